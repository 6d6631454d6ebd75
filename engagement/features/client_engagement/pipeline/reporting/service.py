"""
Fleet-level engagement report built from one completed batch pass.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import datetime

from engagement.config import settings
from engagement.features.client_engagement.domain.models import (
    ChurnRisk,
    ChurnRiskDistribution,
    EngagementReport,
    EngagementScore,
)
from engagement.features.client_engagement.pipeline.scoring.service import round_half_up
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

ACTIVE_CLIENT_DAYS = 30


class ReportGenerator:
    def __init__(self, ranking_size: int | None = None):
        self.ranking_size = (
            ranking_size if ranking_size is not None else settings.ENGAGEMENT_REPORT_SIZE
        )
        if self.ranking_size < 0:
            raise ValueError(f"ranking_size must be non-negative, got {self.ranking_size}")

    def generate(self, scores: Sequence[EngagementScore], now: datetime) -> EngagementReport:
        """
        Summarize a full pass.

        Rankings come from a stable descending sort, so clients with equal
        scores keep their pass order. The low list is the tail of that
        ranking reversed, lowest score first.
        """
        active = sum(1 for s in scores if s.days_since_last_activity <= ACTIVE_CLIENT_DAYS)
        risk_counts = Counter(s.churn_risk for s in scores)

        ranked = sorted(scores, key=lambda s: s.overall_score, reverse=True)
        top = ranked[: self.ranking_size]
        low = list(reversed(ranked[max(len(ranked) - self.ranking_size, 0) :]))

        average = round_half_up(sum(s.overall_score for s in scores) / len(scores)) if scores else 0

        report = EngagementReport(
            total_clients=len(scores),
            active_clients=active,
            at_risk_clients=risk_counts[ChurnRisk.HIGH],
            top_engaged_clients=tuple(top),
            low_engaged_clients=tuple(low),
            churn_risk_distribution=ChurnRiskDistribution(
                low=risk_counts[ChurnRisk.LOW],
                medium=risk_counts[ChurnRisk.MEDIUM],
                high=risk_counts[ChurnRisk.HIGH],
            ),
            average_engagement_score=average,
            generated_at=now,
        )

        logger.info(
            "Engagement report generated",
            total_clients=report.total_clients,
            active_clients=report.active_clients,
            at_risk_clients=report.at_risk_clients,
            average_score=report.average_engagement_score,
        )
        return report
