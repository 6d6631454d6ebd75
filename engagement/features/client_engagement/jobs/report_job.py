"""
One-shot engagement jobs for the worker service.

Each job opens the database pool, runs a single pass through the shared
EngagementService, logs the outcome, and closes the pool again.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from engagement.db.pool import db_pool
from engagement.features.client_engagement.domain.models import ChurnRisk, EngagementReport
from engagement.features.client_engagement.services.engagement_service import (
    EngagementService,
    engagement_service,
)
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

HIGHLIGHT_COUNT = 5
HIGHLIGHT_INSIGHTS = 3


@asynccontextmanager
async def _database() -> AsyncIterator[None]:
    await db_pool.initialize()
    try:
        yield
    finally:
        await db_pool.close()


def log_report_highlights(report: EngagementReport) -> None:
    """Log the headline numbers plus the clients worth a look."""
    logger.info("Engagement report summary", **_summary(report))

    for rank, score in enumerate(report.top_engaged_clients[:HIGHLIGHT_COUNT], 1):
        logger.info(
            "Top engaged client",
            rank=rank,
            client_id=score.client_id,
            client_name=score.client_name,
            overall_score=score.overall_score,
            churn_risk=score.churn_risk.value,
            days_since_last_activity=score.days_since_last_activity,
            sub_scores={kind.value: value for kind, value in score.sub_scores().items()},
        )

    for rank, score in enumerate(report.low_engaged_clients[:HIGHLIGHT_COUNT], 1):
        logger.info(
            "Low engaged client",
            rank=rank,
            client_id=score.client_id,
            client_name=score.client_name,
            overall_score=score.overall_score,
            churn_risk=score.churn_risk.value,
            insights=list(score.insights[:HIGHLIGHT_INSIGHTS]),
        )

    # Ranked lists can overlap on small fleets
    seen: set[str] = set()
    high_risk = []
    for score in (*report.top_engaged_clients, *report.low_engaged_clients):
        if score.churn_risk is ChurnRisk.HIGH and score.client_id not in seen:
            seen.add(score.client_id)
            high_risk.append(score)

    if not high_risk:
        logger.info("No high-risk clients in ranked lists")
    for score in high_risk[:HIGHLIGHT_COUNT]:
        logger.warning(
            "High churn risk client",
            client_id=score.client_id,
            client_name=score.client_name,
            overall_score=score.overall_score,
            days_since_last_activity=score.days_since_last_activity,
            recommendations=list(score.insights),
        )


def _summary(report: EngagementReport) -> dict:
    return {
        "total_clients": report.total_clients,
        "active_clients": report.active_clients,
        "at_risk_clients": report.at_risk_clients,
        "average_engagement_score": report.average_engagement_score,
        "churn_risk_distribution": {
            "low": report.churn_risk_distribution.low,
            "medium": report.churn_risk_distribution.medium,
            "high": report.churn_risk_distribution.high,
        },
        "generated_at": report.generated_at.isoformat(),
    }


async def run_engagement_batch(service: EngagementService = engagement_service) -> None:
    """Run one scoring pass against the configured database."""
    async with _database():
        scores = await service.run_batch()

    info = service.get_cache_info()
    logger.info(
        "Engagement batch job finished",
        scored_clients=len(scores),
        cached_scores=info.count,
        last_computed_at=info.last_computed_at.isoformat() if info.last_computed_at else None,
        status=service.engine.get_status(),
    )


async def run_engagement_report(service: EngagementService = engagement_service) -> None:
    """Run one pass, build the fleet report and log its highlights."""
    async with _database():
        report = await service.generate_report()

    log_report_highlights(report)
