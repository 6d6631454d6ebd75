# engagement/models/api/engagement_response.py
"""
Engagement API response models.
Used by the engagement router for output formatting.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from engagement.features.client_engagement.domain.models import (
    CacheInfo,
    ChurnRisk,
    EngagementReport,
    EngagementScore,
)


class EngagementScoreResponse(BaseModel):
    """Response model for a single client's engagement score."""

    client_id: str = Field(..., description="Client ID")
    client_name: str = Field(..., description="Client display name")
    client_contact_address: str | None = Field(None, description="Client contact address")
    activity_score: float = Field(..., ge=0, le=100, description="Activity sub-score")
    session_score: float = Field(..., ge=0, le=100, description="Session sub-score")
    workout_score: float = Field(..., ge=0, le=100, description="Workout sub-score")
    content_score: float = Field(..., ge=0, le=100, description="Content sub-score")
    milestone_score: float = Field(..., ge=0, le=100, description="Milestone sub-score")
    overall_score: int = Field(..., ge=0, le=100, description="Weighted overall score")
    churn_risk: ChurnRisk = Field(..., description="Churn risk classification")
    last_activity_at: datetime | None = Field(None, description="Most recent activity")
    days_since_last_activity: int = Field(..., description="Days since last activity (999 if none)")
    computed_at: datetime = Field(..., description="When the score was computed")
    insights: list[str] = Field(default_factory=list, description="Ordered insights")

    @classmethod
    def from_domain(cls, score: EngagementScore) -> "EngagementScoreResponse":
        return cls(
            client_id=score.client_id,
            client_name=score.client_name,
            client_contact_address=score.client_contact_address,
            activity_score=score.activity_score,
            session_score=score.session_score,
            workout_score=score.workout_score,
            content_score=score.content_score,
            milestone_score=score.milestone_score,
            overall_score=score.overall_score,
            churn_risk=score.churn_risk,
            last_activity_at=score.last_activity_at,
            days_since_last_activity=score.days_since_last_activity,
            computed_at=score.computed_at,
            insights=list(score.insights),
        )


class EngagementScoresResponse(BaseModel):
    """Response for listing scores."""

    scores: list[EngagementScoreResponse] = Field(..., description="Engagement scores")
    total_count: int = Field(..., description="Number of scores returned")


class CacheInfoResponse(BaseModel):
    cached_scores: int = Field(..., description="Number of cached scores")
    last_computed_at: datetime | None = Field(None, description="When the last pass finished")

    @classmethod
    def from_domain(cls, info: CacheInfo) -> "CacheInfoResponse":
        return cls(cached_scores=info.count, last_computed_at=info.last_computed_at)


class ChurnRiskDistributionResponse(BaseModel):
    low: int = Field(..., description="Clients at low risk")
    medium: int = Field(..., description="Clients at medium risk")
    high: int = Field(..., description="Clients at high risk")


class EngagementReportResponse(BaseModel):
    """Response model for the fleet engagement report."""

    total_clients: int = Field(..., description="Clients scored in the pass")
    active_clients: int = Field(..., description="Clients active within 30 days")
    at_risk_clients: int = Field(..., description="Clients at high churn risk")
    top_engaged_clients: list[EngagementScoreResponse] = Field(..., description="Highest scores first")
    low_engaged_clients: list[EngagementScoreResponse] = Field(..., description="Lowest scores first")
    churn_risk_distribution: ChurnRiskDistributionResponse
    average_engagement_score: int = Field(..., description="Rounded mean overall score")
    generated_at: datetime = Field(..., description="When the report was generated")

    @classmethod
    def from_domain(cls, report: EngagementReport) -> "EngagementReportResponse":
        distribution = report.churn_risk_distribution
        return cls(
            total_clients=report.total_clients,
            active_clients=report.active_clients,
            at_risk_clients=report.at_risk_clients,
            top_engaged_clients=[
                EngagementScoreResponse.from_domain(s) for s in report.top_engaged_clients
            ],
            low_engaged_clients=[
                EngagementScoreResponse.from_domain(s) for s in report.low_engaged_clients
            ],
            churn_risk_distribution=ChurnRiskDistributionResponse(
                low=distribution.low, medium=distribution.medium, high=distribution.high
            ),
            average_engagement_score=report.average_engagement_score,
            generated_at=report.generated_at,
        )
