"""
Client engagement routes.

Thin HTTP adapter over EngagementService; no scoring logic lives here.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from engagement.features.client_engagement.domain.errors import EngagementError
from engagement.features.client_engagement.services.engagement_service import (
    EngagementService,
    get_engagement_service,
)
from engagement.infrastructure.observability.logging import get_logger
from engagement.models.api.engagement_response import (
    CacheInfoResponse,
    EngagementReportResponse,
    EngagementScoreResponse,
    EngagementScoresResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/analytics/engagement", tags=["engagement"])


def _unavailable(e: EngagementError) -> HTTPException:
    logger.error("Engagement operation failed", operation=e.operation, error=str(e))
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Engagement scoring unavailable: {e}",
    )


@router.post("/run", response_model=EngagementScoresResponse)
async def run_engagement_batch(
    service: EngagementService = Depends(get_engagement_service),
) -> EngagementScoresResponse:
    """Run a full scoring pass and return its scores."""
    try:
        scores = await service.run_batch()
    except EngagementError as e:
        raise _unavailable(e) from e

    return EngagementScoresResponse(
        scores=[EngagementScoreResponse.from_domain(s) for s in scores],
        total_count=len(scores),
    )


@router.get("/scores", response_model=EngagementScoresResponse)
async def list_cached_scores(
    service: EngagementService = Depends(get_engagement_service),
) -> EngagementScoresResponse:
    scores = service.get_cached_scores()
    return EngagementScoresResponse(
        scores=[EngagementScoreResponse.from_domain(s) for s in scores],
        total_count=len(scores),
    )


@router.get("/scores/{client_id}", response_model=EngagementScoreResponse)
async def get_cached_score(
    client_id: str,
    service: EngagementService = Depends(get_engagement_service),
) -> EngagementScoreResponse:
    score = service.get_cached_score(client_id)
    if score is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No cached score for client {client_id}",
        )
    return EngagementScoreResponse.from_domain(score)


@router.get("/cache", response_model=CacheInfoResponse)
async def get_cache_info(
    service: EngagementService = Depends(get_engagement_service),
) -> CacheInfoResponse:
    return CacheInfoResponse.from_domain(service.get_cache_info())


@router.get("/report", response_model=EngagementReportResponse)
async def get_engagement_report(
    service: EngagementService = Depends(get_engagement_service),
) -> EngagementReportResponse:
    """Run a fresh pass and return the fleet report."""
    try:
        report = await service.generate_report()
    except EngagementError as e:
        raise _unavailable(e) from e

    return EngagementReportResponse.from_domain(report)
