"""
Client engagement feature package.

Keeps every layer of engagement scoring co-located (domain models,
record store, pipeline stages, cache, service, jobs and API router).
"""

# Re-export the primary building blocks for easy access.
from .api.router import router as engagement_router  # noqa: F401
from .cache.score_cache import ScoreCache  # noqa: F401
from .services.engagement_service import EngagementService, engagement_service  # noqa: F401
from .domain.models import ChurnRisk, EngagementReport, EngagementScore  # noqa: F401
