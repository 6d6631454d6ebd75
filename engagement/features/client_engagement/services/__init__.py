from .engagement_service import EngagementService, engagement_service, get_engagement_service

__all__ = ["EngagementService", "engagement_service", "get_engagement_service"]
