"""Service classes"""

from .recommendation_engine import RecommendationEngine
from .refresh_service import CatalogModel, PipelinePhase, RecommendationRefreshService
from .user_profile_service import UserProfileService

__all__ = [
    "CatalogModel",
    "PipelinePhase",
    "RecommendationEngine",
    "RecommendationRefreshService",
    "UserProfileService",
]
