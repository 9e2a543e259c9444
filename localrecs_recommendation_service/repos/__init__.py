"""Repository classes"""

from localrecs_recommendation_service.repos.recommendation_repository import RecommendationRepository

__all__ = [
    "RecommendationRepository",
]
