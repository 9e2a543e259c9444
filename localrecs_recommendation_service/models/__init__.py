"""Domain types and SQLAlchemy models"""

from localrecs_recommendation_service.models.base import Base
from localrecs_recommendation_service.models.media_item import FeatureCategory, MediaItem, MediaKind
from localrecs_recommendation_service.models.profile import (
    ItemEmbedding,
    ScoredRecommendation,
    UserProfile,
    UserRecommendations,
)
from localrecs_recommendation_service.models.user_recommendation import UserRecommendation
from localrecs_recommendation_service.models.vocabulary import FeatureVocabulary
from localrecs_recommendation_service.models.watch_record import WatchRecord, deduplicate_watch_records

__all__ = [
    "Base",
    "FeatureCategory",
    "FeatureVocabulary",
    "ItemEmbedding",
    "MediaItem",
    "MediaKind",
    "ScoredRecommendation",
    "UserProfile",
    "UserRecommendation",
    "UserRecommendations",
    "WatchRecord",
    "deduplicate_watch_records",
]
