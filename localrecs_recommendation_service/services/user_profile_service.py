"""Aggregate a user's watched-item embeddings into a taste profile."""
import logging
from datetime import UTC, datetime
from typing import Iterable, Mapping, Optional

from localrecs_recommendation_service.config import RecommendationConfig
from localrecs_recommendation_service.exceptions import require
from localrecs_recommendation_service.ml.vector_math import weighted_sum
from localrecs_recommendation_service.ml.weight_calculator import compute_combined_weight
from localrecs_recommendation_service.models import (
    ItemEmbedding,
    UserProfile,
    WatchRecord,
    deduplicate_watch_records,
)

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


class UserProfileService:
    """Build weighted taste profiles from watch history."""

    def __init__(self, config: Optional[RecommendationConfig] = None):
        self.config = config or RecommendationConfig()

    def days_since(self, last_played: datetime, reference_time: datetime) -> float:
        """Days between last_played and reference_time; future timestamps count as 0."""
        elapsed = (_as_utc(reference_time) - _as_utc(last_played)).total_seconds() / SECONDS_PER_DAY
        return max(0.0, elapsed)

    def compute_weight(self, record: WatchRecord, reference_time: datetime) -> float:
        """Combined recency, favorite and rewatch weight for one record."""
        return compute_combined_weight(
            self.days_since(record.last_played, reference_time),
            self.config.recency_decay_half_life_days,
            record.is_favorite,
            self.config.favorite_boost,
            record.play_count,
            self.config.rewatch_base
        )

    def build_profile(
        self,
        user_id: str,
        watch_records: Iterable[WatchRecord],
        embeddings: Mapping[str, ItemEmbedding],
        reference_time: Optional[datetime] = None
    ) -> Optional[UserProfile]:
        """
        Build a user's profile vector.

        Records whose item has no embedding are skipped. The weighted sum is
        not renormalized, so profile magnitude grows with history volume.

        Args:
            user_id: User identifier
            watch_records: The user's watch records
            embeddings: Item id -> embedding
            reference_time: "Now" for recency decay (defaults to current UTC time)

        Returns:
            UserProfile, or None when no record has an embedding (cold start)
        """
        require(watch_records, "watch_records")
        require(embeddings, "embeddings")
        reference_time = reference_time or datetime.now(UTC)

        vectors = []
        weights = []
        watched_ids = []

        for record in deduplicate_watch_records(watch_records):
            embedding = embeddings.get(record.item_id)
            if embedding is None:
                logger.debug(f"Skipping item {record.item_id} for user {user_id}: no embedding")
                continue

            vectors.append(embedding.vector)
            weights.append(self.compute_weight(record, reference_time))
            watched_ids.append(record.item_id)

        if not vectors:
            logger.info(f"No usable watch history for user {user_id} (cold start)")
            return None

        profile = UserProfile(
            user_id=str(user_id),
            vector=weighted_sum(vectors, weights),
            watched_item_count=len(watched_ids),
            watched_item_ids=frozenset(watched_ids),
        )

        logger.info(f"Built profile for user {user_id}: {profile.watched_item_count} items")
        return profile
