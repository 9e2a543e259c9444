"""Score unwatched catalog items against a user's taste profile."""
import logging
from typing import Iterable, List, Mapping, Optional

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from localrecs_recommendation_service.config import RecommendationConfig
from localrecs_recommendation_service.exceptions import (
    InvalidArgumentError,
    VectorLengthError,
    require,
)
from localrecs_recommendation_service.models import (
    ItemEmbedding,
    MediaItem,
    MediaKind,
    ScoredRecommendation,
    UserProfile,
)

logger = logging.getLogger(__name__)


# noinspection PyMethodMayBeStatic
class RecommendationEngine:
    """
    Rank candidate items by cosine similarity to a profile vector.

    Pure computation: no state is kept between calls.
    """

    def __init__(self, config: Optional[RecommendationConfig] = None):
        self.config = config or RecommendationConfig()

    def get_candidates(
        self,
        profile: Optional[UserProfile],
        embeddings: Mapping[str, ItemEmbedding],
        metadata: Mapping[str, MediaItem],
        media_kind: MediaKind,
        exclude_ids: Iterable[str] = ()
    ) -> List[str]:
        """
        Ids of unwatched items of the requested kind that have embeddings.

        Args:
            profile: User profile (its watched ids are excluded), may be None
            embeddings: Item id -> embedding
            metadata: Item id -> catalog item
            media_kind: Kind of item to return
            exclude_ids: Extra ids to skip (e.g. items in progress)

        Returns:
            Candidate ids sorted ascending
        """
        excluded = set(exclude_ids)
        if profile is not None:
            excluded |= profile.watched_item_ids

        candidates = []
        for item_id, item in metadata.items():
            if item.kind is not media_kind:
                continue
            if item_id in excluded or item_id not in embeddings:
                continue
            if item.is_virtual:
                continue
            if self.config.exclude_sparse_metadata and item.has_sparse_metadata:
                continue
            candidates.append(item_id)

        return sorted(candidates)

    def score_candidates(
        self,
        profile: UserProfile,
        candidate_ids: List[str],
        embeddings: Mapping[str, ItemEmbedding]
    ) -> List[ScoredRecommendation]:
        """
        Cosine similarity of every candidate against the profile vector.

        Raises:
            VectorLengthError: if any embedding differs in length from the profile
        """
        if not candidate_ids:
            return []

        vectors = [embeddings[item_id].vector for item_id in candidate_ids]
        for item_id, vector in zip(candidate_ids, vectors):
            if len(vector) != profile.dimensions:
                raise VectorLengthError(
                    f"Embedding for {item_id} has length {len(vector)}, "
                    f"profile has length {profile.dimensions}",
                    argument="embeddings",
                )

        # Zero-magnitude rows score 0, as in vector_math.cosine_similarity
        scores = cosine_similarity(profile.vector.reshape(1, -1), np.vstack(vectors))[0]

        return [
            ScoredRecommendation(item_id=item_id, score=float(score))
            for item_id, score in zip(candidate_ids, scores)
        ]

    def rank(self, scored: List[ScoredRecommendation], max_results: int) -> List[ScoredRecommendation]:
        """Sort by score descending, ties by item id, and keep the top max_results."""
        ordered = sorted(scored, key=lambda rec: (-rec.score, rec.item_id))
        return ordered[:max_results]

    def is_cold_start(self, profile: Optional[UserProfile]) -> bool:
        """True when the profile cannot drive personalized scoring."""
        if profile is None:
            return True
        if profile.watched_item_count < self.config.min_watched_items_for_personalization:
            return True
        return not np.any(profile.vector)

    def generate_cold_start_recommendations(
        self,
        profile: Optional[UserProfile],
        metadata: Mapping[str, MediaItem],
        embeddings: Mapping[str, ItemEmbedding],
        media_kind: MediaKind,
        max_results: int,
        exclude_ids: Iterable[str] = ()
    ) -> List[ScoredRecommendation]:
        """
        Top-rated unwatched items, used only when the fallback is enabled.

        Ranked by community rating, then critic rating (missing counts as 0),
        then id. Score is community rating / 10.
        """
        candidate_ids = self.get_candidates(profile, embeddings, metadata, media_kind, exclude_ids)
        ordered = sorted(
            candidate_ids,
            key=lambda item_id: (
                -(metadata[item_id].community_rating or 0.0),
                -(metadata[item_id].critic_rating or 0.0),
                item_id,
            ),
        )
        return [
            ScoredRecommendation(
                item_id=item_id,
                score=(metadata[item_id].community_rating or 0.0) / 10.0
            )
            for item_id in ordered[:max_results]
        ]

    def generate_recommendations(
        self,
        user_id: str,
        profile: Optional[UserProfile],
        embeddings: Mapping[str, ItemEmbedding],
        metadata: Mapping[str, MediaItem],
        media_kind: MediaKind,
        max_results: int,
        exclude_ids: Iterable[str] = ()
    ) -> List[ScoredRecommendation]:
        """
        Generate a ranked recommendation list for one user and media kind.

        Args:
            user_id: User identifier (for logging)
            profile: User profile, or None for a user without history
            embeddings: Item id -> embedding
            metadata: Item id -> catalog item
            media_kind: Movie or Series
            max_results: Maximum list length
            exclude_ids: Extra ids to skip

        Returns:
            Up to max_results recommendations; empty for cold-start users
            unless the cold-start fallback is enabled
        """
        require(embeddings, "embeddings")
        require(metadata, "metadata")
        media_kind = MediaKind(require(media_kind, "media_kind"))
        if max_results < 0:
            raise InvalidArgumentError("max_results cannot be negative", argument="max_results")

        if max_results == 0:
            return []

        if self.is_cold_start(profile):
            if not self.config.enable_cold_start_fallback:
                logger.info(f"No profile for user {user_id}; returning no {media_kind.value} recommendations")
                return []
            logger.info(f"Cold-start fallback for user {user_id} ({media_kind.value})")
            return self.generate_cold_start_recommendations(
                profile, metadata, embeddings, media_kind, max_results, exclude_ids
            )

        candidate_ids = self.get_candidates(profile, embeddings, metadata, media_kind, exclude_ids)
        if not candidate_ids:
            logger.warning(f"No unwatched {media_kind.value} candidates for user {user_id}")
            return []

        recommendations = self.rank(
            self.score_candidates(profile, candidate_ids, embeddings),
            max_results
        )

        logger.info(
            f"Generated {len(recommendations)} {media_kind.value} recommendations for user {user_id} "
            f"from {len(candidate_ids)} candidates"
        )
        return recommendations
