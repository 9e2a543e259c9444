"""Run the full recommendation refresh: vocabulary, embeddings, profiles, scoring."""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from localrecs_recommendation_service.config import RecommendationConfig
from localrecs_recommendation_service.exceptions import raise_if_cancelled, require
from localrecs_recommendation_service.ml.embedding_service import EmbeddingService
from localrecs_recommendation_service.ml.vocabulary_builder import VocabularyBuilder
from localrecs_recommendation_service.models import (
    FeatureVocabulary,
    ItemEmbedding,
    MediaItem,
    MediaKind,
    UserProfile,
    UserRecommendations,
    WatchRecord,
)
from localrecs_recommendation_service.services.recommendation_engine import RecommendationEngine
from localrecs_recommendation_service.services.user_profile_service import UserProfileService

logger = logging.getLogger(__name__)


class PipelinePhase(str, Enum):
    """Phase boundaries reported to the progress callback."""

    VOCABULARY_BUILT = "vocabulary_built"
    EMBEDDINGS_COMPUTED = "embeddings_computed"
    PROFILES_BUILT = "profiles_built"
    SCORING_COMPLETE = "scoring_complete"


ProgressCallback = Callable[[PipelinePhase, Dict], None]


@dataclass(frozen=True)
class CatalogModel:
    """Everything derived from the catalog for one scoring pass."""

    vocabulary: FeatureVocabulary
    embeddings: Dict[str, ItemEmbedding]
    metadata: Dict[str, MediaItem]


class RecommendationRefreshService:
    """
    Orchestrates a batch refresh for many users.

    Embeddings are computed once per run and shared read-only by every
    user's profile building and scoring.
    """

    def __init__(
        self,
        config: Optional[RecommendationConfig] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        """
        Initialize the refresh service.

        Args:
            config: Recommendation configuration (validated on every run)
            progress_callback: Called with (phase, details) at phase boundaries
        """
        self.config = config or RecommendationConfig()
        self.progress_callback = progress_callback
        self.profile_service = UserProfileService(self.config)
        self.engine = RecommendationEngine(self.config)

        logger.info("Initialized RecommendationRefreshService")

    def _report(self, phase: PipelinePhase, **details) -> None:
        logger.info(f"Phase complete: {phase.value} {details}")
        if self.progress_callback is not None:
            self.progress_callback(phase, details)

    def compute_embeddings(
        self,
        catalog: Sequence[MediaItem],
        cancel_event: Optional[threading.Event] = None
    ) -> CatalogModel:
        """
        Build vocabulary and embeddings for the catalog.

        Virtual (generated) items are dropped before anything is counted.

        Args:
            catalog: All catalog items
            cancel_event: Checked between items

        Returns:
            CatalogModel with vocabulary, embeddings and metadata by id
        """
        require(catalog, "catalog")
        self.config.ensure_valid()

        items: List[MediaItem] = []
        for item in catalog:
            raise_if_cancelled(cancel_event, "catalog scan")
            if item.is_virtual:
                logger.debug(f"Skipping virtual library item: {item.name} ({item.id}) at {item.path}")
                continue
            items.append(item)

        builder = VocabularyBuilder(
            max_genres=self.config.max_vocabulary_genres,
            max_actors=self.config.max_vocabulary_actors,
            max_directors=self.config.max_vocabulary_directors,
            max_tags=self.config.max_vocabulary_tags,
        )
        vocabulary = builder.build(items)
        self._report(
            PipelinePhase.VOCABULARY_BUILT,
            items=len(items),
            dimensions=vocabulary.total_dimensions,
        )

        embedding_service = EmbeddingService.for_catalog(items, vocabulary)
        embeddings = embedding_service.compute_embeddings(items, cancel_event)
        self._report(
            PipelinePhase.EMBEDDINGS_COMPUTED,
            embeddings=len(embeddings),
            dimensions=embedding_service.dimensions,
        )

        return CatalogModel(
            vocabulary=vocabulary,
            embeddings=embeddings,
            metadata={item.id: item for item in items},
        )

    def generate_for_profile(
        self,
        user_id: str,
        profile: Optional[UserProfile],
        model: CatalogModel,
        exclude_ids: Iterable[str] = ()
    ) -> UserRecommendations:
        """Movie and series lists for one user's (possibly absent) profile."""
        exclude_ids = frozenset(exclude_ids)
        movies = self.engine.generate_recommendations(
            user_id, profile, model.embeddings, model.metadata,
            MediaKind.MOVIE, self.config.movie_recommendation_count, exclude_ids
        )
        series = self.engine.generate_recommendations(
            user_id, profile, model.embeddings, model.metadata,
            MediaKind.SERIES, self.config.series_recommendation_count, exclude_ids
        )
        return UserRecommendations(user_id=str(user_id), movies=movies, series=series)

    def generate_for_user(
        self,
        user_id: str,
        watch_records: Iterable[WatchRecord],
        model: CatalogModel,
        reference_time: Optional[datetime] = None,
        exclude_ids: Iterable[str] = ()
    ) -> UserRecommendations:
        """
        Build one user's profile and score it.

        Args:
            user_id: User identifier
            watch_records: The user's watch history
            model: Output of compute_embeddings
            reference_time: "Now" for recency decay
            exclude_ids: Extra ids to keep out of the lists

        Returns:
            UserRecommendations (empty lists for cold-start users)
        """
        profile = self.profile_service.build_profile(
            user_id, watch_records, model.embeddings, reference_time
        )
        return self.generate_for_profile(user_id, profile, model, exclude_ids)

    def build_profiles(
        self,
        history_by_user: Mapping[str, Iterable[WatchRecord]],
        model: CatalogModel,
        reference_time: datetime,
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, Optional[UserProfile]]:
        """Profiles for every user, keyed in input order; None marks cold start."""

        def build(user_id: str) -> Optional[UserProfile]:
            raise_if_cancelled(cancel_event, "profile building")
            return self.profile_service.build_profile(
                user_id, history_by_user[user_id], model.embeddings, reference_time
            )

        return self._map_users(list(history_by_user), build)

    def _map_users(self, user_ids: List[str], func: Callable) -> Dict:
        if self.config.max_workers > 1 and len(user_ids) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                results = list(executor.map(func, user_ids))
        else:
            results = [func(user_id) for user_id in user_ids]
        return dict(zip(user_ids, results))

    def run(
        self,
        catalog: Sequence[MediaItem],
        history_by_user: Mapping[str, Iterable[WatchRecord]],
        cancel_event: Optional[threading.Event] = None,
        reference_time: Optional[datetime] = None,
        exclude_ids_by_user: Optional[Mapping[str, Iterable[str]]] = None
    ) -> Dict[str, UserRecommendations]:
        """
        Run the full pipeline for every user in history_by_user.

        Args:
            catalog: All catalog items
            history_by_user: User id -> that user's watch records
            cancel_event: When set, the run aborts with PipelineCancelledError
            reference_time: "Now" for recency decay, shared by all users
            exclude_ids_by_user: Optional extra ids to exclude per user

        Returns:
            User id -> UserRecommendations, in input order
        """
        require(catalog, "catalog")
        require(history_by_user, "history_by_user")
        self.config.ensure_valid()
        reference_time = reference_time or datetime.now(UTC)
        exclude_ids_by_user = exclude_ids_by_user or {}

        logger.info("=" * 60)
        logger.info(f"RECOMMENDATION REFRESH: {len(catalog)} items, {len(history_by_user)} users")
        logger.info("=" * 60)

        model = self.compute_embeddings(catalog, cancel_event)

        profiles = self.build_profiles(history_by_user, model, reference_time, cancel_event)
        self._report(
            PipelinePhase.PROFILES_BUILT,
            users=len(profiles),
            cold_start=sum(1 for profile in profiles.values() if profile is None),
        )

        def score(user_id: str) -> UserRecommendations:
            raise_if_cancelled(cancel_event, "scoring")
            return self.generate_for_profile(
                user_id, profiles[user_id], model, exclude_ids_by_user.get(user_id, ())
            )

        results = self._map_users(list(profiles), score)
        self._report(PipelinePhase.SCORING_COMPLETE, users=len(results))

        logger.info("=" * 60)
        logger.info(f"✓ REFRESH COMPLETE for {len(results)} users")
        logger.info("=" * 60)

        return results
