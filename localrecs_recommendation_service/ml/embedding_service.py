"""Assemble fixed-length item embeddings from TF-IDF features and scalar signals."""
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from localrecs_recommendation_service.exceptions import raise_if_cancelled, require
from localrecs_recommendation_service.ml.tfidf_computer import (
    build_vector,
    compute_tf_idf,
    normalize_scalar,
)
from localrecs_recommendation_service.ml.vector_math import normalize
from localrecs_recommendation_service.models import (
    FeatureCategory,
    FeatureVocabulary,
    ItemEmbedding,
    MediaItem,
)

logger = logging.getLogger(__name__)

COMMUNITY_RATING_RANGE = (0.0, 10.0)
CRITIC_RATING_RANGE = (0.0, 100.0)
SCALAR_FEATURE_COUNT = 3  # year, community rating, critic rating


@dataclass(frozen=True)
class ScalarSignal:
    """A scalar feature that is either present or defaults to the middle of its range."""

    value: Optional[float]
    lower: float
    upper: float

    MIDPOINT = 0.5

    @property
    def is_present(self) -> bool:
        return self.value is not None and not np.isnan(self.value)

    def normalized(self) -> float:
        if not self.is_present:
            return self.MIDPOINT
        if self.upper <= self.lower:
            # Degenerate range carries no information
            return self.MIDPOINT
        return normalize_scalar(float(self.value), self.lower, self.upper)


class EmbeddingService:
    """Compute one dense embedding per catalog item against a shared vocabulary."""

    def __init__(self, vocabulary: FeatureVocabulary, year_range: Tuple[float, float]):
        """
        Initialize embedding service.

        Args:
            vocabulary: Feature vocabulary with IDF tables
            year_range: (min, max) release year across the catalog
        """
        self.vocabulary = require(vocabulary, "vocabulary")
        self.year_range = year_range

    @classmethod
    def for_catalog(cls, items: Sequence[MediaItem], vocabulary: FeatureVocabulary) -> "EmbeddingService":
        """Create a service whose year range spans the catalog's known release years."""
        years = [item.release_year for item in items if item.release_year is not None]
        if years:
            year_range = (float(min(years)), float(max(years)))
        else:
            year_range = (0.0, 0.0)
        return cls(vocabulary, year_range)

    @property
    def dimensions(self) -> int:
        return self.vocabulary.total_dimensions + SCALAR_FEATURE_COUNT

    def compute_category_vector(self, item: MediaItem, category: FeatureCategory) -> np.ndarray:
        """TF-IDF sub-vector for one feature category."""
        features = self.vocabulary.canonical_features(category, item.features(category))
        scores = compute_tf_idf(features, self.vocabulary.idf_for(category))
        return build_vector(
            scores,
            self.vocabulary.index_for(category),
            self.vocabulary.size(category)
        )

    def compute_scalar_features(self, item: MediaItem) -> np.ndarray:
        """Normalized [year, community rating, critic rating]."""
        signals = [
            ScalarSignal(item.release_year, *self.year_range),
            ScalarSignal(item.community_rating, *COMMUNITY_RATING_RANGE),
            ScalarSignal(item.critic_rating, *CRITIC_RATING_RANGE),
        ]
        return np.array([signal.normalized() for signal in signals], dtype=np.float64)

    def compute_embedding(self, item: MediaItem) -> ItemEmbedding:
        """
        Build the embedding for a single item.

        Args:
            item: Catalog item

        Returns:
            Unit-length ItemEmbedding of size vocabulary.total_dimensions + 3
            (all zeros only if every component is zero)
        """
        require(item, "item")

        parts: List[np.ndarray] = [
            self.compute_category_vector(item, category)
            for category in FeatureCategory
        ]
        parts.append(self.compute_scalar_features(item))

        # Unit length so feature-rich items do not dominate a profile sum
        return ItemEmbedding(item_id=item.id, vector=normalize(np.concatenate(parts)))

    def compute_embeddings(
        self,
        items: Sequence[MediaItem],
        cancel_event: Optional[threading.Event] = None
    ) -> Dict[str, ItemEmbedding]:
        """
        Compute embeddings for all items.

        Args:
            items: Catalog items
            cancel_event: Checked between items; when set the run aborts

        Returns:
            Mapping of item id to embedding
        """
        require(items, "items")

        logger.info(f"Computing embeddings for {len(items)} items...")

        embeddings: Dict[str, ItemEmbedding] = {}
        for item in items:
            raise_if_cancelled(cancel_event, "embedding computation")
            embeddings[item.id] = self.compute_embedding(item)

        if embeddings:
            logger.info(f"✓ Computed {len(embeddings)} embeddings (dimension: {self.dimensions})")
        else:
            logger.info("No embeddings computed (0 items provided)")

        return embeddings
