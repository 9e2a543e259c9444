"""Build the capped, indexed feature vocabulary from the catalog."""
import logging
from typing import Dict, Sequence

import pandas as pd

from localrecs_recommendation_service.exceptions import InvalidArgumentError, require
from localrecs_recommendation_service.ml.tfidf_computer import compute_idf
from localrecs_recommendation_service.models import FeatureCategory, FeatureVocabulary, MediaItem

logger = logging.getLogger(__name__)


class VocabularyBuilder:
    """Count feature document frequencies and keep the most frequent values per category."""

    def __init__(
        self,
        max_genres: int = 0,
        max_actors: int = 500,
        max_directors: int = 0,
        max_tags: int = 500
    ):
        """
        Initialize vocabulary builder.

        Args:
            max_genres: Maximum genres to retain (0 = unlimited)
            max_actors: Maximum actors to retain (0 = unlimited)
            max_directors: Maximum directors to retain (0 = unlimited)
            max_tags: Maximum tags to retain (0 = unlimited)
        """
        self.caps: Dict[FeatureCategory, int] = {
            FeatureCategory.GENRE: max_genres,
            FeatureCategory.ACTOR: max_actors,
            FeatureCategory.DIRECTOR: max_directors,
            FeatureCategory.TAG: max_tags,
        }
        for category, cap in self.caps.items():
            if cap is None or cap < 0:
                raise InvalidArgumentError(
                    f"Vocabulary cap for {category.value} must be non-negative (0 = unlimited)",
                    argument=f"max_{category.value}s",
                )

    def count_document_frequencies(
        self,
        items: Sequence[MediaItem],
        category: FeatureCategory
    ) -> pd.Series:
        """
        Count how many items carry each value of a category.

        Values are matched ignoring case; the first spelling seen in
        traversal order names the entry.

        Args:
            items: Catalog items in traversal order
            category: Feature category to count

        Returns:
            Series of counts indexed by feature value, most frequent first,
            ties in first-seen order
        """
        first_seen: Dict[str, int] = {}
        spellings: Dict[str, str] = {}
        for item in items:
            # A value counts once per item
            seen = set()
            for value in item.features(category):
                key = value.casefold()
                if key in seen:
                    continue
                seen.add(key)
                name = spellings.setdefault(key, value)
                first_seen[name] = first_seen.get(name, 0) + 1

        # Series keeps dict insertion order; the stable sort preserves it for ties
        counts = pd.Series(first_seen, dtype="int64")
        return counts.sort_values(ascending=False, kind="stable")

    def select_top(self, counts: pd.Series, cap: int) -> pd.Series:
        """Keep the top cap entries (all when cap is 0)."""
        if cap and cap > 0:
            return counts.head(cap)
        return counts

    def build(self, items: Sequence[MediaItem]) -> FeatureVocabulary:
        """
        Build the vocabulary for a catalog.

        Args:
            items: Full catalog

        Returns:
            FeatureVocabulary with indices assigned in descending frequency order
        """
        items = list(require(items, "items"))

        if not items:
            logger.warning("No items provided to build vocabulary")
            return FeatureVocabulary()

        logger.info(f"Building vocabulary from {len(items)} items...")

        indices = {}
        document_frequencies = {}
        idf = {}

        for category in FeatureCategory:
            counts = self.count_document_frequencies(items, category)
            top = self.select_top(counts, self.caps[category])

            indices[category] = {str(value): position for position, value in enumerate(top.index)}
            document_frequencies[category] = {str(value): int(count) for value, count in top.items()}
            idf[category] = {
                str(value): compute_idf(len(items), int(count))
                for value, count in top.items()
            }

            logger.info(
                f"  {category.value}: kept {len(top)} of {len(counts)} distinct values"
                + (f" (cap {self.caps[category]})" if self.caps[category] else "")
            )

        vocabulary = FeatureVocabulary(
            indices=indices,
            document_frequencies=document_frequencies,
            idf=idf,
            total_items=len(items),
        )

        logger.info(f"✓ Built vocabulary: {vocabulary.total_dimensions} features {vocabulary.sizes()}")
        return vocabulary
