"""Indexed feature space built from the catalog."""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping

from localrecs_recommendation_service.models.media_item import FeatureCategory


def _freeze(mapping: Mapping[FeatureCategory, Mapping]) -> Mapping[FeatureCategory, Mapping]:
    return MappingProxyType({
        category: MappingProxyType(dict(mapping.get(category, {})))
        for category in FeatureCategory
    })


@dataclass(frozen=True)
class FeatureVocabulary:
    """
    Per-category feature index, document frequency and IDF tables.

    Categories are laid out in FeatureCategory order, each occupying a
    contiguous block of the embedding. All mappings are read-only.
    """

    indices: Mapping[FeatureCategory, Mapping[str, int]] = field(default_factory=dict)
    document_frequencies: Mapping[FeatureCategory, Mapping[str, int]] = field(default_factory=dict)
    idf: Mapping[FeatureCategory, Mapping[str, float]] = field(default_factory=dict)
    total_items: int = 0

    def __post_init__(self):
        object.__setattr__(self, "indices", _freeze(self.indices))
        object.__setattr__(self, "document_frequencies", _freeze(self.document_frequencies))
        object.__setattr__(self, "idf", _freeze(self.idf))
        # casefolded name -> vocabulary spelling
        object.__setattr__(self, "_spellings", {
            category: {name.casefold(): name for name in self.indices[category]}
            for category in FeatureCategory
        })

    def index_for(self, category: FeatureCategory) -> Mapping[str, int]:
        return self.indices[category]

    def idf_for(self, category: FeatureCategory) -> Mapping[str, float]:
        return self.idf[category]

    def canonical_features(self, category: FeatureCategory, values: Iterable[str]) -> List[str]:
        """
        Map feature values onto their vocabulary spelling, ignoring case.

        Values with no case-insensitive match are returned unchanged.
        """
        spellings = self._spellings[category]
        return [spellings.get(value.casefold(), value) for value in values]

    def size(self, category: FeatureCategory) -> int:
        return len(self.indices[category])

    def offset(self, category: FeatureCategory) -> int:
        """Start position of a category's block within the categorical part."""
        start = 0
        for current in FeatureCategory:
            if current is category:
                return start
            start += self.size(current)
        raise KeyError(category)

    @property
    def total_dimensions(self) -> int:
        return sum(self.size(category) for category in FeatureCategory)

    def sizes(self) -> Dict[str, int]:
        return {category.value: self.size(category) for category in FeatureCategory}
