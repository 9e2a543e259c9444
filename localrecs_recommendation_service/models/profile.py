"""Embeddings, user taste profiles and scored results."""
from dataclasses import dataclass, field
from typing import FrozenSet, List

import numpy as np

from localrecs_recommendation_service.models.media_item import MediaKind


@dataclass(frozen=True, eq=False)
class ItemEmbedding:
    """Dense feature vector for one catalog item.

    Layout: [genre | actor | director | tag | year | community | critic].
    """

    item_id: str
    vector: np.ndarray

    @property
    def dimensions(self) -> int:
        return len(self.vector)


@dataclass(frozen=True, eq=False)
class UserProfile:
    """Aggregated taste vector for one user."""

    user_id: str
    vector: np.ndarray
    watched_item_count: int
    watched_item_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def dimensions(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class ScoredRecommendation:
    """A ranked candidate and its cosine similarity to the user profile."""

    item_id: str
    score: float

    def to_dict(self) -> dict:
        return {'item_id': self.item_id, 'similarity_score': self.score}


@dataclass(frozen=True)
class UserRecommendations:
    """Ranked movie and series lists for one user."""

    user_id: str
    movies: List[ScoredRecommendation] = field(default_factory=list)
    series: List[ScoredRecommendation] = field(default_factory=list)

    def for_kind(self, kind: MediaKind) -> List[ScoredRecommendation]:
        return self.movies if MediaKind(kind) is MediaKind.MOVIE else self.series

    def to_dict(self) -> dict:
        return {
            'movies': [rec.to_dict() for rec in self.movies],
            'series': [rec.to_dict() for rec in self.series],
        }
