"""Catalog item metadata used for feature extraction."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple


class MediaKind(str, Enum):
    """Kind of catalog item."""

    MOVIE = "Movie"
    SERIES = "Series"


class FeatureCategory(str, Enum):
    """Categorical feature groups, in embedding order."""

    GENRE = "genre"
    ACTOR = "actor"
    DIRECTOR = "director"
    TAG = "tag"


VIRTUAL_LIBRARY_MARKER = "virtual-libraries"


def _clean_features(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if not values:
        return ()
    return tuple(
        str(value).strip()
        for value in values
        if value is not None and str(value).strip()
    )


@dataclass(frozen=True)
class MediaItem:
    """
    A movie or series in the catalog.

    Feature collections are stored as tuples; blank entries are dropped.
    Actors keep their billing order (primary cast first).
    """

    id: str
    name: str
    kind: MediaKind
    release_year: Optional[int] = None
    community_rating: Optional[float] = None  # 0-10
    critic_rating: Optional[float] = None  # 0-100
    external_ids: Dict[str, str] = field(default_factory=dict)
    path: Optional[str] = None
    genres: Tuple[str, ...] = ()
    actors: Tuple[str, ...] = ()
    directors: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()

    def __post_init__(self):
        if self.id is None:
            raise ValueError("MediaItem id must not be None")
        if self.name is None:
            raise ValueError("MediaItem name must not be None")
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "kind", MediaKind(self.kind))
        object.__setattr__(self, "genres", _clean_features(self.genres))
        object.__setattr__(self, "actors", _clean_features(self.actors))
        object.__setattr__(self, "directors", _clean_features(self.directors))
        object.__setattr__(self, "tags", _clean_features(self.tags))

    def features(self, category: FeatureCategory) -> Tuple[str, ...]:
        """Return the item's values for a feature category."""
        if category is FeatureCategory.GENRE:
            return self.genres
        if category is FeatureCategory.ACTOR:
            return self.actors
        if category is FeatureCategory.DIRECTOR:
            return self.directors
        return self.tags

    @property
    def has_sparse_metadata(self) -> bool:
        """True when the item has neither genres nor actors."""
        return not self.genres and not self.actors

    @property
    def is_virtual(self) -> bool:
        """True for generated recommendation entries (.strm files)."""
        if not self.path:
            return False
        path = self.path.lower()
        return path.endswith(".strm") or VIRTUAL_LIBRARY_MARKER in path

    def __repr__(self):
        return f"<MediaItem(id={self.id!r}, name={self.name!r}, kind={self.kind.value})>"
