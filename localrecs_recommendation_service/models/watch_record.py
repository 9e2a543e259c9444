"""User watch history records."""
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, Tuple


@dataclass(frozen=True)
class WatchRecord:
    """One user's watch state for one catalog item."""

    item_id: str
    user_id: str
    last_played: datetime
    is_favorite: bool = False
    play_count: int = 1

    def __post_init__(self):
        if self.play_count < 1:
            raise ValueError(f"play_count must be at least 1, got {self.play_count}")
        object.__setattr__(self, "item_id", str(self.item_id))
        object.__setattr__(self, "user_id", str(self.user_id))


def deduplicate_watch_records(records: Iterable[WatchRecord]) -> List[WatchRecord]:
    """
    Collapse records to one per (user, item) pair.

    The most recent timestamp wins; the favorite flag is kept if any
    observation had it and the largest play count is kept.

    Args:
        records: Watch records, possibly with repeated (user, item) pairs

    Returns:
        List of records in first-seen order of their (user, item) pair
    """
    merged: Dict[Tuple[str, str], WatchRecord] = {}

    for record in records:
        key = (record.user_id, record.item_id)
        existing = merged.get(key)
        if existing is None:
            merged[key] = record
            continue

        latest = record if record.last_played > existing.last_played else existing
        merged[key] = replace(
            latest,
            is_favorite=existing.is_favorite or record.is_favorite,
            play_count=max(existing.play_count, record.play_count),
        )

    return list(merged.values())
