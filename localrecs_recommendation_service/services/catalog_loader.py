"""Load catalog items and watch history from JSON or CSV exports."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from localrecs_recommendation_service.models import (
    MediaItem,
    MediaKind,
    WatchRecord,
    deduplicate_watch_records,
)

logger = logging.getLogger(__name__)

LIST_SEPARATOR = "|"
LIST_COLUMNS = ("genres", "actors", "directors", "tags")
EXTERNAL_ID_PREFIX = "external_id_"


def _read_frame(path: Path) -> pd.DataFrame:
    """Read a JSON array of objects or a CSV file into a DataFrame."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    if path.suffix.lower() == ".json":
        with open(path) as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise ValueError(f"{path} must contain a JSON array of objects")
        return pd.DataFrame.from_records(records)

    # Read everything as text so ids like "001" survive; scalars are converted per field
    return pd.read_csv(path, dtype=str)


def _optional(value):
    """Convert NaN/NA to None."""
    if isinstance(value, (list, tuple, dict)):
        return value
    if value is None or pd.isna(value):
        return None
    return value


def _as_list(value) -> List[str]:
    value = _optional(value)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value]
    return str(value).split(LIST_SEPARATOR)


def _as_bool(value) -> bool:
    value = _optional(value)
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _external_ids(row: Dict) -> Dict[str, str]:
    external = row.get("external_ids")
    ids = dict(external) if isinstance(external, dict) else {}
    for key, value in row.items():
        if key.startswith(EXTERNAL_ID_PREFIX) and _optional(value) is not None:
            ids[key[len(EXTERNAL_ID_PREFIX):]] = str(value)
    return ids


def row_to_media_item(row: Dict) -> MediaItem:
    """
    Convert one catalog row into a MediaItem.

    Args:
        row: Dict with id, name, kind and optional release_year,
             community_rating, critic_rating, path, genres, actors,
             directors, tags, external_ids / external_id_<provider>

    Returns:
        MediaItem
    """
    year = _optional(row.get("release_year"))
    community = _optional(row.get("community_rating"))
    critic = _optional(row.get("critic_rating"))

    return MediaItem(
        id=str(row["id"]),
        name=str(row["name"]),
        kind=MediaKind(_optional(row.get("kind")) or MediaKind.MOVIE.value),
        release_year=int(float(year)) if year is not None else None,
        community_rating=float(community) if community is not None else None,
        critic_rating=float(critic) if critic is not None else None,
        external_ids=_external_ids(row),
        path=_optional(row.get("path")),
        **{column: _as_list(row.get(column)) for column in LIST_COLUMNS},
    )


def load_catalog(path: Path) -> List[MediaItem]:
    """
    Load the media catalog.

    Virtual library entries (generated .strm recommendations) are skipped.

    Args:
        path: JSON or CSV file

    Returns:
        List of MediaItems in file order
    """
    df = _read_frame(path)
    logger.info(f"Loaded {len(df)} catalog rows from {path}")

    items = []
    skipped = 0
    for row in df.to_dict("records"):
        item = row_to_media_item(row)
        if item.is_virtual:
            skipped += 1
            continue
        items.append(item)

    movies = sum(1 for item in items if item.kind is MediaKind.MOVIE)
    logger.info(
        f"✓ Catalog: {len(items)} items ({movies} movies, {len(items) - movies} series), "
        f"{skipped} virtual items skipped"
    )
    return items


def row_to_watch_record(row: Dict) -> WatchRecord:
    """Convert one history row into a WatchRecord."""
    last_played = pd.Timestamp(row["last_played"])
    if last_played.tzinfo is None:
        last_played = last_played.tz_localize("UTC")

    play_count = _optional(row.get("play_count"))

    return WatchRecord(
        item_id=str(row["item_id"]),
        user_id=str(row["user_id"]),
        last_played=last_played.to_pydatetime(),
        is_favorite=_as_bool(row.get("is_favorite")),
        play_count=max(1, int(float(play_count))) if play_count is not None else 1,
    )


def load_watch_history(path: Path, users: Optional[List[str]] = None) -> Dict[str, List[WatchRecord]]:
    """
    Load watch history grouped by user.

    Args:
        path: JSON or CSV file with user_id, item_id, last_played,
              is_favorite, play_count
        users: Restrict to these user ids (all users when None)

    Returns:
        User id -> deduplicated watch records, users in first-seen order
    """
    df = _read_frame(path)
    logger.info(f"Loaded {len(df)} watch history rows from {path}")

    records = [row_to_watch_record(row) for row in df.to_dict("records")]
    if users is not None:
        wanted = {str(user) for user in users}
        records = [record for record in records if record.user_id in wanted]

    history: Dict[str, List[WatchRecord]] = {}
    for record in deduplicate_watch_records(records):
        history.setdefault(record.user_id, []).append(record)

    logger.info(f"✓ Watch history for {len(history)} users")
    return history
