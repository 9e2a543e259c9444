"""Application configuration"""

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import List

from localrecs_recommendation_service.exceptions import ConfigurationError

CONFIG_PREFIX = "LOCALRECS_"


def _get_config_value(key: str, default: str | None = None) -> str | None:
    """
    Get configuration value from environment or local.settings.json.

    Priority:
    1. Environment variable
    2. local.settings.json (Values.key)
    3. Default value

    Args:
        key: Configuration key name
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    value = os.getenv(key)
    if value:
        return value

    project_root = Path(__file__).resolve().parent.parent
    local_settings_path = project_root / "local.settings.json"

    if local_settings_path.exists():
        try:
            with open(local_settings_path) as f:
                settings = json.load(f)
                value = settings.get("Values", {}).get(key)
                if value:
                    return str(value)
        except (json.JSONDecodeError, KeyError):
            pass

    return default


def get_database_url() -> str | None:
    """
    Get database URL used to store generated recommendation lists.

    Returns:
        Database connection string
    """
    return _get_config_value("DATABASE_URL", default="sqlite:///data/localrecs.db")


@dataclass(frozen=True)
class RecommendationConfig:
    """Tunables for vocabulary building, profile weighting and result sizes.

    Vocabulary caps of 0 mean unlimited.
    """

    movie_recommendation_count: int = 25
    series_recommendation_count: int = 25
    favorite_boost: float = 2.0
    rewatch_base: float = 1.5
    recency_decay_half_life_days: float = 365.0
    max_vocabulary_genres: int = 0
    max_vocabulary_actors: int = 500
    max_vocabulary_directors: int = 0
    max_vocabulary_tags: int = 500
    min_watched_items_for_personalization: int = 1
    enable_cold_start_fallback: bool = False
    exclude_sparse_metadata: bool = False
    max_workers: int = 1

    def validate(self) -> List[str]:
        """
        Validate the configuration.

        Returns:
            List of validation error messages, empty if valid
        """
        errors = []

        if self.movie_recommendation_count < 0:
            errors.append("movie_recommendation_count must be non-negative")
        if self.series_recommendation_count < 0:
            errors.append("series_recommendation_count must be non-negative")
        if self.favorite_boost < 0:
            errors.append("favorite_boost must be non-negative")
        if self.rewatch_base <= 1:
            errors.append("rewatch_base must be greater than 1")
        if self.recency_decay_half_life_days <= 0:
            errors.append("recency_decay_half_life_days must be positive")

        for name in (
            "max_vocabulary_genres",
            "max_vocabulary_actors",
            "max_vocabulary_directors",
            "max_vocabulary_tags",
        ):
            if getattr(self, name) < 0:
                errors.append(f"{name} must be non-negative (0 = unlimited)")

        if self.min_watched_items_for_personalization < 0:
            errors.append("min_watched_items_for_personalization must be non-negative")
        if self.max_workers < 1:
            errors.append("max_workers must be at least 1")

        return errors

    def ensure_valid(self) -> "RecommendationConfig":
        """Raise ConfigurationError listing every problem, or return self."""
        errors = self.validate()
        if errors:
            raise ConfigurationError(errors)
        return self


def _parse_value(raw: str, target_type: type, key: str):
    if target_type is bool:
        lowered = raw.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ConfigurationError([f"{key}={raw!r} is not a boolean"])
    try:
        return target_type(raw)
    except ValueError:
        raise ConfigurationError([f"{key}={raw!r} is not a valid {target_type.__name__}"])


def load_config() -> RecommendationConfig:
    """
    Build a RecommendationConfig from environment or local.settings.json.

    Each field is read from LOCALRECS_<FIELD_NAME_UPPERCASE>; missing keys
    keep their defaults.

    Returns:
        Validated configuration
    """
    defaults = RecommendationConfig()
    overrides = {}

    for field in fields(RecommendationConfig):
        key = CONFIG_PREFIX + field.name.upper()
        raw = _get_config_value(key)
        if raw is None:
            continue
        overrides[field.name] = _parse_value(raw, type(getattr(defaults, field.name)), key)

    return RecommendationConfig(**overrides).ensure_valid()
