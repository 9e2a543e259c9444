"""Importance weights for watch events: recency decay, favorites and rewatches."""
import math

from localrecs_recommendation_service.exceptions import InvalidArgumentError


def exponential_decay(days_since: float, half_life_days: float) -> float:
    """
    Recency weight that halves every half_life_days.

    Args:
        days_since: Days since the item was last played (>= 0)
        half_life_days: Half-life in days (> 0)

    Returns:
        2 ** (-days_since / half_life_days), in (0, 1]
    """
    if days_since < 0:
        raise InvalidArgumentError("Days since cannot be negative", argument="days_since")
    if half_life_days <= 0:
        raise InvalidArgumentError("Half-life must be greater than 0", argument="half_life_days")

    return 2.0 ** (-days_since / half_life_days)


def apply_favorite_boost(base_weight: float, is_favorite: bool, favorite_boost: float) -> float:
    """Multiply base_weight by favorite_boost for favorites."""
    if base_weight < 0:
        raise InvalidArgumentError("Base weight cannot be negative", argument="base_weight")
    if favorite_boost < 0:
        raise InvalidArgumentError("Favorite boost cannot be negative", argument="favorite_boost")

    return base_weight * favorite_boost if is_favorite else base_weight


def apply_rewatch_boost(base_weight: float, play_count: int, rewatch_base: float = 1.5) -> float:
    """
    Logarithmic boost for repeated plays: base_weight * (1 + log_base(play_count)).

    A single play returns base_weight unchanged.

    Args:
        base_weight: Weight before the boost (>= 0)
        play_count: Number of plays (>= 1)
        rewatch_base: Logarithm base (> 1)

    Returns:
        Boosted weight
    """
    if base_weight < 0:
        raise InvalidArgumentError("Base weight cannot be negative", argument="base_weight")
    if play_count < 1:
        raise InvalidArgumentError("Play count must be at least 1", argument="play_count")
    if rewatch_base <= 1:
        raise InvalidArgumentError("Rewatch base must be greater than 1", argument="rewatch_base")

    if play_count == 1:
        return base_weight

    return base_weight * (1.0 + math.log(play_count, rewatch_base))


def compute_combined_weight(
    days_since: float,
    half_life_days: float,
    is_favorite: bool,
    favorite_boost: float,
    play_count: int,
    rewatch_base: float = 1.5
) -> float:
    """Recency decay, then favorite boost, then rewatch boost."""
    weight = exponential_decay(days_since, half_life_days)
    weight = apply_favorite_boost(weight, is_favorite, favorite_boost)
    weight = apply_rewatch_boost(weight, play_count, rewatch_base)
    return weight
