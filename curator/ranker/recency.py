"""Exponential half-life recency decay."""

from datetime import UTC, datetime

from curator.ranker.constants import RECENCY_CEILING, RECENCY_FLOOR, SECONDS_PER_DAY


def age_days(published_at: datetime, now: datetime) -> float:
    """Age of a timestamp in fractional days (negative if in the future)."""
    return (now - published_at).total_seconds() / SECONDS_PER_DAY


def recency_score(
    published_at: datetime,
    half_life_days: float,
    now: datetime | None = None,
) -> float:
    """Compute the recency score of a publication time.

    ``2 ** (-age / half_life)`` clamped into [0.2, 1.0], so an item
    published now scores 1.0 and stale items never fall below 0.2.

    Args:
        published_at: Publication timestamp (timezone-aware).
        half_life_days: Days for the score to halve.
        now: Reference time (default: current UTC time).

    Returns:
        Recency score in [0.2, 1.0].

    Raises:
        ValueError: If ``half_life_days`` is not positive.
    """
    if half_life_days <= 0:
        msg = f"half_life_days must be positive (got {half_life_days})"
        raise ValueError(msg)

    age = age_days(published_at, now or datetime.now(UTC))
    decayed = 2.0 ** (-age / half_life_days) if age > 0 else RECENCY_CEILING
    return max(RECENCY_FLOOR, min(RECENCY_CEILING, decayed))
