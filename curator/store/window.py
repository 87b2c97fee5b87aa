"""Time-window filtering of candidate items."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from curator.store.models import CandidateItem


def within_window(
    items: Iterable[CandidateItem],
    window_days: float,
    now: datetime,
) -> list[CandidateItem]:
    """Keep items published within ``window_days`` before ``now``.

    Items dated in the future are kept; feeds routinely publish with
    slightly skewed clocks. Input order is preserved.

    Args:
        items: Candidate items.
        window_days: Window length in days.
        now: Reference time (timezone-aware).

    Returns:
        Items inside the window.
    """
    cutoff = now - timedelta(days=window_days)
    return [item for item in items if item.published_at >= cutoff]
