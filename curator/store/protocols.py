"""Protocol interfaces for the item and judgment collaborators."""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from curator.store.models import CandidateItem, ModelJudgment


@runtime_checkable
class CandidateStore(Protocol):
    """Source of time-windowed candidate items for a category."""

    async def load_candidates(
        self, category: str, window_days: float
    ) -> list[CandidateItem]:
        """Load the candidate set for one ranking pass.

        Args:
            category: Category name.
            window_days: Time window in days.

        Returns:
            Candidate items; an empty list when nothing is in the window.
        """
        ...


@runtime_checkable
class JudgmentStore(Protocol):
    """Source of precomputed model judgments."""

    async def load_judgments(
        self, item_ids: Sequence[str]
    ) -> dict[str, ModelJudgment]:
        """Load judgments for the given items.

        Items never judged are simply absent from the returned mapping.

        Args:
            item_ids: Identifiers to look up.

        Returns:
            Mapping of item id to judgment.
        """
        ...
