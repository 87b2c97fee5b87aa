"""In-memory item and judgment store backed by JSON documents."""

from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import TypeAdapter

from curator.store.models import CandidateItem, ModelJudgment
from curator.store.window import within_window


logger = structlog.get_logger()

_ITEMS_ADAPTER = TypeAdapter(list[CandidateItem])
_JUDGMENTS_ADAPTER = TypeAdapter(dict[str, ModelJudgment])


class JsonItemStore:
    """Serves candidates and judgments from already-materialized data.

    Implements both ``CandidateStore`` and ``JudgmentStore``. Candidates are
    matched on their primary ``category`` or any secondary category.
    """

    def __init__(
        self,
        items: Sequence[CandidateItem],
        judgments: dict[str, ModelJudgment] | None = None,
        now: datetime | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            items: All known candidate items.
            judgments: Judgments keyed by item id.
            now: Reference time for window filtering (default: current time).
        """
        self._items = list(items)
        self._judgments = dict(judgments or {})
        self._now = now
        self._log = logger.bind(component="store", store="json")

    @classmethod
    def from_files(
        cls,
        candidates_path: Path,
        judgments_path: Path | None = None,
        now: datetime | None = None,
    ) -> "JsonItemStore":
        """Build a store from JSON files.

        Args:
            candidates_path: JSON list of candidate items.
            judgments_path: JSON object mapping item id to judgment.
            now: Reference time for window filtering.

        Returns:
            Populated store.

        Raises:
            pydantic.ValidationError: If a document does not match the models.
        """
        items = _ITEMS_ADAPTER.validate_json(candidates_path.read_bytes())
        judgments: dict[str, ModelJudgment] = {}
        if judgments_path is not None:
            judgments = _JUDGMENTS_ADAPTER.validate_json(judgments_path.read_bytes())
        return cls(items, judgments, now=now)

    async def load_candidates(
        self, category: str, window_days: float
    ) -> list[CandidateItem]:
        """Return category items published inside the window."""
        now = self._now or datetime.now(UTC)
        in_category = [
            item
            for item in self._items
            if item.category == category or category in item.categories
        ]
        candidates = within_window(in_category, window_days, now)
        self._log.info(
            "candidates_loaded",
            category=category,
            window_days=window_days,
            in_category=len(in_category),
            in_window=len(candidates),
        )
        return candidates

    async def load_judgments(
        self, item_ids: Sequence[str]
    ) -> dict[str, ModelJudgment]:
        """Return the judgments known for ``item_ids``."""
        found = {i: self._judgments[i] for i in item_ids if i in self._judgments}
        self._log.info(
            "judgments_loaded",
            requested=len(item_ids),
            found=len(found),
        )
        return found
