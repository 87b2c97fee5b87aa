"""Diversity selection: URL dedup, per-source caps and minimum fill."""

import math
import time
from collections import defaultdict
from collections.abc import Sequence

import structlog

from curator.config.schemas.categories import (
    CategoryProfile,
    CurationConfig,
    SelectionConfig,
)
from curator.ranker.constants import DEFAULT_PER_SOURCE_CAP
from curator.ranker.metrics import RankerMetrics
from curator.ranker.models import RankedItem, SelectionResult
from curator.store.url import url_key


logger = structlog.get_logger()


def minimum_fill(max_items: int, config: SelectionConfig) -> int:
    """Minimum number of items the selector tries to reach.

    ``min_fill_ratio`` of the target, never below ``absolute_min_items``
    and never above the target itself.
    """
    ratio_min = math.ceil(config.min_fill_ratio * max_items)
    return min(max_items, max(ratio_min, config.absolute_min_items))


class DiversitySelector:
    """Constrained top-K selection over a ranked list.

    Steps:
    1. Drop duplicate URLs (first-seen, highest-ranked wins)
    2. Drop items below the quality floor
    3. Greedy strict pass under the per-source cap and target maximum
    4. Relaxed pass with a wider per-source cap if below the minimum fill

    Every examined item receives a reason.
    """

    def __init__(
        self,
        config: SelectionConfig | None = None,
        run_id: str = "select",
        metrics: RankerMetrics | None = None,
    ) -> None:
        """Initialize the selector.

        Args:
            config: Selection tunables.
            run_id: Run identifier for logging.
            metrics: Metrics for this pass.
        """
        self._config = config or SelectionConfig()
        self._metrics = metrics or RankerMetrics()
        self._log = logger.bind(
            component="ranker",
            subcomponent="selector",
            run_id=run_id,
        )

    @property
    def metrics(self) -> RankerMetrics:
        """Metrics for this pass."""
        return self._metrics

    def select(
        self,
        ranked_items: Sequence[RankedItem],
        max_items: int,
        per_source_cap: int = DEFAULT_PER_SOURCE_CAP,
    ) -> SelectionResult:
        """Select a source-diverse shortlist.

        Args:
            ranked_items: Items sorted by final score descending.
            max_items: Target maximum.
            per_source_cap: Items allowed per source in the strict pass.

        Returns:
            SelectionResult in score order with a reason per examined item.

        Raises:
            ValueError: If ``max_items`` or ``per_source_cap`` is below 1.
        """
        if max_items < 1:
            msg = f"max_items must be >= 1 (got {max_items})"
            raise ValueError(msg)
        if per_source_cap < 1:
            msg = f"per_source_cap must be >= 1 (got {per_source_cap})"
            raise ValueError(msg)

        start = time.perf_counter()
        min_items = minimum_fill(max_items, self._config)
        result = SelectionResult(
            per_source_cap=per_source_cap,
            max_items=max_items,
            min_items=min_items,
        )

        ordered = sorted(ranked_items, key=lambda r: r.final_score, reverse=True)
        unique = self._dedupe(ordered, result.reasons)
        eligible = self._apply_quality_floor(unique, result.reasons)

        accepted: set[int] = set()
        source_counts: dict[str, int] = defaultdict(int)
        capped = self._strict_pass(
            eligible, accepted, source_counts, result.reasons, per_source_cap, max_items
        )

        if len(accepted) < min_items and capped:
            self._relaxed_pass(
                eligible, capped, accepted, source_counts, result, min_items
            )

        for rank, position in enumerate(sorted(accepted), start=1):
            item = eligible[position]
            result.items.append(item)
            if item.id in result.relaxed_ids:
                note = result.reasons[item.id]
                result.reasons[item.id] = f"Selected at rank {rank} {note}"
            else:
                result.reasons[item.id] = f"Selected at rank {rank}"

        self._metrics.selected = len(result.items)
        self._metrics.relaxed_selected = len(result.relaxed_ids)
        self._metrics.selection_duration_ms = (time.perf_counter() - start) * 1000

        self._log.info(
            "selection_complete",
            input_count=len(ranked_items),
            unique_count=len(unique),
            selected_count=len(result.items),
            relaxed_count=len(result.relaxed_ids),
            min_items=min_items,
            max_items=max_items,
            per_source_cap=per_source_cap,
        )
        if len(result.items) < min_items:
            self._log.info(
                "selection_under_filled",
                selected_count=len(result.items),
                min_items=min_items,
            )

        return result

    def _dedupe(
        self, items: Sequence[RankedItem], reasons: dict[str, str]
    ) -> list[RankedItem]:
        """Keep the first item per normalized URL key."""
        seen: dict[str, str] = {}
        unique: list[RankedItem] = []
        for item in items:
            key = url_key(item.url)
            first_id = seen.get(key)
            if first_id is not None:
                reasons[item.id] = f"Duplicate URL of {first_id} ({key})"
                self._log.debug("duplicate_url_dropped", item_id=item.id, url_key=key)
                continue
            seen[key] = item.id
            unique.append(item)
        return unique

    def _apply_quality_floor(
        self, items: list[RankedItem], reasons: dict[str, str]
    ) -> list[RankedItem]:
        floor = self._config.quality_floor
        eligible: list[RankedItem] = []
        for item in items:
            if item.final_score < floor:
                reasons[item.id] = (
                    f"Below quality floor (score={item.final_score:.4f} < {floor})"
                )
                continue
            eligible.append(item)
        return eligible

    def _strict_pass(
        self,
        eligible: list[RankedItem],
        accepted: set[int],
        source_counts: dict[str, int],
        reasons: dict[str, str],
        per_source_cap: int,
        max_items: int,
    ) -> list[int]:
        """Greedy walk under the strict cap.

        Returns:
            Positions rejected only because their source was full.
        """
        capped: list[int] = []
        for position, item in enumerate(eligible):
            source = item.source_name
            if len(accepted) >= max_items:
                reasons[item.id] = (
                    f"Total category limit reached ({len(accepted)}/{max_items})"
                )
            elif source_counts[source] >= per_source_cap:
                reasons[item.id] = (
                    f"Source cap reached for {source} "
                    f"({source_counts[source]}/{per_source_cap})"
                )
                capped.append(position)
            else:
                accepted.add(position)
                source_counts[source] += 1
        return capped

    def _relaxed_pass(
        self,
        eligible: list[RankedItem],
        capped: list[int],
        accepted: set[int],
        source_counts: dict[str, int],
        result: SelectionResult,
        min_items: int,
    ) -> None:
        """Re-admit source-capped items under a wider cap up to the minimum."""
        relaxed_cap = result.per_source_cap * self._config.relaxed_cap_multiplier
        self._log.info(
            "source_cap_relaxed",
            have=len(accepted),
            min_items=min_items,
            relaxed_cap=relaxed_cap,
        )
        for position in capped:
            if len(accepted) >= min_items:
                break
            item = eligible[position]
            source = item.source_name
            if source_counts[source] >= relaxed_cap:
                result.reasons[item.id] = (
                    f"Source cap reached for {source} even after relaxation "
                    f"({source_counts[source]}/{relaxed_cap})"
                )
                continue
            accepted.add(position)
            source_counts[source] += 1
            result.relaxed_ids.add(item.id)
            result.reasons[item.id] = (
                f"(relaxed source cap {source_counts[source]}/{relaxed_cap} "
                f"to reach minimum {min_items})"
            )


def select(
    ranked_items: Sequence[RankedItem],
    category: CategoryProfile | str,
    per_source_cap: int = DEFAULT_PER_SOURCE_CAP,
    max_override: int | None = None,
    config: CurationConfig | None = None,
    run_id: str = "pure",
) -> SelectionResult:
    """Pure function API for diversity selection.

    Args:
        ranked_items: Items sorted by final score descending.
        category: Category profile, or a category name looked up in ``config``.
        per_source_cap: Strict per-source cap.
        max_override: Target maximum overriding the category ``max_items``.
        config: Source of category and selection tables (default: built-in).
        run_id: Run identifier.

    Returns:
        SelectionResult.

    Raises:
        ConfigurationError: If ``category`` names an unknown category.
    """
    config = config or CurationConfig()
    if isinstance(category, CategoryProfile):
        profile = category
    else:
        profile = config.get_category(category)
    max_items = max_override if max_override is not None else profile.max_items
    selector = DiversitySelector(config.selection, run_id=run_id)
    return selector.select(ranked_items, max_items, per_source_cap)
