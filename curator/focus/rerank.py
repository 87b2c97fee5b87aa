"""Focus re-ranking and exclusion filtering.

Re-ranking multiplies each item's final score by a boost derived from how
well the item aligns with the focus topics; poorly aligned items are
demoted, never removed. Exclusion filtering removes items outright.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import replace

import structlog

from curator.config.schemas.categories import FocusBoostConfig
from curator.focus.profile import FocusProfile
from curator.ranker.models import RankedItem


logger = structlog.get_logger()

_SEPARATORS = re.compile(r"[\s\-_/]+")


def normalize_topic(text: str) -> str:
    """Lowercase and collapse separators so "code-search" equals "code search"."""
    return _SEPARATORS.sub(" ", text.lower()).strip()


def tag_match_score(tags: Iterable[str], focus_topics: Sequence[str]) -> float:
    """Fraction of tags overlapping a focus topic.

    A tag overlaps when it contains a topic or a topic contains it, after
    separator normalization.

    Args:
        tags: Judgment tags of the item.
        focus_topics: Focus topics.

    Returns:
        Score in [0, 1]; 0 when either side is empty.
    """
    normalized_tags = [t for t in (normalize_topic(tag) for tag in tags) if t]
    topics = [t for t in (normalize_topic(topic) for topic in focus_topics) if t]
    if not normalized_tags or not topics:
        return 0.0

    matches = sum(
        1
        for tag in normalized_tags
        if any(topic in tag or tag in topic for topic in topics)
    )
    return min(1.0, matches / len(normalized_tags))


def term_match_score(text: str, focus_terms: Sequence[str]) -> float:
    """Fraction of focus terms present in ``text``."""
    terms = [t for t in (normalize_topic(term) for term in focus_terms) if t]
    if not terms:
        return 0.0
    haystack = normalize_topic(text)
    matches = sum(1 for term in terms if term in haystack)
    return min(1.0, matches / len(terms))


def _item_text(item: RankedItem) -> str:
    candidate = item.item
    return " ".join(
        part for part in (candidate.title, candidate.summary, candidate.full_text) if part
    )


class FocusReranker:
    """Applies the focus boost table to a ranked list."""

    def __init__(
        self, config: FocusBoostConfig | None = None, run_id: str = "focus"
    ) -> None:
        """Initialize the re-ranker.

        Args:
            config: Boost bands and penalty (default: built-in table).
            run_id: Run identifier for logging.
        """
        self._config = config or FocusBoostConfig()
        self._log = logger.bind(component="focus", run_id=run_id)

    def alignment(self, item: RankedItem, focus_topics: Sequence[str]) -> float:
        """Alignment in [0, 1]: even blend of tag match and term match."""
        tag_match = tag_match_score(item.tags, focus_topics)
        term_match = term_match_score(_item_text(item), focus_topics)
        return 0.5 * tag_match + 0.5 * term_match

    def boost_for(self, alignment: float) -> float:
        """Map alignment onto the band table.

        Within a band the boost is interpolated linearly between ``low``
        and ``high``. Alignment at or below every band gets the penalty.
        """
        for band in self._config.bands:
            if alignment > band.above:
                position = (min(alignment, band.ceiling) - band.above) / (
                    band.ceiling - band.above
                )
                return band.low + position * (band.high - band.low)
        return self._config.penalty

    def rerank(
        self, items: Sequence[RankedItem], focus_profile: FocusProfile | None
    ) -> list[RankedItem]:
        """Re-weight and re-sort items by focus alignment.

        Args:
            items: Ranked items.
            focus_profile: Focus profile; None or no topics is a no-op.

        Returns:
            New list sorted by adjusted final score, ties in input order.
        """
        if focus_profile is None or not focus_profile.is_active:
            return list(items)

        topics = focus_profile.focus_topics
        reranked: list[RankedItem] = []
        for item in items:
            alignment = self.alignment(item, topics)
            boost = self.boost_for(alignment)
            adjusted = item.final_score * boost
            self._log.debug(
                "focus_boost_applied",
                item_id=item.id,
                baseline=round(item.final_score, 4),
                alignment=round(alignment, 3),
                boost=round(boost, 3),
                adjusted=round(adjusted, 4),
            )
            reranked.append(
                replace(
                    item,
                    final_score=adjusted,
                    focus_boost=boost,
                    reasoning=(
                        f"{item.reasoning} "
                        f"[FOCUS: alignment={alignment:.2f}, boost={boost:.2f}x]"
                    ),
                )
            )

        reranked.sort(key=lambda r: r.final_score, reverse=True)
        self._log.info(
            "focus_rerank_complete",
            item_count=len(reranked),
            focus_topics=list(topics),
        )
        return reranked

    def filter_by_exclusions(
        self, items: Sequence[RankedItem], focus_profile: FocusProfile | None
    ) -> list[RankedItem]:
        """Remove items whose text or tags mention an excluded topic.

        Args:
            items: Ranked items.
            focus_profile: Focus profile; None or no exclusions keeps all.

        Returns:
            Surviving items in input order.
        """
        if focus_profile is None or not focus_profile.has_exclusions:
            return list(items)

        excluded = [normalize_topic(t) for t in focus_profile.exclude_topics]
        kept: list[RankedItem] = []
        for item in items:
            text = normalize_topic(
                " ".join([item.title, item.item.summary, *sorted(item.tags)])
            )
            hit = next((topic for topic in excluded if topic and topic in text), None)
            if hit is not None:
                self._log.debug("item_excluded", item_id=item.id, topic=hit)
                continue
            kept.append(item)

        self._log.info(
            "exclusion_filter_complete",
            input_count=len(items),
            excluded_count=len(items) - len(kept),
        )
        return kept


def rerank_by_focus(
    items: Sequence[RankedItem],
    focus_profile: FocusProfile | None,
    config: FocusBoostConfig | None = None,
) -> list[RankedItem]:
    """Pure function API for focus re-ranking."""
    return FocusReranker(config).rerank(items, focus_profile)


def filter_by_exclusions(
    items: Sequence[RankedItem], focus_profile: FocusProfile | None
) -> list[RankedItem]:
    """Pure function API for exclusion filtering."""
    return FocusReranker().filter_by_exclusions(items, focus_profile)
