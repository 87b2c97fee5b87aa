"""Data models for the ranking and selection pipeline."""

import math
from dataclasses import dataclass, field

from curator.store.models import CandidateItem, ModelJudgment


@dataclass(frozen=True)
class RankedItem:
    """A candidate item with its scores for one ranking pass.

    Recomputed on every pass; never the persisted source of truth.

    Attributes:
        item: The candidate item.
        lexical_score: Normalized BM25 score in [0, 1].
        model_score: Normalized judgment score, or the lexical fallback.
        recency_score: Recency decay in [0.2, 1].
        final_score: Boosted weighted sum (may exceed 1).
        reasoning: Human-readable scoring trace.
        judgment: Model judgment, when the item was judged.
        boost_multiplier: Domain-term multiplier applied.
        boost_terms: Domain terms that matched.
        focus_boost: Multiplier applied by focus re-ranking.
    """

    item: CandidateItem
    lexical_score: float
    model_score: float
    recency_score: float
    final_score: float
    reasoning: str
    judgment: ModelJudgment | None = None
    boost_multiplier: float = 1.0
    boost_terms: tuple[str, ...] = ()
    focus_boost: float = 1.0

    @property
    def id(self) -> str:
        """Item identifier."""
        return self.item.id

    @property
    def url(self) -> str:
        """Item URL."""
        return self.item.url

    @property
    def source_name(self) -> str:
        """Item source name."""
        return self.item.source_name

    @property
    def title(self) -> str:
        """Item title."""
        return self.item.title

    @property
    def tags(self) -> frozenset[str]:
        """Judgment tags (empty when unjudged)."""
        return self.judgment.tags if self.judgment else frozenset()

    @property
    def has_judgment(self) -> bool:
        """Whether the external judge scored this item."""
        return self.judgment is not None

    @property
    def effective_relevance(self) -> float:
        """Relevance compared against thresholds.

        Judged items use the judge's relevance; unjudged items use the
        lexical score on the same 0-10 scale, rounded half up.
        """
        if self.judgment is not None:
            return self.judgment.relevance
        return float(math.floor(self.lexical_score * 10 + 0.5))

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "source_name": self.source_name,
            "published_at": self.item.published_at.isoformat(),
            "category": self.item.category,
            "lexical_score": self.lexical_score,
            "model_score": self.model_score,
            "recency_score": self.recency_score,
            "boost_multiplier": self.boost_multiplier,
            "focus_boost": self.focus_boost,
            "final_score": self.final_score,
            "relevance": self.judgment.relevance if self.judgment else None,
            "usefulness": self.judgment.usefulness if self.judgment else None,
            "tags": sorted(self.tags),
            "reasoning": self.reasoning,
        }


@dataclass
class RankingResult:
    """Outcome of a ranking pass.

    Attributes:
        category: Category ranked.
        items: Ranked items, final score descending.
        candidates_in: Candidates received.
        initial_threshold: Category ``min_relevance``.
        threshold_used: Threshold after adaptive relaxation.
        rejected: Item id -> reason for every candidate not in ``items``.
    """

    category: str
    items: list[RankedItem] = field(default_factory=list)
    candidates_in: int = 0
    initial_threshold: int = 0
    threshold_used: int = 0
    rejected: dict[str, str] = field(default_factory=dict)

    @property
    def threshold_relaxed(self) -> bool:
        """Whether relaxation lowered the threshold."""
        return self.threshold_used < self.initial_threshold


@dataclass
class SelectionResult:
    """Outcome of diversity selection.

    Attributes:
        items: Selected items, final score descending.
        reasons: Item id -> inclusion or exclusion reason for every item
            the selector examined.
        per_source_cap: Cap applied in the strict pass.
        max_items: Target maximum.
        min_items: Minimum-fill target.
        relaxed_ids: Items admitted by the relaxed minimum-fill pass.
    """

    items: list[RankedItem] = field(default_factory=list)
    reasons: dict[str, str] = field(default_factory=dict)
    per_source_cap: int = 0
    max_items: int = 0
    min_items: int = 0
    relaxed_ids: set[str] = field(default_factory=set)

    @property
    def relaxed(self) -> bool:
        """Whether the minimum-fill pass admitted anything."""
        return bool(self.relaxed_ids)

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "items": [item.to_dict() for item in self.items],
            "reasons": dict(self.reasons),
            "per_source_cap": self.per_source_cap,
            "max_items": self.max_items,
            "min_items": self.min_items,
            "relaxed_ids": sorted(self.relaxed_ids),
        }
