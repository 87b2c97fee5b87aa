"""Ranking engine: hybrid scoring with adaptive relevance thresholds."""

import time
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import structlog
from pydantic import ValidationError

from curator.config.errors import ConfigurationError
from curator.config.schemas.categories import (
    CategoryProfile,
    CurationConfig,
    DomainBoostConfig,
    RankingConfig,
)
from curator.ranker.boost import BoostMatch, DomainBoostMatcher
from curator.ranker.lexical import LexicalIndex
from curator.ranker.metrics import RankerMetrics
from curator.ranker.models import RankedItem, RankingResult
from curator.ranker.recency import age_days, recency_score
from curator.store.models import CandidateItem, ModelJudgment
from curator.store.url import is_valid_item_url


logger = structlog.get_logger()


def resolve_profile(
    profile: CategoryProfile | Mapping[str, Any] | None,
) -> CategoryProfile:
    """Validate a category profile before any scoring happens.

    Args:
        profile: Profile instance or raw mapping.

    Returns:
        Validated profile.

    Raises:
        ConfigurationError: If the profile is missing or malformed.
    """
    if profile is None:
        msg = "Category profile is required"
        raise ConfigurationError(
            msg, errors=[{"loc": "profile", "msg": msg, "type": "missing"}]
        )
    if isinstance(profile, CategoryProfile):
        return profile
    try:
        return CategoryProfile.model_validate(profile)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(loc) for loc in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        msg = f"Invalid category profile: {len(errors)} errors"
        raise ConfigurationError(msg, errors=errors, source="profile") from e


class CategoryRanker:
    """Ranks a time-windowed candidate set for one category.

    Pipeline:
        URL filter -> BM25 index -> model/recency/boost scoring -> sort
        -> off-topic hard filter -> adaptive threshold -> truncate

    Each call builds its own index and score maps; rankers for different
    categories can run concurrently.
    """

    def __init__(
        self,
        profile: CategoryProfile | Mapping[str, Any] | None,
        boost_config: DomainBoostConfig | None = None,
        ranking_config: RankingConfig | None = None,
        run_id: str = "rank",
        now: datetime | None = None,
        metrics: RankerMetrics | None = None,
    ) -> None:
        """Initialize the ranker.

        Args:
            profile: Category profile (validated here; errors are fatal).
            boost_config: Domain-term boost table.
            ranking_config: Thresholds and judgment weights.
            run_id: Run identifier for logging.
            now: Reference time for recency.
            metrics: Metrics for this pass.

        Raises:
            ConfigurationError: If the profile is missing or malformed.
        """
        self._profile = resolve_profile(profile)
        self._ranking = ranking_config or RankingConfig()
        self._boost_matcher = DomainBoostMatcher(boost_config)
        self._now = now or datetime.now(UTC)
        self._metrics = metrics or RankerMetrics()
        self._log = logger.bind(
            component="ranker",
            run_id=run_id,
            category=self._profile.name,
        )

    @classmethod
    def from_config(
        cls,
        config: CurationConfig,
        category: str,
        run_id: str = "rank",
        now: datetime | None = None,
        metrics: RankerMetrics | None = None,
    ) -> "CategoryRanker":
        """Build a ranker for a configured category.

        Raises:
            ConfigurationError: If the category is unknown.
        """
        return cls(
            config.get_category(category),
            boost_config=config.boost,
            ranking_config=config.ranking,
            run_id=run_id,
            now=now,
            metrics=metrics,
        )

    @property
    def profile(self) -> CategoryProfile:
        """Category profile in use."""
        return self._profile

    @property
    def metrics(self) -> RankerMetrics:
        """Metrics for this pass."""
        return self._metrics

    def rank(
        self,
        candidates: Sequence[CandidateItem],
        judgments: Mapping[str, ModelJudgment] | None = None,
    ) -> RankingResult:
        """Rank candidates for the category.

        Args:
            candidates: Time-window-filtered candidates.
            judgments: Model judgments by item id; missing entries are legal.

        Returns:
            RankingResult; empty when no candidate survives.
        """
        start = time.perf_counter()
        judgments = judgments or {}
        profile = self._profile
        result = RankingResult(
            category=profile.name,
            candidates_in=len(candidates),
            initial_threshold=profile.min_relevance,
            threshold_used=profile.min_relevance,
        )
        self._metrics.candidates_in = len(candidates)

        survivors = self._filter_urls(candidates, result.rejected)
        if not survivors:
            self._log.info(
                "ranking_empty",
                candidates_in=len(candidates),
                url_rejected=len(result.rejected),
            )
            self._metrics.threshold_used = result.threshold_used
            return result

        index = LexicalIndex().build(survivors)
        lexical = index.normalize(index.score(profile.query_terms))

        scored = [
            self._score_item(item, lexical.get(item.id, 0.0), judgments.get(item.id))
            for item in survivors
        ]
        scored.sort(key=lambda r: r.final_score, reverse=True)

        on_topic = self._drop_off_topic(scored, result.rejected)
        kept, threshold = self._apply_adaptive_threshold(on_topic, result.rejected)

        result.items = kept[: profile.max_items]
        for dropped in kept[profile.max_items :]:
            result.rejected[dropped.id] = (
                f"Beyond category limit ({profile.max_items} items)"
            )
        result.threshold_used = threshold

        self._metrics.threshold_used = threshold
        self._metrics.ranked_out = len(result.items)
        for r in result.items:
            self._metrics.record_score(r.final_score)
        self._metrics.scoring_duration_ms = (time.perf_counter() - start) * 1000

        if result.threshold_relaxed:
            self._log.info(
                "ranking_complete",
                candidates_in=len(candidates),
                ranked_out=len(result.items),
                initial_threshold=profile.min_relevance,
                threshold_used=threshold,
                target=profile.max_items,
            )
        else:
            self._log.info(
                "ranking_complete",
                candidates_in=len(candidates),
                ranked_out=len(result.items),
                filtered=len(scored) - len(result.items),
                threshold_used=threshold,
            )

        return result

    def _filter_urls(
        self, candidates: Sequence[CandidateItem], rejected: dict[str, str]
    ) -> list[CandidateItem]:
        """Drop candidates with empty, relative or loopback URLs."""
        survivors: list[CandidateItem] = []
        for item in candidates:
            if is_valid_item_url(item.url):
                survivors.append(item)
                continue
            rejected[item.id] = f"Invalid URL: {item.url!r}"
            self._log.debug("url_rejected", item_id=item.id, url=item.url)

        self._metrics.url_rejected = len(candidates) - len(survivors)
        return survivors

    def _model_score(
        self, judgment: ModelJudgment | None, lexical_score: float
    ) -> float:
        """Normalized judgment score; the lexical score when unjudged."""
        if judgment is None:
            return lexical_score
        return (
            self._ranking.judgment_relevance_weight * judgment.relevance
            + self._ranking.judgment_usefulness_weight * judgment.usefulness
        ) / 10

    def _score_item(
        self,
        item: CandidateItem,
        lexical_score: float,
        judgment: ModelJudgment | None,
    ) -> RankedItem:
        """Compute all score components for one item."""
        weights = self._profile.weights
        model_score = self._model_score(judgment, lexical_score)
        recency = recency_score(
            item.published_at, self._profile.half_life_days, self._now
        )

        boost = self._boost_matcher.match(f"{item.title} {item.summary} {item.snippet}")

        weighted = (
            weights.model * model_score
            + weights.lexical * lexical_score
            + weights.recency * recency
        )
        final_score = boost.multiplier * weighted

        if boost.multiplier > 1.0:
            self._log.debug(
                "boost_applied",
                item_id=item.id,
                multiplier=boost.multiplier,
                terms=list(boost.matched_terms),
            )

        return RankedItem(
            item=item,
            lexical_score=lexical_score,
            model_score=model_score,
            recency_score=recency,
            final_score=final_score,
            reasoning=self._build_reasoning(
                item, lexical_score, recency, judgment, boost
            ),
            judgment=judgment,
            boost_multiplier=boost.multiplier,
            boost_terms=boost.matched_terms,
        )

    def _build_reasoning(
        self,
        item: CandidateItem,
        lexical_score: float,
        recency: float,
        judgment: ModelJudgment | None,
        boost: BoostMatch,
    ) -> str:
        """Human-readable score trace."""
        if judgment is not None:
            model_part = (
                f"Model: relevance={judgment.relevance:.1f}, "
                f"usefulness={judgment.usefulness:.1f}"
            )
            tags = ", ".join(sorted(judgment.tags)) or "none"
        else:
            model_part = f"Model: unjudged (lexical fallback={lexical_score:.2f})"
            tags = "none"

        age = max(0.0, age_days(item.published_at, self._now))
        parts = [
            model_part,
            f"Lexical={lexical_score:.2f}",
            f"Recency={recency:.2f} (age: {age:.0f}d)",
        ]
        if boost.multiplier > 1.0:
            parts.append(boost.describe())
        parts.append(f"Tags: {tags}")
        return " | ".join(parts)

    def _drop_off_topic(
        self, scored: list[RankedItem], rejected: dict[str, str]
    ) -> list[RankedItem]:
        """Remove items the judge tagged off-topic, regardless of score."""
        marker = self._ranking.off_topic_tag
        kept: list[RankedItem] = []
        for r in scored:
            if r.judgment is not None and r.judgment.has_tag(marker):
                rejected[r.id] = f"Tagged '{marker}' by model judgment"
                self._log.debug("off_topic_dropped", item_id=r.id, title=r.title)
                continue
            kept.append(r)

        self._metrics.off_topic_dropped = len(scored) - len(kept)
        return kept

    def _meets_threshold(self, r: RankedItem, threshold: int) -> bool:
        """Check an item against the active threshold.

        Unjudged items are held to the fixed unjudged bar instead.
        """
        bar = threshold if r.has_judgment else self._ranking.unjudged_relevance_bar
        return r.effective_relevance >= bar

    def _apply_adaptive_threshold(
        self, items: list[RankedItem], rejected: dict[str, str]
    ) -> tuple[list[RankedItem], int]:
        """Filter by relevance, relaxing the threshold toward the floor.

        The threshold starts at ``min_relevance`` and drops one step at a
        time while fewer than ``max_items`` items qualify. It never goes
        below the floor; under-filling is preferred to admitting noise.

        Returns:
            Tuple of (qualifying items in score order, threshold used).
        """
        target = self._profile.max_items
        threshold = self._profile.min_relevance
        floor = min(self._ranking.threshold_floor, threshold)

        while True:
            kept = [r for r in items if self._meets_threshold(r, threshold)]
            if len(kept) >= target or threshold <= floor:
                break
            threshold -= 1
            self._log.debug(
                "threshold_lowered",
                threshold=threshold,
                have=len(kept),
                target=target,
            )

        kept_ids = {r.id for r in kept}
        for r in items:
            if r.id not in kept_ids:
                bar = (
                    threshold
                    if r.has_judgment
                    else self._ranking.unjudged_relevance_bar
                )
                rejected[r.id] = (
                    f"Relevance {r.effective_relevance:.1f} below threshold {bar}"
                )

        self._metrics.below_threshold = len(items) - len(kept)
        return kept, threshold


def rank(
    candidates: Sequence[CandidateItem],
    profile: CategoryProfile | Mapping[str, Any] | None,
    judgments: Mapping[str, ModelJudgment] | None = None,
    config: CurationConfig | None = None,
    now: datetime | None = None,
    run_id: str = "pure",
) -> list[RankedItem]:
    """Pure function API for ranking.

    Args:
        candidates: Time-window-filtered candidates.
        profile: Category profile.
        judgments: Model judgments by item id.
        config: Source of the boost and ranking tables (default: built-in).
        now: Reference time for recency.
        run_id: Run identifier.

    Returns:
        Ranked items, final score descending.

    Raises:
        ConfigurationError: If the profile is missing or malformed.
    """
    config = config or CurationConfig()
    ranker = CategoryRanker(
        profile,
        boost_config=config.boost,
        ranking_config=config.ranking,
        run_id=run_id,
        now=now,
    )
    return ranker.rank(candidates, judgments).items
