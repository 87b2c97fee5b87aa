"""Async digest pipeline: the I/O boundary around ranking and selection."""

import asyncio
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from curator.config.constants import COMPONENT_PIPELINE
from curator.config.schemas.categories import CurationConfig
from curator.focus.profile import FocusProfile
from curator.focus.rerank import FocusReranker
from curator.observability.logging import pass_context
from curator.ranker.metrics import RankerMetrics
from curator.ranker.models import RankingResult, SelectionResult
from curator.ranker.ranker import CategoryRanker
from curator.ranker.selector import DiversitySelector
from curator.ranker.state_machine import PassState, PassStateMachine
from curator.store.protocols import CandidateStore, JudgmentStore


logger = structlog.get_logger()


@dataclass
class DigestResult:
    """Outcome of one category pass.

    Attributes:
        category: Category ranked.
        period: Period name used for the window and source cap.
        ranking: Ranking engine output with rejection reasons.
        selection: Final shortlist with reasons.
        metrics: Counters and timings for the pass.
        state: Final pass state.
    """

    category: str
    period: str
    ranking: RankingResult
    selection: SelectionResult
    metrics: RankerMetrics
    state: PassState

    def to_dict(self) -> dict[str, object]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "category": self.category,
            "period": self.period,
            "threshold_used": self.ranking.threshold_used,
            "initial_threshold": self.ranking.initial_threshold,
            "candidates_in": self.ranking.candidates_in,
            "selection": self.selection.to_dict(),
            "rejected": dict(self.ranking.rejected),
            "metrics": self.metrics.to_dict(),
        }


class DigestPipeline:
    """Runs load -> rank -> rerank -> select for categories.

    Candidates and judgments are awaited once each, in that order; the
    rest of the pass is synchronous. Every pass builds its own ranker,
    selector and metrics, so passes for different categories can be
    gathered concurrently.
    """

    def __init__(
        self,
        candidate_store: CandidateStore,
        judgment_store: JudgmentStore,
        config: CurationConfig | None = None,
        run_id: str | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            candidate_store: Source of time-windowed candidates.
            judgment_store: Source of model judgments.
            config: Curation configuration (default: built-in).
            run_id: Run identifier (default: random UUID).
        """
        self._candidates = candidate_store
        self._judgments = judgment_store
        self._config = config or CurationConfig()
        self._run_id = run_id or str(uuid.uuid4())
        self._log = logger.bind(component=COMPONENT_PIPELINE, run_id=self._run_id)

    @property
    def run_id(self) -> str:
        """Run identifier."""
        return self._run_id

    @property
    def config(self) -> CurationConfig:
        """Curation configuration in use."""
        return self._config

    async def run(
        self,
        category: str,
        period: str = "week",
        focus: FocusProfile | None = None,
        max_items: int | None = None,
        now: datetime | None = None,
        window_days: float | None = None,
    ) -> DigestResult:
        """Run one category pass.

        Args:
            category: Category name.
            period: Period name; sets the window and per-source cap.
            focus: Optional focus profile for exclusions and re-ranking.
            max_items: Selection target overriding the category maximum.
            now: Reference time for recency scoring.
            window_days: Window overriding the period's days.

        Returns:
            DigestResult; the selection is empty when nothing met the bar.

        Raises:
            ConfigurationError: If the category or period is unknown.
        """
        profile = self._config.get_category(category)
        period_config = self._config.get_period(period)
        days = window_days if window_days is not None else period_config.days
        now = now or datetime.now(UTC)
        log = self._log.bind(category=category, period=period)

        with pass_context(self._run_id, category):
            candidates = await self._candidates.load_candidates(category, days)
            judgments = await self._judgments.load_judgments(
                [c.id for c in candidates]
            )

            log.info(
                "pass_started",
                candidates=len(candidates),
                judged=len(judgments),
                window_days=days,
            )

            metrics = RankerMetrics()
            state = PassStateMachine(self._run_id, category)

            ranker = CategoryRanker(
                profile,
                boost_config=self._config.boost,
                ranking_config=self._config.ranking,
                run_id=self._run_id,
                now=now,
                metrics=metrics,
            )
            ranking = ranker.rank(candidates, judgments)
            state.to_ranked()

            reranker = FocusReranker(self._config.focus, run_id=self._run_id)
            kept = reranker.filter_by_exclusions(ranking.items, focus)
            metrics.excluded = len(ranking.items) - len(kept)
            reranked = reranker.rerank(kept, focus)
            state.to_reranked()

            selector = DiversitySelector(
                self._config.selection, run_id=self._run_id, metrics=metrics
            )
            selection = selector.select(
                reranked,
                max_items if max_items is not None else profile.max_items,
                period_config.max_per_source,
            )
            state.to_selected()

            log.info(
                "pass_complete",
                ranked=len(ranking.items),
                excluded=metrics.excluded,
                selected=len(selection.items),
                relaxed=selection.relaxed,
                threshold_used=ranking.threshold_used,
            )

            return DigestResult(
                category=category,
                period=period,
                ranking=ranking,
                selection=selection,
                metrics=metrics,
                state=state.state,
            )

    async def run_many(
        self,
        categories: Sequence[str],
        period: str = "week",
        focus: FocusProfile | None = None,
        max_items: int | None = None,
        now: datetime | None = None,
        window_days: float | None = None,
    ) -> dict[str, DigestResult]:
        """Run independent passes for several categories concurrently.

        Returns:
            Results keyed by category, in the order given.
        """
        results = await asyncio.gather(
            *(
                self.run(
                    category,
                    period=period,
                    focus=focus,
                    max_items=max_items,
                    now=now,
                    window_days=window_days,
                )
                for category in categories
            )
        )
        return dict(zip(categories, results, strict=True))
