"""Per-pass metrics for ranking and selection."""

from dataclasses import dataclass, field


@dataclass
class RankerMetrics:
    """Counters and timings for one category pass.

    Created per pass; passes running concurrently never share an instance.

    Attributes:
        candidates_in: Candidates received.
        url_rejected: Candidates rejected for invalid URLs.
        off_topic_dropped: Items removed by the off-topic hard filter.
        below_threshold: Items below the final relevance threshold.
        ranked_out: Items returned by the ranking engine.
        threshold_used: Relevance threshold after relaxation.
        excluded: Items removed by focus exclusions.
        selected: Items selected.
        relaxed_selected: Items admitted by the minimum-fill pass.
        score_values: Final scores for percentile calculation.
        scoring_duration_ms: Time spent ranking.
        selection_duration_ms: Time spent selecting.
    """

    candidates_in: int = 0
    url_rejected: int = 0
    off_topic_dropped: int = 0
    below_threshold: int = 0
    ranked_out: int = 0
    threshold_used: int | None = None
    excluded: int = 0
    selected: int = 0
    relaxed_selected: int = 0
    score_values: list[float] = field(default_factory=list)
    scoring_duration_ms: float = 0.0
    selection_duration_ms: float = 0.0

    def record_score(self, score: float) -> None:
        """Record a final score for percentile calculation."""
        self.score_values.append(score)

    def get_score_percentiles(self) -> dict[str, float]:
        """Calculate score percentiles (p50/p90/p99)."""
        if not self.score_values:
            return {"p50": 0.0, "p90": 0.0, "p99": 0.0}

        sorted_scores = sorted(self.score_values)
        n = len(sorted_scores)

        def percentile(p: float) -> float:
            idx = int(p * n / 100)
            return sorted_scores[min(idx, n - 1)]

        return {
            "p50": percentile(50),
            "p90": percentile(90),
            "p99": percentile(99),
        }

    def to_dict(self) -> dict[str, object]:
        """Convert metrics to dictionary."""
        return {
            "candidates_in": self.candidates_in,
            "url_rejected": self.url_rejected,
            "off_topic_dropped": self.off_topic_dropped,
            "below_threshold": self.below_threshold,
            "ranked_out": self.ranked_out,
            "threshold_used": self.threshold_used,
            "excluded": self.excluded,
            "selected": self.selected,
            "relaxed_selected": self.relaxed_selected,
            "scoring_duration_ms": self.scoring_duration_ms,
            "selection_duration_ms": self.selection_duration_ms,
            "score_percentiles": self.get_score_percentiles(),
        }
