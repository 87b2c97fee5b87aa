"""Unit tests for the ranking engine."""

from datetime import timedelta

import pytest

from curator.config.errors import ConfigurationError
from curator.config.schemas.categories import (
    CategoryProfile,
    CurationConfig,
    RankingConfig,
    ScoreWeights,
)
from curator.ranker.ranker import CategoryRanker, rank
from curator.store.models import CandidateItem, ModelJudgment
from tests.helpers.time import FIXED_NOW


def _make_profile(
    max_items: int = 10,
    min_relevance: int = 5,
    query_terms: list[str] | None = None,
) -> CategoryProfile:
    """Create a test CategoryProfile."""
    return CategoryProfile(
        name="tech_articles",
        query_terms=query_terms or ["code", "search", "refactoring"],
        half_life_days=3,
        max_items=max_items,
        min_relevance=min_relevance,
        weights=ScoreWeights(lexical=0.35, model=0.45, recency=0.2),
    )


def _make_item(
    item_id: str,
    title: str = "Notes on refactoring legacy code",
    source_name: str = "Test Source",
    url: str | None = None,
    days_old: float = 1.0,
    summary: str = "",
) -> CandidateItem:
    """Create a test CandidateItem."""
    return CandidateItem(
        id=item_id,
        source_name=source_name,
        title=title,
        url=url if url is not None else f"https://example.com/{item_id}",
        published_at=FIXED_NOW - timedelta(days=days_old),
        summary=summary,
        category="tech_articles",
    )


def _judge(relevance: float, usefulness: float = 5.0, *tags: str) -> ModelJudgment:
    """Create a test ModelJudgment."""
    return ModelJudgment(relevance=relevance, usefulness=usefulness, tags=list(tags))


class TestRankScoring:
    """Tests for score composition."""

    @pytest.mark.unit
    def test_model_score_from_judgment(self) -> None:
        """Test model score blends relevance and usefulness 70/30."""
        items = [_make_item("a")]
        ranked = rank(items, _make_profile(), {"a": _judge(8, 6)}, now=FIXED_NOW)
        assert ranked[0].model_score == pytest.approx((0.7 * 8 + 0.3 * 6) / 10)

    @pytest.mark.unit
    def test_unjudged_items_fall_back_to_lexical(self) -> None:
        """Test the lexical score stands in for a missing judgment."""
        items = [_make_item("a", title="Code search and refactoring")]
        ranked = rank(items, _make_profile(), {}, now=FIXED_NOW)
        assert len(ranked) == 1
        assert ranked[0].model_score == ranked[0].lexical_score
        assert ranked[0].lexical_score == 1.0
        assert "unjudged" in ranked[0].reasoning

    @pytest.mark.unit
    def test_final_score_is_boosted_weighted_sum(self) -> None:
        """Test the boost multiplies the weighted sum."""
        items = [_make_item("a", title="Sourcegraph refactoring notes")]
        ranked = rank(items, _make_profile(), {"a": _judge(7, 7)}, now=FIXED_NOW)

        item = ranked[0]
        weighted = (
            0.45 * item.model_score + 0.35 * item.lexical_score + 0.2 * item.recency_score
        )
        assert item.boost_multiplier == 5.0
        assert item.final_score == pytest.approx(5.0 * weighted)
        assert "[BOOST] 5x" in item.reasoning

    @pytest.mark.unit
    def test_boost_reads_snippet(self) -> None:
        """Test boost terms are matched in the snippet too."""
        item = CandidateItem(
            id="a",
            source_name="Test Source",
            title="Weekly roundup",
            url="https://example.com/a",
            published_at=FIXED_NOW,
            snippet="Inside the code search rewrite",
        )
        ranked = rank([item], _make_profile(), {"a": _judge(7)}, now=FIXED_NOW)
        assert ranked[0].boost_multiplier == 1.5

    @pytest.mark.unit
    def test_output_sorted_descending(self) -> None:
        """Test output is ordered by final score descending."""
        items = [_make_item(f"i{n}", days_old=n) for n in range(6)]
        judgments = {f"i{n}": _judge(5 + n % 4, 5) for n in range(6)}
        ranked = rank(items, _make_profile(), judgments, now=FIXED_NOW)
        scores = [r.final_score for r in ranked]
        assert scores == sorted(scores, reverse=True)

    @pytest.mark.unit
    def test_ties_keep_input_order(self) -> None:
        """Test equal final scores keep candidate order."""
        items = [_make_item("second"), _make_item("first")]
        judgments = {"second": _judge(7), "first": _judge(7)}
        ranked = rank(items, _make_profile(), judgments, now=FIXED_NOW)
        assert [r.id for r in ranked] == ["second", "first"]

    @pytest.mark.unit
    def test_reasoning_trace(self) -> None:
        """Test the reasoning string carries every component."""
        ranked = rank(
            [_make_item("a", days_old=2)],
            _make_profile(),
            {"a": _judge(8, 6, "refactoring")},
            now=FIXED_NOW,
        )
        reasoning = ranked[0].reasoning
        assert "Model: relevance=8.0, usefulness=6.0" in reasoning
        assert "Lexical=" in reasoning
        assert "(age: 2d)" in reasoning
        assert "Tags: refactoring" in reasoning


class TestRankFiltering:
    """Tests for hard filters in the ranking engine."""

    @pytest.mark.unit
    def test_off_topic_never_ranked(self) -> None:
        """Test off-topic items are dropped regardless of score."""
        items = [
            _make_item("off", title="Sourcegraph code search refactoring"),
            _make_item("on"),
        ]
        judgments = {"off": _judge(10, 10, "off-topic"), "on": _judge(6)}
        ranker = CategoryRanker(_make_profile(), now=FIXED_NOW)
        result = ranker.rank(items, judgments)

        assert [r.id for r in result.items] == ["on"]
        assert "off-topic" in result.rejected["off"]
        assert ranker.metrics.off_topic_dropped == 1

    @pytest.mark.unit
    def test_off_topic_tag_case_insensitive(self) -> None:
        """Test the off-topic marker matches in any case."""
        ranked = rank(
            [_make_item("a")],
            _make_profile(),
            {"a": _judge(9, 9, "Off-Topic")},
            now=FIXED_NOW,
        )
        assert ranked == []

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "url",
        [
            "",
            "/relative/path",
            "example.com/no-scheme",
            "ftp://example.com/file",
            "http://localhost/post",
            "http://127.0.0.1:8080/post",
            "http://[::1]/post",
            "http://0.0.0.0/post",
        ],
    )
    def test_invalid_urls_rejected(self, url: str) -> None:
        """Test invalid or loopback URLs never enter scoring."""
        items = [_make_item("bad", url=url), _make_item("good")]
        judgments = {"bad": _judge(10, 10), "good": _judge(6)}
        ranker = CategoryRanker(_make_profile(), now=FIXED_NOW)
        result = ranker.rank(items, judgments)

        assert [r.id for r in result.items] == ["good"]
        assert result.rejected["bad"].startswith("Invalid URL")
        assert ranker.metrics.url_rejected == 1

    @pytest.mark.unit
    def test_unjudged_items_use_fixed_bar(self) -> None:
        """Test unjudged items are held to the unjudged bar, not min_relevance."""
        items = [
            _make_item("match", title="Code search refactoring"),
            _make_item("miss", title="Sourdough baking"),
        ]
        result = CategoryRanker(_make_profile(min_relevance=8), now=FIXED_NOW).rank(
            items, {}
        )
        assert [r.id for r in result.items] == ["match"]
        assert "below threshold 3" in result.rejected["miss"]

    @pytest.mark.unit
    def test_truncates_to_max_items(self) -> None:
        """Test output is truncated to max_items."""
        items = [_make_item(f"i{n}") for n in range(5)]
        judgments = {f"i{n}": _judge(8) for n in range(5)}
        result = CategoryRanker(_make_profile(max_items=3), now=FIXED_NOW).rank(
            items, judgments
        )
        assert len(result.items) == 3
        assert sum("Beyond category limit" in r for r in result.rejected.values()) == 2


class TestAdaptiveThreshold:
    """Tests for adaptive threshold relaxation."""

    @pytest.mark.unit
    def test_no_relaxation_when_enough_items(self) -> None:
        """Test the threshold stays put when the target is met."""
        items = [_make_item(f"i{n}") for n in range(4)]
        judgments = {f"i{n}": _judge(6) for n in range(4)}
        result = CategoryRanker(_make_profile(max_items=3), now=FIXED_NOW).rank(
            items, judgments
        )
        assert result.threshold_used == 5
        assert result.threshold_relaxed is False

    @pytest.mark.unit
    def test_relaxes_until_target_met(self) -> None:
        """Test the threshold steps down until max_items qualify."""
        relevances = [9, 8, 7, 6, 5, 5, 4, 4, 3, 3, 2, 2]
        items = [_make_item(f"i{n}") for n in range(len(relevances))]
        judgments = {f"i{n}": _judge(r) for n, r in enumerate(relevances)}

        result = CategoryRanker(_make_profile(max_items=10), now=FIXED_NOW).rank(
            items, judgments
        )

        assert result.initial_threshold == 5
        assert result.threshold_used == 3
        assert result.threshold_relaxed is True
        assert len(result.items) == 10
        assert all(r.effective_relevance >= 3 for r in result.items)

    @pytest.mark.unit
    def test_stops_at_floor_when_short(self) -> None:
        """Test relaxation stops at the floor even when under-filled."""
        relevances = [9, 8, 7, 6, 5, 5, 4, 3, 2, 2, 1, 0]
        items = [_make_item(f"i{n}") for n in range(len(relevances))]
        judgments = {f"i{n}": _judge(r) for n, r in enumerate(relevances)}

        result = CategoryRanker(_make_profile(max_items=10), now=FIXED_NOW).rank(
            items, judgments
        )

        assert result.threshold_used == 3
        assert len(result.items) == 8
        assert {r.id for r in result.items}.isdisjoint({"i8", "i9", "i10", "i11"})
        assert "below threshold 3" in result.rejected["i10"]

    @pytest.mark.unit
    def test_floor_never_above_min_relevance(self) -> None:
        """Test a low min_relevance is never raised to the floor."""
        items = [_make_item("a")]
        result = CategoryRanker(_make_profile(min_relevance=2), now=FIXED_NOW).rank(
            items, {"a": _judge(2)}
        )
        assert result.threshold_used == 2
        assert [r.id for r in result.items] == ["a"]

    @pytest.mark.unit
    def test_custom_floor(self) -> None:
        """Test the floor comes from the ranking configuration."""
        items = [_make_item("a"), _make_item("b")]
        judgments = {"a": _judge(6), "b": _judge(1)}
        result = CategoryRanker(
            _make_profile(),
            ranking_config=RankingConfig(threshold_floor=1),
            now=FIXED_NOW,
        ).rank(items, judgments)
        assert result.threshold_used == 1
        assert [r.id for r in result.items] == ["a", "b"]


class TestRankEdgeCases:
    """Tests for empty inputs and configuration errors."""

    @pytest.mark.unit
    def test_empty_candidates_return_empty(self) -> None:
        """Test an empty candidate set is not an error."""
        assert rank([], _make_profile(), {}, now=FIXED_NOW) == []

    @pytest.mark.unit
    def test_all_invalid_urls_return_empty(self) -> None:
        """Test nothing surviving the URL filter returns an empty result."""
        items = [_make_item("a", url=""), _make_item("b", url="http://localhost/b")]
        result = CategoryRanker(_make_profile(), now=FIXED_NOW).rank(items, {})
        assert result.items == []
        assert set(result.rejected) == {"a", "b"}

    @pytest.mark.unit
    def test_missing_profile_fails_fast(self) -> None:
        """Test a missing profile raises before scoring."""
        with pytest.raises(ConfigurationError, match="required"):
            rank([], None, {})

    @pytest.mark.unit
    def test_malformed_profile_fails_fast(self) -> None:
        """Test a malformed profile mapping raises ConfigurationError."""
        profile = {
            "name": "broken",
            "query_terms": ["code"],
            "half_life_days": 0,
            "weights": {"lexical": 0.5, "model": 0.5, "recency": 0.5},
        }
        with pytest.raises(ConfigurationError) as exc_info:
            rank([_make_item("a")], profile, {})

        locations = {e["loc"] for e in exc_info.value.errors}
        assert "half_life_days" in locations
        assert "weights" in locations

    @pytest.mark.unit
    def test_profile_mapping_accepted(self) -> None:
        """Test a valid profile mapping is validated and used."""
        profile = {
            "name": "adhoc",
            "query_terms": "code search",
            "half_life_days": 2,
            "weights": {"lexical": 0.3, "model": 0.5, "recency": 0.2},
        }
        ranker = CategoryRanker(profile, now=FIXED_NOW)
        assert ranker.profile.query_terms == ["code", "search"]

    @pytest.mark.unit
    def test_metrics_recorded(self) -> None:
        """Test the pass metrics reflect the ranking."""
        items = [_make_item(f"i{n}") for n in range(3)]
        judgments = {f"i{n}": _judge(7) for n in range(3)}
        ranker = CategoryRanker(_make_profile(), now=FIXED_NOW)
        ranker.rank(items, judgments)

        metrics = ranker.metrics.to_dict()
        assert metrics["candidates_in"] == 3
        assert metrics["ranked_out"] == 3
        assert metrics["threshold_used"] == 3

    @pytest.mark.unit
    def test_from_config(self) -> None:
        """Test a ranker can be built from a configured category name."""
        ranker = CategoryRanker.from_config(CurationConfig(), "community", now=FIXED_NOW)
        assert ranker.profile.name == "community"
        assert ranker.profile.min_relevance == 4

    @pytest.mark.unit
    def test_from_config_unknown_category(self) -> None:
        """Test an unknown category fails before any scoring."""
        with pytest.raises(ConfigurationError, match="Unknown category"):
            CategoryRanker.from_config(CurationConfig(), "gardening")
