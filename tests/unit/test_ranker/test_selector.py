"""Unit tests for diversity selection."""

from collections import Counter

import pytest

from curator.config.errors import ConfigurationError
from curator.config.schemas.categories import (
    CategoryProfile,
    ScoreWeights,
    SelectionConfig,
)
from curator.ranker.models import RankedItem
from curator.ranker.selector import DiversitySelector, minimum_fill, select
from curator.store.models import CandidateItem
from tests.helpers.time import FIXED_NOW


NO_MINIMUM = SelectionConfig(min_fill_ratio=0.0, absolute_min_items=0)


def _make_ranked(
    item_id: str,
    final_score: float,
    source_name: str = "Test Source",
    url: str | None = None,
) -> RankedItem:
    """Create a test RankedItem."""
    item = CandidateItem(
        id=item_id,
        source_name=source_name,
        title=f"Item {item_id}",
        url=url or f"https://example.com/{item_id}",
        published_at=FIXED_NOW,
    )
    return RankedItem(
        item=item,
        lexical_score=0.5,
        model_score=0.5,
        recency_score=1.0,
        final_score=final_score,
        reasoning="test",
    )


def _two_source_pool(per_source: int = 6) -> list[RankedItem]:
    """Ranked items alternating between two sources, scores descending."""
    items = []
    for n in range(per_source * 2):
        source = "Alpha" if n % 2 == 0 else "Beta"
        items.append(_make_ranked(f"i{n:02d}", 1.0 - n * 0.05, source_name=source))
    return items


class TestMinimumFill:
    """Tests for minimum_fill."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        ("max_items", "expected"),
        [(10, 10), (5, 5), (20, 14), (30, 21)],
    )
    def test_default_minimum(self, max_items: int, expected: int) -> None:
        """Test the minimum is 67% of the target, at least 10, at most the target."""
        assert minimum_fill(max_items, SelectionConfig()) == expected

    @pytest.mark.unit
    def test_disabled_minimum(self) -> None:
        """Test a zero ratio and floor disables the minimum."""
        assert minimum_fill(10, NO_MINIMUM) == 0


class TestDeduplication:
    """Tests for URL deduplication."""

    @pytest.mark.unit
    def test_query_string_variants_collapse(self) -> None:
        """Test URLs differing only by query string are duplicates."""
        items = [
            _make_ranked("a", 0.9, url="https://blog.example.com/post?utm_source=x"),
            _make_ranked(
                "b", 0.8, source_name="Other", url="https://blog.example.com/post?ref=y"
            ),
            _make_ranked("c", 0.7, url="https://blog.example.com/other"),
        ]
        result = DiversitySelector(NO_MINIMUM).select(items, max_items=10)

        assert [r.id for r in result.items] == ["a", "c"]
        assert result.reasons["b"] == "Duplicate URL of a (blog.example.com/post)"

    @pytest.mark.unit
    def test_highest_ranked_duplicate_kept(self) -> None:
        """Test the higher-scoring duplicate survives regardless of input order."""
        items = [
            _make_ranked("low", 0.2, url="https://example.com/x#comments"),
            _make_ranked("high", 0.9, url="https://EXAMPLE.com/x/"),
        ]
        result = DiversitySelector(NO_MINIMUM).select(items, max_items=10)

        assert [r.id for r in result.items] == ["high"]
        assert result.reasons["low"].startswith("Duplicate URL of high")


class TestQualityFloor:
    """Tests for the quality floor."""

    @pytest.mark.unit
    def test_noise_scores_dropped(self) -> None:
        """Test scores below the floor are dropped with a reason."""
        items = [_make_ranked("a", 0.5), _make_ranked("noise", 0.0001)]
        result = DiversitySelector(NO_MINIMUM).select(items, max_items=10)

        assert [r.id for r in result.items] == ["a"]
        assert result.reasons["noise"].startswith("Below quality floor")


class TestStrictSelection:
    """Tests for the strict greedy pass."""

    @pytest.mark.unit
    def test_per_source_cap_honored(self) -> None:
        """Test no source exceeds the cap without relaxation."""
        result = DiversitySelector(NO_MINIMUM).select(
            _two_source_pool(), max_items=10, per_source_cap=2
        )

        counts = Counter(r.source_name for r in result.items)
        assert result.relaxed is False
        assert all(count <= 2 for count in counts.values())
        assert [r.id for r in result.items] == ["i00", "i01", "i02", "i03"]
        assert result.reasons["i04"] == "Source cap reached for Alpha (2/2)"

    @pytest.mark.unit
    def test_total_limit(self) -> None:
        """Test selection stops at the target maximum."""
        items = [
            _make_ranked(f"i{n}", 1.0 - n * 0.01, source_name=f"S{n}") for n in range(8)
        ]
        result = DiversitySelector().select(items, max_items=5)

        assert len(result.items) == 5
        assert result.reasons["i5"] == "Total category limit reached (5/5)"
        assert result.reasons["i7"] == "Total category limit reached (5/5)"

    @pytest.mark.unit
    def test_every_item_has_a_reason(self) -> None:
        """Test a reason is recorded for every examined item."""
        items = [
            *_two_source_pool(),
            _make_ranked("dup", 0.01, url="https://example.com/i00?x=1"),
            _make_ranked("noise", 0.0),
        ]
        result = DiversitySelector(NO_MINIMUM).select(items, max_items=3)
        assert set(result.reasons) == {r.id for r in items}

    @pytest.mark.unit
    def test_selected_reasons_carry_rank(self) -> None:
        """Test accepted items record their rank."""
        items = [_make_ranked("a", 0.9, "A"), _make_ranked("b", 0.8, "B")]
        result = DiversitySelector(NO_MINIMUM).select(items, max_items=10)
        assert result.reasons == {
            "a": "Selected at rank 1",
            "b": "Selected at rank 2",
        }

    @pytest.mark.unit
    def test_output_in_score_order(self) -> None:
        """Test output is descending by final score even for unsorted input."""
        items = [_make_ranked("b", 0.3, "B"), _make_ranked("a", 0.9, "A")]
        result = DiversitySelector(NO_MINIMUM).select(items, max_items=10)
        assert [r.id for r in result.items] == ["a", "b"]

    @pytest.mark.unit
    def test_empty_input(self) -> None:
        """Test an empty ranked list yields an empty selection."""
        result = DiversitySelector().select([], max_items=10)
        assert result.items == []
        assert result.reasons == {}

    @pytest.mark.unit
    @pytest.mark.parametrize(("max_items", "cap"), [(0, 2), (10, 0)])
    def test_invalid_limits_rejected(self, max_items: int, cap: int) -> None:
        """Test non-positive limits raise ValueError."""
        with pytest.raises(ValueError):
            DiversitySelector().select([], max_items=max_items, per_source_cap=cap)


class TestRelaxedSelection:
    """Tests for the minimum-fill relaxation pass."""

    @pytest.mark.unit
    def test_relaxed_pass_fills_toward_minimum(self) -> None:
        """Test the cap widens when the strict pass under-fills."""
        result = DiversitySelector().select(
            _two_source_pool(), max_items=10, per_source_cap=2
        )

        counts = Counter(r.source_name for r in result.items)
        assert result.min_items == 10
        assert result.relaxed is True
        assert len(result.items) == 8
        assert counts == {"Alpha": 4, "Beta": 4}
        assert result.relaxed_ids == {"i04", "i05", "i06", "i07"}

    @pytest.mark.unit
    def test_relaxed_reasons_distinguishable(self) -> None:
        """Test relaxed admissions and relaxed rejections are visible in reasons."""
        result = DiversitySelector().select(
            _two_source_pool(), max_items=10, per_source_cap=2
        )

        assert result.reasons["i00"] == "Selected at rank 1"
        assert result.reasons["i04"] == (
            "Selected at rank 5 (relaxed source cap 3/4 to reach minimum 10)"
        )
        assert result.reasons["i08"] == (
            "Source cap reached for Alpha even after relaxation (4/4)"
        )

    @pytest.mark.unit
    def test_relaxed_pass_stops_at_minimum(self) -> None:
        """Test relaxation admits only what the minimum needs."""
        config = SelectionConfig(absolute_min_items=5)
        result = DiversitySelector(config).select(
            _two_source_pool(), max_items=6, per_source_cap=2
        )

        assert result.min_items == 5
        assert len(result.items) == 5
        assert result.relaxed_ids == {"i04"}
        assert result.reasons["i05"] == "Source cap reached for Beta (2/2)"

    @pytest.mark.unit
    def test_output_keeps_score_order(self) -> None:
        """Test relaxed admissions are interleaved in score order."""
        items = [
            _make_ranked("a1", 0.9, "A"),
            _make_ranked("a2", 0.8, "A"),
            _make_ranked("a3", 0.7, "A"),
            _make_ranked("b1", 0.6, "B"),
        ]
        result = DiversitySelector().select(items, max_items=10, per_source_cap=2)

        assert [r.id for r in result.items] == ["a1", "a2", "a3", "b1"]
        assert result.relaxed_ids == {"a3"}


class TestSelectionIdempotence:
    """Tests for re-running the selector on its own output."""

    @pytest.mark.unit
    @pytest.mark.parametrize("config", [SelectionConfig(), NO_MINIMUM])
    def test_second_pass_removes_nothing(self, config: SelectionConfig) -> None:
        """Test selecting the selection returns the same items."""
        items = [
            *_two_source_pool(),
            _make_ranked(
                "dup", 0.99, source_name="Gamma", url="https://example.com/i03"
            ),
        ]
        selector = DiversitySelector(config)
        first = selector.select(items, max_items=10, per_source_cap=2)
        second = selector.select(first.items, max_items=10, per_source_cap=2)

        assert [r.id for r in second.items] == [r.id for r in first.items]


class TestSelectFunction:
    """Tests for the select pure function."""

    @pytest.mark.unit
    def test_category_name_lookup(self) -> None:
        """Test a category name resolves its max_items from configuration."""
        items = [_make_ranked(f"i{n}", 1.0 - n * 0.01, f"S{n}") for n in range(12)]
        result = select(items, "community")
        assert result.max_items == 10
        assert len(result.items) == 10

    @pytest.mark.unit
    def test_max_override(self) -> None:
        """Test max_override replaces the category maximum."""
        items = [_make_ranked(f"i{n}", 1.0 - n * 0.01, f"S{n}") for n in range(12)]
        result = select(items, "community", per_source_cap=1, max_override=4)
        assert len(result.items) == 4

    @pytest.mark.unit
    def test_profile_accepted(self) -> None:
        """Test a CategoryProfile can be passed directly."""
        profile = CategoryProfile(
            name="adhoc",
            query_terms=["x"],
            half_life_days=1,
            max_items=2,
            weights=ScoreWeights(lexical=0.4, model=0.4, recency=0.2),
        )
        items = [_make_ranked(f"i{n}", 1.0 - n * 0.01, f"S{n}") for n in range(5)]
        assert len(select(items, profile).items) == 2

    @pytest.mark.unit
    def test_unknown_category(self) -> None:
        """Test an unknown category name is a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown category"):
            select([], "nonexistent")
