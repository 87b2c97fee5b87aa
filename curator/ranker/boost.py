"""Domain-term boost matching.

Boost terms are data (``DomainBoostConfig``), matched as case-insensitive
substrings against an item's title, summary and snippet.
"""

from dataclasses import dataclass

from curator.config.schemas.categories import DomainBoostConfig


@dataclass(frozen=True)
class BoostMatch:
    """Result of matching an item against the boost table.

    Attributes:
        multiplier: Multiplier applied to the weighted score (1.0 = none).
        matched_terms: Terms that matched, in table order.
        priority: Whether a priority term decided the multiplier.
    """

    multiplier: float = 1.0
    matched_terms: tuple[str, ...] = ()
    priority: bool = False

    def describe(self) -> str:
        """Short trace for reasoning strings."""
        kind = "priority term" if self.priority else "core domain terms"
        return f"[BOOST] {self.multiplier:g}x ({kind}: {', '.join(self.matched_terms)})"


NO_BOOST = BoostMatch()


class DomainBoostMatcher:
    """Matches text against core and priority boost terms.

    Core matches compound through the tier table (e.g. 1 -> 1.5x,
    2 -> 2x, 3+ -> 3x). A priority match overrides with the single
    priority multiplier instead of stacking.
    """

    def __init__(self, config: DomainBoostConfig | None = None) -> None:
        """Initialize the matcher.

        Args:
            config: Boost table (default: built-in table).
        """
        self._config = config or DomainBoostConfig()
        self._core_terms = [t.lower() for t in self._config.core_terms if t.strip()]
        self._priority_terms = [
            t.lower() for t in self._config.priority_terms if t.strip()
        ]
        self._tiers = sorted(self._config.tier_multipliers.items())

    @property
    def term_count(self) -> int:
        """Number of configured terms."""
        return len(self._core_terms) + len(self._priority_terms)

    def tier_multiplier(self, match_count: int) -> float:
        """Multiplier for ``match_count`` core matches.

        Uses the largest configured tier not above the count.
        """
        multiplier = 1.0
        for count, tier_multiplier in self._tiers:
            if match_count >= count:
                multiplier = tier_multiplier
        return multiplier

    def match(self, text: str) -> BoostMatch:
        """Compute the boost for ``text``.

        Args:
            text: Item text (any case).

        Returns:
            BoostMatch; ``NO_BOOST`` when nothing matches.
        """
        haystack = text.lower()

        priority_hits = tuple(t for t in self._priority_terms if t in haystack)
        if priority_hits:
            return BoostMatch(
                multiplier=self._config.priority_multiplier,
                matched_terms=priority_hits,
                priority=True,
            )

        core_hits = tuple(t for t in self._core_terms if t in haystack)
        if not core_hits:
            return NO_BOOST

        return BoostMatch(
            multiplier=self.tier_multiplier(len(core_hits)),
            matched_terms=core_hits,
        )
