"""Curation configuration schema.

The root document (``CurationConfig``) is what a categories YAML file holds.
Every table has a built-in default so an empty document is valid.
"""

import hashlib
import json
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from curator.config.constants import CONFIG_VERSION_PATTERN, WEIGHT_SUM_TOLERANCE
from curator.config.defaults import (
    DEFAULT_CATEGORIES,
    DEFAULT_CORE_TERMS,
    DEFAULT_FOCUS_BANDS,
    DEFAULT_FOCUS_PENALTY,
    DEFAULT_PERIODS,
    DEFAULT_PRIORITY_MULTIPLIER,
    DEFAULT_PRIORITY_TERMS,
    DEFAULT_TIER_MULTIPLIERS,
)
from curator.config.errors import ConfigurationError


class ScoreWeights(BaseModel):
    """Blend weights for the three base signals.

    Attributes:
        lexical: Weight of the normalized BM25 score.
        model: Weight of the model judgment score.
        recency: Weight of the recency decay score.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    lexical: Annotated[float, Field(ge=0.0, le=1.0)]
    model: Annotated[float, Field(ge=0.0, le=1.0)]
    recency: Annotated[float, Field(ge=0.0, le=1.0)]

    @model_validator(mode="after")
    def validate_sum(self) -> "ScoreWeights":
        """Ensure the weights sum to one."""
        total = self.lexical + self.model + self.recency
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            msg = f"weights must sum to 1.0 (got {total:.3f})"
            raise ValueError(msg)
        return self


class CategoryProfile(BaseModel):
    """Ranking parameters for one category.

    Attributes:
        name: Category identifier.
        description: Human-readable description.
        query_terms: Lexical query terms for the BM25 index.
        half_life_days: Recency half-life in days.
        max_items: Maximum items ranked for the category.
        min_relevance: Initial judgment relevance threshold (0-10).
        weights: Signal blend weights.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: Annotated[str, Field(min_length=1, max_length=100)]
    description: str = ""
    query_terms: Annotated[list[str], Field(min_length=1)]
    half_life_days: Annotated[float, Field(gt=0.0)]
    max_items: Annotated[int, Field(ge=1)] = 10
    min_relevance: Annotated[int, Field(ge=0, le=10)] = 5
    weights: ScoreWeights

    @field_validator("query_terms", mode="before")
    @classmethod
    def split_query_string(cls, v: Any) -> Any:
        """Accept a whitespace-separated query string."""
        if isinstance(v, str):
            return v.split()
        return v

    @field_validator("query_terms")
    @classmethod
    def validate_terms_non_empty(cls, v: list[str]) -> list[str]:
        """Ensure query terms are non-blank."""
        for term in v:
            if not term.strip():
                msg = "query terms must be non-empty strings"
                raise ValueError(msg)
        return v


class PeriodConfig(BaseModel):
    """Digest period: candidate window and diversity cap.

    Attributes:
        label: Display label.
        days: Candidate time window in days.
        max_per_source: Per-source cap for selection.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    label: str = ""
    days: Annotated[float, Field(gt=0.0)]
    max_per_source: Annotated[int, Field(ge=1)]


class DomainBoostConfig(BaseModel):
    """Multiplicative boost table for unambiguously on-topic items.

    Attributes:
        core_terms: Terms counted toward the tiered multiplier.
        priority_terms: Terms that override with ``priority_multiplier``.
        tier_multipliers: Match count -> multiplier.
        priority_multiplier: Multiplier when any priority term matches.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    core_terms: list[str] = Field(default_factory=lambda: list(DEFAULT_CORE_TERMS))
    priority_terms: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITY_TERMS)
    )
    tier_multipliers: dict[int, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIER_MULTIPLIERS)
    )
    priority_multiplier: Annotated[float, Field(ge=1.0)] = DEFAULT_PRIORITY_MULTIPLIER

    @model_validator(mode="after")
    def validate_tiers(self) -> "DomainBoostConfig":
        """Ensure tiers are positive counts with multipliers of at least 1."""
        for count, multiplier in self.tier_multipliers.items():
            if count < 1:
                msg = f"tier match count must be >= 1 (got {count})"
                raise ValueError(msg)
            if multiplier < 1.0:
                msg = f"tier multiplier must be >= 1.0 (got {multiplier})"
                raise ValueError(msg)
        return self


class FocusBand(BaseModel):
    """One alignment band of the focus boost table.

    Alignment in ``(above, ceiling]`` maps linearly onto ``[low, high]``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    above: Annotated[float, Field(ge=0.0, lt=1.0)]
    ceiling: Annotated[float, Field(gt=0.0, le=1.0)]
    low: Annotated[float, Field(gt=0.0)]
    high: Annotated[float, Field(gt=0.0)]

    @model_validator(mode="after")
    def validate_range(self) -> "FocusBand":
        """Ensure the band is well-formed."""
        if self.above >= self.ceiling:
            msg = "band 'above' must be lower than 'ceiling'"
            raise ValueError(msg)
        if self.low > self.high:
            msg = "band 'low' must not exceed 'high'"
            raise ValueError(msg)
        return self


class FocusBoostConfig(BaseModel):
    """Focus re-ranking boost bands.

    Attributes:
        bands: Alignment bands, any order.
        penalty: Multiplier for alignment at or below the lowest band.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    bands: list[FocusBand] = Field(
        default_factory=lambda: [FocusBand(**b) for b in DEFAULT_FOCUS_BANDS]
    )
    penalty: Annotated[float, Field(gt=0.0, le=1.0)] = DEFAULT_FOCUS_PENALTY

    @field_validator("bands")
    @classmethod
    def sort_bands(cls, v: list[FocusBand]) -> list[FocusBand]:
        """Order bands from strongest to weakest."""
        return sorted(v, key=lambda b: b.above, reverse=True)


class SelectionConfig(BaseModel):
    """Diversity selection tunables.

    Attributes:
        quality_floor: Final scores below this are treated as noise.
        min_fill_ratio: Minimum fill as a fraction of the item target.
        absolute_min_items: Minimum fill floor when the pool allows.
        relaxed_cap_multiplier: Per-source cap multiplier for the relaxed pass.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    quality_floor: Annotated[float, Field(ge=0.0)] = 0.001
    min_fill_ratio: Annotated[float, Field(ge=0.0, le=1.0)] = 0.67
    absolute_min_items: Annotated[int, Field(ge=0)] = 10
    relaxed_cap_multiplier: Annotated[int, Field(ge=1)] = 2


class RankingConfig(BaseModel):
    """Ranking engine tunables.

    Attributes:
        threshold_floor: Lowest relevance threshold adaptive relaxation reaches.
        unjudged_relevance_bar: Fixed bar for items without a model judgment.
        off_topic_tag: Judgment tag that removes an item unconditionally.
        judgment_relevance_weight: Relevance share of the model score.
        judgment_usefulness_weight: Usefulness share of the model score.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    threshold_floor: Annotated[int, Field(ge=0, le=10)] = 3
    unjudged_relevance_bar: Annotated[int, Field(ge=0, le=10)] = 3
    off_topic_tag: Annotated[str, Field(min_length=1)] = "off-topic"
    judgment_relevance_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.7
    judgment_usefulness_weight: Annotated[float, Field(ge=0.0, le=1.0)] = 0.3


def _inject_names(value: Any) -> Any:
    """Fill each entry's ``name`` from its mapping key."""
    if not isinstance(value, dict):
        return value
    named: dict[str, Any] = {}
    for key, entry in value.items():
        if isinstance(entry, dict) and "name" not in entry:
            entry = {"name": key, **entry}
        named[key] = entry
    return named


class CurationConfig(BaseModel):
    """Root curation configuration.

    Attributes:
        version: Schema version.
        categories: Category name -> profile.
        periods: Period name -> period configuration.
        boost: Domain-term boost table.
        focus: Focus re-ranking boost bands.
        selection: Diversity selection tunables.
        ranking: Ranking engine tunables.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: Annotated[str, Field(pattern=CONFIG_VERSION_PATTERN)] = "1.0"
    categories: dict[str, CategoryProfile] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORIES), validate_default=True
    )
    periods: dict[str, PeriodConfig] = Field(
        default_factory=lambda: dict(DEFAULT_PERIODS), validate_default=True
    )
    boost: DomainBoostConfig = Field(default_factory=DomainBoostConfig)
    focus: FocusBoostConfig = Field(default_factory=FocusBoostConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)

    @field_validator("categories", mode="before")
    @classmethod
    def name_categories(cls, v: Any) -> Any:
        """Default each category's name to its key."""
        return _inject_names(v)

    @model_validator(mode="after")
    def validate_category_keys(self) -> "CurationConfig":
        """Ensure category keys agree with profile names."""
        for key, profile in self.categories.items():
            if profile.name != key:
                msg = f"category key '{key}' does not match name '{profile.name}'"
                raise ValueError(msg)
        return self

    def get_category(self, name: str) -> CategoryProfile:
        """Look up a category profile.

        Raises:
            ConfigurationError: If the category is not configured.
        """
        profile = self.categories.get(name)
        if profile is None:
            known = ", ".join(sorted(self.categories))
            msg = f"Unknown category '{name}'. Configured categories: {known}"
            raise ConfigurationError(
                msg,
                errors=[{"loc": "categories", "msg": msg, "type": "unknown_category"}],
                source=name,
            )
        return profile

    def get_period(self, name: str) -> PeriodConfig:
        """Look up a period configuration.

        Raises:
            ConfigurationError: If the period is not configured.
        """
        period = self.periods.get(name)
        if period is None:
            known = ", ".join(sorted(self.periods))
            msg = f"Unknown period '{name}'. Configured periods: {known}"
            raise ConfigurationError(
                msg,
                errors=[{"loc": "periods", "msg": msg, "type": "unknown_period"}],
                source=name,
            )
        return period

    def to_normalized_json(self) -> str:
        """Serialize with stable key ordering."""
        data = self.model_dump(mode="json")
        return json.dumps(data, sort_keys=True, separators=(",", ":"))

    def compute_checksum(self) -> str:
        """Compute SHA-256 checksum of the normalized configuration."""
        normalized = self.to_normalized_json()
        return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
