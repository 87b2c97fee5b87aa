"""Pydantic schemas for curation configuration."""

from curator.config.schemas.categories import (
    CategoryProfile,
    CurationConfig,
    DomainBoostConfig,
    FocusBand,
    FocusBoostConfig,
    PeriodConfig,
    RankingConfig,
    ScoreWeights,
    SelectionConfig,
)


__all__ = [
    "CategoryProfile",
    "CurationConfig",
    "DomainBoostConfig",
    "FocusBand",
    "FocusBoostConfig",
    "PeriodConfig",
    "RankingConfig",
    "ScoreWeights",
    "SelectionConfig",
]
