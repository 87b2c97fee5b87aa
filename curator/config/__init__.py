"""Curation configuration: schemas, defaults, loading and validation."""

from curator.config.errors import ConfigurationError
from curator.config.loader import CurationConfigLoader, load_config
from curator.config.schemas import (
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
from curator.config.state_machine import ConfigState, ConfigStateError


__all__ = [
    "CategoryProfile",
    "ConfigState",
    "ConfigStateError",
    "ConfigurationError",
    "CurationConfig",
    "CurationConfigLoader",
    "DomainBoostConfig",
    "FocusBand",
    "FocusBoostConfig",
    "PeriodConfig",
    "RankingConfig",
    "ScoreWeights",
    "SelectionConfig",
    "load_config",
]
