"""User focus profiles and focus-driven re-ranking."""

from curator.focus.profile import FocusProfile, build_focus_profile
from curator.focus.rerank import (
    FocusReranker,
    filter_by_exclusions,
    normalize_topic,
    rerank_by_focus,
    tag_match_score,
    term_match_score,
)


__all__ = [
    "FocusProfile",
    "FocusReranker",
    "build_focus_profile",
    "filter_by_exclusions",
    "normalize_topic",
    "rerank_by_focus",
    "tag_match_score",
    "term_match_score",
]
