"""Hybrid ranking and diversity selection for category digests.

This module scores a time-windowed candidate set with BM25, model
judgments, recency decay and domain-term boosts, relaxes the relevance
threshold when too few items qualify, and selects a deduplicated,
source-diverse shortlist.
"""

from curator.ranker.boost import BoostMatch, DomainBoostMatcher
from curator.ranker.lexical import LexicalIndex, tokenize
from curator.ranker.metrics import RankerMetrics
from curator.ranker.models import RankedItem, RankingResult, SelectionResult
from curator.ranker.ranker import CategoryRanker, rank
from curator.ranker.recency import recency_score
from curator.ranker.selector import DiversitySelector, minimum_fill, select
from curator.ranker.state_machine import (
    PassState,
    PassStateMachine,
    PipelineStateError,
)


__all__ = [
    "BoostMatch",
    "CategoryRanker",
    "DiversitySelector",
    "DomainBoostMatcher",
    "LexicalIndex",
    "PassState",
    "PassStateMachine",
    "PipelineStateError",
    "RankedItem",
    "RankerMetrics",
    "RankingResult",
    "SelectionResult",
    "minimum_fill",
    "rank",
    "recency_score",
    "select",
    "tokenize",
]
