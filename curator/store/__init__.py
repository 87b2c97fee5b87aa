"""Candidate items, model judgments and their collaborators."""

from curator.store.json_store import JsonItemStore
from curator.store.models import CandidateItem, ModelJudgment
from curator.store.protocols import CandidateStore, JudgmentStore
from curator.store.url import is_valid_item_url, url_key
from curator.store.window import within_window


__all__ = [
    "CandidateItem",
    "CandidateStore",
    "JsonItemStore",
    "JudgmentStore",
    "ModelJudgment",
    "is_valid_item_url",
    "url_key",
    "within_window",
]
