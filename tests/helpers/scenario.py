"""Shared candidate and judgment data for pipeline and CLI tests."""

import json
from pathlib import Path
from typing import Any


PUBLISHED = "2026-03-01T12:00:00Z"


def _candidate(
    item_id: str,
    source_name: str,
    title: str,
    url: str,
    summary: str = "",
    category: str = "tech_articles",
    **extra: Any,
) -> dict[str, Any]:
    return {
        "id": item_id,
        "source_name": source_name,
        "title": title,
        "url": url,
        "published_at": PUBLISHED,
        "summary": summary,
        "category": category,
        **extra,
    }


CANDIDATES: list[dict[str, Any]] = [
    _candidate(
        "a1",
        "Blog A",
        "Code search at scale",
        "https://blog.example.com/code-search?utm=1",
        "Building semantic search over a large codebase",
    ),
    _candidate(
        "a2",
        "Blog B",
        "Code search at scale",
        "https://blog.example.com/code-search?ref=x",
        "Building semantic search over a large codebase",
    ),
    _candidate(
        "a3",
        "Blog A",
        "Celebrity code search gossip",
        "https://gossip.example.com/story",
        "Code search drama",
    ),
    _candidate(
        "a4",
        "Blog C",
        "Refactoring legacy services",
        "https://blog.example.org/refactoring",
        "Patterns for incremental refactoring with tests",
    ),
    _candidate(
        "a5",
        "Blog D",
        "Testing agents in CI",
        "https://blog.example.net/agents-ci",
        "Architecture patterns for testing coding agents",
        categories=["podcasts"],
    ),
    _candidate(
        "u1",
        "Garden Weekly",
        "Gardening tips for spring",
        "https://garden.example.com/tips",
        "Planting tulips",
    ),
    _candidate("bad", "Blog E", "Relative link", "/relative/path"),
]

JUDGMENTS: dict[str, dict[str, Any]] = {
    "a1": {"relevance": 8, "usefulness": 7, "tags": ["code-search"]},
    "a2": {"relevance": 7, "usefulness": 6, "tags": ["code-search"]},
    "a3": {"relevance": 9, "usefulness": 2, "tags": ["off-topic"]},
    "a4": {"relevance": 6, "usefulness": 6, "tags": ["refactoring"]},
    "a5": {"relevance": 5, "usefulness": 5, "tags": ["agents", "testing"]},
}


def write_scenario(directory: Path) -> tuple[Path, Path]:
    """Write the candidate and judgment documents into ``directory``.

    Returns:
        Paths of (candidates.json, judgments.json).
    """
    candidates_path = directory / "candidates.json"
    judgments_path = directory / "judgments.json"
    candidates_path.write_text(json.dumps(CANDIDATES, indent=2))
    judgments_path.write_text(json.dumps(JUDGMENTS, indent=2))
    return candidates_path, judgments_path
