"""Built-in curation tables.

Kept as plain data so they can be tuned, overridden from YAML, and tested
independently of the scoring code.
"""

from typing import Final


DEFAULT_CATEGORIES: Final[dict[str, dict[str, object]]] = {
    "newsletters": {
        "description": "Curated newsletters and columns on code intelligence and developer tools",
        "query_terms": "code search semantic search codebase intelligence agents code review devtools IDE",
        "half_life_days": 3,
        "max_items": 10,
        "min_relevance": 5,
        "weights": {"model": 0.45, "lexical": 0.35, "recency": 0.2},
    },
    "podcasts": {
        "description": "Podcast episodes about AI, coding, and developer tools",
        "query_terms": "AI coding podcast agents code search LLM developer productivity tools infrastructure",
        "half_life_days": 7,
        "max_items": 10,
        "min_relevance": 5,
        "weights": {"model": 0.5, "lexical": 0.3, "recency": 0.2},
    },
    "tech_articles": {
        "description": "In-depth technical articles and essays on code and development",
        "query_terms": "code search semantic search codebase refactoring agents code intelligence testing CI/CD architecture patterns",
        "half_life_days": 5,
        "max_items": 10,
        "min_relevance": 5,
        "weights": {"model": 0.4, "lexical": 0.4, "recency": 0.2},
    },
    "ai_news": {
        "description": "AI model releases, research, and infrastructure news relevant to developers",
        "query_terms": "LLM transformer model reasoning AI inference coding agents foundation models context window",
        "half_life_days": 2,
        "max_items": 10,
        "min_relevance": 5,
        "weights": {"model": 0.45, "lexical": 0.35, "recency": 0.2},
    },
    "product_news": {
        "description": "Tool releases, feature announcements, and changelogs for dev tools",
        "query_terms": "release feature announcement changelog IDE debugger code review tool productivity integrations",
        "half_life_days": 4,
        "max_items": 10,
        "min_relevance": 5,
        "weights": {"model": 0.45, "lexical": 0.35, "recency": 0.2},
    },
    "community": {
        "description": "Discussions and posts from Reddit, forums, and community channels",
        "query_terms": "code search agents devtools codebase refactoring code review testing CI/CD best practices",
        "half_life_days": 3,
        "max_items": 10,
        "min_relevance": 4,
        "weights": {"model": 0.45, "lexical": 0.35, "recency": 0.2},
    },
    "research": {
        "description": "Academic papers on software engineering, IR, PL, and ML for code",
        "query_terms": "semantic search code search program synthesis AST machine learning software engineering empirical study",
        "half_life_days": 10,
        "max_items": 10,
        "min_relevance": 5,
        "weights": {"model": 0.5, "lexical": 0.3, "recency": 0.2},
    },
}

DEFAULT_PERIODS: Final[dict[str, dict[str, object]]] = {
    "day": {"label": "Daily", "days": 1, "max_per_source": 1},
    "week": {"label": "Weekly", "days": 7, "max_per_source": 2},
    "month": {"label": "Monthly", "days": 30, "max_per_source": 3},
    "all": {"label": "All-time", "days": 90, "max_per_source": 4},
}

DEFAULT_CORE_TERMS: Final[list[str]] = [
    "deep search",
    "code search",
    "code intelligence",
    "coding agent",
    "codebase understanding",
    "information retrieval",
    "context management",
    "context window",
    "software engineering",
    "benchmark",
    "evaluation",
    "developer productivity",
    "ai tooling",
]

DEFAULT_PRIORITY_TERMS: Final[list[str]] = ["sourcegraph"]

# Match count -> multiplier; the largest key not above the count applies.
DEFAULT_TIER_MULTIPLIERS: Final[dict[int, float]] = {1: 1.5, 2: 2.0, 3: 3.0}

DEFAULT_PRIORITY_MULTIPLIER: Final[float] = 5.0

# (above, ceiling, low, high): alignment in (above, ceiling] maps linearly
# onto [low, high].
DEFAULT_FOCUS_BANDS: Final[list[dict[str, float]]] = [
    {"above": 0.5, "ceiling": 1.0, "low": 4.0, "high": 6.0},
    {"above": 0.3, "ceiling": 0.5, "low": 2.5, "high": 4.0},
    {"above": 0.1, "ceiling": 0.3, "low": 1.5, "high": 2.5},
]

DEFAULT_FOCUS_PENALTY: Final[float] = 0.3
