"""Keyword tables for deterministic prompt parsing."""

from typing import Final


# Longer phrases come first so they are recorded before their parts.
FOCUS_DOMAIN_TERMS: Final[tuple[str, ...]] = (
    "agentic workflows",
    "information retrieval",
    "developer productivity",
    "vector database",
    "context management",
    "context window",
    "code search",
    "semantic search",
    "ai tools",
    "ai coding",
    "code review",
    "devtools",
    "embeddings",
    "refactoring",
    "monorepo",
    "enterprise",
    "infrastructure",
    "testing",
    "productivity",
    "research",
    "agents",
    "agentic",
    "vector",
    "rag",
    "llm",
)

AUDIENCE_RULES: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("senior engineers", ("senior", "lead", "engineer")),
    ("everyone", ("everyone", "team")),
)

INTENT_RULES: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("focus", ("focus", "emphasize")),
    ("deep-dive", ("deep", "detailed")),
    ("summary", ("summary", "overview")),
)

VOICE_RULES: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("conversational", ("conversational", "casual")),
    ("technical", ("technical", "deep")),
    ("executive", ("executive", "brief")),
)

FORMAT_HINTS: Final[tuple[str, ...]] = (
    "actionable",
    "strategic",
    "practical",
    "detailed",
    "summary",
)

# Prompt phrase -> excluded topic
EXCLUSION_PHRASES: Final[tuple[tuple[str, str], ...]] = (
    ("avoid theory", "theory"),
    ("avoid research", "research"),
    ("no research", "research"),
)
