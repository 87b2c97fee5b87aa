"""Focus profile and deterministic extraction from a free-text prompt."""

import re
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from curator.focus.constants import (
    AUDIENCE_RULES,
    EXCLUSION_PHRASES,
    FOCUS_DOMAIN_TERMS,
    FORMAT_HINTS,
    INTENT_RULES,
    VOICE_RULES,
)


logger = structlog.get_logger()


class FocusProfile(BaseModel):
    """Per-request focus and exclusion topics.

    Only ``focus_topics`` and ``exclude_topics`` affect ranking; the other
    fields are carried for downstream content generation.

    Attributes:
        focus_topics: Topics to boost; empty means re-ranking is a no-op.
        exclude_topics: Topics whose items are removed outright.
        audience: Intended audience.
        intent: Requested treatment (focus, deep-dive, summary).
        format_hints: Output format hints.
        voice_style: Requested voice.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    focus_topics: list[str] = Field(default_factory=list)
    exclude_topics: list[str] = Field(default_factory=list)
    audience: str | None = None
    intent: str | None = None
    format_hints: list[str] = Field(default_factory=list)
    voice_style: str | None = None

    @field_validator("focus_topics", "exclude_topics", mode="before")
    @classmethod
    def drop_blank_topics(cls, v: Any) -> Any:
        """Strip topics and drop blanks and repeats, keeping order."""
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, list | tuple):
            return v
        seen: list[str] = []
        for topic in v:
            if not isinstance(topic, str):
                return v
            cleaned = topic.strip()
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        return seen

    @property
    def is_active(self) -> bool:
        """Whether re-ranking has anything to do."""
        return bool(self.focus_topics)

    @property
    def has_exclusions(self) -> bool:
        """Whether exclusion filtering has anything to do."""
        return bool(self.exclude_topics)


def _has_phrase(text: str, phrase: str) -> bool:
    """Whole-word phrase match; "rag" does not match "encourage"."""
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


def _first_rule(
    text: str, rules: tuple[tuple[str, tuple[str, ...]], ...]
) -> str | None:
    for label, keywords in rules:
        if any(keyword in text for keyword in keywords):
            return label
    return None


def build_focus_profile(prompt: str | None) -> FocusProfile | None:
    """Parse a free-text prompt into a focus profile.

    Extraction is keyword based and deterministic: known domain terms
    become focus topics, and phrases such as "avoid research" become
    exclusions.

    Args:
        prompt: User prompt.

    Returns:
        FocusProfile, or None for an empty prompt.
    """
    if not prompt or not prompt.strip():
        return None

    lower = prompt.lower()

    matched = [(p, topic) for p, topic in EXCLUSION_PHRASES if _has_phrase(lower, p)]
    exclude_topics = [topic for _, topic in matched]

    # A topic the prompt excludes never becomes a focus topic.
    remaining = lower
    for phrase, _ in matched:
        remaining = re.sub(rf"\b{re.escape(phrase)}\b", " ", remaining)
    focus_topics = [
        term
        for term in FOCUS_DOMAIN_TERMS
        if term not in exclude_topics and _has_phrase(remaining, term)
    ]

    profile = FocusProfile(
        focus_topics=focus_topics,
        exclude_topics=exclude_topics,
        audience=_first_rule(lower, AUDIENCE_RULES),
        intent=_first_rule(lower, INTENT_RULES),
        format_hints=[hint for hint in FORMAT_HINTS if hint in lower],
        voice_style=_first_rule(lower, VOICE_RULES),
    )

    logger.info(
        "focus_profile_built",
        component="focus",
        prompt_preview=prompt[:100],
        focus_topics=profile.focus_topics,
        exclude_topics=profile.exclude_topics,
    )
    return profile
