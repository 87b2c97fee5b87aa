"""Data models for candidate items and model judgments."""

from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CandidateItem(BaseModel):
    """A content item pulled from an external feed.

    Immutable once loaded for a ranking pass.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: Annotated[str, Field(min_length=1, description="Item identifier")]
    source_name: Annotated[str, Field(description="Feed or publication name")]
    title: Annotated[str, Field(description="Item title")]
    url: Annotated[str, Field(description="Item URL (may be invalid; ranking rejects)")]
    published_at: datetime = Field(description="Publication timestamp")
    summary: str = Field(default="", description="Feed summary")
    snippet: str = Field(default="", description="Short content snippet")
    full_text: str | None = Field(default=None, description="Extracted full text")
    category: str = Field(default="", description="Primary category tag")
    categories: list[str] = Field(
        default_factory=list, description="Secondary category tags"
    )

    @field_validator("published_at")
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class ModelJudgment(BaseModel):
    """Precomputed relevance judgment from an external model.

    Attributes:
        relevance: Relevance to the category, 0-10.
        usefulness: Practical usefulness, 0-10.
        tags: Topic tags assigned by the judge.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    relevance: Annotated[float, Field(ge=0.0, le=10.0)]
    usefulness: Annotated[float, Field(ge=0.0, le=10.0)]
    tags: frozenset[str] = Field(default_factory=frozenset)

    @field_validator("tags", mode="before")
    @classmethod
    def strip_tags(cls, v: Any) -> Any:
        """Drop blank tags and surrounding whitespace."""
        if isinstance(v, (list, tuple, set, frozenset)):
            return frozenset(str(t).strip() for t in v if str(t).strip())
        return v

    def has_tag(self, tag: str) -> bool:
        """Case-insensitive tag membership."""
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)
