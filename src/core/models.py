# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

QuoteSource = Literal["quotable", "dummyjson", "internal"]

MAX_TAGS = 10
MAX_TAG_LENGTH = 50


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


def sanitize_tags(tags: Any) -> list[str]:
    """Normalize a raw tag list before it is written to a store.

    Drops non-string and blank entries, strips and lowercases the rest and
    keeps at most the first MAX_TAGS.
    """
    if not tags or not isinstance(tags, (list, tuple)):
        return []
    cleaned = [
        tag.strip().lower()
        for tag in tags
        if isinstance(tag, str) and tag.strip()
    ]
    return cleaned[:MAX_TAGS]


# === QUOTES ===


class Quote(BaseModel):
    """A single quote. Only ``likes`` changes after creation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    text: str = Field(min_length=1, max_length=1000)
    author: str = Field(min_length=1, max_length=255)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)
    likes: int = Field(default=0, ge=0)
    source: QuoteSource = "internal"
    external_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        """Tags are stored lowercase and bounded in length."""
        for tag in v:
            if len(tag) > MAX_TAG_LENGTH:
                raise ValueError(
                    f"tag {tag!r} exceeds {MAX_TAG_LENGTH} characters"
                )
        return [tag.lower() for tag in v]

    def with_like(self) -> Quote:
        """Return a copy with likes incremented by one."""
        return self.model_copy(
            update={"likes": self.likes + 1, "updated_at": utcnow()}
        )


class PoolEntry(BaseModel):
    """Minimal (id, likes) view of a quote used for one weighted draw."""

    model_config = ConfigDict(frozen=True)

    id: str
    likes: int = Field(ge=0)

    @classmethod
    def from_quote(cls, quote: Quote) -> PoolEntry:
        return cls(id=quote.id, likes=quote.likes)


# === SIMILARITY ===


class SimilarityScore(BaseModel):
    """A ranked candidate and its blended similarity to the target."""

    model_config = ConfigDict(frozen=True)

    quote: Quote
    score: float = Field(ge=0.0, le=1.0)


class SimilarityResult(BaseModel):
    """Ranked candidates for one target quote, best first.

    The target itself never appears in ``scores``.
    """

    target_id: str
    scores: list[SimilarityScore] = Field(default_factory=list)
    computed_at: datetime = Field(default_factory=utcnow)

    def truncated(self, limit: int) -> SimilarityResult:
        """Return a copy holding at most ``limit`` entries."""
        return self.model_copy(update={"scores": self.scores[:limit]})

    @property
    def quote_ids(self) -> list[str]:
        return [s.quote.id for s in self.scores]
