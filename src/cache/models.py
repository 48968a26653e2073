# src/cache/models.py — v1
"""Cache domain models: SimilarityCacheEntry and its tier tag."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Literal

from pydantic import BaseModel

from quoterec.core.models import SimilarityResult, utcnow

CacheTier = Literal["ephemeral", "persistent"]


class SimilarityCacheEntry(BaseModel):
    """Cached ranking for one target quote.

    ``result`` is stored at the canonical cache limit and truncated by the
    reader. Only ephemeral entries carry an expiry.
    """

    target_id: str
    result: SimilarityResult
    tier: CacheTier
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or utcnow()) >= self.expires_at

    @classmethod
    def ephemeral(
        cls, result: SimilarityResult, ttl_seconds: int, now: datetime | None = None
    ) -> SimilarityCacheEntry:
        return cls(
            target_id=result.target_id,
            result=result,
            tier="ephemeral",
            expires_at=(now or utcnow()) + timedelta(seconds=ttl_seconds),
        )

    @classmethod
    def persistent(cls, result: SimilarityResult) -> SimilarityCacheEntry:
        return cls(target_id=result.target_id, result=result, tier="persistent")
