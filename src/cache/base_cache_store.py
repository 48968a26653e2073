# src/cache/base_cache_store.py — v2
"""Abstract ephemeral cache interface (fast tier, may be absent or down)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseEphemeralCache(ABC):
    """Byte-oriented key/value store with per-key TTL."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the stored value, or None if absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""

    async def close(self) -> None:
        """Release connections. No-op by default."""
