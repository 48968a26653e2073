# src/cache/memory_store.py — v2
"""In-process TTL cache (EPHEMERAL_CACHE_BACKEND=memory).

Default backend for single-process deployments and tests. Entries live in a
dict. An expired entry is dropped when it is read, and every write sweeps
out all expired entries.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from quoterec.cache.base_cache_store import BaseEphemeralCache


class MemoryEphemeralCache(BaseEphemeralCache):
    """Dict-backed cache with monotonic-clock expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._data: dict[str, tuple[bytes, float]] = {}

    async def get(self, key: str) -> bytes | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, deadline = item
        if self._clock() >= deadline:
            self._data.pop(key, None)
            return None
        return value

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        now = self._clock()
        self._sweep(now)
        self._data[key] = (value, now + ttl_seconds)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        item = self._data.get(key)
        return item is not None and self._clock() < item[1]

    def __len__(self) -> int:
        return len(self._data)

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, deadline) in self._data.items() if now >= deadline]
        for key in expired:
            del self._data[key]
