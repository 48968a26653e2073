# src/cache/redis_store.py — v2
"""Redis-based ephemeral cache (EPHEMERAL_CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for distributed/multi-instance deployments. Retries and reconnects
are left to the redis client itself.
"""

from __future__ import annotations

from quoterec.cache.base_cache_store import BaseEphemeralCache


class RedisEphemeralCache(BaseEphemeralCache):
    """Redis-backed cache using SET ... EX for expiry."""

    def __init__(self, redis_url: str, key_prefix: str = "") -> None:
        try:
            import redis.asyncio as aioredis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = aioredis.Redis.from_url(redis_url, decode_responses=False)
        self._key_prefix = key_prefix

    async def get(self, key: str) -> bytes | None:
        """Retrieve a value by key."""
        return await self._client.get(f"{self._key_prefix}{key}")

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        """Store a value with expiry."""
        await self._client.set(f"{self._key_prefix}{key}", value, ex=ttl_seconds)

    async def delete(self, key: str) -> None:
        """Remove a key."""
        await self._client.delete(f"{self._key_prefix}{key}")

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()
