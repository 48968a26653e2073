# src/cache/cache_factory.py — v3
"""Factory for ephemeral cache instantiation (EPHEMERAL_CACHE_BACKEND)."""

from __future__ import annotations

import logging

from quoterec.cache.base_cache_store import BaseEphemeralCache
from quoterec.config.settings import Settings

logger = logging.getLogger(__name__)


class UnsupportedCacheBackendError(ValueError):
    """Raised when an ephemeral cache backend is not supported."""


def create_ephemeral_cache(settings: Settings | None = None) -> BaseEphemeralCache | None:
    """Instantiate the configured ephemeral cache.

    Args:
        settings: Application settings. Defaults to the in-memory backend.

    Returns:
        Configured BaseEphemeralCache, or None when the tier is disabled.

    Raises:
        ValueError: If redis is selected without CACHE_REDIS_URL.
        UnsupportedCacheBackendError: If the backend is unknown.
    """
    backend = "memory" if settings is None else settings.ephemeral_cache_backend

    if backend == "none":
        logger.info("Ephemeral similarity cache disabled")
        return None

    if backend == "memory":
        from quoterec.cache.memory_store import MemoryEphemeralCache
        return MemoryEphemeralCache()

    if backend == "redis":
        from quoterec.cache.redis_store import RedisEphemeralCache
        if settings is None or not settings.cache_redis_url:
            raise ValueError(
                "CACHE_REDIS_URL must be set when EPHEMERAL_CACHE_BACKEND=redis"
            )
        return RedisEphemeralCache(redis_url=settings.cache_redis_url)

    raise UnsupportedCacheBackendError(
        f"Unsupported ephemeral cache backend: {backend!r}. "
        f"Available: none, memory, redis"
    )
