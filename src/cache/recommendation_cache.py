# src/cache/recommendation_cache.py — v2
"""Two-tier similarity cache policy.

Read path: ephemeral tier, then persistent tier (backfilling the ephemeral
tier on a hit). Writes go to both tiers. Invalidation deletes only the
entry of the quote that changed; rankings of other quotes that happen to
list it are kept.

Single quotes are also cached, in the ephemeral tier only, under
`quote:<id>` with the base TTL.

The cache is advisory. Every tier call is bounded by a timeout, and any
failure is logged and treated as a miss or a no-op. There is no single-flight
coalescing: concurrent misses for the same id each compute and the last
write wins, which is acceptable because entries are re-derivable from the
pool at any time.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from quoterec.cache.base_cache_store import BaseEphemeralCache
from quoterec.cache.codec import decode_entry, decode_quote, encode_entry, encode_quote
from quoterec.cache.models import SimilarityCacheEntry
from quoterec.core.models import Quote, SimilarityResult
from quoterec.storage.base_quote_store import BaseSimilarityStore

logger = logging.getLogger(__name__)

SIMILAR_KEY_PREFIX = "similar:"
QUOTE_KEY_PREFIX = "quote:"
DEFAULT_TTL_SECONDS = 7200
DEFAULT_QUOTE_TTL_SECONDS = 3600
DEFAULT_TIMEOUT_SECONDS = 2.0

T = TypeVar("T")


def similar_key(quote_id: str) -> str:
    """Ephemeral-tier key for a target quote."""
    return f"{SIMILAR_KEY_PREFIX}{quote_id}"


def quote_key(quote_id: str) -> str:
    """Ephemeral-tier key for a single quote."""
    return f"{QUOTE_KEY_PREFIX}{quote_id}"


class RecommendationCache:
    """Coordinates the ephemeral and persistent tiers."""

    def __init__(
        self,
        ephemeral: BaseEphemeralCache | None,
        persistent: BaseSimilarityStore | None,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        quote_ttl_seconds: int = DEFAULT_QUOTE_TTL_SECONDS,
    ) -> None:
        self._ephemeral = ephemeral
        self._persistent = persistent
        self._ttl_seconds = ttl_seconds
        self._timeout_seconds = timeout_seconds
        self._quote_ttl_seconds = quote_ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @property
    def quote_ttl_seconds(self) -> int:
        return self._quote_ttl_seconds

    async def get(self, target_id: str) -> SimilarityCacheEntry | None:
        """Look up a cached ranking, fastest tier first."""
        entry = await self._get_ephemeral(target_id)
        if entry is not None:
            logger.debug("Similarity cache hit (ephemeral): %s", target_id)
            return entry

        result = await self._get_persistent(target_id)
        if result is None:
            logger.debug("Similarity cache miss: %s", target_id)
            return None

        logger.debug("Similarity cache hit (persistent): %s", target_id)
        await self._set_ephemeral(result)
        return SimilarityCacheEntry.persistent(result)

    async def put(self, target_id: str, result: SimilarityResult) -> None:
        """Write a freshly computed ranking to both tiers."""
        await self._set_persistent(target_id, result)
        await self._set_ephemeral(result)

    async def invalidate(self, target_id: str) -> None:
        """Drop the entry for ``target_id`` from both tiers."""
        if self._ephemeral is not None:
            await self._guard(
                self._ephemeral.delete(similar_key(target_id)),
                "ephemeral delete", target_id,
            )
        if self._persistent is not None:
            await self._guard(
                self._persistent.delete_similarity(target_id),
                "persistent delete", target_id,
            )
        logger.debug("Similarity cache invalidated: %s", target_id)

    # --- Single quotes (ephemeral tier only) ---

    async def get_quote(self, quote_id: str) -> Quote | None:
        if self._ephemeral is None:
            return None
        payload = await self._guard(
            self._ephemeral.get(quote_key(quote_id)), "quote get", quote_id
        )
        if payload is None:
            return None
        try:
            quote = decode_quote(payload)
        except ValueError as e:
            logger.warning("Failed to decode cached quote %s: %s", quote_id, e)
            return None
        return quote if quote.id == quote_id else None

    async def put_quote(self, quote: Quote) -> None:
        if self._ephemeral is None:
            return
        await self._guard(
            self._ephemeral.set(
                quote_key(quote.id), encode_quote(quote), self._quote_ttl_seconds
            ),
            "quote set", quote.id,
        )

    async def invalidate_quote(self, quote_id: str) -> None:
        if self._ephemeral is None:
            return
        await self._guard(
            self._ephemeral.delete(quote_key(quote_id)), "quote delete", quote_id
        )

    # --- Tier helpers ---

    async def _get_ephemeral(self, target_id: str) -> SimilarityCacheEntry | None:
        if self._ephemeral is None:
            return None
        payload = await self._guard(
            self._ephemeral.get(similar_key(target_id)), "ephemeral get", target_id
        )
        if payload is None:
            return None
        try:
            entry = decode_entry(payload)
        except ValueError as e:
            logger.warning("Failed to decode cached similarities %s: %s", target_id, e)
            return None
        if entry.target_id != target_id or entry.is_expired():
            return None
        return entry

    async def _get_persistent(self, target_id: str) -> SimilarityResult | None:
        if self._persistent is None:
            return None
        return await self._guard(
            self._persistent.fetch_similarity(target_id), "persistent get", target_id
        )

    async def _set_ephemeral(self, result: SimilarityResult) -> None:
        if self._ephemeral is None:
            return
        entry = SimilarityCacheEntry.ephemeral(result, self._ttl_seconds)
        await self._guard(
            self._ephemeral.set(
                similar_key(result.target_id), encode_entry(entry), self._ttl_seconds
            ),
            "ephemeral set", result.target_id,
        )

    async def _set_persistent(self, target_id: str, result: SimilarityResult) -> None:
        if self._persistent is None:
            return
        await self._guard(
            self._persistent.store_similarity(target_id, result),
            "persistent set", target_id,
        )

    async def _guard(
        self, call: Awaitable[T], operation: str, target_id: str
    ) -> T | None:
        """Run a tier call under the timeout; failures become None."""
        try:
            return await asyncio.wait_for(call, timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(
                "Similarity cache %s timed out after %.2fs: %s",
                operation, self._timeout_seconds, target_id,
            )
        except Exception as e:
            logger.warning("Similarity cache %s failed for %s: %s", operation, target_id, e)
        return None
