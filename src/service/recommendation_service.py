# src/service/recommendation_service.py — v2
"""Recommendation service — entry point used by the request layer.

Usage:
    service = create_recommendation_service(settings)
    result = await service.get_similar(quote_id, limit=5)
    quote = await service.get_weighted_random_quote(exclude_ids=[...])
    await service.like_quote(quote_id)

Only caller-contract errors (invalid id or limit, unknown quote) are raised
to callers. Cache failures are absorbed by RecommendationCache; a pool fetch
failure is raised as PoolUnavailableError only when no cache tier could
answer.
"""

from __future__ import annotations

import logging
from collections.abc import Collection

import numpy as np

from quoterec.cache.base_cache_store import BaseEphemeralCache
from quoterec.cache.recommendation_cache import RecommendationCache
from quoterec.config.settings import Settings
from quoterec.core.errors import (
    PoolUnavailableError,
    QuoteNotFoundError,
    QuoteServiceError,
    QuoteValidationError,
)
from quoterec.core.models import PoolEntry, Quote, SimilarityResult
from quoterec.logging.context import set_operation_context
from quoterec.selection.weighted import pick_uniform, pick_weighted
from quoterec.similarity.scorer import SimilarityScorer
from quoterec.storage.base_quote_store import BaseQuoteStore, BaseSimilarityStore

logger = logging.getLogger(__name__)


class RecommendationService:
    """Similarity ranking, popularity-weighted selection and like handling."""

    def __init__(
        self,
        pool_source: BaseQuoteStore,
        ephemeral_cache: BaseEphemeralCache | None,
        persistent_cache: BaseSimilarityStore | None,
        settings: Settings | None = None,
        scorer: SimilarityScorer | None = None,
        rng: np.random.Generator | None = None,
    ) -> None:
        self._settings = settings or Settings(_env_file=None)  # type: ignore[call-arg]
        self._pool_source = pool_source
        self._ephemeral_cache = ephemeral_cache
        self._persistent_cache = persistent_cache
        self._cache = RecommendationCache(
            ephemeral=ephemeral_cache,
            persistent=persistent_cache,
            ttl_seconds=self._settings.similarity_cache_ttl,  # type: ignore[arg-type]
            timeout_seconds=self._settings.cache_timeout_seconds,
            quote_ttl_seconds=self._settings.cache_ttl,
        )
        self._scorer = scorer or SimilarityScorer(
            min_score=self._settings.similarity_min_score
        )
        self._rng = rng if rng is not None else np.random.default_rng(
            self._settings.selection_seed
        )

    @property
    def cache(self) -> RecommendationCache:
        return self._cache

    @property
    def pool_source(self) -> BaseQuoteStore:
        return self._pool_source

    # --- Similarity ---

    async def get_similar(
        self, target_id: str, limit: int | None = None
    ) -> SimilarityResult:
        """Quotes most similar to ``target_id``, best first.

        Args:
            target_id: Quote to find neighbours for.
            limit: Number of results, 1..SIMILARITY_MAX_LIMIT.

        Raises:
            QuoteValidationError: Empty id or limit out of range.
            QuoteNotFoundError: Unknown target id.
            PoolUnavailableError: Cache missed and the pool could not be read.
        """
        quote_id = _validate_id(target_id)
        if limit is None:
            limit = self._settings.similarity_default_limit
        self._validate_limit(limit)
        set_operation_context("get_similar", quote_id)

        entry = await self._cache.get(quote_id)
        if entry is not None:
            logger.debug(
                "Serving similar quotes for %s from %s tier", quote_id, entry.tier
            )
            return entry.result.truncated(limit)

        pool = await self._fetch_pool()
        target = next((q for q in pool if q.id == quote_id), None)
        if target is None:
            raise QuoteNotFoundError(quote_id)

        result = self._scorer.rank(
            target, pool, limit=self._settings.similarity_cache_limit
        )
        await self._cache.put(quote_id, result)

        logger.info(
            "Computed similar quotes for %s: %d candidates (pool=%d, limit=%d)",
            quote_id, len(result.scores), len(pool), limit,
        )
        return result.truncated(limit)

    # --- Selection ---

    async def get_weighted_random_quote(
        self, exclude_ids: Collection[str] = (), min_likes: int = 0
    ) -> Quote | None:
        """Pick a quote with probability proportional to ``likes + 1``.

        Returns None only when no quote remains after exclusions.
        """
        set_operation_context("get_weighted_random_quote")
        pool = await self._fetch_pool()
        chosen_id = pick_weighted(
            [PoolEntry.from_quote(q) for q in pool],
            exclude_ids=exclude_ids,
            min_likes=min_likes,
            rng=self._rng,
        )
        return _find(pool, chosen_id)

    async def get_uniform_random_quote(
        self, exclude_ids: Collection[str] = ()
    ) -> Quote | None:
        """Pick a quote uniformly at random (weighting bypassed)."""
        set_operation_context("get_uniform_random_quote")
        pool = await self._fetch_pool()
        chosen_id = pick_uniform(
            [PoolEntry.from_quote(q) for q in pool],
            exclude_ids=exclude_ids,
            rng=self._rng,
        )
        return _find(pool, chosen_id)

    async def get_random_quote(
        self, exclude_ids: Collection[str] = (), weighted: bool = True
    ) -> Quote | None:
        if weighted:
            return await self.get_weighted_random_quote(exclude_ids)
        return await self.get_uniform_random_quote(exclude_ids)

    # --- Likes ---

    async def like_quote(self, quote_id: str) -> Quote:
        """Increment likes, then invalidate the quote's cached ranking.

        Raises:
            QuoteValidationError: Empty id.
            QuoteNotFoundError: Unknown id.
        """
        quote_id = _validate_id(quote_id)
        set_operation_context("like_quote", quote_id)
        try:
            quote = await self._pool_source.increment_likes(quote_id)
        except QuoteServiceError:
            raise
        except Exception as e:
            logger.error("Failed to like quote %s: %s", quote_id, e)
            raise PoolUnavailableError("Failed to update quote likes", cause=e) from e
        await self.on_quote_liked(quote.id)
        logger.info("Quote liked: %s (likes=%d)", quote.id, quote.likes)
        return quote

    async def on_quote_liked(self, quote_id: str) -> None:
        """Invalidation hook: purge this quote's own ranking and cached copy.

        Rankings of other quotes that list it are left alone.
        """
        await self._cache.invalidate(quote_id)
        await self._cache.invalidate_quote(quote_id)

    # --- Lookup ---

    async def get_quote(self, quote_id: str) -> Quote:
        """Look up one quote, ephemeral cache first."""
        quote_id = _validate_id(quote_id)
        cached = await self._cache.get_quote(quote_id)
        if cached is not None:
            return cached
        try:
            quote = await self._pool_source.get_quote(quote_id)
        except Exception as e:
            logger.error("Failed to fetch quote %s: %s", quote_id, e)
            raise PoolUnavailableError("Failed to retrieve quote", cause=e) from e
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        await self._cache.put_quote(quote)
        return quote

    async def close(self) -> None:
        """Close every collaborator (shared objects are closed once)."""
        closed: set[int] = set()
        for resource in (self._ephemeral_cache, self._persistent_cache, self._pool_source):
            if resource is None or id(resource) in closed:
                continue
            closed.add(id(resource))
            await resource.close()

    # --- Helpers ---

    async def _fetch_pool(self) -> list[Quote]:
        try:
            return await self._pool_source.fetch_pool()
        except Exception as e:
            logger.error("Failed to fetch quote pool: %s", e)
            raise PoolUnavailableError("Quote pool unavailable", cause=e) from e

    def _validate_limit(self, limit: int) -> None:
        max_limit = self._settings.similarity_max_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or not 1 <= limit <= max_limit:
            raise QuoteValidationError(
                f"Limit must be between 1 and {max_limit}", details={"limit": limit}
            )


def _validate_id(quote_id: str) -> str:
    if not isinstance(quote_id, str) or not quote_id.strip():
        raise QuoteValidationError(
            "Quote ID is required and must be a non-empty string",
            details={"id": quote_id},
        )
    return quote_id.strip()


def _find(pool: list[Quote], quote_id: str | None) -> Quote | None:
    if quote_id is None:
        return None
    return next((q for q in pool if q.id == quote_id), None)
