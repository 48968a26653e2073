# src/storage/memory_store.py — v1
"""In-memory quote store (QUOTE_STORE_BACKEND=memory).

Keeps quotes and rankings in dicts. Nothing survives the process, so the
"persistent" tier here is only durable for the lifetime of the store; useful
for tests and demos.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence

from quoterec.core.errors import QuoteNotFoundError
from quoterec.core.models import (
    Quote,
    QuoteSource,
    SimilarityResult,
    sanitize_tags,
    utcnow,
)
from quoterec.storage.base_quote_store import BaseQuoteStore, BaseSimilarityStore


class MemoryQuoteStore(BaseQuoteStore, BaseSimilarityStore):
    """Dict-backed quote store and similarity tier."""

    def __init__(self, quotes: Iterable[Quote] = ()) -> None:
        self._quotes: dict[str, Quote] = {}
        self._similarities: dict[str, SimilarityResult] = {}
        for quote in quotes:
            self._quotes[quote.id] = quote

    async def fetch_pool(self) -> list[Quote]:
        # sorted() is stable: equal likes keep insertion order
        return sorted(self._quotes.values(), key=lambda q: -q.likes)

    async def get_quote(self, quote_id: str) -> Quote | None:
        return self._quotes.get(quote_id)

    async def increment_likes(self, quote_id: str) -> Quote:
        quote = self._quotes.get(quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        updated = quote.with_like()
        self._quotes[quote_id] = updated
        return updated

    async def add_quote(
        self,
        text: str,
        author: str,
        tags: Sequence[str] | None = None,
        source: QuoteSource = "internal",
        external_id: str | None = None,
    ) -> Quote:
        if external_id is not None:
            existing = await self.find_by_external_id(source, external_id)
            if existing is not None:
                return existing
        now = utcnow()
        quote = Quote(
            id=uuid.uuid4().hex,
            text=text,
            author=author,
            tags=sanitize_tags(list(tags) if tags is not None else None),
            source=source,
            external_id=external_id,
            created_at=now,
            updated_at=now,
        )
        self._quotes[quote.id] = quote
        return quote

    async def find_by_external_id(
        self, source: QuoteSource, external_id: str
    ) -> Quote | None:
        for quote in self._quotes.values():
            if quote.source == source and quote.external_id == external_id:
                return quote
        return None

    async def count(self) -> int:
        return len(self._quotes)

    async def fetch_similarity(self, target_id: str) -> SimilarityResult | None:
        return self._similarities.get(target_id)

    async def store_similarity(
        self, target_id: str, result: SimilarityResult
    ) -> None:
        self._similarities[target_id] = result

    async def delete_similarity(self, target_id: str) -> None:
        self._similarities.pop(target_id, None)
