# src/storage/base_quote_store.py — v1
"""Abstract persistence interfaces.

BaseQuoteStore is the pool source (quotes and like counters).
BaseSimilarityStore is the durable similarity tier, keyed by target quote id.
Concrete backends usually implement both.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from quoterec.core.models import Quote, QuoteSource, SimilarityResult


class BaseQuoteStore(ABC):
    """Unified interface for quote persistence backends."""

    @abstractmethod
    async def fetch_pool(self) -> list[Quote]:
        """Return every quote, most liked first, stable for equal likes."""

    @abstractmethod
    async def get_quote(self, quote_id: str) -> Quote | None:
        """Retrieve a quote by id."""

    @abstractmethod
    async def increment_likes(self, quote_id: str) -> Quote:
        """Add one like and return the updated quote.

        Raises:
            QuoteNotFoundError: If the id is unknown.
        """

    @abstractmethod
    async def add_quote(
        self,
        text: str,
        author: str,
        tags: Sequence[str] | None = None,
        source: QuoteSource = "internal",
        external_id: str | None = None,
    ) -> Quote:
        """Insert a quote, or return the existing one for (source, external_id)."""

    @abstractmethod
    async def find_by_external_id(
        self, source: QuoteSource, external_id: str
    ) -> Quote | None:
        """Lookup by origin identifier."""

    @abstractmethod
    async def count(self) -> int:
        """Total number of quotes."""

    async def close(self) -> None:
        """Release resources. No-op by default."""


class BaseSimilarityStore(ABC):
    """Durable tier of the similarity cache."""

    @abstractmethod
    async def fetch_similarity(self, target_id: str) -> SimilarityResult | None:
        """Return the stored ranking, or None when nothing is stored."""

    @abstractmethod
    async def store_similarity(
        self, target_id: str, result: SimilarityResult
    ) -> None:
        """Replace the stored ranking for ``target_id``."""

    @abstractmethod
    async def delete_similarity(self, target_id: str) -> None:
        """Drop the stored ranking for ``target_id`` only."""
