# src/storage/store_factory.py — v2
"""Factory: instantiate the quote store from configuration."""

from __future__ import annotations

from quoterec.config.settings import Settings
from quoterec.storage.memory_store import MemoryQuoteStore
from quoterec.storage.sqlite_store import SqliteQuoteStore


class UnsupportedStoreBackendError(ValueError):
    """Raised when a quote store backend is not supported."""


def create_quote_store(settings: Settings) -> SqliteQuoteStore | MemoryQuoteStore:
    """Create the quote store selected by QUOTE_STORE_BACKEND.

    The returned object serves as both pool source and persistent
    similarity tier. A locked SQLite database is retried for at most
    CACHE_TIMEOUT_SECONDS.

    Raises:
        UnsupportedStoreBackendError: If the backend is unknown.
    """
    if settings.quote_store_backend == "sqlite":
        return SqliteQuoteStore(
            db_path=settings.database_path,
            busy_timeout=settings.cache_timeout_seconds,
        )

    if settings.quote_store_backend == "memory":
        return MemoryQuoteStore()

    raise UnsupportedStoreBackendError(
        f"Unsupported quote store backend: {settings.quote_store_backend!r}"
    )
