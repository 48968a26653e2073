# tests/conftest.py — v2
"""Shared test fixtures for all unit and integration tests.

Provides quote factories, sample pools, in-memory collaborators and temp
directories. No external services — Redis is always mocked.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from quoterec.cache.memory_store import MemoryEphemeralCache
from quoterec.config.settings import Settings
from quoterec.core.models import Quote
from quoterec.logging.context import clear_context
from quoterec.storage.memory_store import MemoryQuoteStore

_FIXED_TS = datetime(2025, 8, 3, 13, 27, 32, tzinfo=timezone.utc)


# === FIXTURES: Sample data ===


@pytest.fixture
def make_quote() -> Callable[..., Quote]:
    """Factory for Quote with sensible defaults."""

    def _make(
        id: str = "q1",
        text: str = "The only way to do great work is to love what you do.",
        author: str = "Steve Jobs",
        tags: list[str] | None = None,
        likes: int = 0,
        source: str = "internal",
    ) -> Quote:
        return Quote(
            id=id,
            text=text,
            author=author,
            tags=tags if tags is not None else [],
            likes=likes,
            source=source,
            created_at=_FIXED_TS,
            updated_at=_FIXED_TS,
        )

    return _make


@pytest.fixture
def sample_pool(make_quote) -> list[Quote]:
    """Small pool with related and unrelated quotes."""
    return [
        make_quote(
            id="work-1", text="Hard work beats talent", author="Tim Notke",
            tags=["work", "motivation"], likes=3,
        ),
        make_quote(
            id="work-2", text="Talent without hard work is nothing", author="Tim Notke",
            tags=["work"], likes=10,
        ),
        make_quote(
            id="work-3", text="Hard work pays off in the end", author="Unknown",
            tags=["work"], likes=0,
        ),
        make_quote(
            id="twain-1", text="The secret of getting ahead is getting started.",
            author="Mark Twain", tags=["motivation"], likes=5,
        ),
        make_quote(
            id="twain-2", text="Courage is resistance to fear, mastery of fear.",
            author="Twain", tags=["courage"], likes=1,
        ),
        make_quote(
            id="ocean-1", text="Oceans breathe slowly beneath moonlit tides",
            author="Zadie Q", tags=["nature"], likes=0,
        ),
    ]


@pytest.fixture
def memory_store(sample_pool) -> MemoryQuoteStore:
    """In-memory pool source + persistent tier seeded with sample_pool."""
    return MemoryQuoteStore(sample_pool)


@pytest.fixture
def ephemeral_cache() -> MemoryEphemeralCache:
    return MemoryEphemeralCache()


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        quote_store_backend="memory",
        ephemeral_cache_backend="memory",
        selection_seed=1234,
    )


@pytest.fixture
def seeded_rng() -> np.random.Generator:
    return np.random.default_rng(20250803)


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


# === FIXTURES: Temp dirs ===


@pytest.fixture
def tmp_db_path(tmp_path: Path) -> Path:
    """Temporary SQLite database path."""
    return tmp_path / "db" / "quotes.db"
