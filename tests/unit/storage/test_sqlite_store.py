# tests/unit/storage/test_sqlite_store.py — v2
"""Tests for storage/sqlite_store.py — quotes, likes and stored rankings."""

from __future__ import annotations

import asyncio
import sqlite3

import pytest
import pytest_asyncio

from quoterec.core.errors import QuoteNotFoundError
from quoterec.core.models import SimilarityResult, SimilarityScore
from quoterec.storage.sqlite_store import SqliteQuoteStore


@pytest_asyncio.fixture
async def store(tmp_db_path):
    s = SqliteQuoteStore(db_path=tmp_db_path)
    yield s
    await s.close()


async def _seed(store: SqliteQuoteStore, count: int = 3):
    return [
        await store.add_quote(text=f"Quote number {i}", author=f"Author {i}", tags=["life"])
        for i in range(count)
    ]


class TestQuotes:
    @pytest.mark.asyncio
    async def test_add_and_get(self, store):
        quote = await store.add_quote(
            text="Hard work beats talent", author="Tim Notke", tags=[" Work ", "MOTIVATION"],
        )
        loaded = await store.get_quote(quote.id)
        assert loaded == quote
        assert loaded.tags == ["work", "motivation"]
        assert loaded.likes == 0
        assert loaded.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_untagged_quote(self, store):
        quote = await store.add_quote(text="No tags here", author="Anon")
        assert (await store.get_quote(quote.id)).tags == []

    @pytest.mark.asyncio
    async def test_get_missing(self, store):
        assert await store.get_quote("nope") is None

    @pytest.mark.asyncio
    async def test_creates_parent_directory(self, tmp_db_path, store):
        assert tmp_db_path.parent.is_dir()

    @pytest.mark.asyncio
    async def test_dedup_on_external_id(self, store):
        first = await store.add_quote(
            text="A", author="B", source="quotable", external_id="ext-1",
        )
        second = await store.add_quote(
            text="A", author="B", source="quotable", external_id="ext-1",
        )
        assert first.id == second.id
        assert await store.count() == 1
        assert (await store.find_by_external_id("quotable", "ext-1")).id == first.id
        assert await store.find_by_external_id("dummyjson", "ext-1") is None

    @pytest.mark.asyncio
    async def test_pool_order_by_likes_then_insertion(self, store):
        a, b, c = await _seed(store)
        await store.increment_likes(c.id)
        pool = await store.fetch_pool()
        assert [q.id for q in pool] == [c.id, a.id, b.id]

    @pytest.mark.asyncio
    async def test_increment_likes(self, store):
        (quote,) = await _seed(store, 1)
        await store.increment_likes(quote.id)
        updated = await store.increment_likes(quote.id)
        assert updated.likes == 2
        assert (await store.get_quote(quote.id)).likes == 2
        assert updated.updated_at >= quote.updated_at

    @pytest.mark.asyncio
    async def test_increment_unknown(self, store):
        with pytest.raises(QuoteNotFoundError):
            await store.increment_likes("nope")

    @pytest.mark.asyncio
    async def test_in_memory_database(self):
        s = SqliteQuoteStore(db_path=":memory:")
        await s.add_quote(text="x", author="y")
        assert await s.count() == 1
        await s.close()

    @pytest.mark.asyncio
    async def test_survives_reopen(self, tmp_db_path):
        s = SqliteQuoteStore(db_path=tmp_db_path)
        quote = await s.add_quote(text="Persistent", author="Disk")
        await s.close()

        reopened = SqliteQuoteStore(db_path=tmp_db_path)
        assert (await reopened.get_quote(quote.id)).text == "Persistent"
        await reopened.close()


class TestSimilarities:
    @pytest.mark.asyncio
    async def test_absent_ranking(self, store):
        (quote,) = await _seed(store, 1)
        assert await store.fetch_similarity(quote.id) is None

    @pytest.mark.asyncio
    async def test_store_and_fetch(self, store):
        target, a, b = await _seed(store)
        result = SimilarityResult(
            target_id=target.id,
            scores=[
                SimilarityScore(quote=b, score=0.1 + 0.2),
                SimilarityScore(quote=a, score=0.25),
            ],
        )
        await store.store_similarity(target.id, result)

        loaded = await store.fetch_similarity(target.id)
        assert loaded.target_id == target.id
        assert loaded.quote_ids == [b.id, a.id]
        assert loaded.scores[0].score == 0.1 + 0.2
        assert loaded.computed_at == result.computed_at

    @pytest.mark.asyncio
    async def test_empty_ranking_is_stored(self, store):
        (target,) = await _seed(store, 1)
        await store.store_similarity(target.id, SimilarityResult(target_id=target.id))
        loaded = await store.fetch_similarity(target.id)
        assert loaded is not None
        assert loaded.scores == []

    @pytest.mark.asyncio
    async def test_store_replaces(self, store):
        target, a, b = await _seed(store)
        await store.store_similarity(
            target.id,
            SimilarityResult(target_id=target.id, scores=[SimilarityScore(quote=a, score=0.5)]),
        )
        await store.store_similarity(
            target.id,
            SimilarityResult(target_id=target.id, scores=[SimilarityScore(quote=b, score=0.4)]),
        )
        assert (await store.fetch_similarity(target.id)).quote_ids == [b.id]

    @pytest.mark.asyncio
    async def test_fetch_reflects_current_likes(self, store):
        target, a, _ = await _seed(store)
        await store.store_similarity(
            target.id,
            SimilarityResult(target_id=target.id, scores=[SimilarityScore(quote=a, score=0.5)]),
        )
        await store.increment_likes(a.id)
        loaded = await store.fetch_similarity(target.id)
        assert loaded.scores[0].quote.likes == 1

    @pytest.mark.asyncio
    async def test_delete_only_target(self, store):
        q1, q2, _ = await _seed(store)
        await store.store_similarity(
            q1.id,
            SimilarityResult(target_id=q1.id, scores=[SimilarityScore(quote=q2, score=0.5)]),
        )
        await store.store_similarity(
            q2.id,
            SimilarityResult(target_id=q2.id, scores=[SimilarityScore(quote=q1, score=0.5)]),
        )

        await store.delete_similarity(q1.id)

        assert await store.fetch_similarity(q1.id) is None
        assert (await store.fetch_similarity(q2.id)).quote_ids == [q1.id]


class TestLocking:
    @pytest.mark.asyncio
    async def test_locked_write_can_be_abandoned(self, tmp_db_path):
        s = SqliteQuoteStore(db_path=tmp_db_path, busy_timeout=2.0)
        (quote,) = await _seed(s, 1)
        locker = sqlite3.connect(str(tmp_db_path), isolation_level=None)
        locker.execute("BEGIN EXCLUSIVE")
        try:
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(s.increment_likes(quote.id), timeout=0.05)
        finally:
            locker.execute("ROLLBACK")
            locker.close()
        await s.close()

    @pytest.mark.asyncio
    async def test_busy_timeout_surfaces_as_operational_error(self, tmp_db_path):
        s = SqliteQuoteStore(db_path=tmp_db_path, busy_timeout=0.05)
        (quote,) = await _seed(s, 1)
        locker = sqlite3.connect(str(tmp_db_path), isolation_level=None)
        locker.execute("BEGIN EXCLUSIVE")
        try:
            with pytest.raises(sqlite3.OperationalError, match="locked"):
                await s.delete_similarity(quote.id)
        finally:
            locker.execute("ROLLBACK")
            locker.close()
        await s.close()
