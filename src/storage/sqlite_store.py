# src/storage/sqlite_store.py — v2
"""SQLite-based quote store (QUOTE_STORE_BACKEND=sqlite).

Uses stdlib sqlite3 — no external dependency.
Serves both as the pool source and as the persistent similarity tier.
Rankings are stored as rows referencing quotes, so a read always returns the
current like counts of the ranked candidates.

sqlite3 calls block, so every public method runs its statements in a worker
thread (one at a time per store). Awaiting callers can then be cancelled by
``asyncio.wait_for`` while the database is locked; the worker gives up after
``busy_timeout`` seconds.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sqlite3
import threading
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from typing import TypeVar

from quoterec.core.errors import QuoteNotFoundError
from quoterec.core.models import (
    Quote,
    QuoteSource,
    SimilarityResult,
    SimilarityScore,
    sanitize_tags,
    utcnow,
)
from quoterec.storage.base_quote_store import BaseQuoteStore, BaseSimilarityStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BUSY_TIMEOUT = 5.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS quotes (
    id TEXT PRIMARY KEY,
    text TEXT NOT NULL,
    author TEXT NOT NULL,
    tags TEXT,
    likes INTEGER NOT NULL DEFAULT 0,
    source TEXT NOT NULL,
    external_id TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (source, external_id)
);
CREATE INDEX IF NOT EXISTS idx_likes ON quotes(likes DESC);
CREATE INDEX IF NOT EXISTS idx_author ON quotes(author);

CREATE TABLE IF NOT EXISTS similarity_snapshots (
    quote_id TEXT PRIMARY KEY REFERENCES quotes(id) ON DELETE CASCADE,
    computed_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS quote_similarities (
    quote_id TEXT NOT NULL REFERENCES similarity_snapshots(quote_id) ON DELETE CASCADE,
    similar_quote_id TEXT NOT NULL REFERENCES quotes(id) ON DELETE CASCADE,
    similarity_score REAL NOT NULL,
    position INTEGER NOT NULL,
    PRIMARY KEY (quote_id, similar_quote_id)
);
CREATE INDEX IF NOT EXISTS idx_quote_similarity
    ON quote_similarities(quote_id, position);
"""

_QUOTE_COLUMNS = (
    "id, text, author, tags, likes, source, external_id, created_at, updated_at"
)


class SqliteQuoteStore(BaseQuoteStore, BaseSimilarityStore):
    """SQLite-backed quote store and durable similarity tier."""

    def __init__(
        self, db_path: Path | str, busy_timeout: float = DEFAULT_BUSY_TIMEOUT
    ) -> None:
        if str(db_path) == ":memory:":
            self._db_path: Path | None = None
            target = ":memory:"
        else:
            self._db_path = Path(db_path).expanduser()
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(self._db_path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(
            target, timeout=busy_timeout, check_same_thread=False
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys=ON")
        if self._db_path is not None:
            self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def _run(self, fn: Callable[..., T], *args: object) -> T:
        """Run ``fn`` in a worker thread while holding the connection lock."""
        return await asyncio.to_thread(self._locked, fn, *args)

    def _locked(self, fn: Callable[..., T], *args: object) -> T:
        with self._lock:
            return fn(*args)

    # --- Pool source ---

    async def fetch_pool(self) -> list[Quote]:
        """Return every quote, most liked first (insertion order on ties)."""
        return await self._run(self._fetch_pool)

    async def get_quote(self, quote_id: str) -> Quote | None:
        return await self._run(self._get_quote, quote_id)

    async def increment_likes(self, quote_id: str) -> Quote:
        quote = await self._run(self._increment_likes, quote_id)
        logger.debug("Quote likes incremented: %s -> %d", quote_id, quote.likes)
        return quote

    async def add_quote(
        self,
        text: str,
        author: str,
        tags: Sequence[str] | None = None,
        source: QuoteSource = "internal",
        external_id: str | None = None,
    ) -> Quote:
        """Insert a quote (deduplicated on source + external_id)."""
        if external_id is not None:
            existing = await self.find_by_external_id(source, external_id)
            if existing is not None:
                logger.debug(
                    "Quote already stored: %s (%s/%s)", existing.id, source, external_id
                )
                return existing

        now = utcnow()
        quote = Quote(
            id=uuid.uuid4().hex,
            text=text,
            author=author,
            tags=sanitize_tags(list(tags) if tags is not None else None),
            likes=0,
            source=source,
            external_id=external_id,
            created_at=now,
            updated_at=now,
        )
        await self._run(self._insert_quote, quote)
        logger.debug("Quote created: %s", quote.id)
        return quote

    async def find_by_external_id(
        self, source: QuoteSource, external_id: str
    ) -> Quote | None:
        return await self._run(self._find_by_external_id, source, external_id)

    async def count(self) -> int:
        return await self._run(self._count)

    # --- Persistent similarity tier ---

    async def fetch_similarity(self, target_id: str) -> SimilarityResult | None:
        return await self._run(self._fetch_similarity, target_id)

    async def store_similarity(
        self, target_id: str, result: SimilarityResult
    ) -> None:
        """Replace the stored ranking (upsert snapshot, rewrite rows)."""
        await self._run(self._store_similarity, target_id, result)
        logger.debug(
            "Stored similarities for %s (%d entries)", target_id, len(result.scores)
        )

    async def delete_similarity(self, target_id: str) -> None:
        await self._run(self._delete_similarity, target_id)

    async def close(self) -> None:
        """Close the database connection."""
        await self._run(self._conn.close)

    # --- Blocking statements (worker thread, lock held) ---

    def _fetch_pool(self) -> list[Quote]:
        cursor = self._conn.execute(
            f"SELECT {_QUOTE_COLUMNS} FROM quotes ORDER BY likes DESC, rowid ASC"
        )
        return [_row_to_quote(row) for row in cursor.fetchall()]

    def _get_quote(self, quote_id: str) -> Quote | None:
        cursor = self._conn.execute(
            f"SELECT {_QUOTE_COLUMNS} FROM quotes WHERE id = ?", (quote_id,)
        )
        row = cursor.fetchone()
        return _row_to_quote(row) if row is not None else None

    def _increment_likes(self, quote_id: str) -> Quote:
        with self._conn:
            cursor = self._conn.execute(
                "UPDATE quotes SET likes = likes + 1, updated_at = ? WHERE id = ?",
                (utcnow().isoformat(), quote_id),
            )
        if cursor.rowcount == 0:
            raise QuoteNotFoundError(quote_id)
        quote = self._get_quote(quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)
        return quote

    def _insert_quote(self, quote: Quote) -> None:
        with self._conn:
            self._conn.execute(
                f"INSERT INTO quotes ({_QUOTE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    quote.id,
                    quote.text,
                    quote.author,
                    json.dumps(quote.tags) if quote.tags else None,
                    quote.likes,
                    quote.source,
                    quote.external_id,
                    quote.created_at.isoformat(),
                    quote.updated_at.isoformat(),
                ),
            )

    def _find_by_external_id(
        self, source: QuoteSource, external_id: str
    ) -> Quote | None:
        cursor = self._conn.execute(
            f"SELECT {_QUOTE_COLUMNS} FROM quotes WHERE source = ? AND external_id = ?",
            (source, external_id),
        )
        row = cursor.fetchone()
        return _row_to_quote(row) if row is not None else None

    def _count(self) -> int:
        cursor = self._conn.execute("SELECT COUNT(*) FROM quotes")
        return int(cursor.fetchone()[0])

    def _fetch_similarity(self, target_id: str) -> SimilarityResult | None:
        cursor = self._conn.execute(
            "SELECT computed_at FROM similarity_snapshots WHERE quote_id = ?",
            (target_id,),
        )
        snapshot = cursor.fetchone()
        if snapshot is None:
            return None

        columns = ", ".join(f"q.{c.strip()}" for c in _QUOTE_COLUMNS.split(","))
        cursor = self._conn.execute(
            f"""SELECT {columns}, s.similarity_score
                FROM quote_similarities s
                JOIN quotes q ON q.id = s.similar_quote_id
                WHERE s.quote_id = ?
                ORDER BY s.position ASC""",
            (target_id,),
        )
        scores = [
            SimilarityScore(quote=_row_to_quote(row), score=float(row["similarity_score"]))
            for row in cursor.fetchall()
        ]
        return SimilarityResult(
            target_id=target_id,
            scores=scores,
            computed_at=datetime.fromisoformat(snapshot["computed_at"]),
        )

    def _store_similarity(self, target_id: str, result: SimilarityResult) -> None:
        with self._conn:
            self._conn.execute(
                "DELETE FROM quote_similarities WHERE quote_id = ?", (target_id,)
            )
            self._conn.execute(
                """INSERT INTO similarity_snapshots (quote_id, computed_at)
                   VALUES (?, ?)
                   ON CONFLICT(quote_id) DO UPDATE SET computed_at = excluded.computed_at""",
                (target_id, result.computed_at.isoformat()),
            )
            self._conn.executemany(
                """INSERT INTO quote_similarities
                   (quote_id, similar_quote_id, similarity_score, position)
                   VALUES (?, ?, ?, ?)""",
                [
                    (target_id, item.quote.id, item.score, position)
                    for position, item in enumerate(result.scores)
                ],
            )

    def _delete_similarity(self, target_id: str) -> None:
        with self._conn:
            self._conn.execute(
                "DELETE FROM quote_similarities WHERE quote_id = ?", (target_id,)
            )
            self._conn.execute(
                "DELETE FROM similarity_snapshots WHERE quote_id = ?", (target_id,)
            )


def _row_to_quote(row: sqlite3.Row) -> Quote:
    return Quote(
        id=row["id"],
        text=row["text"],
        author=row["author"],
        tags=json.loads(row["tags"]) if row["tags"] else [],
        likes=row["likes"],
        source=row["source"],
        external_id=row["external_id"],
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )
