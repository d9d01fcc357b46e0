"""SQLite-backed storage for tracked words."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Union

from errors import StorageError
from models import StoreSummary, WordRecord, clamp_stars

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS words (
    text TEXT PRIMARY KEY,
    count INTEGER NOT NULL DEFAULT 1 CHECK (count >= 1),
    stars INTEGER NOT NULL DEFAULT 0 CHECK (stars BETWEEN 0 AND 5),
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_words_updated_at ON words (updated_at);
"""

_COLUMNS = "text, count, stars, created_at, updated_at"
_ORDER = "ORDER BY updated_at DESC, text ASC"

# Never move updated_at backwards, so created_at <= updated_at holds even if
# the wall clock steps back.
_UPSERT = """
INSERT INTO words (text, count, stars, created_at, updated_at)
VALUES (?, 1, 0, ?, ?)
ON CONFLICT(text) DO UPDATE SET
    count = count + 1,
    updated_at = MAX(updated_at, excluded.updated_at)
"""


def _escape_like(query: str) -> str:
    return query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class WordStore:
    """Single-file word repository keyed by normalized word text.

    One connection is shared by all threads and guarded by a re-entrant lock,
    which makes the store a single writer: conflicting increments of the same
    word are serialized and never lost.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path) if path else Path(__file__).resolve().parent / "storage" / "words.db"
        self.clock = clock
        self._lock = threading.RLock()
        try:
            if str(self.path) != ":memory:":
                self.path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.path), check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.executescript(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Cannot open word store at {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def upsert_increment(self, word: str) -> None:
        self.batch_upsert_increment([word])

    def batch_upsert_increment(self, words: Iterable[str]) -> int:
        """Increment every word in one transaction; all or nothing.

        Returns the number of distinct words written.
        """
        unique = sorted({self._normalize(word) for word in words} - {""})
        if not unique:
            return 0
        with self._transaction() as conn:
            now = self.clock()
            conn.executemany(_UPSERT, [(word, now, now) for word in unique])
        logger.debug("Upserted %d words", len(unique))
        return len(unique)

    def set_stars(self, word: str, stars: int) -> bool:
        """Set the star rank; returns False when the word is not stored."""
        with self._transaction() as conn:
            cursor = conn.execute(
                "UPDATE words SET stars = ? WHERE text = ?",
                (clamp_stars(stars), self._normalize(word)),
            )
            return cursor.rowcount > 0

    def get(self, word: str) -> Optional[WordRecord]:
        rows = self._query(f"SELECT {_COLUMNS} FROM words WHERE text = ?", (self._normalize(word),))
        return rows[0] if rows else None

    def get_all(self) -> List[WordRecord]:
        return self._query(f"SELECT {_COLUMNS} FROM words {_ORDER}")

    def get_starred(self) -> List[WordRecord]:
        return self._query(f"SELECT {_COLUMNS} FROM words WHERE stars > 0 {_ORDER}")

    def search(self, query: str) -> List[WordRecord]:
        """Exact, prefix and substring matches (case-insensitive), newest first."""
        normalized = self._normalize(query)
        if not normalized:
            return self.get_all()
        # A substring match subsumes the exact and prefix matches.
        pattern = f"%{_escape_like(normalized)}%"
        return self._query(
            f"SELECT {_COLUMNS} FROM words WHERE text LIKE ? ESCAPE '\\' {_ORDER}",
            (pattern,),
        )

    def count_in_range(self, start: float, end: float) -> int:
        """Number of records whose updated_at lies in [start, end)."""
        rows = self._fetch(
            "SELECT COUNT(*) AS n FROM words WHERE updated_at >= ? AND updated_at < ?",
            (float(start), float(end)),
        )
        return int(rows[0]["n"])

    def remove(self, word: str) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM words WHERE text = ?", (self._normalize(word),))
            return cursor.rowcount > 0

    def remove_all(self) -> int:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM words")
            return cursor.rowcount

    def summary(self) -> StoreSummary:
        rows = self._fetch(
            "SELECT COUNT(*) AS total, "
            "COALESCE(SUM(CASE WHEN stars > 0 THEN 1 ELSE 0 END), 0) AS starred, "
            "MIN(created_at) AS first_word_at FROM words"
        )
        row = rows[0]
        return StoreSummary(
            total=int(row["total"]),
            starred=int(row["starred"]),
            first_word_at=row["first_word_at"],
        )

    def top_words(self, limit: int = 10) -> List[WordRecord]:
        return self._query(
            f"SELECT {_COLUMNS} FROM words ORDER BY count DESC, updated_at DESC LIMIT ?",
            (max(0, int(limit)),),
        )

    def export_list(self, starred_only: bool = False) -> str:
        records = self.get_starred() if starred_only else self.get_all()
        return "\n".join(record.text for record in records)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _normalize(self, word: str) -> str:
        return (word or "").strip().lower()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                raise StorageError(f"Word store transaction failed: {exc}") from exc

    def _fetch(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise StorageError(f"Word store query failed: {exc}") from exc

    def _query(self, sql: str, params: tuple = ()) -> List[WordRecord]:
        return [self._to_record(row) for row in self._fetch(sql, params)]

    def _to_record(self, row: sqlite3.Row) -> WordRecord:
        return WordRecord(
            text=row["text"],
            count=int(row["count"]),
            stars=int(row["stars"]),
            created_at=float(row["created_at"]),
            updated_at=float(row["updated_at"]),
        )
