"""SQLite-backed local store.

Persistent counterpart of InMemoryLocalStore: entries survive process
restarts, which is what the CLI relies on. Same string-in/string-out
contract and the same quota accounting (characters of key plus value).
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any

from ..config import DEFAULT_LOCAL_QUOTA
from ..exceptions import BackendUnavailableError, QuotaExceededError

logger = logging.getLogger(__name__)


class SQLiteLocalStore:
    """File-backed key-value substrate.

    Features:
    - Persistent storage in a single `entries` table
    - Capacity-bound, like the in-memory store
    - Thread-safe operations
    - Connections are opened per operation; nothing is held between calls

    Usage:
        store = SQLiteLocalStore("storage.db")
        store.set_item("greeting", "hello")
        print(store.get_item("greeting"))
    """

    def __init__(self, db_path: str | Path = "mmle_storage.db", quota: int = DEFAULT_LOCAL_QUOTA):
        self._db_path = Path(db_path)
        self.quota = quota
        self._lock = RLock()
        self._init_db()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success and always close it."""
        conn = sqlite3.connect(str(self._db_path))
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self) -> None:
        """Initialize the database schema.

        Raises:
            BackendUnavailableError: If the database cannot be opened or written.
        """
        try:
            with self._lock, self._connect() as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS entries (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                """)
        except sqlite3.Error as e:
            raise BackendUnavailableError(
                "Cannot open SQLite local store",
                details={"db_path": str(self._db_path), "error": e},
            ) from e
        logger.debug(f"SQLite local store ready at {self._db_path}")

    def get_item(self, key: str) -> str | None:
        with self._lock, self._connect() as conn:
            row = conn.execute("SELECT value FROM entries WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        """Store a value, enforcing the quota.

        Raises:
            QuotaExceededError: If the write would push usage past the quota.
        """
        with self._lock, self._connect() as conn:
            used = conn.execute(
                "SELECT COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) FROM entries WHERE key != ?",
                (key,),
            ).fetchone()[0]
            required = int(used) + len(key) + len(value)
            if required > self.quota:
                raise QuotaExceededError(
                    "Local store quota exceeded",
                    details={"quota": self.quota, "required": required},
                )
            conn.execute(
                "INSERT INTO entries (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("DELETE FROM entries WHERE key = ?", (key,))

    def clear(self) -> None:
        with self._lock, self._connect() as conn:
            conn.execute("DELETE FROM entries")

    def keys(self) -> list[str]:
        with self._lock, self._connect() as conn:
            return [row[0] for row in conn.execute("SELECT key FROM entries")]

    def get_stats(self) -> dict[str, Any]:
        with self._lock, self._connect() as conn:
            count, used = conn.execute(
                "SELECT COUNT(*), COALESCE(SUM(LENGTH(key) + LENGTH(value)), 0) FROM entries"
            ).fetchone()
        return {
            "backend_type": "sqlite",
            "entry_count": int(count),
            "chars_used": int(used),
            "quota": self.quota,
            "db_path": str(self._db_path),
        }

