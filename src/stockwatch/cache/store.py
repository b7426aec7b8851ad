"""
Persistent key/value stores.

The expiring cache only needs durable string storage with get/set/remove.
``SQLiteStore`` keeps records on disk between runs; ``MemoryStore`` lives
for the life of the process.
"""

import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from stockwatch.core.exceptions import CacheError


class KeyValueStore(ABC):
    """Durable string-keyed storage.

    Implementations serialize their own operations and raise CacheError
    when the backing storage fails.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove ``key``; absence is not an error."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every record."""


class MemoryStore(KeyValueStore):
    """Dict-backed store."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> list[str]:
        """Return stored keys (diagnostics only)."""
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)


class SQLiteStore(KeyValueStore):
    """SQLite-backed store.

    Uses one short-lived connection per operation, so concurrent callers
    are serialized by SQLite's own locking.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file. Defaults to
                ~/.stockwatch/cache.db
        """
        if db_path is None:
            db_path = Path.home() / ".stockwatch" / "cache.db"

        self.db_path = db_path

        # Ensure parent directory exists
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

    def _init_db(self) -> None:
        """Initialize the store schema."""
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS kv (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                    """
                )
        except sqlite3.Error as e:
            raise CacheError("initialization", str(e))

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection context manager.

        Yields:
            sqlite3.Connection that auto-commits on success.
        """
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise CacheError("connect", str(e))

        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise CacheError("database operation", str(e))
        finally:
            conn.close()

    def get_item(self, key: str) -> Optional[str]:
        with self._connection() as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def set_item(self, key: str, value: str) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))

    def clear(self) -> None:
        with self._connection() as conn:
            conn.execute("DELETE FROM kv")

    def size_bytes(self) -> int:
        """Return the database file size."""
        return self.db_path.stat().st_size if self.db_path.exists() else 0
