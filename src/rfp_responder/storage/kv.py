"""Key-value persistence backends."""

from __future__ import annotations

import sqlite3
import threading
from pathlib import Path
from typing import Protocol


class KeyValueStore(Protocol):
    """Minimal persistent store contract used by the knowledge store and session."""

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if the key is absent."""

    def set(self, key: str, value: bytes) -> None:
        """Insert or replace the value for `key`."""

    def delete(self, key: str) -> None:
        """Remove `key`. Removing an absent key is a no-op."""


class InMemoryKeyValueStore:
    """Process-local store used for tests and throwaway sessions."""

    def __init__(self) -> None:
        self._data: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> bytes | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SqliteKeyValueStore:
    """Local SQLite key-value persistence."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.path) as conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value BLOB NOT NULL)"
            )
            conn.commit()

    def get(self, key: str) -> bytes | None:
        with sqlite3.connect(self.path) as conn:
            cur = conn.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
        return bytes(row[0]) if row else None

    def set(self, key: str, value: bytes) -> None:
        with sqlite3.connect(self.path) as conn:
            conn.execute(
                "INSERT INTO kv(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, sqlite3.Binary(value)),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with sqlite3.connect(self.path) as conn:
            conn.execute("DELETE FROM kv WHERE key = ?", (key,))
            conn.commit()
