"""
Key/value storage areas mirroring the extension's storage model.

    local   — persistent, this machine only (PIN, timer state, tasks)
    sync    — persistent, the user's registry of distracting domains/tabs
    session — in-memory, wiped when the browser session ends

Values are stored as JSON so lists and dicts round-trip unchanged.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, Optional, Union

Keys = Union[str, Iterable[str], None]


def _normalise_keys(keys: Keys) -> Optional[list[str]]:
    if keys is None:
        return None
    if isinstance(keys, str):
        return [keys]
    return list(keys)


class StorageArea:
    """SQLite-backed storage area; one table per area name."""

    def __init__(self, db_path: Path, name: str):
        if not name.isidentifier():
            raise ValueError(f"Invalid storage area name: {name!r}")
        self.db_path = db_path
        self.name = name
        self._init_db()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, keys: Keys = None) -> Dict[str, Any]:
        """Return {key: value} for the requested keys that exist (all keys if None)."""
        wanted = _normalise_keys(keys)
        with self._conn() as conn:
            if wanted is None:
                rows = conn.execute(f"SELECT key, value FROM {self.name}").fetchall()
            elif not wanted:
                return {}
            else:
                marks = ", ".join("?" for _ in wanted)
                rows = conn.execute(
                    f"SELECT key, value FROM {self.name} WHERE key IN ({marks})",
                    wanted,
                ).fetchall()
        return {key: json.loads(value) for key, value in rows}

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def set(self, items: Dict[str, Any]) -> None:
        with self._conn() as conn:
            conn.executemany(
                f"INSERT OR REPLACE INTO {self.name} (key, value) VALUES (?, ?)",
                [(k, json.dumps(v)) for k, v in items.items()],
            )

    def remove(self, keys: Keys) -> None:
        wanted = _normalise_keys(keys) or []
        with self._conn() as conn:
            conn.executemany(
                f"DELETE FROM {self.name} WHERE key = ?",
                [(k,) for k in wanted],
            )

    def clear(self) -> None:
        with self._conn() as conn:
            conn.execute(f"DELETE FROM {self.name}")

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.name} (
                    key   TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()


class SessionArea:
    """In-memory storage area with the same interface as StorageArea."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, keys: Keys = None) -> Dict[str, Any]:
        wanted = _normalise_keys(keys)
        with self._lock:
            if wanted is None:
                wanted = list(self._data)
            return {k: json.loads(self._data[k]) for k in wanted if k in self._data}

    def set(self, items: Dict[str, Any]) -> None:
        with self._lock:
            for k, v in items.items():
                self._data[k] = json.dumps(v)

    def remove(self, keys: Keys) -> None:
        with self._lock:
            for k in _normalise_keys(keys) or []:
                self._data.pop(k, None)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class BrowserStorage:
    """The three storage areas the services read and write."""

    def __init__(self, db_path: Path):
        self.local = StorageArea(db_path, "local_area")
        self.sync = StorageArea(db_path, "sync_area")
        self.session = SessionArea()
