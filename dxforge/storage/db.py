"""SQLite store for operations, anchors and annotations."""

from __future__ import annotations

import os
import sqlite3
import threading
from pathlib import Path
from types import TracebackType

DB_FILENAME = "forge.db"

_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS operations (
        id TEXT PRIMARY KEY,
        timestamp TEXT NOT NULL,
        actor_id TEXT NOT NULL,
        file_path TEXT NOT NULL,
        op_type TEXT NOT NULL,
        op_data BLOB NOT NULL,
        parent_ops TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS anchors (
        id TEXT PRIMARY KEY,
        file_path TEXT NOT NULL,
        stable_id TEXT NOT NULL UNIQUE,
        position BLOB NOT NULL,
        created_at TEXT NOT NULL,
        message TEXT,
        tags TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS annotations (
        id TEXT PRIMARY KEY,
        file_path TEXT NOT NULL,
        anchor_id TEXT,
        line INTEGER NOT NULL,
        content TEXT NOT NULL,
        author TEXT NOT NULL,
        created_at TEXT NOT NULL,
        is_ai BOOLEAN NOT NULL,
        FOREIGN KEY(anchor_id) REFERENCES anchors(id)
    )""",
    """CREATE INDEX IF NOT EXISTS idx_ops_file_time
       ON operations(file_path, timestamp)""",
    """CREATE INDEX IF NOT EXISTS idx_anchors_file
       ON anchors(file_path)""",
    """CREATE INDEX IF NOT EXISTS idx_annotations_file
       ON annotations(file_path, line)""",
)


class Database:
    """The forge database, kept in ``<forge_path>/forge.db``; thread-safe."""

    def __init__(self, forge_path: str | os.PathLike[str]) -> None:
        self.path = Path(forge_path) / DB_FILENAME
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = sqlite3.connect(
            self.path, check_same_thread=False
        )

    @classmethod
    def open(cls, forge_path: str | os.PathLike[str]) -> Database:
        """Open the database in the forge directory ``forge_path``."""
        return cls(forge_path)

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        return self._conn

    def initialize(self) -> None:
        """Create the tables and indexes if they do not exist yet."""
        with self._lock:
            conn = self._connection()
            with conn:
                for statement in _SCHEMA:
                    conn.execute(statement)

    def table_names(self) -> list[str]:
        """Names of the tables in the database, sorted."""
        with self._lock:
            rows = self._connection().execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            ).fetchall()
        return [name for (name,) in rows]

    def close(self) -> None:
        """Close the connection; further calls do nothing."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> Database:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()