# src/tictac/storage/sqlite_backend.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
import time
from pathlib import Path

from ..core.errors import StorageError
from ..core.ports import Record

logger = logging.getLogger(__name__)


class SQLiteBackend:
    """
    SQLite whole-collection store.

    One row per collection holding the JSON-encoded record list, so a save
    is a single atomic UPSERT.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "board.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteBackend ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS collections (
                    name TEXT PRIMARY KEY,
                    records TEXT NOT NULL DEFAULT '[]',
                    updated_at REAL NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    # ---- StorageBackend ----

    def load(self, collection: str) -> list[Record]:
        try:
            conn = self._get_conn()
            try:
                row = conn.execute(
                    "SELECT records FROM collections WHERE name = ?", (collection,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("SQLite load failed collection=%s", collection)
            raise StorageError(f"sqlite load failed for {collection}") from e

        if row is None:
            return []
        try:
            data = json.loads(row["records"] or "[]")
        except json.JSONDecodeError as e:
            raise StorageError(f"corrupt JSON in collection {collection}") from e
        return data if isinstance(data, list) else []

    def save(self, collection: str, records: list[Record]) -> None:
        payload = json.dumps(records, ensure_ascii=False)
        try:
            conn = self._get_conn()
            try:
                conn.execute(
                    """
                    INSERT INTO collections(name, records, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(name) DO UPDATE SET
                        records = excluded.records,
                        updated_at = excluded.updated_at
                    """,
                    (collection, payload, time.time()),
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.exception("SQLite save failed collection=%s", collection)
            raise StorageError(f"sqlite save failed for {collection}") from e
        logger.debug("Saved collection=%s records=%d", collection, len(records))
