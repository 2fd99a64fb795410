"""SQLite storage for saved reports and feedback."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = ".presales_research.db"


class Database:
    """One shared sqlite3 connection (WAL, foreign keys on, Row results).

    Reads go through ``fetchone``/``fetchall``; ``write`` commits immediately
    and returns the affected row count.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        self.conn: sqlite3.Connection | None = None

    def connect(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        conn.execute("PRAGMA journal_mode=WAL")
        self.conn = conn
        logger.debug("Opened report database at %s", self.db_path)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    @property
    def is_connected(self) -> bool:
        return self.conn is not None

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise sqlite3.ProgrammingError(f"Database {self.db_path} is not open")
        return self.conn

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        return self._connection().execute(sql, params)

    def executescript(self, sql: str) -> None:
        self._connection().executescript(sql)

    def commit(self) -> None:
        self._connection().commit()

    def fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def write(self, sql: str, params: tuple = ()) -> int:
        conn = self._connection()
        with conn:
            return conn.execute(sql, params).rowcount


def to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def from_json(raw: str | None, default: Any = None) -> Any:
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding malformed JSON column value: %r", raw[:80])
        return default
