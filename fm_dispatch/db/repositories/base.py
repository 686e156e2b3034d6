"""
Shared SQL helpers for the snapshot repositories.

Repositories receive an open ``sqlite3.Connection`` (see
``fm_dispatch.db.connection``) and never manage its lifetime.  SQL is
written out in each repository method; rows leave a repository as
pydantic models or plain values, never as ``sqlite3.Row``.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

logger = logging.getLogger(__name__)

Params = tuple[Any, ...] | dict[str, Any]


class BaseRepository:
    """Query helpers over one connection.

    Attributes:
        conn: The active ``sqlite3.Connection``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("SQL: %s | params: %s", " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def fetchvalue(self, sql: str, params: Params = ()) -> Any:
        """Return the first column of the first row, or ``None`` if no row."""
        row = self.fetchone(sql, params)
        return None if row is None else row[0]

    def table_columns(self, table: str) -> list[str]:
        """Column names of ``table`` in declaration order (empty if no such table)."""
        return [row[1] for row in self.conn.execute(f"PRAGMA table_info({table});")]
