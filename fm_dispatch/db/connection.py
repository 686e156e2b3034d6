"""
SQLite connections for the local snapshot store.

``get_connection()`` yields a configured ``sqlite3.Connection``:
  - ``sqlite3.Row`` rows, foreign keys ON, busy timeout applied.
  - WAL journal mode when requested, so snapshot reads running in worker
    threads do not block an import in progress.
  - ``query_only`` connections refuse writes; the snapshot provider uses
    them because the dispatch engine never mutates its data.
  - Commit on clean exit, rollback on exception, always closed.

``open_database(config.database)`` is the usual entry point; it unpacks a
``DatabaseConfig`` so callers do not repeat the three connection settings::

    with open_database(config.database) as conn:
        DispatchSnapshotRepository(conn).get_eligible_vendors(1)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import AbstractContextManager, contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator

if TYPE_CHECKING:
    from fm_dispatch.config import DatabaseConfig

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    query_only: bool = False,
) -> Generator[sqlite3.Connection, None, None]:
    """Context manager yielding a configured SQLite connection.

    Args:
        db_path:         Database file, or ``":memory:"``.  Parent
            directories of a file path are created.
        wal_mode:        Switch the database to WAL journal mode.
        busy_timeout_ms: How long to wait on a locked database.
        query_only:      Reject any statement that writes.

    Yields:
        An open ``sqlite3.Connection``.

    Raises:
        sqlite3.OperationalError: If the database cannot be opened or stays
            locked past the timeout.
    """
    if db_path != MEMORY_DB:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row

    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode and not query_only:
            conn.execute("PRAGMA journal_mode = WAL;")
        if query_only:
            conn.execute("PRAGMA query_only = ON;")

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()


def open_database(
    database: "DatabaseConfig",
    query_only: bool = False,
) -> AbstractContextManager[sqlite3.Connection]:
    """``get_connection()`` with settings taken from a ``DatabaseConfig``."""
    logger.debug("Opening %s (query_only=%s)", database.db_path, query_only)
    return get_connection(
        database.db_path,
        wal_mode=database.wal_mode,
        busy_timeout_ms=database.busy_timeout_ms,
        query_only=query_only,
    )
