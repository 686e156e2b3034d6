"""
SQLite-backed snapshot provider.

Adapts the synchronous ``DispatchSnapshotRepository`` to the async
``SnapshotProvider`` contract.  Each call runs in a worker thread
(``asyncio.to_thread``) on its own short-lived, query-only connection, so
the engine's concurrent lookups never share a ``sqlite3.Connection``
across threads.

Requires a file-backed database; ``":memory:"`` would give every call its
own empty database.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, TypeVar

from fm_dispatch.config import DatabaseConfig
from fm_dispatch.db.connection import MEMORY_DB, open_database
from fm_dispatch.db.repositories.dispatch_repo import DispatchSnapshotRepository
from fm_dispatch.models.candidate import TechnicianCandidate, VendorCandidate
from fm_dispatch.models.work_order import WorkOrderContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqliteSnapshotProvider:
    """``SnapshotProvider`` reading from the local SQLite store.

    Args:
        database: Connection settings (path, WAL, busy timeout).
        as_of:    Fixed "now" for the feedback window; ``None`` = wall clock.
    """

    def __init__(self, database: DatabaseConfig, as_of: datetime | None = None) -> None:
        if database.db_path == MEMORY_DB:
            raise ValueError("SqliteSnapshotProvider needs a file-backed database.")
        self.database = database
        self.as_of = as_of

    def _query(self, fn: Callable[[DispatchSnapshotRepository], T]) -> T:
        with open_database(self.database, query_only=True) as conn:
            return fn(DispatchSnapshotRepository(conn))

    async def _run(self, fn: Callable[[DispatchSnapshotRepository], T]) -> T:
        return await asyncio.to_thread(self._query, fn)

    async def get_work_order_details(
        self, work_order_id: int, organization_id: int
    ) -> Optional[WorkOrderContext]:
        return await self._run(
            lambda repo: repo.get_work_order_details(work_order_id, organization_id)
        )

    async def get_eligible_technicians(self, organization_id: int) -> list[TechnicianCandidate]:
        return await self._run(lambda repo: repo.get_eligible_technicians(organization_id))

    async def get_eligible_vendors(self, organization_id: int) -> list[VendorCandidate]:
        return await self._run(lambda repo: repo.get_eligible_vendors(organization_id))

    async def get_required_skills_for_category(self, category_id: int) -> Optional[list[str]]:
        return await self._run(lambda repo: repo.get_required_skills_for_category(category_id))

    async def get_past_feedback_score(
        self, feedback_key: int, window_days: int = 90
    ) -> Optional[float]:
        return await self._run(
            lambda repo: repo.get_past_feedback_score(feedback_key, window_days, self.as_of)
        )
