"""
Data snapshot provider contract.

The dispatch engine does not own storage.  It reads a work order, its
candidate pools and two kinds of auxiliary data through a
``SnapshotProvider``.  All methods are coroutines so implementations can
perform real I/O; the engine issues independent calls concurrently.

Contract
--------
get_work_order_details(work_order_id, organization_id)
    -> WorkOrderContext | None            (None = not found for this org)
get_eligible_technicians(organization_id)
    -> list[TechnicianCandidate]          (already filtered to available)
get_eligible_vendors(organization_id)
    -> list[VendorCandidate]              (already filtered to active)
get_required_skills_for_category(category_id)
    -> list[str] | None
get_past_feedback_score(feedback_key, window_days=90)
    -> float | None

List order is significant: it is the tie-break order of the final ranking.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from fm_dispatch.models.candidate import TechnicianCandidate, VendorCandidate
from fm_dispatch.models.work_order import WorkOrderContext


@runtime_checkable
class SnapshotProvider(Protocol):
    """Read-only source of dispatch snapshot data."""

    async def get_work_order_details(
        self, work_order_id: int, organization_id: int
    ) -> Optional[WorkOrderContext]: ...

    async def get_eligible_technicians(
        self, organization_id: int
    ) -> list[TechnicianCandidate]: ...

    async def get_eligible_vendors(self, organization_id: int) -> list[VendorCandidate]: ...

    async def get_required_skills_for_category(
        self, category_id: int
    ) -> Optional[list[str]]: ...

    async def get_past_feedback_score(
        self, feedback_key: int, window_days: int = 90
    ) -> Optional[float]: ...
