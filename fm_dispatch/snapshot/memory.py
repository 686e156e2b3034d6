"""
In-memory snapshot provider.

Backs the engine with plain Python collections — used by tests and by
callers that already hold the data (e.g. a web layer that fetched it
through its own ORM).  Eligibility filtering (availability / active flag)
happens here, as it would in a database query; pool order is preserved.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

from fm_dispatch.models.candidate import TechnicianCandidate, VendorCandidate
from fm_dispatch.models.work_order import WorkOrderContext


class InMemorySnapshotProvider:
    """Dict-backed ``SnapshotProvider``.

    Args:
        work_orders:     Work orders; looked up by (id, organization).
        technicians:     Technician pool per organization id.
        vendors:         Vendor pool per organization id.
        required_skills: Required skills per asset category id.
        feedback_scores: Average feedback per technician feedback key.
    """

    def __init__(
        self,
        work_orders: Sequence[WorkOrderContext] = (),
        technicians: Mapping[int, Sequence[TechnicianCandidate]] | None = None,
        vendors: Mapping[int, Sequence[VendorCandidate]] | None = None,
        required_skills: Mapping[int, Optional[list[str]]] | None = None,
        feedback_scores: Mapping[int, Optional[float]] | None = None,
    ) -> None:
        self._work_orders = {(wo.work_order_id, wo.organization_id): wo for wo in work_orders}
        self._technicians = dict(technicians or {})
        self._vendors = dict(vendors or {})
        self._required_skills = dict(required_skills or {})
        self._feedback_scores = dict(feedback_scores or {})

    async def get_work_order_details(
        self, work_order_id: int, organization_id: int
    ) -> Optional[WorkOrderContext]:
        return self._work_orders.get((work_order_id, organization_id))

    async def get_eligible_technicians(self, organization_id: int) -> list[TechnicianCandidate]:
        return [t for t in self._technicians.get(organization_id, ()) if t.is_available]

    async def get_eligible_vendors(self, organization_id: int) -> list[VendorCandidate]:
        return [v for v in self._vendors.get(organization_id, ()) if v.is_active]

    async def get_required_skills_for_category(self, category_id: int) -> Optional[list[str]]:
        return self._required_skills.get(category_id)

    async def get_past_feedback_score(
        self, feedback_key: int, window_days: int = 90
    ) -> Optional[float]:
        return self._feedback_scores.get(feedback_key)
