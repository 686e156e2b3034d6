"""
Failures that cross the dispatch engine boundary.

Only two conditions abort a recommendation request:

  - ``WorkOrderNotFoundError``     — the work order does not exist for the
                                     requesting organization.
  - ``NoCandidatesAvailableError`` — both candidate pools are empty after
                                     eligibility filtering.

Per-candidate lookup failures (required skills, feedback history) never
surface here; they are absorbed by ``fm_dispatch.dispatch.factors.with_default``.
"""

from __future__ import annotations

NO_CANDIDATES_MESSAGE = "No suitable technicians or vendors available for assignment"


class DispatchError(RuntimeError):
    """Base class for recommendation request failures."""


class WorkOrderNotFoundError(DispatchError, LookupError):
    """Raised when the work order is missing for the given organization.

    Attributes:
        work_order_id:   The requested work order.
        organization_id: The organization the request was scoped to.
    """

    def __init__(self, work_order_id: int, organization_id: int) -> None:
        self.work_order_id   = work_order_id
        self.organization_id = organization_id
        super().__init__(
            f"Work order {work_order_id} not found for organization {organization_id}."
        )


class NoCandidatesAvailableError(DispatchError):
    """Raised when neither a technician nor a vendor can be recommended."""

    def __init__(self, work_order_id: int | None = None) -> None:
        self.work_order_id = work_order_id
        super().__init__(NO_CANDIDATES_MESSAGE)
