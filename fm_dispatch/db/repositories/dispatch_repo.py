"""
Snapshot queries for the dispatch engine.

``DispatchSnapshotRepository`` answers the five questions the engine asks
about a work order: the work order itself, the eligible technicians and
vendors, the category's required skills, and a technician's recent
feedback average.  It is synchronous; ``SqliteSnapshotProvider`` adapts it
to the engine's async provider contract.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fm_dispatch.db.repositories.base import BaseRepository
from fm_dispatch.models.candidate import (
    TechnicianCandidate,
    VendorCandidate,
    parse_skill_list,
)
from fm_dispatch.models.work_order import WorkOrderContext
from fm_dispatch.utils.time_utils import to_iso, window_start

logger = logging.getLogger(__name__)

# Statuses that count towards a technician's current workload.
OPEN_ASSIGNMENT_STATUSES: tuple[str, ...] = ("assigned", "in_progress")


class DispatchSnapshotRepository(BaseRepository):
    """Read-only access to the data a dispatch recommendation needs."""

    def get_work_order_details(
        self, work_order_id: int, organization_id: int
    ) -> Optional[WorkOrderContext]:
        """Return the work order with its asset category, location and site.

        The site comes from the work order, falling back to the asset's site.

        Returns:
            ``WorkOrderContext``, or ``None`` if the work order does not exist
            for this organization.
        """
        row = self.fetchone(
            """
            SELECT wo.work_order_id,
                   wo.organization_id,
                   a.asset_category_id,
                   ac.name                AS category_name,
                   a.location_description AS asset_location,
                   s.name                 AS site_name
            FROM work_orders wo
            LEFT JOIN assets a            ON wo.asset_id = a.asset_id
            LEFT JOIN asset_categories ac ON a.asset_category_id = ac.category_id
            LEFT JOIN sites s             ON s.site_id = COALESCE(wo.site_id, a.site_id)
            WHERE wo.work_order_id = ? AND wo.organization_id = ?;
            """,
            (work_order_id, organization_id),
        )
        if row is None:
            return None
        return WorkOrderContext(**dict(row))

    def get_eligible_technicians(self, organization_id: int) -> list[TechnicianCandidate]:
        """Return available technicians with their current workload.

        Ordered by workload ascending, then technician_id, so ties in the
        final ranking resolve deterministically.
        """
        placeholders = ", ".join("?" for _ in OPEN_ASSIGNMENT_STATUSES)
        rows = self.fetchall(
            f"""
            SELECT t.technician_id,
                   t.display_name,
                   t.specializations,
                   t.current_location,
                   t.is_available,
                   (SELECT COUNT(*) FROM work_orders wo
                    WHERE wo.assigned_technician_id = t.technician_id
                      AND wo.status IN ({placeholders})) AS current_workload
            FROM technicians t
            WHERE t.organization_id = ? AND t.is_available = 1
            ORDER BY current_workload ASC, t.technician_id ASC;
            """,
            (*OPEN_ASSIGNMENT_STATUSES, organization_id),
        )
        return [
            TechnicianCandidate(
                technician_id=row["technician_id"],
                display_name=row["display_name"],
                specializations=row["specializations"],
                current_location=row["current_location"],
                current_workload=row["current_workload"],
                is_available=bool(row["is_available"]),
            )
            for row in rows
        ]

    def get_eligible_vendors(self, organization_id: int) -> list[VendorCandidate]:
        """Return active vendors, best-rated first (unrated last)."""
        rows = self.fetchall(
            """
            SELECT vendor_id, display_name, specialty, average_rating,
                   service_level_agreement, is_active
            FROM vendors
            WHERE organization_id = ? AND is_active = 1
            ORDER BY average_rating DESC, vendor_id ASC;
            """,
            (organization_id,),
        )
        return [
            VendorCandidate(
                vendor_id=row["vendor_id"],
                display_name=row["display_name"],
                specialty=row["specialty"],
                average_rating=row["average_rating"],
                service_level_agreement=row["service_level_agreement"],
                is_active=bool(row["is_active"]),
            )
            for row in rows
        ]

    def get_required_skills_for_category(self, category_id: int) -> Optional[list[str]]:
        """Return the category's required skills, or ``None`` if unknown."""
        raw = self.fetchvalue(
            "SELECT required_skills FROM asset_categories WHERE category_id = ?;",
            (category_id,),
        )
        return parse_skill_list(raw)

    def get_past_feedback_score(
        self,
        technician_id: int,
        window_days: int = 90,
        as_of: datetime | None = None,
    ) -> Optional[float]:
        """Average feedback over the technician's recently completed work orders.

        ``completed_at`` is compared with ``julianday()`` so space-separated and
        date-only timestamps are windowed the same as ISO ``...T...Z`` ones.
        Each completed order in the window scores the mean of its feedback
        labels (positive 1.0, negative 0.0, other 0.5), or 0.5 if it has no
        feedback.  The result is the mean of those per-order scores.

        Args:
            technician_id: Technician whose history to read.
            window_days:   Trailing window length.
            as_of:         End of the window (defaults to now, UTC).

        Returns:
            Average in [0, 1], or ``None`` when no completed orders qualify.
        """
        since = to_iso(window_start(window_days, as_of))
        avg = self.fetchvalue(
            """
            SELECT AVG(order_score) AS avg_feedback
            FROM (
                SELECT wo.work_order_id,
                       AVG(CASE
                             WHEN f.user_feedback = 'positive' THEN 1.0
                             WHEN f.user_feedback = 'negative' THEN 0.0
                             ELSE 0.5
                           END) AS order_score
                FROM work_orders wo
                LEFT JOIN work_order_feedback f ON f.work_order_id = wo.work_order_id
                WHERE wo.assigned_technician_id = ?
                  AND wo.status = 'completed'
                  AND julianday(wo.completed_at) >= julianday(?)
                GROUP BY wo.work_order_id
            );
            """,
            (technician_id, since),
        )
        return None if avg is None else float(avg)

