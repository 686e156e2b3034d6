"""
Dispatch recommendation engine: snapshot → factors → scores → ranking →
decision → assembled response.

Only the snapshot reads suspend; scoring is synchronous and pure.  Reads
that are independent of each other run concurrently:

  1. work order                        (must exist, else WorkOrderNotFoundError)
  2. technician pool ┐
     vendor pool     ├ gathered together
     required skills ┘ (through with_default → None on failure)
  3. one feedback lookup per technician, bounded by a semaphore
     (through with_default → None on failure)

The engine imposes no timeouts; cancellation belongs to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fm_dispatch.config import AppConfig
from fm_dispatch.dispatch.factors import with_default
from fm_dispatch.dispatch.ranker import (
    determine_best_assignment,
    rank_candidates,
    top_n,
)
from fm_dispatch.dispatch.scorer import score_technician, score_vendor
from fm_dispatch.errors import WorkOrderNotFoundError
from fm_dispatch.models.candidate import TechnicianCandidate
from fm_dispatch.models.recommendation import DispatchRecommendation
from fm_dispatch.models.work_order import WorkOrderContext
from fm_dispatch.snapshot.provider import SnapshotProvider

logger = logging.getLogger(__name__)


class DispatchEngine:
    """Scores and ranks candidates for a work order and picks one assignee.

    Attributes:
        provider: Source of snapshot data.
        config:   Application configuration (``dispatch`` section is used).
    """

    def __init__(self, provider: SnapshotProvider, config: Optional[AppConfig] = None) -> None:
        self.provider = provider
        self.config = config or AppConfig()

    async def recommend(self, work_order_id: int, organization_id: int) -> DispatchRecommendation:
        """Build the dispatch recommendation for one work order.

        Raises:
            WorkOrderNotFoundError:     Work order missing for this organization.
            NoCandidatesAvailableError: No technician or vendor available.
        """
        work_order = await self.provider.get_work_order_details(work_order_id, organization_id)
        if work_order is None:
            raise WorkOrderNotFoundError(work_order_id, organization_id)

        technicians, vendors, required_skills = await asyncio.gather(
            self.provider.get_eligible_technicians(organization_id),
            self.provider.get_eligible_vendors(organization_id),
            self._required_skills(work_order),
        )

        # Providers filter already; re-check so a lax provider cannot leak
        # unavailable or inactive candidates into the pools.
        technicians = [t for t in technicians if t.is_available]
        vendors = [v for v in vendors if v.is_active]

        feedback = await self._feedback_scores(technicians)

        scored_techs = [
            score_technician(tech, work_order, required_skills, avg)
            for tech, avg in zip(technicians, feedback)
        ]
        scored_vendors = [score_vendor(vendor, work_order) for vendor in vendors]

        ranked_techs = rank_candidates(scored_techs)
        ranked_vendors = rank_candidates(scored_vendors)

        # Decision uses the full ranked pools; truncation is display-only.
        assignment = determine_best_assignment(ranked_techs, ranked_vendors, work_order_id)

        n = self.config.dispatch.top_n
        logger.info(
            "Dispatch wo=%d org=%d | technicians=%d vendors=%d | recommended %s %d (%.3f)",
            work_order_id, organization_id, len(ranked_techs), len(ranked_vendors),
            assignment.type, assignment.id, assignment.confidence_score,
        )
        return DispatchRecommendation(
            work_order_id=work_order_id,
            technicians=top_n(ranked_techs, n),
            vendors=top_n(ranked_vendors, n),
            recommended_assignment=assignment,
        )

    def recommend_sync(self, work_order_id: int, organization_id: int) -> DispatchRecommendation:
        """Blocking wrapper around ``recommend()`` for CLI use."""
        return asyncio.run(self.recommend(work_order_id, organization_id))

    # ── Auxiliary lookups ─────────────────────────────────────────────────────

    async def _required_skills(self, work_order: WorkOrderContext) -> Optional[list[str]]:
        if work_order.asset_category_id is None:
            return None
        lookup = with_default(
            self.provider.get_required_skills_for_category,
            None,
            label="required_skills",
        )
        return await lookup(work_order.asset_category_id)

    async def _feedback_scores(
        self, technicians: list[TechnicianCandidate]
    ) -> list[Optional[float]]:
        """Fetch past-performance averages concurrently, in pool order."""
        semaphore = asyncio.Semaphore(self.config.dispatch.lookup_concurrency)
        window_days = self.config.dispatch.feedback_window_days
        lookup = with_default(
            self.provider.get_past_feedback_score,
            None,
            label="past_performance",
        )

        async def _one(tech: TechnicianCandidate) -> Optional[float]:
            async with semaphore:
                return await lookup(tech.feedback_key, window_days)

        return list(await asyncio.gather(*(_one(t) for t in technicians)))
