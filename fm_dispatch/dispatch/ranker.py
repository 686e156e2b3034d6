"""
Ranking and assignment selection.

Usage flow
----------
1. rank_candidates(scored)
   -> same objects, confidence_score descending (stable: ties keep snapshot order)

2. determine_best_assignment(ranked_technicians, ranked_vendors)
   -> RecommendedAssignment  (uses index 0 of the *full* ranked pools)

3. top_n(ranked, n=5)
   -> display list handed to the assembler

Decision policy (evaluated in order — first match wins)
--------------------------------------------------------
    1. best technician confidence > 0.7            → technician
    2. best vendor confidence > 0.7                → vendor
    3. technician exists and (no vendor, or
       technician confidence >= vendor confidence) → technician
    4. vendor exists                               → vendor
    5. nothing                                     → NoCandidatesAvailableError

This is not a global argmax: a strong technician (rule 1) wins even when a
vendor scores higher, because internal resources are preferred.
"""

from __future__ import annotations

from typing import Optional, Sequence, TypeVar

from fm_dispatch.errors import NoCandidatesAvailableError
from fm_dispatch.models.recommendation import (
    RecommendedAssignment,
    TechnicianRecommendation,
    VendorRecommendation,
)

STRONG_MATCH_THRESHOLD = 0.7
DEFAULT_TOP_N = 5

ScoredT = TypeVar("ScoredT", TechnicianRecommendation, VendorRecommendation)


def rank_candidates(scored: Sequence[ScoredT]) -> list[ScoredT]:
    """Sort scored candidates by confidence descending.

    ``sorted`` is stable, so candidates with equal scores keep the order the
    snapshot returned them in.  No secondary key is applied.
    """
    return sorted(scored, key=lambda c: -c.confidence_score)


def top_n(ranked: Sequence[ScoredT], n: int = DEFAULT_TOP_N) -> list[ScoredT]:
    """Truncate an already-ranked pool for display."""
    return list(ranked[:n])


def determine_best_assignment(
    technicians: Sequence[TechnicianRecommendation],
    vendors:     Sequence[VendorRecommendation],
    work_order_id: Optional[int] = None,
) -> RecommendedAssignment:
    """Apply the decision policy to the ranked pools.

    Args:
        technicians:   Ranked technicians (index 0 = best).
        vendors:       Ranked vendors (index 0 = best).
        work_order_id: Attached to the error for context only.

    Returns:
        The recommended assignment.

    Raises:
        NoCandidatesAvailableError: If both pools are empty.
    """
    best_tech   = technicians[0] if technicians else None
    best_vendor = vendors[0] if vendors else None

    # Strong technician match: internal resource first
    if best_tech is not None and best_tech.confidence_score > STRONG_MATCH_THRESHOLD:
        return RecommendedAssignment.from_technician(best_tech)

    if best_vendor is not None and best_vendor.confidence_score > STRONG_MATCH_THRESHOLD:
        return RecommendedAssignment.from_vendor(best_vendor)

    # Neither is strong: highest confidence wins, technician on ties
    if best_tech is not None and (
        best_vendor is None or best_tech.confidence_score >= best_vendor.confidence_score
    ):
        return RecommendedAssignment.from_technician(best_tech)

    if best_vendor is not None:
        return RecommendedAssignment.from_vendor(best_vendor)

    raise NoCandidatesAvailableError(work_order_id)
