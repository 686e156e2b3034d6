"""
Candidate scoring: combines factor sub-scores into a single confidence score
and a human-readable reasoning string.

Technician score (weights sum to 1.0)
-------------------------------------
    confidence = min(1.0,
          skills_match       * 0.3
        + location_proximity * 0.2
        + workload           * 0.2
        + availability       * 0.1
        + past_performance   * 0.2
    )

Vendor score (weights sum to 1.0)
---------------------------------
    confidence = min(1.0,
          specialty_match * 0.3
        + cost_rating     * 0.2
        + response_time   * 0.2
        + reliability     * 0.3
    )

The two weight vectors differ in shape; keep them separate.
The clamp can never bind with the current weights but stays in place for
future weight changes.

Reasoning
---------
One clause per factor strictly above ``REASONING_THRESHOLD`` (0.7), joined
with ", ".  If nothing clears the bar the reasoning is "Available technician"
or "Available vendor".  The availability factor never appears in the
reasoning.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional, Sequence

from fm_dispatch.dispatch import factors as f
from fm_dispatch.models.candidate import TechnicianCandidate, VendorCandidate
from fm_dispatch.models.recommendation import (
    TechnicianRecommendation,
    VendorRecommendation,
)
from fm_dispatch.models.work_order import WorkOrderContext

TECHNICIAN_WEIGHTS: dict[str, float] = {
    "skills_match":       0.3,
    "location_proximity": 0.2,
    "workload":           0.2,
    "availability":       0.1,
    "past_performance":   0.2,
}

VENDOR_WEIGHTS: dict[str, float] = {
    "specialty_match": 0.3,
    "cost_rating":     0.2,
    "response_time":   0.2,
    "reliability":     0.3,
}

REASONING_THRESHOLD = 0.7

# Clause order is fixed; it is the order the clauses appear in the output.
_TECHNICIAN_CLAUSES: tuple[tuple[str, str], ...] = (
    ("skills_match",       "Strong skills match"),
    ("location_proximity", "Close to work site"),
    ("workload",           "Low current workload"),
    ("past_performance",   "Good past performance"),
)

_VENDOR_CLAUSES: tuple[tuple[str, str], ...] = (
    ("specialty_match", "Specialty matches"),
    ("reliability",     "High reliability"),
    ("response_time",   "Fast response time"),
    ("cost_rating",     "Good value"),
)


@dataclass(frozen=True)
class TechnicianFactors:
    """Factor set for one technician.  Every field is in [0, 1]."""

    skills_match:       float
    location_proximity: float
    workload:           float
    availability:       float
    past_performance:   float

    @property
    def total(self) -> float:
        """Weighted sum of the factors (unclamped)."""
        return (
            self.skills_match         * TECHNICIAN_WEIGHTS["skills_match"]
            + self.location_proximity * TECHNICIAN_WEIGHTS["location_proximity"]
            + self.workload           * TECHNICIAN_WEIGHTS["workload"]
            + self.availability       * TECHNICIAN_WEIGHTS["availability"]
            + self.past_performance   * TECHNICIAN_WEIGHTS["past_performance"]
        )

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class VendorFactors:
    """Factor set for one vendor.  Every field is in [0, 1]."""

    specialty_match: float
    cost_rating:     float
    response_time:   float
    reliability:     float

    @property
    def total(self) -> float:
        """Weighted sum of the factors (unclamped)."""
        return (
            self.specialty_match * VENDOR_WEIGHTS["specialty_match"]
            + self.cost_rating   * VENDOR_WEIGHTS["cost_rating"]
            + self.response_time * VENDOR_WEIGHTS["response_time"]
            + self.reliability   * VENDOR_WEIGHTS["reliability"]
        )

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def confidence(total: float) -> float:
    """Clamp a weighted total into [0, 1]."""
    return max(0.0, min(total, 1.0))


# ── Technicians ───────────────────────────────────────────────────────────────

def compute_technician_factors(
    candidate:       TechnicianCandidate,
    work_order:      WorkOrderContext,
    required_skills: Optional[Sequence[str]],
    avg_feedback:    Optional[float],
) -> TechnicianFactors:
    """Compute all technician factors from already-fetched lookup results.

    Args:
        candidate:       The technician.
        work_order:      The work order being dispatched.
        required_skills: Skills required by the asset category (``None`` if
            unavailable or the lookup failed).
        avg_feedback:    Average feedback over the trailing window (``None``
            if no history or the lookup failed).
    """
    return TechnicianFactors(
        skills_match=f.skills_match(candidate.specializations, required_skills),
        location_proximity=f.location_proximity(
            candidate.current_location,
            work_order.asset_location,
            work_order.site_name,
        ),
        workload=f.workload_score(candidate.current_workload),
        availability=f.availability_score(candidate.is_available),
        past_performance=f.past_performance(avg_feedback),
    )


def build_technician_reasoning(factors: TechnicianFactors) -> str:
    """Explain a technician score, e.g. "Strong skills match, Low current workload"."""
    values = factors.as_dict()
    reasons = [text for name, text in _TECHNICIAN_CLAUSES if values[name] > REASONING_THRESHOLD]
    return ", ".join(reasons) or "Available technician"


def score_technician(
    candidate:       TechnicianCandidate,
    work_order:      WorkOrderContext,
    required_skills: Optional[Sequence[str]],
    avg_feedback:    Optional[float],
) -> TechnicianRecommendation:
    """Score one technician and package it for ranking."""
    tech_factors = compute_technician_factors(
        candidate, work_order, required_skills, avg_feedback
    )
    return TechnicianRecommendation(
        technician_id=candidate.technician_id,
        confidence_score=confidence(tech_factors.total),
        factors=tech_factors.as_dict(),
        reasoning=build_technician_reasoning(tech_factors),
    )


# ── Vendors ───────────────────────────────────────────────────────────────────

def compute_vendor_factors(
    candidate:  VendorCandidate,
    work_order: WorkOrderContext,
) -> VendorFactors:
    """Compute all vendor factors.  Vendors need no auxiliary lookups."""
    return VendorFactors(
        specialty_match=f.specialty_match(candidate.specialty, work_order.category_name),
        cost_rating=f.cost_rating(candidate.average_rating),
        response_time=f.response_time_score(candidate.service_level_agreement),
        reliability=f.reliability(candidate.average_rating),
    )


def build_vendor_reasoning(factors: VendorFactors) -> str:
    """Explain a vendor score, e.g. "Specialty matches, High reliability"."""
    values = factors.as_dict()
    reasons = [text for name, text in _VENDOR_CLAUSES if values[name] > REASONING_THRESHOLD]
    return ", ".join(reasons) or "Available vendor"


def score_vendor(
    candidate:  VendorCandidate,
    work_order: WorkOrderContext,
) -> VendorRecommendation:
    """Score one vendor, including the cost and response-time estimates."""
    vendor_factors = compute_vendor_factors(candidate, work_order)
    return VendorRecommendation(
        vendor_id=candidate.vendor_id,
        confidence_score=confidence(vendor_factors.total),
        factors=vendor_factors.as_dict(),
        estimated_cost=f.estimate_vendor_cost(candidate.average_rating),
        estimated_response_time_hours=f.estimate_response_hours(
            candidate.service_level_agreement
        ),
        reasoning=build_vendor_reasoning(vendor_factors),
    )
