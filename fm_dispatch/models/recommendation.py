"""
Recommendation output models.

``TechnicianRecommendation`` and ``VendorRecommendation`` are the scored
candidates returned to the caller. They are kept as two distinct models
because their factor sets mean different things; code that needs to treat
them uniformly goes through ``RecommendedAssignment``.

``DispatchRecommendation`` is the assembled response::

    {
      "work_order_id": 42,
      "recommendations": {"technicians": [...], "vendors": [...]},
      "recommended_assignment": {"type": "technician", "id": 7,
                                 "confidence_score": 0.82, "reasoning": "..."}
    }
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

AssigneeType = Literal["technician", "vendor"]


def _validate_unit_interval(v: float) -> float:
    if not 0.0 <= v <= 1.0:
        raise ValueError(f"confidence_score must be in [0, 1], got {v}.")
    return v


class TechnicianRecommendation(BaseModel):
    """A scored technician.

    Attributes:
        technician_id:    Technician PK.
        confidence_score: Weighted factor score in [0, 1].
        factors:          ``skills_match``, ``location_proximity``,
            ``workload``, ``availability``, ``past_performance``.
        reasoning:        Human-readable explanation.
    """

    model_config = ConfigDict(frozen=True)

    technician_id: int
    confidence_score: float
    factors: dict[str, float]
    reasoning: str

    @field_validator("confidence_score")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        return _validate_unit_interval(v)


class VendorRecommendation(BaseModel):
    """A scored vendor.

    Attributes:
        vendor_id:                     Vendor PK.
        confidence_score:              Weighted factor score in [0, 1].
        factors:                       ``specialty_match``, ``cost_rating``,
            ``response_time``, ``reliability``.
        estimated_cost:                Synthetic hourly-rate proxy.
        estimated_response_time_hours: Hours derived from the SLA text.
        reasoning:                     Human-readable explanation.
    """

    model_config = ConfigDict(frozen=True)

    vendor_id: int
    confidence_score: float
    factors: dict[str, float]
    estimated_cost: float
    estimated_response_time_hours: int
    reasoning: str

    @field_validator("confidence_score")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        return _validate_unit_interval(v)


class RecommendedAssignment(BaseModel):
    """The single assignee chosen by the decision policy."""

    model_config = ConfigDict(frozen=True)

    type: AssigneeType
    id: int
    confidence_score: float
    reasoning: str

    @classmethod
    def from_technician(cls, rec: TechnicianRecommendation) -> "RecommendedAssignment":
        return cls(
            type="technician",
            id=rec.technician_id,
            confidence_score=rec.confidence_score,
            reasoning=rec.reasoning,
        )

    @classmethod
    def from_vendor(cls, rec: VendorRecommendation) -> "RecommendedAssignment":
        return cls(
            type="vendor",
            id=rec.vendor_id,
            confidence_score=rec.confidence_score,
            reasoning=rec.reasoning,
        )


class DispatchRecommendation(BaseModel):
    """Ranked candidates plus the recommended assignment for one work order.

    Attributes:
        work_order_id:          The work order being dispatched.
        technicians:            Top-N technicians, confidence descending.
        vendors:                Top-N vendors, confidence descending.
        recommended_assignment: Output of the decision policy.
    """

    model_config = ConfigDict(frozen=True)

    work_order_id: int
    technicians: list[TechnicianRecommendation]
    vendors: list[VendorRecommendation]
    recommended_assignment: RecommendedAssignment

    def to_dict(self) -> dict[str, Any]:
        """Return the response in its wire shape."""
        return {
            "work_order_id": self.work_order_id,
            "recommendations": {
                "technicians": [t.model_dump() for t in self.technicians],
                "vendors":     [v.model_dump() for v in self.vendors],
            },
            "recommended_assignment": self.recommended_assignment.model_dump(),
        }
