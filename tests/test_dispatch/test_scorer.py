"""
Tests for fm_dispatch/dispatch/scorer.py.

What we test
------------
TechnicianFactors.total / VendorFactors.total:
  - Follow the weighted formulas; weights each sum to 1.0.

score_technician():
  - Confidence and factor values for a known candidate.
  - Confidence never exceeds 1.0 even with all factors at 1.0.
  - Unavailable technician gets availability 0.0.

build_technician_reasoning() / build_vendor_reasoning():
  - Clauses only for factors strictly above 0.7, in fixed order.
  - Fallback text when nothing clears the threshold.
  - Availability never appears in the reasoning.

score_vendor():
  - Confidence, estimates and reasoning for a known vendor.
"""

from __future__ import annotations

import pytest

from fm_dispatch.dispatch.scorer import (
    TECHNICIAN_WEIGHTS,
    VENDOR_WEIGHTS,
    TechnicianFactors,
    VendorFactors,
    build_technician_reasoning,
    build_vendor_reasoning,
    confidence,
    score_technician,
    score_vendor,
)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _tech_factors(
    skills_match: float = 0.5,
    location_proximity: float = 0.5,
    workload: float = 0.5,
    availability: float = 1.0,
    past_performance: float = 0.5,
) -> TechnicianFactors:
    return TechnicianFactors(
        skills_match=skills_match,
        location_proximity=location_proximity,
        workload=workload,
        availability=availability,
        past_performance=past_performance,
    )


def _vendor_factors(
    specialty_match: float = 0.5,
    cost_rating: float = 0.5,
    response_time: float = 0.5,
    reliability: float = 0.5,
) -> VendorFactors:
    return VendorFactors(
        specialty_match=specialty_match,
        cost_rating=cost_rating,
        response_time=response_time,
        reliability=reliability,
    )


# ── Weights and totals ────────────────────────────────────────────────────────

class TestWeights:
    def test_weights_sum_to_one(self):
        assert sum(TECHNICIAN_WEIGHTS.values()) == pytest.approx(1.0)
        assert sum(VENDOR_WEIGHTS.values()) == pytest.approx(1.0)

    def test_technician_total_formula(self):
        fs = _tech_factors(0.5, 1.0, 0.8, 1.0, 0.75)
        expected = 0.5 * 0.3 + 1.0 * 0.2 + 0.8 * 0.2 + 1.0 * 0.1 + 0.75 * 0.2
        assert fs.total == pytest.approx(expected)

    def test_vendor_total_formula(self):
        fs = _vendor_factors(1.0, 0.9, 0.6, 0.9)
        assert fs.total == pytest.approx(1.0 * 0.3 + 0.9 * 0.2 + 0.6 * 0.2 + 0.9 * 0.3)

    def test_confidence_clamps(self):
        assert confidence(1.3) == 1.0
        assert confidence(-0.1) == 0.0
        assert confidence(0.42) == 0.42


# ── Technician scoring ────────────────────────────────────────────────────────

class TestScoreTechnician:
    def test_known_candidate(self, make_technician, sample_work_order):
        tech = make_technician(1, specializations=["HVAC", "electrical"], current_workload=1)
        rec = score_technician(tech, sample_work_order, ["HVAC", "refrigerant"], 0.75)

        assert rec.technician_id == 1
        assert rec.factors == {
            "skills_match":       pytest.approx(0.5),
            "location_proximity": 1.0,
            "workload":           0.8,
            "availability":       1.0,
            "past_performance":   0.75,
        }
        assert rec.confidence_score == pytest.approx(0.76)
        assert rec.reasoning == "Close to work site, Low current workload, Good past performance"

    def test_all_factors_max_confidence_is_one(self, make_technician, sample_work_order):
        tech = make_technician(1, specializations=["HVAC", "refrigerant"])
        rec = score_technician(tech, sample_work_order, ["HVAC", "refrigerant"], 1.0)
        assert rec.confidence_score == pytest.approx(1.0)
        assert rec.confidence_score <= 1.0

    def test_unavailable_technician_scores_zero_availability(
        self, make_technician, sample_work_order
    ):
        tech = make_technician(1, is_available=False)
        rec = score_technician(tech, sample_work_order, None, None)
        assert rec.factors["availability"] == 0.0

    def test_missing_lookups_use_neutral_defaults(self, make_technician, sample_work_order):
        tech = make_technician(1)
        rec = score_technician(tech, sample_work_order, None, None)
        assert rec.factors["skills_match"] == 0.5
        assert rec.factors["past_performance"] == 0.5


class TestTechnicianReasoning:
    def test_only_skills_clears_threshold(self):
        fs = _tech_factors(skills_match=0.9, location_proximity=0.3, workload=0.6,
                           availability=1.0, past_performance=0.5)
        assert build_technician_reasoning(fs) == "Strong skills match"

    def test_threshold_is_strict(self):
        fs = _tech_factors(skills_match=0.7, location_proximity=0.7, workload=0.7,
                           past_performance=0.7)
        assert build_technician_reasoning(fs) == "Available technician"

    def test_availability_never_listed(self):
        fs = _tech_factors(availability=1.0)
        assert build_technician_reasoning(fs) == "Available technician"

    def test_clause_order_is_fixed(self):
        fs = _tech_factors(1.0, 1.0, 1.0, 1.0, 1.0)
        assert build_technician_reasoning(fs) == (
            "Strong skills match, Close to work site, Low current workload, "
            "Good past performance"
        )


# ── Vendor scoring ────────────────────────────────────────────────────────────

class TestScoreVendor:
    def test_known_vendor(self, make_vendor, sample_work_order):
        vendor = make_vendor(20, average_rating=4.5, service_level_agreement="4 hour response")
        rec = score_vendor(vendor, sample_work_order)

        assert rec.vendor_id == 20
        assert rec.confidence_score == pytest.approx(0.87)
        assert rec.estimated_cost == pytest.approx(157.5)
        assert rec.estimated_response_time_hours == 4
        assert rec.reasoning == "Specialty matches, High reliability, Good value"

    def test_unrated_vendor(self, make_vendor, sample_work_order):
        vendor = make_vendor(22, specialty="electrical contractor",
                             average_rating=None, service_level_agreement="same day")
        rec = score_vendor(vendor, sample_work_order)

        assert rec.factors == {
            "specialty_match": 0.3,
            "cost_rating":     pytest.approx(0.6),
            "response_time":   0.4,
            "reliability":     0.0,
        }
        assert rec.confidence_score == pytest.approx(0.29)
        assert rec.estimated_cost == pytest.approx(225.0)
        assert rec.estimated_response_time_hours == 8
        assert rec.reasoning == "Available vendor"


class TestVendorReasoning:
    def test_clause_order_is_fixed(self):
        fs = _vendor_factors(1.0, 1.0, 1.0, 1.0)
        assert build_vendor_reasoning(fs) == (
            "Specialty matches, High reliability, Fast response time, Good value"
        )

    def test_fallback(self):
        assert build_vendor_reasoning(_vendor_factors()) == "Available vendor"
