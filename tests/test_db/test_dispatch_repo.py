"""
Tests for DispatchSnapshotRepository against the sample seed document.

What we test
------------
get_work_order_details():  joins category, asset location and site; org scoping.
get_eligible_technicians(): availability filter, workload count, ordering.
get_eligible_vendors():     active filter, rating ordering (unrated last).
get_required_skills_for_category(): JSON parsing, missing category.
get_past_feedback_score():  per-order averaging, window, no history.
"""

from __future__ import annotations

import pytest

from fm_dispatch.db.repositories.dispatch_repo import DispatchSnapshotRepository


@pytest.fixture
def repo(seeded_db) -> DispatchSnapshotRepository:
    return DispatchSnapshotRepository(seeded_db)


class TestWorkOrderDetails:
    def test_joins_category_location_and_site(self, repo):
        wo = repo.get_work_order_details(42, 1)
        assert wo is not None
        assert wo.asset_category_id == 7
        assert wo.category_name == "HVAC"
        assert wo.asset_location == "Building A Floor 2"
        assert wo.site_name == "North Campus"

    def test_work_order_without_asset(self, repo):
        wo = repo.get_work_order_details(43, 1)
        assert wo is not None
        assert wo.asset_category_id is None
        assert wo.asset_location is None

    def test_wrong_organization_is_none(self, repo):
        assert repo.get_work_order_details(42, 2) is None

    def test_missing_is_none(self, repo):
        assert repo.get_work_order_details(999, 1) is None


class TestEligibleTechnicians:
    def test_available_only_and_org_scoped(self, repo):
        ids = [t.technician_id for t in repo.get_eligible_technicians(1)]
        assert sorted(ids) == [1, 2]

    def test_workload_counts_open_assignments(self, repo):
        techs = {t.technician_id: t for t in repo.get_eligible_technicians(1)}
        # 43 is assigned; 44-46 are completed and do not count
        assert techs[1].current_workload == 1
        assert techs[2].current_workload == 0

    def test_ordered_by_workload_then_id(self, repo):
        assert [t.technician_id for t in repo.get_eligible_technicians(1)] == [2, 1]

    def test_specializations_parsed(self, repo):
        techs = {t.technician_id: t for t in repo.get_eligible_technicians(1)}
        assert techs[1].specializations == ["HVAC", "electrical"]
        assert techs[2].specializations == []
        assert techs[1].feedback_key == 1


class TestEligibleVendors:
    def test_active_only_rating_desc_unrated_last(self, repo):
        assert [v.vendor_id for v in repo.get_eligible_vendors(1)] == [20, 22]

    def test_other_org_empty(self, repo):
        assert repo.get_eligible_vendors(2) == []


class TestRequiredSkills:
    def test_parsed_list(self, repo):
        assert repo.get_required_skills_for_category(7) == ["HVAC", "refrigerant"]

    def test_null_column_is_none(self, repo):
        assert repo.get_required_skills_for_category(8) is None

    def test_missing_category_is_none(self, repo):
        assert repo.get_required_skills_for_category(999) is None


class TestPastFeedbackScore:
    def test_per_order_average_within_window(self, repo, seed_as_of):
        # 44 → mean(1.0, 1.0) = 1.0 ; 46 → no feedback = 0.5 ; 45 outside window
        score = repo.get_past_feedback_score(1, window_days=90, as_of=seed_as_of)
        assert score == pytest.approx(0.75)

    def test_wide_window_includes_old_order(self, repo, seed_as_of):
        # 45 → 0.0 joins: mean(1.0, 0.0, 0.5)
        score = repo.get_past_feedback_score(1, window_days=365, as_of=seed_as_of)
        assert score == pytest.approx(0.5)

    def test_no_history_is_none(self, repo, seed_as_of):
        assert repo.get_past_feedback_score(2, as_of=seed_as_of) is None

    @pytest.mark.parametrize("completed_at", ["2025-11-02 12:00:00", "2025-11-02"])
    def test_boundary_day_in_other_timestamp_forms(self, seeded_db, repo, seed_as_of, completed_at):
        # 90 days before seed_as_of is 2025-11-02T00:00:00Z
        seeded_db.execute(
            "INSERT INTO work_orders (work_order_id, organization_id, status, "
            "assigned_technician_id, completed_at) VALUES (47, 1, 'completed', 2, ?);",
            (completed_at,),
        )
        assert repo.get_past_feedback_score(2, window_days=90, as_of=seed_as_of) == 0.5


class TestBaseHelpers:
    def test_fetchvalue_returns_scalar(self, repo):
        assert repo.fetchvalue("SELECT name FROM sites WHERE site_id = ?", (10,)) == "North Campus"

    def test_fetchvalue_no_row_is_none(self, repo):
        assert repo.fetchvalue("SELECT name FROM sites WHERE site_id = ?", (999,)) is None
