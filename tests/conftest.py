"""
Shared pytest fixtures for the fm-dispatch test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``sample_seed_document`` / ``seeded_db``: a small organization with
    technicians, vendors and work-order history, loaded into SQLite.
  - Sample domain object factories for use in multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generator

import pytest

from fm_dispatch.db.connection import get_connection
from fm_dispatch.db.repositories.seed_repo import SnapshotSeedRepository
from fm_dispatch.db.schema import apply_schema
from fm_dispatch.models.candidate import TechnicianCandidate, VendorCandidate
from fm_dispatch.models.work_order import WorkOrderContext

# Fixed "now" for feedback-window queries against the seed document.
SEED_AS_OF = datetime(2026, 1, 31, tzinfo=timezone.utc)


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Foreign key enforcement is ON. Schema is applied idempotently.
    Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def sample_seed_document() -> dict[str, Any]:
    """One organization (1) with a second (2) to check scoping.

    Work order 42 is an HVAC job in "Building A Floor 2" at "North Campus".
    Technician 1 has one assigned order (43) and two completed orders in the
    window (44: two positive labels, 46: no feedback) plus one old negative
    order (45) outside it.
    """
    return {
        "organizations": [
            {"organization_id": 1, "name": "Acme FM"},
            {"organization_id": 2, "name": "Other Org"},
        ],
        "sites": [
            {"site_id": 10, "organization_id": 1, "name": "North Campus"},
        ],
        "asset_categories": [
            {"category_id": 7, "name": "HVAC", "required_skills": ["HVAC", "refrigerant"]},
            {"category_id": 8, "name": "Plumbing", "required_skills": None},
        ],
        "assets": [
            {
                "asset_id": 100, "organization_id": 1, "asset_category_id": 7,
                "site_id": 10, "name": "Rooftop unit 3",
                "location_description": "Building A Floor 2",
            },
        ],
        "technicians": [
            {
                "technician_id": 1, "organization_id": 1, "display_name": "Ana",
                "specializations": ["HVAC", "electrical"],
                "current_location": "Building A Floor 2", "is_available": True,
            },
            {
                "technician_id": 2, "organization_id": 1, "display_name": "Ben",
                "specializations": [], "current_location": "Warehouse",
                "is_available": True,
            },
            {
                "technician_id": 3, "organization_id": 1, "display_name": "Cy",
                "specializations": ["HVAC"], "is_available": False,
            },
            {
                "technician_id": 4, "organization_id": 2, "display_name": "Dee",
                "specializations": ["HVAC"], "is_available": True,
            },
        ],
        "vendors": [
            {
                "vendor_id": 20, "organization_id": 1, "display_name": "CoolAir",
                "specialty": "HVAC services", "average_rating": 4.5,
                "service_level_agreement": "4 hour response", "is_active": True,
            },
            {
                "vendor_id": 21, "organization_id": 1, "display_name": "Old Pipes",
                "specialty": "Plumbing", "average_rating": 3.0,
                "service_level_agreement": "24 hour", "is_active": False,
            },
            {
                "vendor_id": 22, "organization_id": 1, "display_name": "Sparky",
                "specialty": "electrical contractor", "average_rating": None,
                "service_level_agreement": "same day", "is_active": True,
            },
        ],
        "work_orders": [
            {"work_order_id": 42, "organization_id": 1, "title": "No cooling",
             "asset_id": 100, "status": "open"},
            {"work_order_id": 43, "organization_id": 1, "status": "assigned",
             "assigned_technician_id": 1},
            {"work_order_id": 44, "organization_id": 1, "status": "completed",
             "assigned_technician_id": 1, "completed_at": "2026-01-15T10:00:00Z"},
            {"work_order_id": 45, "organization_id": 1, "status": "completed",
             "assigned_technician_id": 1, "completed_at": "2025-06-01T00:00:00Z"},
            {"work_order_id": 46, "organization_id": 1, "status": "completed",
             "assigned_technician_id": 1, "completed_at": "2026-01-20T10:00:00Z"},
        ],
        "work_order_feedback": [
            {"work_order_id": 44, "user_feedback": "positive"},
            {"work_order_id": 44, "user_feedback": "positive"},
            {"work_order_id": 45, "user_feedback": "negative"},
        ],
    }


@pytest.fixture
def seeded_db(in_memory_db, sample_seed_document) -> sqlite3.Connection:
    """``in_memory_db`` with ``sample_seed_document`` loaded."""
    SnapshotSeedRepository(in_memory_db).load(sample_seed_document)
    in_memory_db.commit()
    return in_memory_db


@pytest.fixture
def seeded_db_path(tmp_path: Path, sample_seed_document) -> Path:
    """A file-backed database with ``sample_seed_document`` loaded."""
    db_path = tmp_path / "db" / "fm_dispatch.db"
    with get_connection(str(db_path)) as conn:
        apply_schema(conn)
        SnapshotSeedRepository(conn).load(sample_seed_document)
    return db_path


@pytest.fixture
def seed_as_of() -> datetime:
    """Fixed "now" for feedback-window queries against the seed document."""
    return SEED_AS_OF


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def sample_work_order() -> WorkOrderContext:
    """An HVAC work order with location and site populated."""
    return WorkOrderContext(
        organization_id=1,
        work_order_id=42,
        asset_category_id=7,
        category_name="HVAC",
        asset_location="Building A Floor 2",
        site_name="North Campus",
    )


@pytest.fixture
def make_technician():
    """Factory for ``TechnicianCandidate`` with sensible defaults."""

    def _make(technician_id: int = 1, **overrides: Any) -> TechnicianCandidate:
        fields: dict[str, Any] = {
            "technician_id": technician_id,
            "display_name": f"Tech {technician_id}",
            "specializations": ["HVAC"],
            "current_location": "Building A Floor 2",
            "current_workload": 0,
            "is_available": True,
        }
        fields.update(overrides)
        return TechnicianCandidate(**fields)

    return _make


@pytest.fixture
def make_vendor():
    """Factory for ``VendorCandidate`` with sensible defaults."""

    def _make(vendor_id: int = 20, **overrides: Any) -> VendorCandidate:
        fields: dict[str, Any] = {
            "vendor_id": vendor_id,
            "display_name": f"Vendor {vendor_id}",
            "specialty": "HVAC services",
            "average_rating": 4.0,
            "service_level_agreement": "4 hour response",
            "is_active": True,
        }
        fields.update(overrides)
        return VendorCandidate(**fields)

    return _make
