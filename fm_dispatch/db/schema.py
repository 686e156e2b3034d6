"""
SQLite schema DDL for the local dispatch snapshot store.

The engine only reads this data; the tables mirror the subset of the
work-order platform's relational model that the scoring factors need.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is **idempotent**.

Table creation order respects foreign key dependencies:
  1. organizations        (no FKs)
  2. sites                (→ organizations)
  3. asset_categories     (no FKs)
  4. assets               (→ organizations, asset_categories, sites)
  5. technicians          (→ organizations)
  6. vendors              (→ organizations)
  7. work_orders          (→ organizations, assets, sites, technicians, vendors)
  8. work_order_feedback  (→ work_orders)

Skill lists (``asset_categories.required_skills``,
``technicians.specializations``) are stored as JSON text.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_ORGANIZATIONS = """
CREATE TABLE IF NOT EXISTS organizations (
    organization_id INTEGER PRIMARY KEY,
    name            TEXT    NOT NULL,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_SITES = """
CREATE TABLE IF NOT EXISTS sites (
    site_id         INTEGER PRIMARY KEY,
    organization_id INTEGER NOT NULL REFERENCES organizations(organization_id),
    name            TEXT    NOT NULL,
    address         TEXT
);
"""

_DDL_ASSET_CATEGORIES = """
CREATE TABLE IF NOT EXISTS asset_categories (
    category_id     INTEGER PRIMARY KEY,
    name            TEXT    NOT NULL,
    required_skills TEXT
);
"""

_DDL_ASSETS = """
CREATE TABLE IF NOT EXISTS assets (
    asset_id             INTEGER PRIMARY KEY,
    organization_id      INTEGER NOT NULL REFERENCES organizations(organization_id),
    asset_category_id    INTEGER REFERENCES asset_categories(category_id),
    site_id              INTEGER REFERENCES sites(site_id),
    name                 TEXT    NOT NULL,
    location_description TEXT
);
"""

_DDL_TECHNICIANS = """
CREATE TABLE IF NOT EXISTS technicians (
    technician_id    INTEGER PRIMARY KEY,
    organization_id  INTEGER NOT NULL REFERENCES organizations(organization_id),
    display_name     TEXT    NOT NULL,
    specializations  TEXT,
    current_location TEXT,
    is_available     INTEGER NOT NULL DEFAULT 1
);
"""

_DDL_VENDORS = """
CREATE TABLE IF NOT EXISTS vendors (
    vendor_id               INTEGER PRIMARY KEY,
    organization_id         INTEGER NOT NULL REFERENCES organizations(organization_id),
    display_name            TEXT    NOT NULL,
    specialty               TEXT,
    average_rating          REAL    CHECK (average_rating IS NULL OR average_rating BETWEEN 0 AND 5),
    service_level_agreement TEXT,
    is_active               INTEGER NOT NULL DEFAULT 1
);
"""

_DDL_WORK_ORDERS = """
CREATE TABLE IF NOT EXISTS work_orders (
    work_order_id          INTEGER PRIMARY KEY,
    organization_id        INTEGER NOT NULL REFERENCES organizations(organization_id),
    title                  TEXT    NOT NULL DEFAULT '',
    asset_id               INTEGER REFERENCES assets(asset_id),
    site_id                INTEGER REFERENCES sites(site_id),
    status                 TEXT    NOT NULL DEFAULT 'open'
                           CHECK (status IN ('open', 'assigned', 'in_progress',
                                             'on_hold', 'completed', 'cancelled')),
    assigned_technician_id INTEGER REFERENCES technicians(technician_id),
    assigned_vendor_id     INTEGER REFERENCES vendors(vendor_id),
    completed_at           TEXT,
    created_at             TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_WORK_ORDER_FEEDBACK = """
CREATE TABLE IF NOT EXISTS work_order_feedback (
    feedback_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    work_order_id INTEGER NOT NULL REFERENCES work_orders(work_order_id),
    user_feedback TEXT    NOT NULL,
    created_at    TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_technicians_org ON technicians (organization_id, is_available);",
    "CREATE INDEX IF NOT EXISTS idx_vendors_org ON vendors (organization_id, is_active);",
    "CREATE INDEX IF NOT EXISTS idx_work_orders_tech ON work_orders (assigned_technician_id, status);",
    "CREATE INDEX IF NOT EXISTS idx_feedback_work_order ON work_order_feedback (work_order_id);",
)

_TABLE_DDL: tuple[tuple[str, str], ...] = (
    ("organizations",       _DDL_ORGANIZATIONS),
    ("sites",               _DDL_SITES),
    ("asset_categories",    _DDL_ASSET_CATEGORIES),
    ("assets",              _DDL_ASSETS),
    ("technicians",         _DDL_TECHNICIANS),
    ("vendors",             _DDL_VENDORS),
    ("work_orders",         _DDL_WORK_ORDERS),
    ("work_order_feedback", _DDL_WORK_ORDER_FEEDBACK),
)

ALL_TABLE_NAMES: tuple[str, ...] = tuple(name for name, _ in _TABLE_DDL)


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes if they do not already exist.

    Args:
        conn: An open SQLite connection.
    """
    for name, ddl in _TABLE_DDL:
        conn.execute(ddl)
        logger.debug("Table ensured: %s", name)
    for ddl in _DDL_INDEXES:
        conn.execute(ddl)
    conn.commit()
    logger.info("Schema applied (%d tables).", len(ALL_TABLE_NAMES))


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return list of table names present in the database (sorted)."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return list of index names present in the database (sorted)."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]
