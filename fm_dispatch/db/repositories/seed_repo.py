"""
Bulk loader for local snapshot data.

A seed document is a JSON object keyed by table name, each value a list of
row objects::

    {
      "organizations":    [{"organization_id": 1, "name": "Acme FM"}],
      "asset_categories": [{"category_id": 7, "name": "HVAC",
                            "required_skills": ["HVAC", "refrigerant"]}],
      "technicians":      [{"technician_id": 1, "organization_id": 1,
                            "display_name": "Ana", "specializations": ["HVAC"]}],
      ...
    }

Tables are loaded in foreign-key order regardless of key order in the
document.  List/dict values are stored as JSON text.  Rows are upserted
(``INSERT OR REPLACE``) so re-importing the same document is safe
for rows that carry their primary key; feedback rows without a
``feedback_id`` are appended.
Unknown tables or columns raise ``ValueError`` before anything is written.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fm_dispatch.db.repositories.base import BaseRepository
from fm_dispatch.db.schema import ALL_TABLE_NAMES

logger = logging.getLogger(__name__)


class SnapshotSeedRepository(BaseRepository):
    """Writes seed documents into the snapshot tables."""

    def validate(self, document: dict[str, Any]) -> dict[str, int]:
        """Check a seed document against the live schema.

        Returns:
            Row count per table present in the document.

        Raises:
            ValueError: On unknown tables, unknown columns, or non-list values.
        """
        unknown_tables = sorted(set(document) - set(ALL_TABLE_NAMES))
        if unknown_tables:
            raise ValueError(f"Unknown table(s) in seed document: {unknown_tables}")

        counts: dict[str, int] = {}
        for table in ALL_TABLE_NAMES:
            rows = document.get(table)
            if rows is None:
                continue
            if not isinstance(rows, list):
                raise ValueError(f"Seed entry '{table}' must be a list of objects.")
            columns = set(self.table_columns(table))
            for i, row in enumerate(rows):
                if not isinstance(row, dict):
                    raise ValueError(f"{table}[{i}] must be an object.")
                extra = sorted(set(row) - columns)
                if extra:
                    raise ValueError(f"{table}[{i}] has unknown column(s): {extra}")
            counts[table] = len(rows)
        return counts

    def load(self, document: dict[str, Any]) -> dict[str, int]:
        """Validate and upsert every row of a seed document.

        Returns:
            Row count written per table.
        """
        counts = self.validate(document)
        for table in ALL_TABLE_NAMES:
            for row in document.get(table, []):
                self._upsert(table, row)
        logger.info("Seed document loaded: %s", counts)
        return counts

    def _upsert(self, table: str, row: dict[str, Any]) -> None:
        # Column names were checked against PRAGMA table_info in validate().
        columns = list(row)
        values = tuple(_to_sql_value(row[c]) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        self.execute(
            f"INSERT OR REPLACE INTO {table} ({', '.join(columns)}) VALUES ({placeholders});",
            values,
        )


def _to_sql_value(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    if isinstance(value, bool):
        return int(value)
    return value
