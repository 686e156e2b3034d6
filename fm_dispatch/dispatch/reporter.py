"""
Dispatch report output: a console table and a JSON file per recommendation.

All functions are pure I/O — no DB access.  They consume an in-memory
``DispatchRecommendation``.

Output files
------------
  data/outputs/dispatch/
    dispatch_wo{work_order_id}_{date}.json   -- wire-shape response + metadata
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from fm_dispatch.models.recommendation import DispatchRecommendation
from fm_dispatch.utils.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

SCHEMA_VERSION = "v1"


def format_recommendation(rec: DispatchRecommendation) -> str:
    """Render a recommendation as a plain-text table for the terminal."""
    lines: list[str] = []
    best = rec.recommended_assignment

    lines.append(f"Work order {rec.work_order_id}")
    lines.append(
        f"  Recommended: {best.type} {best.id} "
        f"(confidence {best.confidence_score:.3f}) — {best.reasoning}"
    )
    lines.append("")

    lines.append(f"Technicians ({len(rec.technicians)})")
    if rec.technicians:
        lines.append(
            f"  {'#':>2}  {'id':>6}  {'score':>6}  {'skills':>6}  {'loc':>5}  "
            f"{'load':>5}  {'perf':>5}  reasoning"
        )
        for rank, t in enumerate(rec.technicians, start=1):
            f = t.factors
            lines.append(
                f"  {rank:>2}  {t.technician_id:>6}  {t.confidence_score:>6.3f}  "
                f"{f['skills_match']:>6.2f}  {f['location_proximity']:>5.2f}  "
                f"{f['workload']:>5.2f}  {f['past_performance']:>5.2f}  {t.reasoning}"
            )
    else:
        lines.append("  (none)")
    lines.append("")

    lines.append(f"Vendors ({len(rec.vendors)})")
    if rec.vendors:
        lines.append(
            f"  {'#':>2}  {'id':>6}  {'score':>6}  {'cost':>8}  {'eta_h':>5}  reasoning"
        )
        for rank, v in enumerate(rec.vendors, start=1):
            lines.append(
                f"  {rank:>2}  {v.vendor_id:>6}  {v.confidence_score:>6.3f}  "
                f"{v.estimated_cost:>8.2f}  {v.estimated_response_time_hours:>5}  {v.reasoning}"
            )
    else:
        lines.append("  (none)")

    return "\n".join(lines)


def write_recommendation_json(
    rec: DispatchRecommendation,
    output_dir: Path,
    run_date: date | None = None,
) -> Path:
    """Write a recommendation to a structured JSON file.

    Args:
        rec:        The assembled recommendation.
        output_dir: Target directory (created if missing).
        run_date:   Date label for the filename. Defaults to today.

    Returns:
        Path to the written JSON file.
    """
    if run_date is None:
        run_date = date.today()

    output_dir.mkdir(parents=True, exist_ok=True)
    json_path = output_dir / f"dispatch_wo{rec.work_order_id}_{run_date}.json"

    payload = {
        "schema_version": SCHEMA_VERSION,
        "generated_at":   to_iso(utcnow()),
        **rec.to_dict(),
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Dispatch JSON written: %s", json_path)
    return json_path
