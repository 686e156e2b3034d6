"""
Candidate models: technicians and vendors eligible for assignment.

Skill lists reach us in two shapes — already-parsed sequences (JSON columns,
fixtures) or raw serialized JSON text (SQLite ``TEXT`` columns). Both are
resolved exactly once, here at the model boundary, by ``parse_skill_list``;
factor calculators only ever see ``Optional[list[str]]``.

``None`` and ``[]`` mean different things downstream: ``None`` is "no data"
(neutral score) while ``[]`` is "known to have no skills" (scores zero).
"""

from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


def parse_skill_list(value: Any) -> Optional[list[str]]:
    """Normalise a raw or parsed skill list.

    Args:
        value: ``None``, a sequence of strings, or JSON text encoding one.

    Returns:
        ``None`` when absent (``None`` or blank text); the list of skill
        strings otherwise. Unparseable text and JSON that is not a list both
        fall back to ``[]``.
    """
    if value is None:
        return None

    if isinstance(value, (str, bytes)):
        text = value.decode("utf-8") if isinstance(value, bytes) else value
        if not text.strip():
            return None
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return []
        if not isinstance(parsed, list):
            return []
        value = parsed

    if isinstance(value, Sequence):
        return [str(skill) for skill in value if skill is not None]

    return []


class TechnicianCandidate(BaseModel):
    """An internal technician considered for a work order.

    Attributes:
        technician_id:    Technician PK.
        display_name:     Human-readable name.
        specializations:  Skill strings; ``None`` when unknown.
        current_location: Free-text current location, or ``None``.
        current_workload: Count of assigned / in-progress work orders.
        is_available:     Availability flag (eligibility requires ``True``).
        feedback_key:     Identifier for the feedback-history lookup;
            defaults to ``technician_id``.
    """

    model_config = ConfigDict(frozen=True)

    technician_id: int
    display_name: str = ""
    specializations: Optional[list[str]] = None
    current_location: Optional[str] = None
    current_workload: int = 0
    is_available: bool = True
    feedback_key: Optional[int] = None

    @field_validator("specializations", mode="before")
    @classmethod
    def normalise_specializations(cls, v: Any) -> Optional[list[str]]:
        return parse_skill_list(v)

    @field_validator("current_workload")
    @classmethod
    def validate_workload(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"current_workload must be >= 0, got {v}.")
        return v

    @model_validator(mode="before")
    @classmethod
    def default_feedback_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("feedback_key") is None:
            data = {**data, "feedback_key": data.get("technician_id")}
        return data


class VendorCandidate(BaseModel):
    """An external vendor considered for a work order.

    Attributes:
        vendor_id:               Vendor PK.
        display_name:            Company name.
        specialty:               Free-text specialty, e.g. ``"HVAC services"``.
        average_rating:          Mean customer rating on a 0–5 scale, or ``None``.
        service_level_agreement: Free-text SLA, e.g. ``"4 hour response"``.
        is_active:               Active flag (eligibility requires ``True``).
    """

    model_config = ConfigDict(frozen=True)

    vendor_id: int
    display_name: str = ""
    specialty: Optional[str] = None
    average_rating: Optional[float] = None
    service_level_agreement: Optional[str] = None
    is_active: bool = True

    @field_validator("average_rating")
    @classmethod
    def validate_rating(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 5.0:
            raise ValueError(f"average_rating must be in [0, 5], got {v}.")
        return v
