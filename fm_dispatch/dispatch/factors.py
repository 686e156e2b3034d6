"""
Factor calculators: normalised [0, 1] sub-scores for dispatch candidates.

Technician factors
------------------
skills_match (0–1):
    Fraction of the asset category's required skills that have at least one
    case-insensitive substring match (either direction) in the technician's
    specializations.  No required skills, or unknown specializations → 0.5.

location_proximity (0–1):
    Crude text heuristic, not geocoding.
        missing location on either side      → 0.5
        exact match (case-insensitive)       → 1.0
        site name appears in tech location   → 0.8
        any overlapping word                 → 0.6
        otherwise                            → 0.3

workload (0–1):
    Step function on open assignments: 0 → 1.0, ≤2 → 0.8, ≤4 → 0.6,
    ≤6 → 0.4, else 0.2.

availability (0–1):
    1.0 if available else 0.0.  Re-checked even though the pool is already
    filtered.

past_performance (0–1):
    Average per-order feedback over the trailing window (positive = 1.0,
    negative = 0.0, anything else = 0.5).  No history → 0.5.

Vendor factors
--------------
specialty_match (0–1):
    1.0 when the category name appears in the specialty, 0.8 when both fall
    in the same domain term group (HVAC / electrical / plumbing), else 0.3.
    Missing data → 0.5.

cost_rating (0–1):      (average_rating or 3.0) / 5.0 — rating as value proxy.
response_time (0–1):    SLA keyword ladder (see ``_SLA_LADDER``).
reliability (0–1):      average_rating / 5.0.

Auxiliary lookups (required skills, feedback history) are wrapped with
``with_default`` so a failing lookup degrades that one factor to its
neutral default instead of aborting the recommendation.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

NEUTRAL_SCORE = 0.5

# Domain term groups for vendor specialty matching.
_TERM_GROUPS: tuple[tuple[str, ...], ...] = (
    ("hvac", "heating", "ventilation", "air conditioning"),
    ("electrical", "electric", "power"),
    ("plumbing", "pipe", "water"),
)

# SLA keyword ladder: (keywords, response_time score, estimated hours).
# Plain substring checks, first match wins.  "24 hour" sits ahead of the
# 4-hour rung so it is not read as "4 hour".
_SLA_LADDER: tuple[tuple[tuple[str, ...], float, int], ...] = (
    (("immediate", "1 hour"), 1.0, 1),
    (("2 hour", "2hr"),       0.8, 2),
    (("24 hour",),            0.4, 8),
    (("4 hour", "4hr"),       0.6, 4),
    (("same day",),           0.4, 8),
)
_SLA_OTHER_SCORE = 0.2
_SLA_DEFAULT_HOURS = 4

_BASE_HOURLY_RATE = 150.0


# ── Default-on-error wrapper ──────────────────────────────────────────────────

def with_default(
    fn: Callable[..., Awaitable[T]],
    fallback: T,
    label: str | None = None,
) -> Callable[..., Awaitable[T]]:
    """Wrap an async lookup so any failure returns ``fallback``.

    Used uniformly for every auxiliary lookup a factor depends on.  The
    failure is logged at WARNING and never propagated.

    Args:
        fn:       Async callable performing the lookup.
        fallback: Value returned when ``fn`` raises.
        label:    Name used in the log line; defaults to ``fn.__name__``.

    Returns:
        An async callable with the same signature as ``fn``.
    """
    name = label or getattr(fn, "__name__", "lookup")

    @functools.wraps(fn)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await fn(*args, **kwargs)
        except Exception as exc:
            logger.warning(
                "Degraded factor lookup %s%r: %s — using default %r",
                name, args, exc, fallback,
            )
            return fallback

    return wrapper


# ── Technician factors ────────────────────────────────────────────────────────

def skills_match(
    specializations: Optional[Sequence[str]],
    required_skills: Optional[Sequence[str]],
) -> float:
    """Fraction of required skills covered by the technician's specializations.

    Args:
        specializations: Technician skill strings; ``None`` when unknown.
        required_skills: Category requirements; ``None`` when unavailable.

    Returns:
        ``matched / len(required_skills)``, or 0.5 when either side has no data.
    """
    if not required_skills or specializations is None:
        return NEUTRAL_SCORE

    tech_skills = [s.lower() for s in specializations]
    matched = 0
    for skill in required_skills:
        needle = skill.lower()
        if any(needle in ts or ts in needle for ts in tech_skills):
            matched += 1

    return matched / len(required_skills)


def location_proximity(
    technician_location: Optional[str],
    asset_location: Optional[str],
    site_name: Optional[str] = None,
) -> float:
    """Text-similarity proxy for how close a technician is to the asset."""
    if not technician_location or not asset_location:
        return NEUTRAL_SCORE

    tech_loc  = technician_location.lower()
    asset_loc = asset_location.lower()

    if tech_loc == asset_loc:
        return 1.0

    if site_name and site_name.lower() in tech_loc:
        return 0.8

    asset_words = asset_loc.split()
    for word in tech_loc.split():
        if any(aw in word or word in aw for aw in asset_words):
            return 0.6

    return 0.3


def workload_score(current_workload: int) -> float:
    """Map open-assignment count to a score; fewer assignments score higher."""
    if current_workload == 0:
        return 1.0
    if current_workload <= 2:
        return 0.8
    if current_workload <= 4:
        return 0.6
    if current_workload <= 6:
        return 0.4
    return 0.2


def availability_score(is_available: bool) -> float:
    return 1.0 if is_available else 0.0


def feedback_value(user_feedback: Optional[str]) -> float:
    """Score a single feedback label: positive 1.0, negative 0.0, else 0.5."""
    if user_feedback == "positive":
        return 1.0
    if user_feedback == "negative":
        return 0.0
    return NEUTRAL_SCORE


def past_performance(avg_feedback: Optional[float]) -> float:
    """Past-performance factor from a looked-up average feedback score.

    ``None`` (no qualifying history, or the lookup failed) → 0.5.
    """
    if avg_feedback is None:
        return NEUTRAL_SCORE
    return _clamp(float(avg_feedback), 0.0, 1.0)


# ── Vendor factors ────────────────────────────────────────────────────────────

def specialty_match(specialty: Optional[str], category_name: Optional[str]) -> float:
    """How well a vendor's specialty covers the work order's asset category."""
    if not specialty or not category_name:
        return NEUTRAL_SCORE

    vendor_specialty = specialty.lower()
    category = category_name.lower()

    if category in vendor_specialty:
        return 1.0

    specialty_words = vendor_specialty.split()
    for terms in _TERM_GROUPS:
        if any(term in category for term in terms) and any(
            word in terms for word in specialty_words
        ):
            return 0.8

    return 0.3


def cost_rating(average_rating: Optional[float]) -> float:
    """Value-for-money proxy.  Unknown (or zero) rating is treated as 3.0."""
    return _clamp((average_rating or 3.0) / 5.0, 0.0, 1.0)


def response_time_score(service_level_agreement: Optional[str]) -> float:
    """Score a vendor's SLA text by how fast it promises to respond."""
    if not service_level_agreement:
        return NEUTRAL_SCORE

    sla = service_level_agreement.lower()
    for keywords, score, _hours in _SLA_LADDER:
        if any(k in sla for k in keywords):
            return score
    return _SLA_OTHER_SCORE


def reliability(average_rating: Optional[float]) -> float:
    """Normalised rating; an unrated vendor has no demonstrated reliability."""
    return _clamp((average_rating or 0.0) / 5.0, 0.0, 1.0)


def estimate_response_hours(service_level_agreement: Optional[str]) -> int:
    """Hours to first response implied by the SLA text (default 4)."""
    if not service_level_agreement:
        return _SLA_DEFAULT_HOURS

    sla = service_level_agreement.lower()
    for keywords, _score, hours in _SLA_LADDER:
        if any(k in sla for k in keywords):
            return hours
    return _SLA_DEFAULT_HOURS


def estimate_vendor_cost(average_rating: Optional[float]) -> float:
    """Synthetic hourly rate: 150 scaled up 10% per rating point below 5."""
    rating = average_rating or 0.0
    return _BASE_HOURLY_RATE * (1 + (5 - rating) * 0.1)


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
