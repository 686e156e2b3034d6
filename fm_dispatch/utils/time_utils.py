"""
Time helpers for the SQLite repository and report output.

Timestamps are stored in SQLite as ISO-8601 UTC strings
(``YYYY-MM-DDTHH:MM:SSZ``) so lexical comparison matches chronological order.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

ISO_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


def to_iso(value: datetime) -> str:
    """Format a datetime as the UTC ISO string used in the database."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(ISO_FORMAT)


def window_start(days: int, as_of: datetime | None = None) -> datetime:
    """Return the start of a trailing window of ``days`` ending at ``as_of``.

    Args:
        days:  Window length in days.
        as_of: End of the window; defaults to now (UTC).

    Returns:
        ``as_of - days``.
    """
    return (as_of or utcnow()) - timedelta(days=days)
