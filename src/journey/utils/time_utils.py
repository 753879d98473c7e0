"""Timestamp helpers.

All records carry ISO-8601 strings; these helpers convert at the edges.
"""

from __future__ import annotations

from datetime import datetime, timezone

MINUTES_PER_WORKDAY = 8 * 60
MINUTES_PER_WORKWEEK = 40 * 60
SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """Current time as an ISO string."""
    return utc_now().isoformat()


def parse_iso(value: str | datetime | None) -> datetime | None:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def iso_date(value: datetime | None = None) -> str:
    """YYYY-MM-DD for file names."""
    return (value or utc_now()).date().isoformat()
