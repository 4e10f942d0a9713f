from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse 'YYYY-MM-DD'. Blank -> None; anything else malformed raises ValueError."""
    if value is None:
        return None
    s = value.strip()
    if not s:
        return None
    return date.fromisoformat(s)


def day_range_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """
    Turn an inclusive calendar-date range into [start 00:00, (end + 1 day) 00:00).

    Reports filter with created_at >= lower AND created_at < upper so the whole
    end day is included.
    """
    lower = datetime.combine(start, time.min)
    upper = datetime.combine(end + timedelta(days=1), time.min)
    return lower, upper


def default_report_range(today: Optional[date] = None) -> tuple[date, date]:
    """First day of the current month through today."""
    today = today or utcnow().date()
    return today.replace(day=1), today


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
