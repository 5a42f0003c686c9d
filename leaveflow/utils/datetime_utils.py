"""
Datetime helpers.
- Everything is stored and compared in UTC.
- API responses render datetimes in the configured display timezone (settings.DISPLAY_TZ).
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from leaveflow.core.config import settings

UTC = timezone.utc


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Naive values are taken as UTC; aware values are converted to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_local(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    return ensure_utc(dt).astimezone(ZoneInfo(settings.DISPLAY_TZ))


def iso_local(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 in the display timezone, always with an explicit offset."""
    if dt is None:
        return None
    return to_local(dt).isoformat()


def js_weekday(value: date) -> int:
    """Weekday index with 0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7
