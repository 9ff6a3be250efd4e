"""Utility helper functions"""

from datetime import datetime, date, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import os


def format_duration(minutes: int) -> str:
    """Format duration in minutes to human-readable string"""
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    mins = minutes % 60
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_starts_in(minutes: int) -> str:
    """Time until a class starts; the final minute reads '< 1m'"""
    if minutes < 1:
        return "< 1m"
    return format_duration(minutes)


def format_clock(seconds: int) -> str:
    """Format a second count as zero-padded MM:SS"""
    seconds = max(0, int(seconds))
    return f"{seconds // 60:02d}:{seconds % 60:02d}"


def get_week_range(target_date: Optional[date] = None, first_weekday: int = 0) -> tuple[date, date]:
    """Get start and end of week for given date.

    first_weekday follows date.weekday(): 0 is Monday, 6 is Sunday.
    """
    if target_date is None:
        target_date = date.today()

    days_since_start = (target_date.weekday() - first_weekday) % 7
    start_of_week = target_date - timedelta(days=days_since_start)
    end_of_week = start_of_week + timedelta(days=6)

    return start_of_week, end_of_week


def calculate_percentage(part: float, total: float) -> float:
    """Calculate percentage, handling zero division"""
    if total == 0:
        return 0.0
    return round((part / total) * 100, 2)


def parse_hhmm(value: str) -> time:
    """Parse a 24h "HH:MM" string. Raises ValueError on anything else."""
    if not isinstance(value, str):
        raise ValueError(f"Expected 'HH:MM' string, got {value!r}")
    return datetime.strptime(value.strip(), "%H:%M").time()


def minutes_between(start: time, end: time) -> int:
    """Whole minutes from start to end on the same day (negative if end is earlier)"""
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)


def to_epoch_ms(dt: datetime) -> int:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    return int(dt.timestamp() * 1000)


def from_epoch_ms(epoch_ms: int, tz_name: Optional[str] = None) -> datetime:
    return datetime.fromtimestamp(int(epoch_ms) / 1000, tz=get_zoneinfo(tz_name))


# Timezone helpers
DEFAULT_TZ = os.getenv("STUDYDESK_TIMEZONE", "UTC")


def get_zoneinfo(tz_name: Optional[str] = None) -> ZoneInfo:
    """Return a ZoneInfo for the given tz_name or default."""
    if tz_name is None:
        tz_name = DEFAULT_TZ
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        # Fallback to UTC
        return ZoneInfo("UTC")


def now_local(tz_name: Optional[str] = None) -> datetime:
    """Current wall-clock time in the configured timezone"""
    return datetime.now(get_zoneinfo(tz_name))


def to_local(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert an aware or naive datetime to the local timezone.

    If dt is naive, it is assumed to be in UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        # assume UTC for naive datetimes
        dt = dt.replace(tzinfo=ZoneInfo("UTC"))
    zone = get_zoneinfo(tz_name)
    return dt.astimezone(zone)


def format_datetime_local(dt: Optional[datetime], fmt: str = "%Y-%m-%d %H:%M", tz_name: Optional[str] = None) -> str:
    """Format a datetime in the local timezone. Returns 'N/A' for None."""
    if dt is None:
        return "N/A"
    local = to_local(dt, tz_name)
    return local.strftime(fmt)
