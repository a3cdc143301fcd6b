"""
Date and time helpers shared by the forecast and report layers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string with millisecond precision."""
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def in_range(date_str: str, start: str, end: str) -> bool:
    """
    Closed-interval check on fixed-width ISO dates.

    Plain string comparison is valid because YYYY-MM-DD sorts chronologically.
    """
    return start <= date_str <= end


def local_time_label(value: str, timezone_name: str) -> str:
    """
    Format an ISO datetime as HH:MM in the destination timezone.

    Naive timestamps are assumed to already be local. Unknown timezones fall back to UTC.
    """
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        return dt.strftime("%H:%M")
    try:
        tz = ZoneInfo(timezone_name)
    except (TypeError, ValueError, ZoneInfoNotFoundError):
        tz = timezone.utc
    return dt.astimezone(tz).strftime("%H:%M")
