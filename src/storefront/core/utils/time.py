"""Date and time-of-day helpers.

Times of day are handled as minutes since midnight. Dates and times
sent by clients are interpreted in the tenant's timezone.
"""

import re
from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from storefront.core.constants import (
    DATE_PATTERN,
    MINUTES_PER_DAY,
    MINUTES_PER_HOUR,
    TIME_PATTERN,
)


logger = structlog.get_logger()

_TIME_RE = re.compile(TIME_PATTERN)
_DATE_RE = re.compile(DATE_PATTERN)


def parse_time_to_minutes(value: str | None) -> int | None:
    """Convert ``HH:MM`` or ``HH:MM:SS`` to minutes since midnight.

    Seconds are ignored.

    Returns:
        Minutes in ``[0, 1440)``, or None if the string is malformed

    Examples:
        >>> parse_time_to_minutes("09:30")
        570
        >>> parse_time_to_minutes("9h30") is None
        True
    """
    if not value:
        return None
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        return None
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        return None
    if not (0 <= hours < 24 and 0 <= minutes < MINUTES_PER_HOUR):
        return None
    return hours * MINUTES_PER_HOUR + minutes


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as ``HH:MM``."""
    minutes = minutes % MINUTES_PER_DAY
    return f"{minutes // MINUTES_PER_HOUR:02d}:{minutes % MINUTES_PER_HOUR:02d}"


def parse_request_date(value: str) -> date | None:
    """Parse a strict ``YYYY-MM-DD`` calendar date, or None."""
    if not _DATE_RE.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_request_time(value: str) -> int | None:
    """Parse a strict ``HH:MM[:SS]`` request time to minutes, or None."""
    if not _TIME_RE.match(value):
        return None
    return parse_time_to_minutes(value)


def tenant_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA timezone name, falling back to UTC."""
    if not name or name.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("unknown_timezone", timezone=name)
        return UTC


def local_datetime(day: date, minutes: int, tz: tzinfo) -> datetime:
    """Combine a date and minutes since midnight into an aware datetime."""
    midnight = datetime(day.year, day.month, day.day, tzinfo=tz)
    return midnight + timedelta(minutes=minutes)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)
