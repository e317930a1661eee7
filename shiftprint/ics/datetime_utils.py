"""Datetime normalization helpers shared by the ICS parser and RRULE expander."""

import logging
from datetime import date, datetime, time, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UTC = timezone.utc

logger = logging.getLogger(__name__)


def resolve_timezone(name: Optional[str], fallback: tzinfo = UTC) -> tzinfo:
    """Resolve an IANA timezone name, falling back when it is empty or unknown.

    Args:
        name: IANA timezone identifier such as ``"America/Los_Angeles"``
        fallback: Timezone returned when ``name`` cannot be resolved

    Returns:
        A tzinfo instance
    """
    if not name:
        return fallback
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{name}', using {fallback}")
        return fallback


def to_datetime(value: Union[date, datetime], default_tz: tzinfo) -> datetime:
    """Convert an iCalendar DATE or DATE-TIME value to a timezone-aware datetime.

    Floating (naive) times and all-day dates are interpreted in ``default_tz``.

    Raises:
        TypeError: If ``value`` is neither a date nor a datetime
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=default_tz)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time(0, 0), tzinfo=default_tz)
    raise TypeError(f"Expected date or datetime, got {type(value).__name__}")


def utc_day(value: datetime) -> date:
    """Calendar day of ``value`` in UTC."""
    return value.astimezone(UTC).date()


def timestamp_key(value: datetime) -> int:
    """Millisecond epoch timestamp used for exact-instant matching."""
    return int(value.timestamp() * 1000)


def localize(value: datetime, tz: Optional[tzinfo]) -> datetime:
    """View ``value`` in ``tz``; with no tz (or a naive value) keep its own fields."""
    if tz is None or value.tzinfo is None:
        return value
    return value.astimezone(tz)


def minute_key(value: datetime) -> str:
    """Minute-precision key for an instant, stable across source timezones."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%Y-%m-%d %H:%M")
