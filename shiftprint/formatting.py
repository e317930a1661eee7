"""Timezone-aware time and date labels for rendered calendars."""

import logging
from datetime import date, datetime
from typing import Literal, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

TimeFormat = Literal["12h", "24h"]

_warned_timezones: set[str] = set()


def _to_zone(value: datetime, timezone: Optional[str]) -> datetime:
    """Convert ``value`` to ``timezone``; unknown zones leave it unchanged."""
    if not timezone or value.tzinfo is None:
        return value
    try:
        return value.astimezone(ZoneInfo(timezone))
    except (ZoneInfoNotFoundError, ValueError):
        if timezone not in _warned_timezones:
            _warned_timezones.add(timezone)
            logger.warning(f"Unknown timezone '{timezone}', formatting times unconverted")
        return value


def format_time(value: datetime, timezone: Optional[str], time_format: TimeFormat = "24h") -> str:
    """Clock time such as ``"09:00"`` or ``"9:00 AM"``."""
    local = _to_zone(value, timezone)
    if time_format == "12h":
        hour = local.hour % 12 or 12
        suffix = "AM" if local.hour < 12 else "PM"
        return f"{hour}:{local.minute:02d} {suffix}"
    return local.strftime("%H:%M")


def format_time_range(
    start: datetime, end: datetime, timezone: Optional[str], time_format: TimeFormat = "24h"
) -> str:
    """``"09:00-17:00"`` or ``"9:00 AM-5:00 PM"``."""
    return f"{format_time(start, timezone, time_format)}-{format_time(end, timezone, time_format)}"


def _local_date(value: Union[date, datetime], timezone: Optional[str]) -> date:
    if isinstance(value, datetime):
        return _to_zone(value, timezone).date()
    return value


def format_date(value: Union[date, datetime], timezone: Optional[str] = None) -> str:
    """Day of month without padding, e.g. ``"7"``."""
    return str(_local_date(value, timezone).day)


def format_day_of_week(value: Union[date, datetime], timezone: Optional[str] = None) -> str:
    """Abbreviated weekday, e.g. ``"Mon"``."""
    return _local_date(value, timezone).strftime("%a")
