"""Arrange merged shifts into week and month calendar grids."""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from ..ics.datetime_utils import localize
from ..shifts.models import CalendarDay, CalendarWeek, MergedShift, TimeRange

logger = logging.getLogger(__name__)

DEFAULT_TIME_RANGE = TimeRange(start_hour=6, end_hour=23)

# date.weekday(): Monday=0 ... Sunday=6
SATURDAY = 5
SUNDAY = 6


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_end(day: date) -> date:
    """Saturday on or after ``day``."""
    return day + timedelta(days=(SATURDAY - day.weekday()) % 7)


def _today(tz: Optional[tzinfo]) -> date:
    return datetime.now(tz).date()


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _shifts_by_day(
    merged_shifts: Iterable[MergedShift], tz: Optional[tzinfo]
) -> dict[date, list[MergedShift]]:
    by_day: dict[date, list[MergedShift]] = {}
    for merged in merged_shifts:
        by_day.setdefault(localize(merged.shift.start, tz).date(), []).append(merged)
    return by_day


def _build_day(day: date, shifts: Sequence[MergedShift], today: date) -> CalendarDay:
    return CalendarDay(
        date=day,
        shifts=tuple(shifts),
        is_today=day == today,
        is_weekend=day.weekday() in (SATURDAY, SUNDAY),
    )


def month_sort_key(merged: MergedShift) -> tuple:
    """Start, then end, then people label (case-insensitive)."""
    return (merged.shift.start, merged.shift.end, merged.people_list.casefold())


def build_week_calendar(
    day: date,
    merged_shifts: Iterable[MergedShift],
    tz: Optional[tzinfo] = None,
    today: Optional[date] = None,
) -> list[CalendarDay]:
    """Seven days, Sunday to Saturday, of the week containing ``day``.

    Each day holds the shifts starting on it in ``tz``, in input order.

    Args:
        day: Any date (or datetime) inside the wanted week
        merged_shifts: Shifts to place
        tz: Timezone that defines calendar days; None uses each start's own fields
        today: Date flagged as today; defaults to the current date in ``tz``
    """
    today = today or _today(tz)
    first = week_start(_as_date(day))
    by_day = _shifts_by_day(merged_shifts, tz)

    days = []
    for offset in range(7):
        current = first + timedelta(days=offset)
        days.append(_build_day(current, by_day.get(current, []), today))
    return days


def build_month_calendar(
    year: int,
    month: int,
    merged_shifts: Iterable[MergedShift],
    tz: Optional[tzinfo] = None,
    today: Optional[date] = None,
) -> list[CalendarWeek]:
    """Every Sunday-start week overlapping a month, with lead and trail days.

    Args:
        year: Four-digit year
        month: Zero-based month (0 = January)
        merged_shifts: Shifts to place
        tz: Timezone that defines calendar days
        today: Date flagged as today; defaults to the current date in ``tz``

    Returns:
        Weeks numbered from 1, each day's shifts sorted by start, end and
        people label so the printed stacking order is stable

    Raises:
        ValueError: If ``month`` is outside 0..11
    """
    if not 0 <= month <= 11:
        raise ValueError(f"month must be between 0 and 11, got {month}")

    today = today or _today(tz)
    first_of_month = date(year, month + 1, 1)
    if month == 11:
        last_of_month = date(year, 12, 31)
    else:
        last_of_month = date(year, month + 2, 1) - timedelta(days=1)

    by_day = _shifts_by_day(merged_shifts, tz)
    current = week_start(first_of_month)
    last = week_end(last_of_month)

    weeks: list[CalendarWeek] = []
    while current <= last:
        days = []
        for _ in range(7):
            shifts = sorted(by_day.get(current, []), key=month_sort_key)
            days.append(_build_day(current, shifts, today))
            current += timedelta(days=1)
        weeks.append(CalendarWeek(week_number=len(weeks) + 1, days=tuple(days)))

    logger.debug(f"Built {len(weeks)} weeks for {year}-{month + 1:02d}")
    return weeks


def detect_time_range(
    days: Iterable[CalendarDay], tz: Optional[tzinfo] = None
) -> Optional[TimeRange]:
    """Visible hours for the given days, padded by one hour on each side.

    A shift ending on a later day than it starts counts as ending at 24.
    Returns None when the days hold no shifts; callers fall back to
    :data:`DEFAULT_TIME_RANGE` or a configured range.
    """
    min_hour: Optional[int] = None
    max_hour: Optional[int] = None

    for day in days:
        for merged in day.shifts:
            start = localize(merged.shift.start, tz)
            end = localize(merged.shift.end, tz)
            end_hour = 24 if end.date() > start.date() else end.hour

            min_hour = start.hour if min_hour is None else min(min_hour, start.hour)
            max_hour = end_hour if max_hour is None else max(max_hour, end_hour)

    if min_hour is None or max_hour is None:
        return None

    return TimeRange(start_hour=max(0, min_hour - 1), end_hour=min(24, max_hour + 1))


def generate_time_slots(start_hour: int = 6, end_hour: int = 23) -> list[int]:
    """Hour labels for the week grid, ``start_hour`` up to but excluding ``end_hour``."""
    return list(range(start_hour, end_hour))
