"""End-to-end shift pipeline: occurrences to merged shifts to calendar views."""

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime, timedelta, tzinfo
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from .color.resolver import legend_entries
from .config.settings import DisplaySettings, ShiftPrintSettings
from .grid.builder import (
    build_month_calendar,
    build_week_calendar,
    detect_time_range,
    generate_time_slots,
)
from .grid.layout import calculate_shift_positions, combine_concurrent_shifts
from .ics.datetime_utils import resolve_timezone
from .ics.models import ICSParseResult, RawOccurrence
from .ics.parser import ICSParser
from .people.models import Person
from .people.registry import PersonRegistry
from .shifts.merger import MergeResult, merge_shifts
from .shifts.models import CalendarDay, CalendarWeek, ShiftPosition, TimeRange

logger = logging.getLogger(__name__)


class DayColumn(BaseModel):
    """One day of the week grid with its placed shifts."""

    model_config = ConfigDict(frozen=True)

    day: CalendarDay
    positions: tuple[ShiftPosition, ...] = ()


class WeekView(BaseModel):
    """Everything a renderer needs to draw one week grid."""

    model_config = ConfigDict(frozen=True)

    start: date
    time_range: TimeRange
    time_slots: tuple[int, ...]
    columns: tuple[DayColumn, ...]

    @property
    def days(self) -> list[CalendarDay]:
        return [column.day for column in self.columns]


class MonthView(BaseModel):
    """Weeks of one month; ``month`` is zero-based."""

    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    weeks: tuple[CalendarWeek, ...]


class ShiftSchedule:
    """Occurrences of one calendar import plus the person snapshot derived from them.

    Every view recomputes the merge from the raw occurrences, so changing
    color assignments means building a new schedule with
    :meth:`with_color_assignments`.
    """

    def __init__(
        self,
        occurrences: Iterable[RawOccurrence],
        display: Optional[DisplaySettings] = None,
        registry: Optional[PersonRegistry] = None,
        today: Optional[date] = None,
    ) -> None:
        self.occurrences: tuple[RawOccurrence, ...] = tuple(occurrences)
        self.display = display or DisplaySettings()
        self.registry = registry or PersonRegistry.from_occurrences(self.occurrences)
        self.today = today
        self.tz: tzinfo = resolve_timezone(self.display.timezone)
        self.parse_result: Optional[ICSParseResult] = None

    @classmethod
    def from_ics(
        cls,
        ics_content: str,
        settings: Optional[ShiftPrintSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
        today: Optional[date] = None,
    ) -> "ShiftSchedule":
        """Parse an ICS document and build a schedule from its occurrences.

        Raises:
            ICSParseError: If the document cannot be parsed
        """
        settings = settings or ShiftPrintSettings()
        parser = ICSParser(
            settings.expansion, default_timezone=settings.display.timezone, clock=clock
        )
        result = parser.parse(ics_content)

        schedule = cls(result.occurrences, display=settings.display, today=today)
        schedule.parse_result = result
        logger.info(
            f"Loaded {len(schedule.occurrences)} occurrences for {len(schedule.registry)} people"
        )
        return schedule

    @property
    def color_assignments(self) -> Mapping[str, str]:
        return self.display.color_assignments

    def with_color_assignments(self, color_assignments: Mapping[str, str]) -> "ShiftSchedule":
        """New schedule with replaced color overrides; the person snapshot is shared."""
        display = self.display.model_copy(update={"color_assignments": dict(color_assignments)})
        schedule = ShiftSchedule(
            self.occurrences, display=display, registry=self.registry, today=self.today
        )
        schedule.parse_result = self.parse_result
        return schedule

    def merge(self) -> MergeResult:
        return merge_shifts(self.occurrences, self.registry, self.color_assignments)

    def legend(self) -> list[tuple[Person, str]]:
        return legend_entries(self.registry, self.color_assignments)

    def week_view(self, day: date) -> WeekView:
        """Week grid for the Sunday-start week containing ``day``."""
        merged = self.merge().merged_shifts
        days = build_week_calendar(day, merged, self.tz, self.today)

        time_range = detect_time_range(days, self.tz) or TimeRange(
            start_hour=self.display.default_start_hour,
            end_hour=self.display.default_end_hour,
        )

        columns = []
        for calendar_day in days:
            day_shifts = list(calendar_day.shifts)
            if self.display.combine_concurrent_shifts:
                day_shifts = combine_concurrent_shifts(day_shifts)
            color_map = {m.shift.id: m.display_color for m in day_shifts}
            positions = calculate_shift_positions(
                [m.shift for m in day_shifts], time_range.start_hour, color_map, self.tz
            )
            columns.append(DayColumn(day=calendar_day, positions=tuple(positions)))

        return WeekView(
            start=days[0].date,
            time_range=time_range,
            time_slots=tuple(generate_time_slots(time_range.start_hour, time_range.end_hour)),
            columns=tuple(columns),
        )

    def week_views(self, start: date, count: int) -> list[WeekView]:
        """Consecutive week grids for multi-page export, in page order."""
        return [self.week_view(start + timedelta(weeks=i)) for i in range(count)]

    def month_view(self, year: int, month: int) -> MonthView:
        """Month grid; ``month`` is zero-based."""
        merged = self.merge().merged_shifts
        weeks = build_month_calendar(year, month, merged, self.tz, self.today)
        return MonthView(year=year, month=month, weeks=tuple(weeks))
