"""Plain-text rendering of month and week views for the console."""

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Optional

from ..color.resolver import get_contrast_text_color, shift_fill
from ..formatting import TimeFormat, format_date, format_day_of_week, format_time_range
from ..people.models import Person
from ..pipeline import MonthView, WeekView
from ..print_config import DEFAULT_PAPER_SIZE, get_paper_config
from ..shifts.models import CalendarDay, ShiftPosition

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class TextRenderer:
    """Render calendar views as plain text lines.

    Week pages name the paper they are laid out for and give each shift its
    fill (a gradient across its people's colors when there are several) and
    the text color that reads on it.
    """

    def __init__(
        self,
        timezone: str,
        time_format: TimeFormat = "24h",
        paper_size: str = DEFAULT_PAPER_SIZE,
        orientation: str = "portrait",
        color_assignments: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.timezone = timezone
        self.time_format = time_format
        self.paper_size = paper_size
        self.orientation = orientation
        self.color_assignments = color_assignments

    def _day_header(self, day: CalendarDay) -> str:
        marker = " (today)" if day.is_today else ""
        return (
            f"{format_day_of_week(day.date)} {day.date.strftime('%b')} "
            f"{format_date(day.date)}{marker}"
        )

    def render_month(self, view: MonthView) -> str:
        lines = [f"{MONTH_NAMES[view.month]} {view.year}", ""]
        for week in view.weeks:
            lines.append(f"Week {week.week_number}")
            for day in week.days:
                if day.date.month != view.month + 1 and not day.shifts:
                    continue
                lines.append(f"  {self._day_header(day)}")
                for merged in day.shifts:
                    time_range = format_time_range(
                        merged.shift.start, merged.shift.end, self.timezone, self.time_format
                    )
                    lines.append(
                        f"    {time_range}  {merged.shift.title}  [{merged.people_list}]"
                    )
            lines.append("")
        return "\n".join(lines).rstrip() + "\n"

    def render_week(self, view: WeekView) -> str:
        end = view.columns[-1].day.date
        lines = [
            f"Week of {_long_date(view.start)} - {_long_date(end)}",
            f"Hours {view.time_range.start_hour:02d}:00-{view.time_range.end_hour:02d}:00",
            self._paper_line(),
            "",
        ]
        for column in view.columns:
            lines.append(self._day_header(column.day))
            if not column.positions:
                lines.append("    (no shifts)")
            for position in column.positions:
                shift = position.shift
                time_range = format_time_range(
                    shift.start, shift.end, self.timezone, self.time_format
                )
                names = ", ".join(person.name for person in shift.people) or "Unassigned"
                stack = (
                    f"  layer {position.index_in_group + 1}/{position.group_size}"
                    if position.group_size > 1
                    else ""
                )
                lines.append(
                    f"    {time_range}  {shift.title}  [{names}]  {self._fill(position)}{stack}"
                )
            lines.append("")
        return "\n".join(lines).rstrip() + "\n"

    def _paper_line(self) -> str:
        config = get_paper_config(self.paper_size)
        return (
            f"Paper {self.paper_size} {self.orientation}, scale {config.scale_factor:g}, "
            f"text {config.shift_text_size}/{config.shift_time_size}"
        )

    def _fill(self, position: ShiftPosition) -> str:
        """Background and text color of one placed shift."""
        fill = shift_fill(position.shift, self.color_assignments)
        background = fill.css if fill.is_gradient else position.display_color
        try:
            text_color = get_contrast_text_color(position.display_color)
        except ValueError:
            # not a hex color, e.g. a named CSS color from the config
            return background
        return f"{background}  text {text_color}"

    def render_legend(self, entries: Sequence[tuple[Person, str]]) -> str:
        if not entries:
            return ""
        lines = ["Legend"]
        lines.extend(f"  {color}  {person.name}" for person, color in entries)
        return "\n".join(lines) + "\n"


def _long_date(value: date) -> str:
    return f"{value.strftime('%b')} {value.day}, {value.year}"
