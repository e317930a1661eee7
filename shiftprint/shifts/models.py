"""Data models for merged shifts and calendar grid structures."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..people.models import Person


class Shift(BaseModel):
    """This title, this time window, these people."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Shift key: '{start}|{end}|{title}' at minute precision")
    title: str = Field(..., description="Shift title, e.g. 'Morning Shift'")
    start: datetime
    end: datetime
    location: Optional[str] = None
    description: Optional[str] = None
    people: tuple[Person, ...] = Field(default=(), description="Distinct people, by first mention")

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


class MergedShift(BaseModel):
    """Display-ready wrapper around a Shift."""

    model_config = ConfigDict(frozen=True)

    shift_key: str
    shift: Shift
    people_list: str = Field(
        ..., description="'A, B, +2 more' past three names; 'Unassigned' if empty"
    )
    display_color: str = Field(..., description="Resolved hex color for the shift")


class CalendarDay(BaseModel):
    """One cell of a week or month grid."""

    model_config = ConfigDict(frozen=True)

    date: date
    shifts: tuple[MergedShift, ...] = ()
    is_today: bool = False
    is_weekend: bool = False


class CalendarWeek(BaseModel):
    """Sunday through Saturday."""

    model_config = ConfigDict(frozen=True)

    week_number: int = Field(..., ge=1, description="1-based position within the month view")
    days: tuple[CalendarDay, ...]

    @model_validator(mode="after")
    def _check_seven_days(self) -> "CalendarWeek":
        if len(self.days) != 7:
            raise ValueError(f"A calendar week has 7 days, got {len(self.days)}")
        return self


class TimeRange(BaseModel):
    """Visible hours of the week grid, ``start_hour`` inclusive to ``end_hour`` exclusive."""

    model_config = ConfigDict(frozen=True)

    start_hour: int = Field(..., ge=0, le=24)
    end_hour: int = Field(..., ge=0, le=24)


class ShiftPosition(BaseModel):
    """Placement of one shift in a week-grid day column.

    ``row_start`` and ``row_end`` are minutes from the displayed start hour;
    ``z_index`` grows with ``index_in_group`` so later-starting shifts in an
    overlap group render above earlier ones.
    """

    model_config = ConfigDict(frozen=True)

    shift: Shift
    display_color: str
    row_start: int
    row_end: int
    z_index: int
    index_in_group: int
    group_size: int
