"""Shift models and occurrence merging."""

from .merger import (
    MergeResult,
    detect_day_overlaps,
    format_people_list,
    group_shifts_by_day,
    merge_shifts,
    occurrence_key,
    shifts_overlap,
)
from .models import (
    CalendarDay,
    CalendarWeek,
    MergedShift,
    Shift,
    ShiftPosition,
    TimeRange,
)

__all__ = [
    "CalendarDay",
    "CalendarWeek",
    "MergeResult",
    "MergedShift",
    "Shift",
    "ShiftPosition",
    "TimeRange",
    "detect_day_overlaps",
    "format_people_list",
    "group_shifts_by_day",
    "merge_shifts",
    "occurrence_key",
    "shifts_overlap",
]
