"""Calendar grid construction and week-grid layout."""

from .builder import (
    DEFAULT_TIME_RANGE,
    build_month_calendar,
    build_week_calendar,
    detect_time_range,
    generate_time_slots,
    week_start,
)
from .layout import calculate_shift_positions, combine_concurrent_shifts, find_overlap_groups

__all__ = [
    "DEFAULT_TIME_RANGE",
    "build_month_calendar",
    "build_week_calendar",
    "calculate_shift_positions",
    "combine_concurrent_shifts",
    "detect_time_range",
    "find_overlap_groups",
    "generate_time_slots",
    "week_start",
]
