"""Merge raw occurrences into canonical shifts."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, tzinfo
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..color.resolver import get_shift_color
from ..ics.datetime_utils import localize, minute_key
from ..ics.models import RawOccurrence
from ..people.extractor import extract_people_and_title
from ..people.models import Person
from ..people.registry import PersonRegistry
from .models import MergedShift, Shift

logger = logging.getLogger(__name__)

UNASSIGNED_LABEL = "Unassigned"
MAX_LISTED_PEOPLE = 3


class MergeResult(BaseModel):
    """Shifts and their display wrappers, index-aligned."""

    model_config = ConfigDict(frozen=True)

    shifts: tuple[Shift, ...] = ()
    merged_shifts: tuple[MergedShift, ...] = ()


def shift_key(start_key: str, end_key: str, title: str) -> str:
    return f"{start_key}|{end_key}|{title}"


def occurrence_key(occurrence: RawOccurrence) -> str:
    """Group key of an occurrence: start and end at minute precision plus extracted title."""
    title = extract_people_and_title(occurrence.summary).title
    return shift_key(minute_key(occurrence.start), minute_key(occurrence.end), title)


def format_people_list(people: Sequence[Person]) -> str:
    """Short label for a shift's people.

    >>> format_people_list([])
    'Unassigned'
    """
    names = [person.name for person in people]
    if not names:
        return UNASSIGNED_LABEL
    if len(names) <= MAX_LISTED_PEOPLE:
        return ", ".join(names)
    return f"{', '.join(names[:2])}, +{len(names) - 2} more"


def create_merged_shift(
    shift: Shift, color_assignments: Optional[Mapping[str, str]] = None
) -> MergedShift:
    return MergedShift(
        shift_key=shift.id,
        shift=shift,
        people_list=format_people_list(shift.people),
        display_color=get_shift_color(shift, color_assignments),
    )


def merge_shifts(
    occurrences: Iterable[RawOccurrence],
    registry: PersonRegistry,
    color_assignments: Optional[Mapping[str, str]] = None,
) -> MergeResult:
    """Collapse occurrences sharing (start, end, title) into single shifts.

    People named in every occurrence of a group are unioned by person id;
    names missing from ``registry`` are dropped. Title, times, location and
    description come from the group's first occurrence.

    Args:
        occurrences: Expanded calendar occurrences
        registry: Person snapshot for this import
        color_assignments: Person name to hex color overrides

    Returns:
        MergeResult with one Shift and one MergedShift per group, in order of
        each group's first occurrence
    """
    groups: dict[str, list[RawOccurrence]] = {}
    for occurrence in occurrences:
        groups.setdefault(occurrence_key(occurrence), []).append(occurrence)

    shifts: list[Shift] = []
    merged_shifts: list[MergedShift] = []

    for key, group in groups.items():
        names: list[str] = []
        for occurrence in group:
            names.extend(extract_people_and_title(occurrence.summary).names)

        representative = group[0]
        shift = Shift(
            id=key,
            title=extract_people_and_title(representative.summary).title,
            start=representative.start,
            end=representative.end,
            location=representative.location,
            description=representative.description,
            people=tuple(registry.resolve(names)),
        )
        shifts.append(shift)
        merged_shifts.append(create_merged_shift(shift, color_assignments))

    occurrence_count = sum(len(group) for group in groups.values())
    logger.debug(f"Merged {occurrence_count} occurrences into {len(shifts)} shifts")
    return MergeResult(shifts=tuple(shifts), merged_shifts=tuple(merged_shifts))


def group_shifts_by_day(
    shifts: Iterable[Shift], tz: Optional[tzinfo] = None
) -> dict[date, list[Shift]]:
    """Bucket shifts by the calendar day of their start in ``tz``."""
    grouped: dict[date, list[Shift]] = {}
    for shift in shifts:
        grouped.setdefault(localize(shift.start, tz).date(), []).append(shift)
    return grouped


def shifts_overlap(shift1: Shift, shift2: Shift) -> bool:
    """Half-open interval overlap; touching endpoints do not overlap."""
    return shift1.start < shift2.end and shift1.end > shift2.start


def detect_day_overlaps(day_shifts: Sequence[Shift]) -> dict[str, tuple[Shift, Shift]]:
    """Overlapping pairs of one day's shifts, keyed ``"{title1}-{title2}"``.

    Only the first pair seen for a given title pair is kept.
    """
    overlaps: dict[str, tuple[Shift, Shift]] = {}
    for i, first in enumerate(day_shifts):
        for second in day_shifts[i + 1 :]:
            if shifts_overlap(first, second):
                overlaps.setdefault(f"{first.title}-{second.title}", (first, second))
    return overlaps
