"""Week-grid layout: overlap grouping and stacked shift positions."""

import logging
from collections.abc import Mapping, Sequence
from datetime import tzinfo
from typing import Optional

from ..color.resolver import UNASSIGNED_COLOR, get_person_color
from ..ics.datetime_utils import localize, minute_key
from ..people.models import Person
from ..shifts.merger import shifts_overlap
from ..shifts.models import MergedShift, Shift, ShiftPosition

logger = logging.getLogger(__name__)

BASE_Z_INDEX = 10


def find_overlap_groups(shifts: Sequence[Shift]) -> list[list[Shift]]:
    """Partition shifts into transitively overlapping groups.

    A group keeps absorbing any remaining shift that overlaps one of its
    members, so A-B and B-C overlaps put A, B and C together even when A
    and C are disjoint. Groups appear in order of their first member.
    """
    groups: list[list[Shift]] = []
    used: set[int] = set()

    for i, shift in enumerate(shifts):
        if i in used:
            continue

        group = [shift]
        used.add(i)

        changed = True
        while changed:
            changed = False
            for j, candidate in enumerate(shifts):
                if j in used:
                    continue
                if any(shifts_overlap(member, candidate) for member in group):
                    group.append(candidate)
                    used.add(j)
                    changed = True

        groups.append(group)

    return groups


def _default_color(shift: Shift) -> str:
    if shift.people:
        return get_person_color(shift.people[0])
    return UNASSIGNED_COLOR


def calculate_shift_positions(
    day_shifts: Sequence[Shift],
    start_hour: int = 6,
    color_map: Optional[Mapping[str, str]] = None,
    tz: Optional[tzinfo] = None,
) -> list[ShiftPosition]:
    """Place one day's shifts on the week grid.

    Args:
        day_shifts: Shifts starting on the day
        start_hour: First hour shown on the grid
        color_map: Shift id to display color; missing ids use the first
            person's color, or gray for unassigned shifts
        tz: Timezone of the grid's hour axis

    Returns:
        Positions grouped by overlap group, each group ordered by start
    """
    color_map = color_map or {}
    positions: list[ShiftPosition] = []

    for group in find_overlap_groups(day_shifts):
        ordered = sorted(group, key=lambda s: s.start)
        for idx, shift in enumerate(ordered):
            local_start = localize(shift.start, tz)
            row_start = (local_start.hour - start_hour) * 60 + local_start.minute

            positions.append(
                ShiftPosition(
                    shift=shift,
                    display_color=color_map.get(shift.id) or _default_color(shift),
                    row_start=row_start,
                    row_end=row_start + shift.duration_minutes,
                    z_index=BASE_Z_INDEX + idx,
                    index_in_group=idx,
                    group_size=len(group),
                )
            )

    return positions


def combine_concurrent_shifts(merged_shifts: Sequence[MergedShift]) -> list[MergedShift]:
    """Collapse shifts sharing start and end into one block per time window.

    The first shift of each window keeps its id, title and color; the
    people of later shifts are appended without duplicates and the label
    lists everyone.
    """
    windows: dict[tuple[str, str], list[MergedShift]] = {}
    for merged in merged_shifts:
        key = (minute_key(merged.shift.start), minute_key(merged.shift.end))
        windows.setdefault(key, []).append(merged)

    combined: list[MergedShift] = []
    for group in windows.values():
        first = group[0]
        if len(group) == 1:
            combined.append(first)
            continue

        people: list[Person] = []
        seen: set[str] = set()
        for merged in group:
            for person in merged.shift.people:
                if person.id not in seen:
                    seen.add(person.id)
                    people.append(person)

        shift = first.shift.model_copy(update={"people": tuple(people)})
        combined.append(
            first.model_copy(
                update={
                    "shift": shift,
                    "people_list": ", ".join(p.name for p in people) or first.people_list,
                }
            )
        )

    return combined
