"""Helpers for reading VEVENT components into RawOccurrence values."""

import logging
from datetime import datetime, timedelta, tzinfo
from typing import Any, Optional

from icalendar import Event as ICalEvent
from icalendar.parser import Contentlines

from .datetime_utils import timestamp_key, to_datetime
from .models import RawOccurrence

logger = logging.getLogger(__name__)


def first_value(component: ICalEvent, name: str) -> Any:
    """Return the first value of a property that may appear more than once."""
    value = component.get(name)
    if isinstance(value, list):
        return value[0] if value else None
    return value


def get_text(component: ICalEvent, name: str) -> Optional[str]:
    """Read a text property, returning None when absent or blank."""
    value = first_value(component, name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def property_errors(component: ICalEvent, name: str) -> list[str]:
    """Parse errors icalendar recorded for ``name`` on this component."""
    errors = getattr(component, "errors", None) or []
    return [message for prop, message in errors if str(prop).upper() == name]


def get_dt(component: ICalEvent, name: str) -> Any:
    """Typed value of a date, time or duration property.

    Returns None when the property is absent or icalendar could not parse
    it. Unparseable values are either dropped by icalendar or kept as broken
    properties that raise on attribute access, depending on its version.
    """
    if property_errors(component, name):
        return None
    prop = first_value(component, name)
    if prop is None:
        return None
    try:
        return prop.dt
    except (AttributeError, ValueError):
        return None


def get_event_window(
    component: ICalEvent, default_tz: tzinfo
) -> Optional[tuple[datetime, datetime]]:
    """Resolve an event's start and end.

    DTEND wins; a DURATION is used when DTEND is absent. Returns None when
    either end of the window cannot be determined.
    """
    dtstart = get_dt(component, "DTSTART")
    if dtstart is None:
        return None

    try:
        start = to_datetime(dtstart, default_tz)

        dtend = get_dt(component, "DTEND")
        if dtend is not None:
            return start, to_datetime(dtend, default_tz)
    except TypeError:
        return None

    duration = get_dt(component, "DURATION")
    if isinstance(duration, timedelta):
        return start, start + duration

    return None


def collect_raw_exdates(ics_content: str) -> dict[str, list[tuple[Optional[str], str]]]:
    """Unparsed EXDATE lines of each recurring master, keyed by UID.

    Each entry is the line's TZID parameter (or None) and its raw value
    text. Read from the document's content lines, so values icalendar
    rejected are still available for parsing one by one.
    """
    found: dict[str, list[tuple[Optional[str], str]]] = {}
    stack: list[str] = []
    uid: Optional[str] = None
    is_override = False
    lines: list[tuple[Optional[str], str]] = []

    for line in Contentlines.from_ical(ics_content):
        if not line:
            continue
        try:
            name, params, value = line.parts()
        except ValueError:
            continue
        name = name.upper()

        if name == "BEGIN":
            stack.append(value.strip().upper())
            if stack[-1] == "VEVENT":
                uid, is_override, lines = None, False, []
        elif name == "END":
            if stack and stack[-1] == "VEVENT" and uid and not is_override:
                found[uid] = lines
            if stack:
                stack.pop()
        elif stack and stack[-1] == "VEVENT":
            if name == "UID":
                uid = value.strip()
            elif name == "RECURRENCE-ID":
                is_override = True
            elif name == "EXDATE":
                lines.append((params.get("TZID"), value))

    return found


def build_occurrence(
    component: ICalEvent,
    uid: str,
    start: datetime,
    end: datetime,
    is_exception: bool = False,
    recurrence_id: Optional[datetime] = None,
) -> RawOccurrence:
    """Create a RawOccurrence from a component's descriptive properties."""
    return RawOccurrence(
        id=f"{uid}_{timestamp_key(start)}",
        summary=get_text(component, "SUMMARY") or "Untitled",
        start=start,
        end=end,
        location=get_text(component, "LOCATION"),
        description=get_text(component, "DESCRIPTION"),
        color=get_text(component, "COLOR"),
        source_uid=uid,
        recurrence_id=recurrence_id,
        is_exception=is_exception,
    )
