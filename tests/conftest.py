"""Shared fixtures for ShiftPrint tests."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from shiftprint.config.settings import ExpansionSettings, reset_settings
from shiftprint.ics.models import RawOccurrence
from shiftprint.people.extractor import generate_person_id
from shiftprint.people.models import Person
from shiftprint.people.registry import PersonRegistry
from shiftprint.shifts.models import Shift

FIXED_NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def wrap_calendar(*events: str, extra: str = "") -> str:
    """Wrap VEVENT blocks in a VCALENDAR."""
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", "PRODID:-//ShiftPrint Tests//EN"]
    if extra:
        lines.append(extra)
    body = "\r\n".join(lines) + "\r\n"
    for event in events:
        body += event.strip().replace("\n", "\r\n") + "\r\n"
    return body + "END:VCALENDAR\r\n"


def make_occurrence(
    summary: str,
    start: datetime,
    end: Optional[datetime] = None,
    uid: str = "event-1",
    **kwargs,
) -> RawOccurrence:
    """Build a RawOccurrence with sensible defaults."""
    end = end or start + timedelta(hours=8)
    return RawOccurrence(
        id=f"{uid}_{int(start.timestamp() * 1000)}",
        summary=summary,
        start=start,
        end=end,
        source_uid=uid,
        **kwargs,
    )


def make_person(name: str, color: str = "#3b82f6", color_override: Optional[str] = None) -> Person:
    """Build a Person with an id derived from the name."""
    return Person(
        id=generate_person_id(name), name=name, color=color, color_override=color_override
    )


def make_shift(
    title: str,
    start: datetime,
    end: Optional[datetime] = None,
    people: tuple = (),
    **kwargs,
) -> Shift:
    """Build a Shift keyed the way the merger keys it."""
    end = end or start + timedelta(hours=8)
    return Shift(
        id=f"{start:%Y-%m-%d %H:%M}|{end:%Y-%m-%d %H:%M}|{title}",
        title=title,
        start=start,
        end=end,
        people=tuple(people),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def clean_settings():
    """Reset the global settings instance around every test."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fixed_clock():
    """Clock frozen at 2025-01-01 12:00 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def expansion_settings():
    """Expansion settings with the default two-year horizon."""
    return ExpansionSettings()


@pytest.fixture
def weekly_shift_ics():
    """Four Monday shifts with the third excluded and the second moved an hour later."""
    return wrap_calendar(
        """
BEGIN:VEVENT
UID:weekly-morning@example.com
DTSTART:20250106T080000Z
DTEND:20250106T160000Z
RRULE:FREQ=WEEKLY;BYDAY=MO;COUNT=4
EXDATE:20250120T080000Z
SUMMARY:John Doe - Morning Shift
LOCATION:Front Desk
END:VEVENT
""",
        """
BEGIN:VEVENT
UID:weekly-morning@example.com
RECURRENCE-ID:20250113T080000Z
DTSTART:20250113T090000Z
DTEND:20250113T170000Z
SUMMARY:John Doe - Late Start
END:VEVENT
""",
    )


@pytest.fixture
def team_week_ics():
    """A small team calendar: overlapping shifts, a shared shift and an unassigned one."""
    return wrap_calendar(
        """
BEGIN:VEVENT
UID:a@example.com
DTSTART:20250303T090000Z
DTEND:20250303T170000Z
SUMMARY:Jane Smith - Day Shift
END:VEVENT
""",
        """
BEGIN:VEVENT
UID:b@example.com
DTSTART:20250303T090000Z
DTEND:20250303T170000Z
SUMMARY:Bob Jones - Day Shift
END:VEVENT
""",
        """
BEGIN:VEVENT
UID:c@example.com
DTSTART:20250303T130000Z
DTEND:20250303T210000Z
SUMMARY:Evening Shift: Alice Brown, Carl White
END:VEVENT
""",
        """
BEGIN:VEVENT
UID:d@example.com
DTSTART:20250305T060000Z
DTEND:20250305T100000Z
SUMMARY:Training Shift
END:VEVENT
""",
        extra="X-WR-CALNAME:Front Desk Rota",
    )


@pytest.fixture
def sample_occurrences():
    """Occurrences naming three people, two of them on the same shift."""
    start = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)
    return [
        make_occurrence("Jane Smith - Day Shift", start, uid="a"),
        make_occurrence("Bob Jones - Day Shift", start, uid="b"),
        make_occurrence(
            "Evening Shift: Alice Brown, Carl White",
            start + timedelta(hours=4),
            uid="c",
        ),
    ]


@pytest.fixture
def sample_registry(sample_occurrences):
    """Registry built from the sample occurrences."""
    return PersonRegistry.from_occurrences(sample_occurrences)


@pytest.fixture
def occurrence_factory():
    """Factory for RawOccurrence objects."""
    return make_occurrence


@pytest.fixture
def calendar_factory():
    """Factory wrapping VEVENT text blocks in a VCALENDAR document."""
    return wrap_calendar


@pytest.fixture
def person_factory():
    """Factory for Person objects."""
    return make_person


@pytest.fixture
def shift_factory():
    """Factory for Shift objects."""
    return make_shift


@pytest.fixture
def restore_app_logger():
    """Remove handlers added to the shiftprint logger during a test."""
    yield
    app_logger = logging.getLogger("shiftprint")
    for handler in app_logger.handlers:
        handler.close()
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
