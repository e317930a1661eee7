"""Unit tests for RRuleExpander."""

import logging
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from icalendar import Calendar

from shiftprint.config.settings import ExpansionSettings
from shiftprint.ics.components import get_event_window
from shiftprint.ics.models import ICSParseResult
from shiftprint.ics.rrule_expander import (
    ExcludedDates,
    RRuleExpander,
    RRuleExpansionError,
    RRuleParseError,
)

UTC = timezone.utc


def load_events(ics_text):
    """Parse ICS text and return its VEVENT components."""
    return list(Calendar.from_ical(ics_text).walk("VEVENT"))


class TestGenerateOccurrences:
    """Tests for RRULE string expansion."""

    @pytest.fixture
    def expander(self, fixed_clock):
        return RRuleExpander(ExpansionSettings(), clock=fixed_clock)

    def test_count_limits_occurrences(self, expander):
        """Test COUNT yields exactly that many occurrences."""
        dtstart = datetime(2025, 1, 6, 8, 0, tzinfo=UTC)

        result = expander.generate_occurrences("FREQ=DAILY;COUNT=3", dtstart)

        assert result == [dtstart + timedelta(days=i) for i in range(3)]

    def test_empty_rrule_raises(self, expander):
        """Test empty RRULE string raises RRuleParseError."""
        with pytest.raises(RRuleParseError):
            expander.generate_occurrences("   ", datetime(2025, 1, 6, tzinfo=UTC))

    def test_invalid_rrule_raises(self, expander):
        """Test an unparseable RRULE raises RRuleParseError."""
        with pytest.raises(RRuleParseError):
            expander.generate_occurrences("INVALID", datetime(2025, 1, 6, tzinfo=UTC))

    def test_parse_error_is_expansion_error(self):
        """Test RRuleParseError is caught by RRuleExpansionError handlers."""
        assert issubclass(RRuleParseError, RRuleExpansionError)

    def test_unbounded_rule_stops_at_horizon(self, fixed_clock):
        """Test an unbounded rule stops horizon_years past the current moment."""
        expander = RRuleExpander(ExpansionSettings(horizon_years=1), clock=fixed_clock)
        dtstart = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)

        result = expander.generate_occurrences("FREQ=DAILY", dtstart)

        # 2025-01-01 through 2026-01-01 08:00, which is before 12:00 on the horizon day
        assert len(result) == 366
        assert result[-1] == datetime(2026, 1, 1, 8, 0, tzinfo=UTC)

    def test_max_occurrences_caps_expansion(self, fixed_clock, caplog):
        """Test max_occurrences caps the expansion and reports a warning."""
        expander = RRuleExpander(ExpansionSettings(max_occurrences=10), clock=fixed_clock)
        parse_result = ICSParseResult()

        with caplog.at_level(logging.WARNING):
            result = expander.generate_occurrences(
                "FREQ=DAILY", datetime(2025, 1, 1, 8, 0, tzinfo=UTC), parse_result
            )

        assert len(result) == 10
        assert "Limiting RRULE expansion" in caplog.text
        assert len(parse_result.warnings) == 1
        assert "Limiting RRULE expansion to 10 occurrences" in parse_result.warnings[0]

    def test_date_only_until_includes_last_day(self, expander):
        """Test a DATE-only UNTIL includes occurrences on that day."""
        dtstart = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)

        result = expander.generate_occurrences("FREQ=DAILY;UNTIL=20250103", dtstart)

        assert [d.day for d in result] == [1, 2, 3]

    def test_floating_until_with_aware_start(self, expander):
        """Test a floating UNTIL is accepted for a timezone-aware DTSTART."""
        dtstart = datetime(2025, 1, 1, 8, 0, tzinfo=UTC)

        result = expander.generate_occurrences("FREQ=DAILY;UNTIL=20250103T080000", dtstart)

        assert len(result) == 3

    def test_wall_clock_kept_across_dst(self, expander):
        """Test weekly occurrences keep local start time across a DST change."""
        tz = ZoneInfo("America/New_York")
        dtstart = datetime(2025, 3, 3, 8, 0, tzinfo=tz)

        result = expander.generate_occurrences("FREQ=WEEKLY;COUNT=3", dtstart)

        assert [d.hour for d in result] == [8, 8, 8]
        assert result[0].utcoffset() != result[2].utcoffset()


class TestExcludedDates:
    """Tests for EXDATE day matching."""

    def test_datetime_exclusion_matches_utc_day(self):
        """Test DATE-TIME exclusions match any occurrence on the same UTC day."""
        excluded = ExcludedDates()
        excluded.add(datetime(2025, 1, 20, 8, 0, tzinfo=UTC))

        assert excluded.excludes(datetime(2025, 1, 20, 15, 30, tzinfo=UTC))
        assert not excluded.excludes(datetime(2025, 1, 21, 8, 0, tzinfo=UTC))

    def test_date_exclusion_matches_local_day(self):
        """Test DATE exclusions match the occurrence's own calendar day."""
        excluded = ExcludedDates()
        excluded.add(date(2025, 1, 20))
        tz = ZoneInfo("America/Los_Angeles")

        # 20:00 local is already the 21st in UTC
        assert excluded.excludes(datetime(2025, 1, 20, 20, 0, tzinfo=tz))
        assert len(excluded) == 1


class TestExpand:
    """Tests for expanding master events with EXDATE and RECURRENCE-ID."""

    @pytest.fixture
    def expander(self, fixed_clock):
        return RRuleExpander(ExpansionSettings(), clock=fixed_clock)

    def _expand(self, expander, ics_text, result=None):
        events = load_events(ics_text)
        master = next(e for e in events if e.get("RECURRENCE-ID") is None)
        exceptions = [e for e in events if e.get("RECURRENCE-ID") is not None]
        start, end = get_event_window(master, UTC)
        return expander.expand(
            master, str(master.get("UID")), start, end, exceptions, UTC, result
        )

    def test_exdate_and_exception(self, expander, weekly_shift_ics):
        """Test EXDATE removes one Monday and RECURRENCE-ID replaces another."""
        result = self._expand(expander, weekly_shift_ics)

        assert [(o.start, o.end) for o in result] == [
            (datetime(2025, 1, 6, 8, tzinfo=UTC), datetime(2025, 1, 6, 16, tzinfo=UTC)),
            (datetime(2025, 1, 13, 9, tzinfo=UTC), datetime(2025, 1, 13, 17, tzinfo=UTC)),
            (datetime(2025, 1, 27, 8, tzinfo=UTC), datetime(2025, 1, 27, 16, tzinfo=UTC)),
        ]

        moved = result[1]
        assert moved.is_exception is True
        assert moved.summary == "John Doe - Late Start"
        assert moved.recurrence_id == datetime(2025, 1, 13, 8, tzinfo=UTC)
        assert moved.location is None

    def test_regular_occurrences_use_master_fields(self, expander, weekly_shift_ics):
        """Test generated occurrences carry master summary, location and duration."""
        result = self._expand(expander, weekly_shift_ics)

        first = result[0]
        assert first.summary == "John Doe - Morning Shift"
        assert first.location == "Front Desk"
        assert first.is_exception is False
        assert first.source_uid == "weekly-morning@example.com"
        assert first.duration_minutes == 480

    def test_occurrence_ids_are_unique(self, expander, weekly_shift_ics):
        """Test each occurrence gets a distinct id."""
        result = self._expand(expander, weekly_shift_ics)

        assert len({o.id for o in result}) == len(result)

    def test_date_valued_exdate(self, expander, calendar_factory):
        """Test an all-day EXDATE removes the occurrence on that date."""
        ics_text = calendar_factory(
            """
BEGIN:VEVENT
UID:daily@example.com
DTSTART:20250106T080000Z
DTEND:20250106T160000Z
RRULE:FREQ=DAILY;COUNT=3
EXDATE;VALUE=DATE:20250107
SUMMARY:Jane Smith - Day Shift
END:VEVENT
"""
        )

        result = self._expand(expander, ics_text)

        assert [o.start.day for o in result] == [6, 8]

    def test_malformed_exdate_is_ignored(self, expander, calendar_factory, caplog):
        """Test a malformed EXDATE is reported and excludes nothing."""
        ics_text = calendar_factory(
            """
BEGIN:VEVENT
UID:daily@example.com
DTSTART:20250106T080000Z
DTEND:20250106T160000Z
RRULE:FREQ=DAILY;COUNT=3
EXDATE:not-a-date
SUMMARY:Jane Smith - Day Shift
END:VEVENT
"""
        )

        parse_result = ICSParseResult()

        with caplog.at_level(logging.WARNING):
            result = self._expand(expander, ics_text, parse_result)

        assert len(result) == 3
        assert "EXDATE" in caplog.text
        assert any("malformed EXDATE on daily@example.com" in w for w in parse_result.warnings)

    def test_exception_with_unmatched_recurrence_id(self, expander, calendar_factory):
        """Test an exception whose RECURRENCE-ID matches nothing is not emitted."""
        ics_text = calendar_factory(
            """
BEGIN:VEVENT
UID:daily@example.com
DTSTART:20250106T080000Z
DTEND:20250106T160000Z
RRULE:FREQ=DAILY;COUNT=2
SUMMARY:Jane Smith - Day Shift
END:VEVENT
""",
            """
BEGIN:VEVENT
UID:daily@example.com
RECURRENCE-ID:20250106T090000Z
DTSTART:20250106T100000Z
DTEND:20250106T180000Z
SUMMARY:Jane Smith - Late Shift
END:VEVENT
""",
        )

        result = self._expand(expander, ics_text)

        assert [o.summary for o in result] == ["Jane Smith - Day Shift"] * 2
        assert not any(o.is_exception for o in result)

    def test_tzid_recurrence_id_matches_occurrence(self, expander, calendar_factory):
        """Test RECURRENCE-ID with TZID matches the same instant of the series."""
        ics_text = calendar_factory(
            """
BEGIN:VEVENT
UID:ny@example.com
DTSTART;TZID=America/New_York:20250106T080000
DTEND;TZID=America/New_York:20250106T160000
RRULE:FREQ=WEEKLY;COUNT=2
SUMMARY:John Doe - Morning Shift
END:VEVENT
""",
            """
BEGIN:VEVENT
UID:ny@example.com
RECURRENCE-ID:20250113T130000Z
DTSTART;TZID=America/New_York:20250113T100000
DTEND;TZID=America/New_York:20250113T180000
SUMMARY:John Doe - Late Start
END:VEVENT
""",
        )

        result = self._expand(expander, ics_text)

        assert len(result) == 2
        assert result[1].summary == "John Doe - Late Start"
        assert result[1].start.hour == 10


class TestParseExdates:
    """Tests for EXDATE collection from a master event."""

    @pytest.fixture
    def expander(self, fixed_clock):
        return RRuleExpander(ExpansionSettings(), clock=fixed_clock)

    def test_raw_lines_recover_valid_values(self, expander, calendar_factory):
        """Test valid values of a rejected EXDATE list are read from its raw text."""
        ics_text = calendar_factory(
            """
BEGIN:VEVENT
UID:ny-daily@example.com
DTSTART;TZID=America/New_York:20250106T080000
DTEND;TZID=America/New_York:20250106T160000
RRULE:FREQ=DAILY;COUNT=3
EXDATE;TZID=America/New_York:20250107T080000,bogus
SUMMARY:John Doe - Morning Shift
END:VEVENT
"""
        )
        master = load_events(ics_text)[0]
        parse_result = ICSParseResult()

        excluded = expander.parse_exdates(
            master,
            UTC,
            parse_result,
            raw_lines=[("America/New_York", "20250107T080000,bogus")],
        )

        new_york = ZoneInfo("America/New_York")
        assert len(excluded) == 1
        assert excluded.excludes(datetime(2025, 1, 7, 8, tzinfo=new_york))
        assert not excluded.excludes(datetime(2025, 1, 6, 8, tzinfo=new_york))
        assert any("'bogus'" in w for w in parse_result.warnings)

    def test_well_formed_exdate_ignores_raw_lines(self, expander, weekly_shift_ics):
        """Test raw lines are only consulted when icalendar rejected the EXDATE."""
        master = next(e for e in load_events(weekly_shift_ics) if e.get("RECURRENCE-ID") is None)
        parse_result = ICSParseResult()

        excluded = expander.parse_exdates(
            master, UTC, parse_result, raw_lines=[(None, "20250106T080000Z")]
        )

        assert excluded.excludes(datetime(2025, 1, 20, 8, tzinfo=UTC))
        assert not excluded.excludes(datetime(2025, 1, 6, 8, tzinfo=UTC))
        assert parse_result.warnings == []
