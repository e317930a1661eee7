"""Unit tests for ShiftSchedule."""

from datetime import date, datetime, timezone

import pytest

from shiftprint.config.settings import DisplaySettings, ShiftPrintSettings
from shiftprint.ics.exceptions import ICSParseError
from shiftprint.people.registry import DEFAULT_PALETTE
from shiftprint.pipeline import ShiftSchedule
from shiftprint.shifts.models import TimeRange

UTC = timezone.utc
TODAY = date(2025, 3, 4)


@pytest.fixture
def schedule(sample_occurrences):
    return ShiftSchedule(sample_occurrences, display=DisplaySettings(timezone="UTC"), today=TODAY)


@pytest.fixture
def settings(tmp_path):
    return ShiftPrintSettings(
        config_dir=tmp_path / "config",
        data_dir=tmp_path / "data",
        display=DisplaySettings(timezone="UTC"),
    )


class TestConstruction:
    """Tests for building schedules."""

    def test_registry_from_occurrences(self, schedule):
        """Test the person snapshot is derived from the occurrences."""
        assert [p.name for p in schedule.registry.people()] == [
            "Jane Smith",
            "Bob Jones",
            "Alice Brown",
            "Carl White",
        ]

    def test_from_ics(self, team_week_ics, settings, fixed_clock):
        """Test from_ics parses the document and keeps the parse result."""
        schedule = ShiftSchedule.from_ics(team_week_ics, settings, clock=fixed_clock, today=TODAY)

        assert len(schedule.occurrences) == 4
        assert schedule.parse_result.calendar_name == "Front Desk Rota"
        assert len(schedule.registry) == 4

    def test_from_ics_invalid(self, settings):
        """Test an unparseable document raises ICSParseError."""
        with pytest.raises(ICSParseError):
            ShiftSchedule.from_ics("not a calendar", settings)

    def test_merge(self, schedule):
        """Test merge groups the two day shifts together."""
        result = schedule.merge()

        assert [s.title for s in result.shifts] == ["Day Shift", "Evening Shift"]


class TestColorAssignments:
    """Tests for replacing color overrides."""

    def test_with_color_assignments(self, schedule):
        """Test a new schedule carries the overrides and shares the registry."""
        updated = schedule.with_color_assignments({"Jane Smith": "#000000"})

        assert updated.registry is schedule.registry
        assert updated.merge().merged_shifts[0].display_color == "#000000"
        assert schedule.merge().merged_shifts[0].display_color == DEFAULT_PALETTE[0]
        assert schedule.color_assignments == {}

    def test_legend(self, schedule):
        """Test the legend reflects color assignments."""
        legend = schedule.with_color_assignments({"Bob Jones": "#000000"}).legend()

        assert [(p.name, c) for p, c in legend][:2] == [
            ("Jane Smith", DEFAULT_PALETTE[0]),
            ("Bob Jones", "#000000"),
        ]


class TestWeekView:
    """Tests for week_view."""

    def test_layout(self, schedule):
        """Test the week grid holds the detected range and stacked positions."""
        view = schedule.week_view(date(2025, 3, 5))

        assert view.start == date(2025, 3, 2)
        assert view.time_range == TimeRange(start_hour=8, end_hour=22)
        assert view.time_slots == tuple(range(8, 22))
        assert [d.is_today for d in view.days].index(True) == 2

        monday = view.columns[1]
        assert [p.shift.title for p in monday.positions] == ["Day Shift", "Evening Shift"]
        assert [p.group_size for p in monday.positions] == [2, 2]
        assert monday.positions[0].row_start == 60
        assert monday.positions[0].display_color == DEFAULT_PALETTE[0]
        assert monday.positions[1].display_color == DEFAULT_PALETTE[2]

    def test_empty_week_uses_default_hours(self, schedule):
        """Test a week with no shifts uses the configured default hours."""
        view = schedule.week_view(date(2025, 4, 9))

        assert view.time_range == TimeRange(start_hour=6, end_hour=23)
        assert all(not column.positions for column in view.columns)

    def test_display_timezone_groups_days(self, occurrence_factory):
        """Test a late UTC shift is placed on the previous day in New York."""
        late = occurrence_factory(
            "Jane Smith - Night Shift", datetime(2025, 3, 4, 2, 0, tzinfo=UTC)
        )
        schedule = ShiftSchedule(
            [late], display=DisplaySettings(timezone="America/New_York"), today=TODAY
        )

        view = schedule.week_view(date(2025, 3, 3))

        assert len(view.columns[1].positions) == 1
        assert view.columns[1].day.date == date(2025, 3, 3)

    def test_combine_concurrent(self, occurrence_factory):
        """Test concurrent shifts collapse into one block when enabled."""
        nine = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)
        occurrences = [
            occurrence_factory("Jane Smith - Front Desk", nine, uid="a"),
            occurrence_factory("Bob Jones - Phones", nine, uid="b"),
        ]
        display = DisplaySettings(timezone="UTC", combine_concurrent_shifts=True)

        view = ShiftSchedule(occurrences, display=display, today=TODAY).week_view(nine.date())

        (position,) = view.columns[1].positions
        assert position.shift.title == "Front Desk"
        assert [p.name for p in position.shift.people] == ["Jane Smith", "Bob Jones"]
        assert position.display_color == DEFAULT_PALETTE[0]

    def test_concurrent_kept_apart_by_default(self, occurrence_factory):
        """Test concurrent shifts with different titles stay separate by default."""
        nine = datetime(2025, 3, 3, 9, 0, tzinfo=UTC)
        occurrences = [
            occurrence_factory("Jane Smith - Front Desk", nine, uid="a"),
            occurrence_factory("Bob Jones - Phones", nine, uid="b"),
        ]
        schedule = ShiftSchedule(occurrences, display=DisplaySettings(timezone="UTC"), today=TODAY)

        view = schedule.week_view(nine.date())

        assert len(view.columns[1].positions) == 2

    def test_week_views(self, schedule):
        """Test consecutive week pages start a week apart."""
        views = schedule.week_views(date(2025, 3, 5), 3)

        assert [v.start for v in views] == [date(2025, 3, 2), date(2025, 3, 9), date(2025, 3, 16)]


class TestMonthView:
    """Tests for month_view."""

    def test_month(self, schedule):
        """Test the month grid places shifts on their days."""
        view = schedule.month_view(2025, 2)

        assert (view.year, view.month) == (2025, 2)
        assert len(view.weeks) == 6
        monday = view.weeks[1].days[1]
        assert monday.date == date(2025, 3, 3)
        assert [m.shift.title for m in monday.shifts] == ["Day Shift", "Evening Shift"]

    def test_invalid_month(self, schedule):
        """Test an out-of-range month raises ValueError."""
        with pytest.raises(ValueError):
            schedule.month_view(2025, 12)
