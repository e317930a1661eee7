"""Unit tests for the plain-text renderer."""

from datetime import date

import pytest

from shiftprint.config.settings import DisplaySettings
from shiftprint.pipeline import ShiftSchedule
from shiftprint.render.text import TextRenderer


@pytest.fixture
def schedule(sample_occurrences):
    return ShiftSchedule(
        sample_occurrences, display=DisplaySettings(timezone="UTC"), today=date(2025, 3, 4)
    )


class TestRenderWeek:
    """Tests for render_week."""

    def test_week_lines(self, schedule):
        """Test the week page lists each day with its stacked shifts."""
        text = TextRenderer("UTC").render_week(schedule.week_view(date(2025, 3, 5)))
        lines = text.splitlines()

        assert lines[0] == "Week of Mar 2, 2025 - Mar 8, 2025"
        assert lines[1] == "Hours 08:00-22:00"
        assert lines[2] == "Paper letter portrait, scale 0.94, text 11px/10px"
        assert "Sun Mar 2" in lines
        assert "Tue Mar 4 (today)" in lines
        assert (
            "    09:00-17:00  Day Shift  [Jane Smith, Bob Jones]  "
            "linear-gradient(135deg, #3b82f6 0%, #ef4444 100%)  text #ffffff  layer 1/2"
        ) in lines
        assert (
            "    13:00-21:00  Evening Shift  [Alice Brown, Carl White]  "
            "linear-gradient(135deg, #10b981 0%, #f59e0b 100%)  text #000000  layer 2/2"
        ) in lines
        assert lines.count("    (no shifts)") == 6

    def test_12h_clock(self, schedule):
        """Test the renderer honours the 12-hour clock."""
        text = TextRenderer("UTC", "12h").render_week(schedule.week_view(date(2025, 3, 5)))

        assert "9:00 AM-5:00 PM" in text

    def test_paper_line_follows_paper_size(self, schedule):
        """Test the paper line reports the scale of the configured paper."""
        renderer = TextRenderer("UTC", paper_size="tabloid", orientation="landscape")
        lines = renderer.render_week(schedule.week_view(date(2025, 3, 5))).splitlines()

        assert lines[2] == "Paper tabloid landscape, scale 1.25, text 16px/14px"

    def test_shared_color_gives_solid_fill(self, schedule):
        """Test people sharing one color get a solid fill, not a gradient."""
        assignments = {"Bob Jones": "#3b82f6"}
        view = schedule.with_color_assignments(assignments).week_view(date(2025, 3, 5))

        text = TextRenderer("UTC", color_assignments=assignments).render_week(view)

        assert (
            "    09:00-17:00  Day Shift  [Jane Smith, Bob Jones]  #3b82f6  text #ffffff  layer 1/2"
        ) in text.splitlines()

    def test_named_color_has_no_text_color(self, schedule):
        """Test a non-hex color is printed without a contrast text color."""
        assignments = {"Jane Smith": "navy", "Bob Jones": "navy"}
        view = schedule.with_color_assignments(assignments).week_view(date(2025, 3, 5))

        text = TextRenderer("UTC", color_assignments=assignments).render_week(view)

        assert "    09:00-17:00  Day Shift  [Jane Smith, Bob Jones]  navy  layer 1/2" in text


class TestRenderMonth:
    """Tests for render_month."""

    def test_month_lines(self, schedule):
        """Test the month page lists in-month days and their shifts."""
        text = TextRenderer("UTC").render_month(schedule.month_view(2025, 2))
        lines = text.splitlines()

        assert lines[0] == "March 2025"
        assert "Week 1" in lines
        assert "Week 6" in lines
        assert "  Sat Mar 1" in lines
        assert "  Sun Feb 23" not in lines
        assert "    09:00-17:00  Day Shift  [Jane Smith, Bob Jones]" in lines


class TestRenderLegend:
    """Tests for render_legend."""

    def test_legend(self, schedule):
        """Test each person is listed with their color."""
        text = TextRenderer("UTC").render_legend(schedule.legend())

        assert text.splitlines()[:2] == ["Legend", "  #3b82f6  Jane Smith"]

    def test_empty_legend(self):
        """Test no people render nothing."""
        assert TextRenderer("UTC").render_legend([]) == ""
