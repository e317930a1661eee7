"""Command-line interface for ShiftPrint.

Loads an ICS calendar from a file or URL and prints a monthly or weekly
shift view to the console.
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional

from . import __version__
from .config.settings import ShiftPrintSettings
from .ics.exceptions import ICSError
from .ics.fetcher import ICSFetcher
from .ics.models import ICSSource
from .pipeline import ShiftSchedule
from .render.text import TextRenderer
from .utils.logging import apply_command_line_overrides, setup_logging

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "VERBOSE", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_date(date_str: str) -> date:
    """Parse a YYYY-MM-DD command-line date.

    Raises:
        argparse.ArgumentTypeError: If the date is not in YYYY-MM-DD format
    """
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError as err:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: {date_str}. Use YYYY-MM-DD"
        ) from err


def create_parser() -> argparse.ArgumentParser:
    """Create command line argument parser.

    Example:
        >>> parser = create_parser()
        >>> args = parser.parse_args(["--file", "shifts.ics", "--view", "weekly"])
    """
    parser = argparse.ArgumentParser(
        prog="shiftprint",
        description="ShiftPrint - printable shift calendars from ICS feeds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --file shifts.ics                       # Current month
  %(prog)s --file shifts.ics --view weekly --date 2025-03-10
  %(prog)s --url https://example.com/team.ics --weeks 4 --view weekly
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show version"
    )
    parser.add_argument("--config", type=Path, help="Path to a YAML configuration file")

    source_group = parser.add_mutually_exclusive_group(required=True)
    source_group.add_argument("--file", "-f", type=Path, help="Local ICS file")
    source_group.add_argument("--url", "-u", help="ICS calendar URL")

    display_group = parser.add_argument_group("display", "Calendar view options")
    display_group.add_argument(
        "--view", choices=["monthly", "weekly"], help="Calendar view (default from config)"
    )
    display_group.add_argument(
        "--date",
        type=parse_date,
        help="Date inside the month or week to show, YYYY-MM-DD (default: today)",
    )
    display_group.add_argument(
        "--weeks", type=int, default=1, help="Number of consecutive weeks for the weekly view"
    )
    display_group.add_argument("--timezone", help="IANA display timezone")
    display_group.add_argument(
        "--time-format", choices=["12h", "24h"], help="Clock format for shift times"
    )
    display_group.add_argument(
        "--combine-concurrent",
        action="store_true",
        help="Collapse shifts with identical start and end into one block in the weekly view",
    )
    display_group.add_argument(
        "--no-legend", action="store_true", help="Do not print the color legend"
    )

    logging_group = parser.add_argument_group("logging", "Logging configuration options")
    logging_group.add_argument(
        "--log-level", choices=LOG_LEVELS, help="Set both console and file log levels"
    )
    logging_group.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    logging_group.add_argument(
        "--quiet", "-q", action="store_true", help="Only show errors on console"
    )
    logging_group.add_argument("--log-dir", type=Path, help="Write log files to this directory")
    logging_group.add_argument(
        "--no-log-colors", action="store_true", help="Disable colored console output"
    )

    return parser


def build_settings(args: argparse.Namespace) -> ShiftPrintSettings:
    """Settings from config file and environment with command-line overrides applied."""
    kwargs: dict[str, Any] = {}
    if args.config:
        kwargs["config_path"] = args.config
    settings = ShiftPrintSettings(**kwargs)

    display_updates: dict[str, Any] = {}
    if args.view:
        display_updates["view"] = args.view
    if args.timezone:
        display_updates["timezone"] = args.timezone
    if args.time_format:
        display_updates["time_format"] = args.time_format
    if args.combine_concurrent:
        display_updates["combine_concurrent_shifts"] = True
    if display_updates:
        settings.display = settings.display.model_copy(update=display_updates)

    return apply_command_line_overrides(settings, args)


async def load_ics_content(args: argparse.Namespace, settings: ShiftPrintSettings) -> str:
    """Read the ICS document from ``--file`` or download it from ``--url``.

    Raises:
        ICSError: If the download fails
        OSError: If the file cannot be read
    """
    if args.file:
        logger.debug(f"Reading ICS file {args.file}")
        return Path(args.file).read_text(encoding="utf-8")

    source = ICSSource(url=args.url, timeout=settings.fetch.request_timeout)
    async with ICSFetcher(settings.fetch) as fetcher:
        response = await fetcher.fetch_ics(source)

    if not response.success or response.content is None:
        raise ICSError(
            f"Failed to fetch calendar: {response.error_message}", response.status_code
        )
    return response.content


def render(schedule: ShiftSchedule, args: argparse.Namespace, today: date) -> str:
    """Render the requested view of ``schedule`` as text."""
    display = schedule.display
    renderer = TextRenderer(
        display.timezone,
        display.time_format,
        paper_size=display.paper_size,
        orientation=display.orientation,
        color_assignments=display.color_assignments,
    )
    target = args.date or today

    if display.view == "weekly":
        views = schedule.week_views(target, max(1, args.weeks))
        output = "\n".join(renderer.render_week(view) for view in views)
    else:
        output = renderer.render_month(schedule.month_view(target.year, target.month - 1))

    if not args.no_legend:
        legend = renderer.render_legend(schedule.legend())
        if legend:
            output = f"{output}\n{legend}"
    return output


async def run(args: argparse.Namespace, settings: ShiftPrintSettings) -> int:
    """Load, build and print the calendar. Returns a process exit code."""
    try:
        content = await load_ics_content(args, settings)
    except ICSError as e:
        logger.error(f"Could not download calendar: {e}")
        return 1
    except OSError as e:
        logger.error(f"Could not read calendar file: {e}")
        return 1

    try:
        schedule = ShiftSchedule.from_ics(content, settings)
    except ICSError as e:
        logger.error(f"Could not load calendar: {e}")
        return 1

    if schedule.parse_result is not None:
        for warning in schedule.parse_result.warnings:
            logger.verbose(warning)  # type: ignore[attr-defined]

    today = datetime.now(schedule.tz).date()
    sys.stdout.write(render(schedule, args, today))
    return 0


async def main_entry(argv: Optional[list[str]] = None) -> int:
    """Main entry point with argument parsing.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.weeks < 1:
        parser.error("--weeks must be at least 1")

    settings = build_settings(args)
    setup_logging(settings)

    return await run(args, settings)


def main() -> None:
    """Console script entry point."""
    sys.exit(asyncio.run(main_entry()))
