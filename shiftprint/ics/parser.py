"""iCalendar parser producing concrete shift occurrences."""

import logging
import uuid
from datetime import datetime, tzinfo
from typing import Callable, Optional, cast

from icalendar import Calendar, Event as ICalEvent

from ..config.settings import ExpansionSettings
from .components import (
    build_occurrence,
    collect_raw_exdates,
    get_event_window,
    get_text,
    property_errors,
)
from .datetime_utils import UTC, resolve_timezone
from .exceptions import ICSParseError
from .models import ICSParseResult, RawOccurrence
from .rrule_expander import RRuleExpander, RRuleExpansionError

logger = logging.getLogger(__name__)


class ClassifiedEvents:
    """VEVENTs split into recurring masters, exceptions and single events."""

    def __init__(self) -> None:
        self.masters: dict[str, ICalEvent] = {}
        self.exceptions: dict[str, list[ICalEvent]] = {}
        self.singles: list[tuple[str, ICalEvent]] = []
        self.malformed: list[tuple[str, ICalEvent]] = []

    @property
    def exception_count(self) -> int:
        return sum(len(items) for items in self.exceptions.values())


class ICSParser:
    """Parse an iCalendar document into RawOccurrence values.

    Recurring masters are expanded through :class:`RRuleExpander`; failures
    below the document level degrade to the largest usable result and are
    reported as warnings. Only an unparseable document raises.
    """

    def __init__(
        self,
        settings: Optional[ExpansionSettings] = None,
        default_timezone: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """Initialize ICS parser.

        Args:
            settings: Recurrence expansion settings
            default_timezone: Timezone for floating times when neither the
                settings nor the calendar's X-WR-TIMEZONE name one
            clock: Current-moment provider forwarded to the expander
        """
        self.settings = settings or ExpansionSettings()
        self.default_timezone = default_timezone
        self.rrule_expander = RRuleExpander(self.settings, clock=clock)
        logger.debug("ICS parser initialized")

    def parse(self, ics_content: str) -> ICSParseResult:
        """Parse ICS content into concrete occurrences.

        Args:
            ics_content: Raw ICS document text

        Returns:
            Parse result with occurrences, statistics and warnings

        Raises:
            ICSParseError: If the document is empty or not valid iCalendar
        """
        calendar = self._load_calendar(ics_content)

        calendar_tz_name = self._get_calendar_property(calendar, "X-WR-TIMEZONE")
        default_tz = self._resolve_default_timezone(calendar_tz_name)

        result = ICSParseResult(
            calendar_name=self._get_calendar_property(calendar, "X-WR-CALNAME"),
            timezone=calendar_tz_name,
        )

        classified = self.classify_events(calendar, result)
        result.recurring_event_count = len(classified.masters)
        result.exception_count = classified.exception_count
        result.single_event_count = len(classified.singles)

        raw_exdates: dict[str, list[tuple[Optional[str], str]]] = {}
        if any(property_errors(master, "EXDATE") for master in classified.masters.values()):
            raw_exdates = collect_raw_exdates(ics_content)

        occurrences: list[RawOccurrence] = []

        for uid, master in classified.masters.items():
            occurrences.extend(
                self._expand_master(
                    uid,
                    master,
                    classified.exceptions.get(uid, []),
                    default_tz,
                    result,
                    raw_exdates.get(uid),
                )
            )

        for uid, event in classified.singles:
            window = get_event_window(event, default_tz)
            if window is None:
                result.skipped_event_count += 1
                continue
            occurrences.append(build_occurrence(event, uid, window[0], window[1]))

        result.occurrences = occurrences
        logger.info(
            f"Parsed {result.event_count} events into {len(occurrences)} occurrences "
            f"({result.recurring_event_count} recurring, {result.exception_count} exceptions, "
            f"{result.skipped_event_count} skipped)"
        )
        return result

    def parse_occurrences(self, ics_content: str) -> list[RawOccurrence]:
        """Parse ICS content and return only the occurrences."""
        return self.parse(ics_content).occurrences

    def _load_calendar(self, ics_content: str) -> Calendar:
        """Parse the document text into a VCALENDAR component."""
        if ics_content is None or not ics_content.strip():
            raise ICSParseError("Failed to parse ICS: empty content")

        try:
            calendar = Calendar.from_ical(ics_content)
        except (ValueError, IndexError, KeyError) as e:
            logger.exception("Failed to parse ICS content")
            raise ICSParseError(f"Failed to parse ICS: {e}") from e

        if getattr(calendar, "name", None) != "VCALENDAR":
            raise ICSParseError(
                f"Failed to parse ICS: expected VCALENDAR, found {getattr(calendar, 'name', None)}"
            )

        return cast("Calendar", calendar)

    def _resolve_default_timezone(self, calendar_tz_name: Optional[str]) -> tzinfo:
        """Timezone for floating times: settings, then calendar, then parser default."""
        for name in (self.settings.default_timezone, calendar_tz_name, self.default_timezone):
            if name:
                return resolve_timezone(name)
        return UTC

    def classify_events(
        self, calendar: Calendar, result: Optional[ICSParseResult] = None
    ) -> ClassifiedEvents:
        """Split VEVENTs into recurring masters, exceptions and single events.

        A component with RECURRENCE-ID is an exception; otherwise one with an
        RRULE is a recurring master; anything else is a single event. A
        component whose RECURRENCE-ID failed to parse is dropped with a warning.
        """
        classified = ClassifiedEvents()

        for component in calendar.walk("VEVENT"):
            event = cast("ICalEvent", component)
            uid = get_text(event, "UID") or str(uuid.uuid4())
            if result is not None:
                result.event_count += 1

            recurrence_errors = property_errors(event, "RECURRENCE-ID")
            if recurrence_errors:
                warning = (
                    f"Ignoring exception {uid} with malformed RECURRENCE-ID: "
                    f"{recurrence_errors[0]}"
                )
                logger.warning(warning)
                if result is not None:
                    result.add_warning(warning)
                classified.malformed.append((uid, event))
            elif event.get("RECURRENCE-ID") is not None:
                classified.exceptions.setdefault(uid, []).append(event)
            elif event.get("RRULE") is not None:
                if uid in classified.masters:
                    logger.warning(f"Duplicate recurring master {uid}, keeping the last one")
                classified.masters[uid] = event
            else:
                classified.singles.append((uid, event))

        orphaned = set(classified.exceptions) - set(classified.masters)
        if orphaned:
            logger.debug(f"{len(orphaned)} exception UIDs have no recurring master")

        return classified

    def _expand_master(
        self,
        uid: str,
        master: ICalEvent,
        exceptions: list[ICalEvent],
        default_tz: tzinfo,
        result: ICSParseResult,
        raw_exdates: Optional[list[tuple[Optional[str], str]]] = None,
    ) -> list[RawOccurrence]:
        """Expand one master, falling back to its single original occurrence on failure."""
        window = get_event_window(master, default_tz)
        if window is None:
            result.skipped_event_count += 1
            return []

        start, end = window
        try:
            return self.rrule_expander.expand(
                master, uid, start, end, exceptions, default_tz, result, raw_exdates
            )
        except RRuleExpansionError as e:
            warning = f"RRULE expansion failed for {uid}, using original occurrence: {e}"
            logger.warning(warning)
            result.add_warning(warning)
            return [build_occurrence(master, uid, start, end)]

    def _get_calendar_property(self, calendar: Calendar, prop: str) -> Optional[str]:
        """Get a calendar-level property as text."""
        value = calendar.get(prop)
        return str(value) if value is not None else None
