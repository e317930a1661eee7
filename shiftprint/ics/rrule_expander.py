"""RRULE expansion for recurring shift events."""

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, Callable, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from dateutil.rrule import rrulestr
from icalendar import Event as ICalEvent, vDDDTypes

from ..config.settings import ExpansionSettings
from .components import build_occurrence, get_event_window, get_text, property_errors
from .datetime_utils import UTC, timestamp_key, to_datetime, utc_day
from .models import ICSParseResult, RawOccurrence

logger = logging.getLogger(__name__)


class RRuleExpansionError(Exception):
    """Base exception for RRULE expansion errors."""


class RRuleParseError(RRuleExpansionError):
    """Error parsing RRULE string."""


class ExcludedDates:
    """EXDATE values of one master event, matched at day granularity.

    DATE-TIME exclusions are compared on their UTC calendar day. Pure DATE
    exclusions carry no instant and are compared on the occurrence's own
    calendar day.
    """

    def __init__(self) -> None:
        self.utc_days: set[date] = set()
        self.local_days: set[date] = set()

    def add(self, value: date) -> None:
        if isinstance(value, datetime):
            self.utc_days.add(utc_day(value))
        else:
            self.local_days.add(value)

    def excludes(self, occurrence: datetime) -> bool:
        return utc_day(occurrence) in self.utc_days or occurrence.date() in self.local_days

    def __len__(self) -> int:
        return len(self.utc_days) + len(self.local_days)


class RRuleExpander:
    """Client-side RRULE expansion using python-dateutil.

    Expands a recurring master VEVENT from its own DTSTART up to a horizon
    ``horizon_years`` past the current moment, dropping EXDATE days and
    substituting RECURRENCE-ID overrides for the instants they replace.
    """

    def __init__(
        self,
        settings: Optional[ExpansionSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize RRuleExpander.

        Args:
            settings: Expansion configuration (horizon and occurrence cap)
            clock: Returns the current moment; defaults to ``datetime.now(UTC)``
        """
        self.settings = settings or ExpansionSettings()
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def expansion_end(self, dtstart: datetime) -> datetime:
        """Exclusive upper bound for generated occurrences."""
        now = self.clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=UTC)
        return now.astimezone(dtstart.tzinfo) + relativedelta(years=self.settings.horizon_years)

    def generate_occurrences(
        self, rrule_string: str, dtstart: datetime, result: Optional[ICSParseResult] = None
    ) -> list[datetime]:
        """Generate occurrence start times for an RRULE anchored at ``dtstart``.

        Hitting ``max_occurrences`` truncates the list and is reported as a
        warning on ``result``.

        Raises:
            RRuleParseError: If the RRULE string cannot be parsed
            RRuleExpansionError: If iterating the rule fails
        """
        if not rrule_string or not rrule_string.strip():
            raise RRuleParseError("Empty RRULE string")

        normalized = self._normalize_until(rrule_string.strip(), dtstart)
        try:
            rule = rrulestr(normalized, dtstart=dtstart)
        except (ValueError, TypeError) as e:
            raise RRuleParseError(f"Invalid RRULE '{rrule_string}': {e}") from e

        end_window = self.expansion_end(dtstart)
        max_occurrences = self.settings.max_occurrences
        occurrences: list[datetime] = []

        try:
            for occurrence in rule:
                if occurrence >= end_window:
                    break
                if len(occurrences) >= max_occurrences:
                    warning = (
                        f"Limiting RRULE expansion to {max_occurrences} occurrences: {rrule_string}"
                    )
                    self._warn(warning, result)
                    break
                occurrences.append(occurrence)
        except (ValueError, TypeError, OverflowError) as e:
            raise RRuleExpansionError(f"Failed to expand RRULE '{rrule_string}': {e}") from e

        logger.debug(
            "RRULE expansion: dtstart=%s rrule=%s occurrences=%d window_end=%s",
            dtstart.isoformat(),
            rrule_string,
            len(occurrences),
            end_window.isoformat(),
        )
        return occurrences

    def _normalize_until(self, rrule_string: str, dtstart: datetime) -> str:
        """Rewrite a floating or DATE-only UNTIL as UTC so it matches an aware DTSTART."""
        if dtstart.tzinfo is None:
            return rrule_string

        parts = []
        for part in rrule_string.split(";"):
            key, _, value = part.partition("=")
            if key.strip().upper() == "UNTIL" and value and not value.upper().endswith("Z"):
                try:
                    until = date_parser.parse(value)
                except (ValueError, OverflowError) as e:
                    raise RRuleParseError(f"Invalid UNTIL value '{value}': {e}") from e
                if len(value.strip()) == 8:
                    # DATE-only UNTIL includes the whole day
                    until = datetime.combine(until.date(), time(23, 59, 59))
                until = until.replace(tzinfo=dtstart.tzinfo).astimezone(UTC)
                part = f"{key}={until.strftime('%Y%m%dT%H%M%SZ')}"
            parts.append(part)
        return ";".join(parts)

    def parse_exdates(
        self,
        component: ICalEvent,
        default_tz: tzinfo,
        result: Optional[ICSParseResult] = None,
        raw_lines: Optional[Sequence[tuple[Optional[str], str]]] = None,
    ) -> ExcludedDates:
        """Collect EXDATE values; malformed values are reported and contribute nothing.

        Args:
            component: Master VEVENT
            default_tz: Timezone for floating values
            result: Parse result that collects warnings
            raw_lines: Unparsed (TZID, text) EXDATE lines of this master, used
                to recover the valid values of a list icalendar rejected
        """
        excluded = ExcludedDates()
        uid = get_text(component, "UID")
        errors = property_errors(component, "EXDATE")

        if errors and raw_lines is not None:
            for tzid, text in raw_lines:
                for value in self._parse_exdate_text(text, tzid, uid, result):
                    self._exclude(excluded, value, default_tz)
            return excluded

        for message in errors:
            self._warn(f"Ignoring malformed EXDATE on {uid}: {message}", result)

        props = component.get("EXDATE")
        if props is None:
            return excluded
        if not isinstance(props, list):
            props = [props]

        for prop in props:
            for value in self._exdate_values(prop, uid, result):
                self._exclude(excluded, value, default_tz)

        return excluded

    def _exclude(self, excluded: ExcludedDates, value: date, default_tz: tzinfo) -> None:
        if isinstance(value, datetime):
            value = to_datetime(value, default_tz)
        excluded.add(value)

    def _exdate_values(
        self, prop: Any, uid: Optional[str], result: Optional[ICSParseResult]
    ) -> Iterable[date]:
        """Yield the date values of one EXDATE property."""
        try:
            dts = prop.dts
        except AttributeError:
            # Unparsed text value
            yield from self._parse_exdate_text(str(prop), None, uid, result)
            return
        except ValueError:
            # Broken property; its parse error is on the component
            return

        for item in dts:
            value = getattr(item, "dt", None)
            if isinstance(value, date):
                yield value
            else:
                self._warn(f"Ignoring EXDATE value of unexpected type on {uid}: {value!r}", result)

    def _parse_exdate_text(
        self,
        text: str,
        tzid: Optional[str],
        uid: Optional[str],
        result: Optional[ICSParseResult],
    ) -> list[date]:
        """Parse a comma-separated EXDATE value list, skipping values that fail."""
        values: list[date] = []
        for raw in text.split(","):
            raw = raw.strip()
            if not raw:
                continue
            try:
                value = vDDDTypes.from_ical(raw, timezone=tzid)
            except (ValueError, TypeError) as e:
                self._warn(f"Ignoring malformed EXDATE value '{raw}' on {uid}: {e}", result)
                continue
            if isinstance(value, date):
                values.append(value)
            else:
                self._warn(f"Ignoring EXDATE value of unexpected type on {uid}: {raw!r}", result)
        return values

    def _warn(self, warning: str, result: Optional[ICSParseResult]) -> None:
        logger.warning(warning)
        if result is not None:
            result.add_warning(warning)

    def index_exceptions(
        self, exceptions: list[ICalEvent], default_tz: tzinfo
    ) -> dict[int, ICalEvent]:
        """Map each RECURRENCE-ID instant (ms timestamp) to its override component."""
        exception_map: dict[int, ICalEvent] = {}

        for exc in exceptions:
            recurrence_id = self.parse_recurrence_id(exc, default_tz)
            if recurrence_id is not None:
                exception_map[timestamp_key(recurrence_id)] = exc

        return exception_map

    def parse_recurrence_id(self, component: ICalEvent, default_tz: tzinfo) -> Optional[datetime]:
        """Resolve a component's RECURRENCE-ID, or None (with a warning) if malformed."""
        prop = component.get("RECURRENCE-ID")
        if isinstance(prop, list):
            prop = prop[0] if prop else None

        try:
            value = getattr(prop, "dt", None)
        except ValueError:
            # broken property
            value = prop = None
        if value is None and prop is not None:
            try:
                value = date_parser.parse(str(prop))
            except (ValueError, OverflowError) as e:
                logger.warning(f"Failed to parse RECURRENCE-ID '{prop}': {e}")
                return None

        if not isinstance(value, date):
            logger.warning(
                f"Ignoring exception with malformed RECURRENCE-ID on {get_text(component, 'UID')}"
            )
            return None

        return to_datetime(value, default_tz)

    def expand(
        self,
        master: ICalEvent,
        uid: str,
        start: datetime,
        end: datetime,
        exceptions: list[ICalEvent],
        default_tz: tzinfo,
        result: Optional[ICSParseResult] = None,
        raw_exdates: Optional[Sequence[tuple[Optional[str], str]]] = None,
    ) -> list[RawOccurrence]:
        """Expand a recurring master into concrete occurrences.

        Args:
            master: Recurring master VEVENT (has RRULE, no RECURRENCE-ID)
            uid: Master UID
            start: Resolved master start
            end: Resolved master end
            exceptions: Override components sharing the master's UID
            default_tz: Timezone for floating values
            result: Parse result that collects warnings
            raw_exdates: Unparsed EXDATE lines of the master, see :meth:`parse_exdates`

        Returns:
            Occurrences in chronological order of the rule

        Raises:
            RRuleExpansionError: If the rule cannot be parsed or iterated
        """
        rrule_prop = master.get("RRULE")
        if isinstance(rrule_prop, list):
            rrule_prop = rrule_prop[0] if rrule_prop else None
        if rrule_prop is None:
            raise RRuleParseError(f"Event {uid} has no RRULE")

        rrule_string = (
            rrule_prop.to_ical().decode("utf-8")
            if hasattr(rrule_prop, "to_ical")
            else str(rrule_prop)
        )

        duration = end - start
        excluded = self.parse_exdates(master, default_tz, result, raw_exdates)
        exception_map = self.index_exceptions(exceptions, default_tz)

        results: list[RawOccurrence] = []
        excluded_count = 0
        replaced_count = 0

        for occurrence_start in self.generate_occurrences(rrule_string, start, result):
            if excluded.excludes(occurrence_start):
                excluded_count += 1
                continue

            override = exception_map.get(timestamp_key(occurrence_start))
            if override is not None:
                window = get_event_window(override, default_tz)
                if window is None:
                    logger.debug(f"Exception for {uid} at {occurrence_start} has no start/end")
                    continue
                results.append(
                    build_occurrence(
                        override,
                        uid,
                        window[0],
                        window[1],
                        is_exception=True,
                        recurrence_id=occurrence_start,
                    )
                )
                replaced_count += 1
                continue

            results.append(
                build_occurrence(master, uid, occurrence_start, occurrence_start + duration)
            )

        logger.debug(
            f"Expanded {uid}: {len(results)} occurrences "
            f"({excluded_count} excluded, {replaced_count} replaced by exceptions)"
        )
        return results
