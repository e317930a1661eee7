"""Extract person names and a shift title from free-text event summaries.

Summaries seen in shift calendars follow a handful of loose conventions::

    John Doe - Morning Shift
    Morning Shift: Jane Smith, John Doe
    John, Jane, Mike (Evening)
    Jane Smith (Standby)

Each convention is a :class:`SplitRule`; rules are tried in order and the
first one that yields a split wins. Summaries no rule can split are read
as a bare list of names.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

TITLE_KEYWORDS = (
    "shift",
    "break",
    "lunch",
    "meeting",
    "standby",
    "on-call",
    "training",
    "holiday",
    "vacation",
    "sick",
    "personal",
    "day",
    "night",
    "evening",
    "morning",
    "afternoon",
)

# Tokens containing these are never names
NAME_REJECT_KEYWORDS = ("shift", "break")

MAX_NAME_LENGTH = 100

_NAME_DELIMITERS = re.compile(r"[,&;/]|\band\s+")
_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*")
_FULLY_PARENTHETICAL = re.compile(r"^\(.*\)$")
_TRAILING_TIME = re.compile(r"\b\d{1,2}:\d{2}\b.*$", re.IGNORECASE)
_CAPITALIZED = re.compile(r"^[A-Z]")
_WHITESPACE = re.compile(r"\s+")
_NON_ID_CHARS = re.compile(r"[^a-z0-9\s_]")


class ExtractedData(BaseModel):
    """Names and title read from one summary."""

    names: list[str] = Field(default_factory=list, description="Person names in summary order")
    title: str = Field(default="", description="Shift title with names removed")


@dataclass(frozen=True)
class SplitRule:
    """One ``<part1> <separator> <part2>`` summary convention."""

    name: str
    pattern: re.Pattern

    def apply(self, summary: str) -> Optional[ExtractedData]:
        """Split ``summary`` into names and title, or return None on no match."""
        match = self.pattern.match(summary)
        if not match:
            return None

        part1, part2 = match.group(1), match.group(2)

        if looks_like_name(part1):
            return ExtractedData(names=parse_names(part1), title=part2)
        if looks_like_name(part2):
            return ExtractedData(names=parse_names(part2), title=part1)

        names = parse_names(part1)
        if names:
            return ExtractedData(names=names, title=part2)
        return None


SPLIT_RULES: tuple[SplitRule, ...] = (
    SplitRule("dash", re.compile(r"^([^-\n]+)\s*-\s*(.+)$", re.DOTALL)),
    SplitRule("colon", re.compile(r"^(.+?):\s*(.+)$", re.DOTALL)),
    SplitRule("parenthetical", re.compile(r"^(.+?)\s*\((.+?)\)$", re.DOTALL)),
)


def looks_like_name(text: str) -> bool:
    """Heuristic: does this fragment read as one or more person names?

    A fragment holding any title keyword is a title. Otherwise it is
    names-like when it contains a comma, or starts with an uppercase
    letter and contains whitespace.
    """
    lower_text = text.lower()
    if any(keyword in lower_text for keyword in TITLE_KEYWORDS):
        return False

    if "," in text:
        return True

    return bool(_CAPITALIZED.match(text)) and bool(_WHITESPACE.search(text))


def parse_names(text: str) -> list[str]:
    """Tokenize a names fragment into individual cleaned names."""
    if not text:
        return []

    names = []
    for token in _NAME_DELIMITERS.split(text):
        token = token.strip()
        if not token:
            continue
        lower_token = token.lower()
        if any(keyword in lower_token for keyword in NAME_REJECT_KEYWORDS):
            continue
        if _FULLY_PARENTHETICAL.match(token):
            continue

        token = _PARENTHETICAL.sub(" ", token)
        token = _TRAILING_TIME.sub("", token).strip()

        if 0 < len(token) < MAX_NAME_LENGTH:
            names.append(token)

    return names


def _clean_title(title: str) -> str:
    title = title.strip()
    if title.startswith("-"):
        title = title[1:].strip()
    if title.endswith("-"):
        title = title[:-1].strip()
    return title


def extract_people_and_title(
    summary: str, rules: tuple[SplitRule, ...] = SPLIT_RULES
) -> ExtractedData:
    """Split an event summary into person names and a shift title.

    Args:
        summary: Free-text event summary
        rules: Split conventions, tried in order

    Returns:
        Extracted names (possibly empty) and the cleaned title

    Example:
        >>> extract_people_and_title("John Doe - Morning Shift")
        ExtractedData(names=['John Doe'], title='Morning Shift')
    """
    summary = summary or ""
    names: list[str] = []
    title = summary

    for rule in rules:
        result = rule.apply(summary)
        if result is not None:
            logger.debug(f"Summary {summary!r} split by {rule.name} rule")
            names, title = result.names, result.title
            break

    if not names:
        names = parse_names(summary)

    return ExtractedData(names=names, title=_clean_title(title))


def generate_person_id(name: str) -> str:
    """Deterministic identifier for a person name.

    Lowercases, drops everything but letters, digits, whitespace and
    underscores, and joins the remaining words with underscores, so
    ``"John Doe "`` and ``"john doe"`` both map to ``"john_doe"`` and the
    result maps to itself.
    """
    normalized = _NON_ID_CHARS.sub("", (name or "").lower()).strip()
    return _WHITESPACE.sub("_", normalized)
