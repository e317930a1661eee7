"""ICS calendar downloading, parsing and recurrence expansion module."""

from .exceptions import (
    ICSAuthError,
    ICSError,
    ICSFetchError,
    ICSNetworkError,
    ICSParseError,
)
from .fetcher import ICSFetcher
from .models import ICSParseResult, ICSResponse, ICSSource, RawOccurrence
from .parser import ICSParser
from .rrule_expander import RRuleExpander, RRuleExpansionError, RRuleParseError

__all__ = [
    "ICSAuthError",
    "ICSError",
    "ICSFetchError",
    "ICSFetcher",
    "ICSNetworkError",
    "ICSParseError",
    "ICSParseResult",
    "ICSParser",
    "ICSResponse",
    "ICSSource",
    "RRuleExpander",
    "RRuleExpansionError",
    "RRuleParseError",
    "RawOccurrence",
]
