"""Person extraction from event summaries and the per-import person registry."""

from .extractor import (
    ExtractedData,
    SplitRule,
    extract_people_and_title,
    generate_person_id,
    looks_like_name,
    parse_names,
)
from .models import Person
from .registry import DEFAULT_PALETTE, PersonRegistry

__all__ = [
    "DEFAULT_PALETTE",
    "ExtractedData",
    "Person",
    "PersonRegistry",
    "SplitRule",
    "extract_people_and_title",
    "generate_person_id",
    "looks_like_name",
    "parse_names",
]
