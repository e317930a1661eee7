"""Color resolution for people and shifts.

Priority order for a person's color: the color-assignment override map,
then the person's own override, then the palette color assigned at import.
"""

import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict

from ..people.extractor import generate_person_id
from ..people.models import Person

if TYPE_CHECKING:
    from ..people.registry import PersonRegistry
    from ..shifts.models import Shift

logger = logging.getLogger(__name__)

UNASSIGNED_COLOR = "#d1d5db"
DARK_TEXT = "#000000"
LIGHT_TEXT = "#ffffff"
GRADIENT_ANGLE = 135

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _assigned_color(
    person: Person, color_assignments: Optional[Mapping[str, str]]
) -> Optional[str]:
    """Override for ``person``, keyed by exact name or any spelling of it."""
    if not color_assignments:
        return None
    color = color_assignments.get(person.name)
    if color:
        return color
    for name, assigned in color_assignments.items():
        if assigned and generate_person_id(name) == person.id:
            return assigned
    return None


def get_person_color(
    person: Person, color_assignments: Optional[Mapping[str, str]] = None
) -> str:
    """Effective color of a person."""
    return _assigned_color(person, color_assignments) or person.color_override or person.color


def get_shift_color(shift: "Shift", color_assignments: Optional[Mapping[str, str]] = None) -> str:
    """Display color of a shift: its first person's color, gray if unassigned."""
    if not shift.people:
        return UNASSIGNED_COLOR
    return get_person_color(shift.people[0], color_assignments)


def get_shift_colors(
    shift: "Shift", color_assignments: Optional[Mapping[str, str]] = None
) -> list[str]:
    """Distinct resolved colors of a shift's people, in people order."""
    colors: list[str] = []
    for person in shift.people:
        color = get_person_color(person, color_assignments)
        if color not in colors:
            colors.append(color)
    return colors


class ColorStop(BaseModel):
    """One stop of a linear gradient."""

    model_config = ConfigDict(frozen=True)

    color: str
    offset: float  # percent


class ShiftFill(BaseModel):
    """Background of a shift block: a solid color or an evenly spaced gradient."""

    model_config = ConfigDict(frozen=True)

    color: str
    stops: tuple[ColorStop, ...] = ()

    @property
    def is_gradient(self) -> bool:
        return len(self.stops) > 1

    @property
    def css(self) -> str:
        """CSS ``background`` value."""
        if not self.is_gradient:
            return self.color
        stops = ", ".join(f"{stop.color} {stop.offset:g}%" for stop in self.stops)
        return f"linear-gradient({GRADIENT_ANGLE}deg, {stops})"


def shift_fill(shift: "Shift", color_assignments: Optional[Mapping[str, str]] = None) -> ShiftFill:
    """Fill for a shift: a gradient across its people's distinct colors.

    Zero people or a single distinct color yields a solid fill.
    """
    colors = get_shift_colors(shift, color_assignments)
    if len(colors) <= 1:
        return ShiftFill(color=colors[0] if colors else UNASSIGNED_COLOR)

    last = len(colors) - 1
    stops = tuple(
        ColorStop(color=color, offset=index / last * 100) for index, color in enumerate(colors)
    )
    return ShiftFill(color=colors[0], stops=stops)


def parse_hex_color(color: str) -> tuple[int, int, int]:
    """Parse ``#rgb`` or ``#rrggbb`` into an RGB triple.

    Raises:
        ValueError: If ``color`` is not a 3- or 6-digit hex color
    """
    match = _HEX_COLOR.match(color.strip()) if isinstance(color, str) else None
    if not match:
        raise ValueError(f"Invalid hex color: {color!r}")

    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def get_contrast_text_color(background: str) -> str:
    """Black or white text, whichever reads better on ``background``."""
    r, g, b = parse_hex_color(background)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return DARK_TEXT if luminance > 0.5 else LIGHT_TEXT


def legend_entries(
    registry: "PersonRegistry", color_assignments: Optional[Mapping[str, str]] = None
) -> list[tuple[Person, str]]:
    """People with their effective colors, in registration order."""
    return [(person, get_person_color(person, color_assignments)) for person in registry.people()]
