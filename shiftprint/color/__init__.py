"""Color resolution and blending for people and shifts."""

from .resolver import (
    UNASSIGNED_COLOR,
    ColorStop,
    ShiftFill,
    get_contrast_text_color,
    get_person_color,
    get_shift_color,
    get_shift_colors,
    legend_entries,
    parse_hex_color,
    shift_fill,
)

__all__ = [
    "UNASSIGNED_COLOR",
    "ColorStop",
    "ShiftFill",
    "get_contrast_text_color",
    "get_person_color",
    "get_shift_color",
    "get_shift_colors",
    "legend_entries",
    "parse_hex_color",
    "shift_fill",
]
