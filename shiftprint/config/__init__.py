"""Configuration package."""

from .settings import (
    DisplaySettings,
    ExpansionSettings,
    FetchSettings,
    LoggingSettings,
    ShiftPrintSettings,
    get_settings,
    reset_settings,
)

__all__ = [
    "DisplaySettings",
    "ExpansionSettings",
    "FetchSettings",
    "LoggingSettings",
    "ShiftPrintSettings",
    "get_settings",
    "reset_settings",
]
