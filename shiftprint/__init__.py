"""ShiftPrint - printable shift calendars built from iCalendar feeds.

Reconstructs who is working when from free-text event titles and lays the
result out as monthly and weekly grids ready for printing.
"""

__version__ = "1.0.0"
__author__ = "ShiftPrint Team"
__description__ = "Printable shift calendars from ICS feeds"

__all__ = [
    "__author__",
    "__description__",
    "__version__",
]
