"""Renderers for calendar views."""

from .text import TextRenderer

__all__ = ["TextRenderer"]
