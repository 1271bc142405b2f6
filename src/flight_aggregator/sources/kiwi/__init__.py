"""Kiwi Tequila source."""

from .source import KiwiSource

__all__ = ["KiwiSource"]
