"""Ryanair fares source."""

from .source import RyanairSource

__all__ = ["RyanairSource"]
