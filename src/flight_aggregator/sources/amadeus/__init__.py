"""Amadeus Self-Service source."""

from .source import AmadeusSource

__all__ = ["AmadeusSource"]
