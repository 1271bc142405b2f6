"""FlightAPI.io source."""

from .source import FlightApiSource

__all__ = ["FlightApiSource"]
