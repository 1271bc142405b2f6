"""SerpAPI Google Flights source."""

from .source import SerpApiSource

__all__ = ["SerpApiSource"]
