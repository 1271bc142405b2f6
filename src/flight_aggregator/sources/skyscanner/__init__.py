"""Sky-Scrapper (Skyscanner data) source."""

from .source import SkyscannerSource

__all__ = ["SkyscannerSource"]
