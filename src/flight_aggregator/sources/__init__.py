"""Flight data sources and process-wide wiring."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flight_aggregator.aggregator import FlightAggregator
from flight_aggregator.cache import ResultCache

from .amadeus import AmadeusSource
from .base import BaseSource, ExploreCapableSource
from .flightapi import FlightApiSource
from .kiwi import KiwiSource
from .ryanair import RyanairSource
from .serpapi import SerpApiSource
from .skyscanner import SkyscannerSource

if TYPE_CHECKING:
    from collections.abc import Callable

    from flight_aggregator.aggregator import SourceFailure
    from flight_aggregator.config import AggregatorSettings

__all__ = [
    "AmadeusSource",
    "BaseSource",
    "ExploreCapableSource",
    "FlightApiSource",
    "KiwiSource",
    "RyanairSource",
    "SerpApiSource",
    "SkyscannerSource",
    "build_aggregator",
    "build_sources",
]


def build_sources(settings: AggregatorSettings) -> list[BaseSource]:
    """Instantiate every built-in source from *settings*.

    Sources without credentials are still built; they report
    ``is_available() == False`` and are skipped at fan-out time.
    """
    return [
        KiwiSource(
            api_key=settings.kiwi_api_key,
            currency=settings.currency,
            timeout=settings.request_timeout,
        ),
        AmadeusSource(
            client_id=settings.amadeus_client_id,
            client_secret=settings.amadeus_client_secret,
            hostname=settings.amadeus_hostname,
            currency=settings.currency,
        ),
        SerpApiSource(
            api_key=settings.serpapi_key,
            currency=settings.currency,
            timeout=settings.request_timeout,
        ),
        RyanairSource(
            enabled=settings.ryanair_enabled,
            currency=settings.currency,
            timeout=settings.request_timeout,
        ),
        SkyscannerSource(
            api_key=settings.rapidapi_key,
            currency=settings.currency,
            timeout=settings.request_timeout,
        ),
        FlightApiSource(
            api_key=settings.flightapi_key,
            currency=settings.currency,
            timeout=settings.request_timeout,
        ),
    ]


def build_aggregator(
    settings: AggregatorSettings,
    *,
    on_source_error: Callable[[SourceFailure], None] | None = None,
) -> FlightAggregator:
    """Build the single aggregator a process holds for its lifetime."""
    return FlightAggregator(
        build_sources(settings),
        cache=ResultCache(default_ttl=settings.cache_ttl_seconds),
        on_source_error=on_source_error,
    )
