"""String enums for source identifiers and cabin classes."""

from enum import StrEnum


class SourceName(StrEnum):
    """Identifiers of the built-in flight data sources."""

    KIWI = "kiwi"
    AMADEUS = "amadeus"
    SERPAPI = "serpapi"
    RYANAIR = "ryanair"
    SKYSCANNER = "skyscanner"
    FLIGHTAPI = "flightapi"


class CabinClass(StrEnum):
    """Cabin class for the flight."""

    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"
