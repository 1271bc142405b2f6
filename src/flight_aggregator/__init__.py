"""Flight aggregator - fan-out search across multiple flight data sources."""

from flight_aggregator.aggregator import FlightAggregator, SourceFailure
from flight_aggregator.cache import ResultCache
from flight_aggregator.errors import (
    AggregatorError,
    CacheKeyError,
    CatastrophicError,
    SourceError,
    SourceErrorKind,
)
from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import (
    CabinClass,
    DestinationOffer,
    ExploreRequest,
    FlightOffer,
    SearchRequest,
    SourceName,
)
from flight_aggregator.sources import (
    BaseSource,
    ExploreCapableSource,
    build_aggregator,
    build_sources,
)

__all__ = [
    "AggregatorError",
    "BaseSource",
    "CabinClass",
    "CacheKeyError",
    "CatastrophicError",
    "DestinationOffer",
    "ExploreCapableSource",
    "ExploreRequest",
    "FlightAggregator",
    "FlightOffer",
    "RateLimiter",
    "ResultCache",
    "SearchRequest",
    "SourceError",
    "SourceErrorKind",
    "SourceFailure",
    "SourceName",
    "build_aggregator",
    "build_sources",
]
