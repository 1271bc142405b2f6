"""Request and result schemas shared by the aggregator and its sources."""

from .enums import CabinClass, SourceName
from .flight import DestinationOffer, FlightOffer
from .search import ExploreRequest, SearchRequest

__all__ = [
    "CabinClass",
    "DestinationOffer",
    "ExploreRequest",
    "FlightOffer",
    "SearchRequest",
    "SourceName",
]
