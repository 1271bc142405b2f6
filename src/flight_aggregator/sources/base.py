"""Abstract base classes for all flight data sources."""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from flight_aggregator.rate_limiter import RateLimiter
    from flight_aggregator.schemas import (
        DestinationOffer,
        ExploreRequest,
        FlightOffer,
        SearchRequest,
    )


class BaseSource(abc.ABC):
    """Base class that all flight data sources must implement.

    A source answers route searches. Sources that can also answer
    "cheapest destinations" queries derive from :class:`ExploreCapableSource`
    instead; the aggregator checks :attr:`supports_explore` before dispatch.
    """

    name: ClassVar[str]
    supports_explore: ClassVar[bool] = False

    def __init__(self, *, rate_limiter: RateLimiter) -> None:
        self._limiter = rate_limiter

    @property
    def rate_limiter(self) -> RateLimiter:
        return self._limiter

    @abc.abstractmethod
    def is_available(self) -> bool:
        """Return True if the source has the credentials it needs."""

    @abc.abstractmethod
    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        """Run a route search.

        Raises :class:`~flight_aggregator.errors.SourceError` on any failure.
        """

    async def explore(self, request: ExploreRequest) -> list[DestinationOffer]:
        msg = f"{self.name} does not support explore"
        raise NotImplementedError(msg)

    async def close(self) -> None:  # noqa: B027
        """Release any held resources (HTTP clients, SDK sessions)."""


class ExploreCapableSource(BaseSource):
    """A source that can also list the cheapest destinations from an origin."""

    supports_explore: ClassVar[bool] = True

    @abc.abstractmethod
    async def explore(self, request: ExploreRequest) -> list[DestinationOffer]:
        """Run an explore query.

        Raises :class:`~flight_aggregator.errors.SourceError` on any failure.
        """
