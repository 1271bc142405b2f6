"""Shared fixtures and fakes for aggregator tests."""

from __future__ import annotations

import asyncio
from datetime import UTC, date, datetime, timedelta

import pytest

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import (
    DestinationOffer,
    ExploreRequest,
    FlightOffer,
    SearchRequest,
)
from flight_aggregator.sources.base import BaseSource, ExploreCapableSource


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.advance(seconds)
        await asyncio.sleep(0)


class FakeSource(BaseSource):
    """Search-only source returning canned offers or raising canned errors."""

    def __init__(
        self,
        name: str,
        offers: list[FlightOffer] | None = None,
        *,
        error: Exception | None = None,
        available: bool = True,
        delay: float = 0.0,
    ) -> None:
        super().__init__(rate_limiter=RateLimiter(100, 100))
        self.name = name  # type: ignore[misc]
        self._offers = offers or []
        self._error = error
        self._available = available
        self._delay = delay
        self.search_calls = 0
        self.closed = False

    def is_available(self) -> bool:
        return self._available

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        self.search_calls += 1
        await self._limiter.acquire()
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return list(self._offers)

    async def close(self) -> None:
        self.closed = True


class FakeExploreSource(ExploreCapableSource, FakeSource):
    """Fake source that also answers explore queries."""

    def __init__(
        self,
        name: str,
        destinations: list[DestinationOffer] | None = None,
        **kwargs,
    ) -> None:
        FakeSource.__init__(self, name, **kwargs)
        self._destinations = destinations or []
        self.explore_calls = 0

    async def explore(self, request: ExploreRequest) -> list[DestinationOffer]:
        self.explore_calls += 1
        await self._limiter.acquire()
        if self._error is not None:
            raise self._error
        return list(self._destinations)


def source_error(name: str, kind: SourceErrorKind = SourceErrorKind.NETWORK) -> SourceError:
    return SourceError(name, "boom", kind)


_BASE_DEPARTURE = datetime(2030, 5, 10, 6, 0, tzinfo=UTC)


def make_offer(
    *,
    source: str = "alpha",
    airline_code: str = "LO",
    flight_number: str = "LO281",
    origin: str = "KRK",
    destination: str = "LHR",
    departure: datetime = _BASE_DEPARTURE,
    duration: int = 150,
    price: float = 400.0,
    stops: int = 0,
    offer_id: str | None = None,
) -> FlightOffer:
    return FlightOffer(
        id=offer_id or f"{source}-{flight_number}-{price:g}-{duration}",
        source=source,
        airline=airline_code,
        airline_code=airline_code,
        flight_number=flight_number,
        origin=origin,
        destination=destination,
        departure_time=departure,
        arrival_time=departure + timedelta(minutes=max(duration, 1)),
        duration_minutes=duration,
        stops=stops,
        price=price,
        currency="PLN",
    )


def make_destination(
    destination: str, price: float, *, source: str = "alpha"
) -> DestinationOffer:
    return DestinationOffer(
        destination=destination,
        destination_name=destination.title(),
        price=price,
        currency="PLN",
        departure_date=date(2030, 6, 1),
        return_date=date(2030, 6, 5),
        source=source,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def search_request() -> SearchRequest:
    return SearchRequest(origin="KRK", destination="LHR", date_from=date(2030, 5, 10))


@pytest.fixture
def explore_request() -> ExploreRequest:
    return ExploreRequest(
        origin="KRK",
        date_from=date(2030, 6, 1),
        date_to=date(2030, 6, 30),
        limit=5,
    )
