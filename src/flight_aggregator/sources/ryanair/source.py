"""Ryanair source: cheapest fares per day and round-trip destinations."""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Any

from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.base import ExploreCapableSource

from .client import RyanairClient
from .response_parser import parse_cheapest_per_day, parse_round_trip_fares

if TYPE_CHECKING:
    from collections.abc import Iterator

    import httpx

    from flight_aggregator.schemas import (
        DestinationOffer,
        ExploreRequest,
        FlightOffer,
        SearchRequest,
    )

logger = logging.getLogger(__name__)


def _months(start: date, end: date) -> Iterator[date]:
    """First day of every month touched by [start, end]."""
    current = start.replace(day=1)
    while current <= end:
        yield current
        if current.month == 12:
            current = current.replace(year=current.year + 1, month=1)
        else:
            current = current.replace(month=current.month + 1)


class RyanairSource(ExploreCapableSource):
    """Ryanair's unofficial fare-finder API.

    Point-to-point only, so every offer has zero stops.
    """

    name = SourceName.RYANAIR

    def __init__(
        self,
        *,
        enabled: bool = True,
        currency: str = "PLN",
        timeout: float = 30,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        # Conservative: unofficial API
        super().__init__(rate_limiter=rate_limiter or RateLimiter(3, 1))
        self._enabled = enabled
        self._currency = currency
        self._client = RyanairClient(timeout=timeout, transport=transport)

    def is_available(self) -> bool:
        return self._enabled

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        date_to = request.date_to or request.date_from
        offers: list[FlightOffer] = []

        for month in _months(request.date_from, date_to):
            await self._limiter.acquire()
            raw = await self._client.cheapest_per_day(
                request.origin, request.destination, month.isoformat(), self._currency
            )
            if raw is None:
                # Route not served that month
                continue
            offers.extend(
                parse_cheapest_per_day(
                    raw,
                    origin=request.origin,
                    destination=request.destination,
                    date_from=request.date_from,
                    date_to=date_to,
                    max_price=request.max_price,
                    currency=self._currency,
                )
            )

        logger.info("Parsed %d offers from Ryanair", len(offers))
        return offers

    async def explore(self, request: ExploreRequest) -> list[DestinationOffer]:
        await self._limiter.acquire()

        params: dict[str, Any] = {
            "departureAirportIataCode": request.origin,
            "outboundDepartureDateFrom": request.date_from.isoformat(),
            "outboundDepartureDateTo": request.date_to.isoformat(),
            "durationFrom": request.nights_min,
            "durationTo": request.nights_max,
            "currency": self._currency,
            "market": "en-gb",
        }
        if request.max_price is not None:
            params["priceValueTo"] = int(request.max_price)

        raw = await self._client.round_trip_fares(params)
        return parse_round_trip_fares(
            raw, max_price=request.max_price, currency=self._currency
        )

    async def close(self) -> None:
        await self._client.close()
