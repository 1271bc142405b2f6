"""FlightAPI.io source: one-way and round-trip searches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.base import BaseSource

from .client import FlightApiClient
from .response_parser import parse_trip_response

if TYPE_CHECKING:
    import httpx

    from flight_aggregator.schemas import FlightOffer, SearchRequest

logger = logging.getLogger(__name__)

_CABIN = "Economy"


class FlightApiSource(BaseSource):
    """Search-only; FlightAPI.io has no destination explore."""

    name = SourceName.FLIGHTAPI

    def __init__(
        self,
        *,
        api_key: str,
        currency: str = "PLN",
        timeout: float = 30,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(rate_limiter=rate_limiter or RateLimiter(2, 0.5))
        self._api_key = api_key
        self._currency = currency
        self._client = FlightApiClient(api_key=api_key, timeout=timeout, transport=transport)

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        await self._limiter.acquire()

        dates: tuple[str, ...] = (request.date_from.isoformat(),)
        trip = "onewaytrip"
        if request.return_date_from is not None:
            dates += (request.return_date_from.isoformat(),)
            trip = "roundtrip"

        # adults, children, infants, cabin, currency
        raw = await self._client.search(
            trip,
            request.origin,
            request.destination,
            *dates,
            request.passengers,
            0,
            0,
            _CABIN,
            self._currency,
        )
        return parse_trip_response(
            raw,
            origin=request.origin,
            destination=request.destination,
            max_stops=request.max_stops,
            max_price=request.max_price,
            currency=self._currency,
        )

    async def close(self) -> None:
        await self._client.close()
