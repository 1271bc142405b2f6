"""SerpAPI source: Google Flights results through SerpAPI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.base import BaseSource

from .client import SerpApiClient
from .response_parser import parse_search_response

if TYPE_CHECKING:
    import httpx

    from flight_aggregator.schemas import FlightOffer, SearchRequest

logger = logging.getLogger(__name__)

# Google Flights "stops" filter: 1 = nonstop, 2 = <=1 stop, 3 = <=2 stops
_MAX_STOPS_FILTER = 3

_ROUND_TRIP = "1"
_ONE_WAY = "2"


class SerpApiSource(BaseSource):
    """Search-only source; the free plan allows ~250 searches a month."""

    name = SourceName.SERPAPI

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
        self._client = SerpApiClient(api_key=api_key, timeout=timeout, transport=transport)

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        await self._limiter.acquire()

        params: dict[str, Any] = {
            "departure_id": request.origin,
            "arrival_id": request.destination,
            "outbound_date": request.date_from.isoformat(),
            "currency": self._currency,
            "hl": "en",
            "adults": request.passengers,
            "stops": min(request.max_stops + 1, _MAX_STOPS_FILTER),
            "type": _ROUND_TRIP if request.return_date_from else _ONE_WAY,
        }
        if request.return_date_from is not None:
            params["return_date"] = request.return_date_from.isoformat()
        if request.max_price is not None:
            params["max_price"] = int(request.max_price)

        raw = await self._client.search_flights(params)
        return parse_search_response(raw, currency=self._currency)

    async def close(self) -> None:
        await self._client.close()
