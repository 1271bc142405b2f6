"""Sky-Scrapper source: Skyscanner search data through RapidAPI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.base import ExploreCapableSource

from .client import SkyscannerClient
from .response_parser import parse_everywhere_response, parse_search_response

if TYPE_CHECKING:
    import httpx

    from flight_aggregator.schemas import (
        DestinationOffer,
        ExploreRequest,
        FlightOffer,
        SearchRequest,
    )

logger = logging.getLogger(__name__)

_MARKET = "PL"


class SkyscannerSource(ExploreCapableSource):
    """Route search and "everywhere" explore from the Sky-Scrapper API.

    Explore results are per destination country, not per airport.
    """

    name = SourceName.SKYSCANNER

    def __init__(
        self,
        *,
        api_key: str,
        currency: str = "PLN",
        timeout: float = 30,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(rate_limiter=rate_limiter or RateLimiter(3, 1))
        self._api_key = api_key
        self._currency = currency
        self._client = SkyscannerClient(api_key=api_key, timeout=timeout, transport=transport)

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        await self._limiter.acquire()

        params: dict[str, Any] = {
            "originSkyId": request.origin,
            "destinationSkyId": request.destination,
            "originEntityId": "",
            "destinationEntityId": "",
            "date": request.date_from.isoformat(),
            "cabinClass": "economy",
            "adults": request.passengers,
            "currency": self._currency,
            "market": _MARKET,
            "countryCode": _MARKET,
            "sortBy": "best",
        }
        if request.return_date_from is not None:
            params["returnDate"] = request.return_date_from.isoformat()

        raw = await self._client.search_flights(params)
        return parse_search_response(
            raw,
            origin=request.origin,
            destination=request.destination,
            max_stops=request.max_stops,
            max_price=request.max_price,
            currency=self._currency,
        )

    async def explore(self, request: ExploreRequest) -> list[DestinationOffer]:
        await self._limiter.acquire()

        raw = await self._client.search_everywhere(
            {
                "originSkyId": request.origin,
                "travelDate": request.date_from.isoformat(),
                "currency": self._currency,
            }
        )
        return parse_everywhere_response(
            raw,
            date_from=request.date_from,
            date_to=request.date_to,
            max_price=request.max_price,
            currency=self._currency,
        )

    async def close(self) -> None:
        await self._client.close()
