"""Kiwi Tequila source: route search and destination explore."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.base import ExploreCapableSource

from .client import KiwiClient
from .response_parser import parse_explore_response, parse_search_response

if TYPE_CHECKING:
    from datetime import date

    import httpx

    from flight_aggregator.schemas import (
        DestinationOffer,
        ExploreRequest,
        FlightOffer,
        SearchRequest,
    )

logger = logging.getLogger(__name__)

_RESULT_LIMIT = 30


def _kiwi_date(value: date) -> str:
    """Kiwi expects DD/MM/YYYY."""
    return value.strftime("%d/%m/%Y")


class KiwiSource(ExploreCapableSource):
    """Flight offers and cheapest destinations from the Kiwi Tequila API."""

    name = SourceName.KIWI

    def __init__(
        self,
        *,
        api_key: str,
        currency: str = "PLN",
        timeout: float = 30,
        rate_limiter: RateLimiter | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(rate_limiter=rate_limiter or RateLimiter(5, 2))
        self._api_key = api_key
        self._currency = currency
        self._client = KiwiClient(api_key=api_key, timeout=timeout, transport=transport)

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        await self._limiter.acquire()

        params: dict[str, Any] = {
            "fly_from": request.origin,
            "fly_to": request.destination,
            "date_from": _kiwi_date(request.date_from),
            "date_to": _kiwi_date(request.date_to or request.date_from),
            "curr": self._currency,
            "locale": "en",
            "adults": request.passengers,
            "max_stopovers": request.max_stops,
            "limit": _RESULT_LIMIT,
        }
        if request.return_date_from is not None:
            params["return_from"] = _kiwi_date(request.return_date_from)
            if request.return_date_to is not None:
                params["return_to"] = _kiwi_date(request.return_date_to)
        if request.max_price is not None:
            params["price_to"] = int(request.max_price)

        raw = await self._client.search(params)
        return parse_search_response(raw, currency=self._currency)

    async def explore(self, request: ExploreRequest) -> list[DestinationOffer]:
        await self._limiter.acquire()

        params: dict[str, Any] = {
            "fly_from": request.origin,
            "fly_to": "anywhere",
            "date_from": _kiwi_date(request.date_from),
            "date_to": _kiwi_date(request.date_to),
            "curr": self._currency,
            "nights_in_dst_from": request.nights_min,
            "nights_in_dst_to": request.nights_max,
            "one_for_city": 1,
            "limit": request.limit,
            "sort": "price",
        }
        if request.max_price is not None:
            params["price_to"] = int(request.max_price)

        raw = await self._client.search(params)
        return parse_explore_response(raw, currency=self._currency)

    async def close(self) -> None:
        await self._client.close()
