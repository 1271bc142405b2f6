"""Amadeus source: flight offers via the Amadeus Self-Service API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.base import BaseSource

from .client import AmadeusClient
from .response_parser import parse_flight_offers

if TYPE_CHECKING:
    from flight_aggregator.schemas import FlightOffer, SearchRequest

logger = logging.getLogger(__name__)


class AmadeusSource(BaseSource):
    """Search-only source backed by the Amadeus ``Flight Offers Search`` API.

    Requires ``FLIGHTS_AMADEUS_CLIENT_ID`` and ``FLIGHTS_AMADEUS_CLIENT_SECRET``.
    """

    name = SourceName.AMADEUS

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        hostname: str = "test",
        currency: str = "PLN",
        rate_limiter: RateLimiter | None = None,
        client: AmadeusClient | None = None,
    ) -> None:
        super().__init__(rate_limiter=rate_limiter or RateLimiter(5, 1))
        self._credentials = (client_id, client_secret)
        self._currency = currency
        self._client = client or AmadeusClient(
            client_id=client_id, client_secret=client_secret, hostname=hostname
        )

    def is_available(self) -> bool:
        return all(self._credentials)

    async def search(self, request: SearchRequest) -> list[FlightOffer]:
        await self._limiter.acquire()

        raw_offers = await self._client.search_flight_offers(
            origin=request.origin,
            destination=request.destination,
            departure_date=request.date_from.isoformat(),
            return_date=(
                request.return_date_from.isoformat()
                if request.return_date_from
                else None
            ),
            adults=request.passengers,
            non_stop=request.max_stops == 0,
            max_price=int(request.max_price) if request.max_price else None,
            currency_code=self._currency,
        )
        return parse_flight_offers(raw_offers, currency=self._currency)

    async def close(self) -> None:
        await self._client.close()
