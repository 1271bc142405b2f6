"""HTTP client for Ryanair's public fare-finder endpoints (no API key)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.http import (
    BROWSER_HEADERS,
    build_client,
    get_json,
    require_mapping,
)

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

_BASE_URL = "https://www.ryanair.com/api"


class RyanairClient:
    """Wrapper around the ``farfnd/v4`` one-way and round-trip fare APIs."""

    def __init__(
        self,
        *,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = build_client(
            SourceName.RYANAIR,
            base_url=_BASE_URL,
            timeout=timeout,
            headers=BROWSER_HEADERS,
            transport=transport,
        )

    async def cheapest_per_day(
        self, origin: str, destination: str, month: str, currency: str
    ) -> dict[str, Any] | None:
        """Cheapest one-way fare per day for the month containing *month*.

        Returns ``None`` when Ryanair does not serve the route (HTTP 404).
        """
        data = await get_json(
            self._client,
            SourceName.RYANAIR,
            f"/farfnd/v4/oneWayFares/{origin}/{destination}/cheapestPerDay",
            params={"outboundMonthOfDate": month, "currency": currency},
            empty_on=frozenset({404}),
        )
        if data is None:
            logger.debug("Ryanair does not serve %s-%s", origin, destination)
            return None
        return require_mapping(SourceName.RYANAIR, data)

    async def round_trip_fares(self, params: dict[str, Any]) -> dict[str, Any]:
        """Cheapest round trips from one airport to every destination."""
        data = await get_json(
            self._client,
            SourceName.RYANAIR,
            "/farfnd/v4/roundTripFares",
            params=params,
        )
        return require_mapping(SourceName.RYANAIR, data)

    async def close(self) -> None:
        await self._client.aclose()
