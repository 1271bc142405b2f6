"""HTTP client for the Sky-Scrapper (Skyscanner data) API on RapidAPI."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.http import build_client, get_json, require_mapping

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

RAPIDAPI_HOST = "sky-scrapper.p.rapidapi.com"
_BASE_URL = f"https://{RAPIDAPI_HOST}"


class SkyscannerClient:
    """Calls the ``searchFlightsWebComplete`` and ``searchFlightEverywhere`` endpoints."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = build_client(
            SourceName.SKYSCANNER,
            base_url=_BASE_URL,
            timeout=timeout,
            headers={"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": RAPIDAPI_HOST},
            transport=transport,
        )

    async def _get(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        return require_mapping(
            SourceName.SKYSCANNER,
            await get_json(self._client, SourceName.SKYSCANNER, url, params=params),
        )

    async def search_flights(self, params: dict[str, Any]) -> dict[str, Any]:
        data = await self._get("/api/v2/flights/searchFlightsWebComplete", params)
        logger.debug("Sky-Scrapper search answered for %s", params.get("date"))
        return data

    async def search_everywhere(self, params: dict[str, Any]) -> dict[str, Any]:
        return await self._get("/api/v1/flights/searchFlightEverywhere", params)

    async def close(self) -> None:
        await self._client.aclose()
