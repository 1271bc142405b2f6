"""HTTP client for the SerpAPI Google Flights engine."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.http import build_client, get_json, require_mapping

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

_BASE_URL = "https://serpapi.com"


class SerpApiClient:
    """Calls ``GET /search.json`` with ``engine=google_flights``."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = build_client(
            SourceName.SERPAPI,
            base_url=_BASE_URL,
            timeout=timeout,
            transport=transport,
        )

    async def search_flights(self, params: dict[str, Any]) -> dict[str, Any]:
        query = {"engine": "google_flights", "api_key": self._api_key, **params}
        data = require_mapping(
            SourceName.SERPAPI,
            await get_json(self._client, SourceName.SERPAPI, "/search.json", params=query),
        )
        return data

    async def close(self) -> None:
        await self._client.aclose()
