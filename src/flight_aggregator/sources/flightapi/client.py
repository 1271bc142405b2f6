"""HTTP client for FlightAPI.io."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.http import build_client, get_json, require_mapping

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

_BASE_URL = "https://api.flightapi.io"


class FlightApiClient:
    """FlightAPI.io takes every parameter, the key included, as a path segment."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._client = build_client(
            SourceName.FLIGHTAPI,
            base_url=_BASE_URL,
            timeout=timeout,
            transport=transport,
        )

    async def search(self, trip: str, *segments: object) -> dict[str, Any]:
        """Call ``/<trip>/<key>/<segments...>``; *trip* is ``onewaytrip`` or ``roundtrip``."""
        path = "/".join(str(part) for part in (trip, self._api_key, *segments))
        return require_mapping(
            SourceName.FLIGHTAPI,
            await get_json(self._client, SourceName.FLIGHTAPI, f"/{path}"),
        )

    async def close(self) -> None:
        await self._client.aclose()
