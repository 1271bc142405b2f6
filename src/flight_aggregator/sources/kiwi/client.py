"""HTTP client for the Kiwi Tequila search API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from flight_aggregator.schemas import SourceName
from flight_aggregator.sources.http import build_client, get_json, require_mapping

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

_BASE_URL = "https://tequila-api.kiwi.com"


class KiwiClient:
    """Thin async wrapper around the Kiwi Tequila ``/v2/search`` endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout: float = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = build_client(
            SourceName.KIWI,
            base_url=_BASE_URL,
            timeout=timeout,
            headers={"apikey": api_key},
            transport=transport,
        )

    async def search(self, params: dict[str, Any]) -> dict[str, Any]:
        """Call ``GET /v2/search`` and return the parsed JSON body."""
        data = require_mapping(
            SourceName.KIWI,
            await get_json(self._client, SourceName.KIWI, "/v2/search", params=params),
        )
        logger.debug("Kiwi search returned %d results", len(data.get("data") or []))
        return data

    async def close(self) -> None:
        """Shut down the underlying HTTPX client."""
        await self._client.aclose()
