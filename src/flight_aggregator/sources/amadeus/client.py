"""Amadeus Self-Service API client wrapper.

Uses the official ``amadeus`` Python SDK which handles the OAuth2 token
lifecycle automatically.  Exposes a thin async wrapper around the
synchronous SDK using ``asyncio.to_thread``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from amadeus import AuthenticationError, Client, ParserError, ResponseError

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.schemas import SourceName

logger = logging.getLogger(__name__)


def _to_source_error(exc: ResponseError) -> SourceError:
    status = getattr(getattr(exc, "response", None), "status_code", None)
    if isinstance(exc, AuthenticationError) or status in (401, 403):
        kind = SourceErrorKind.AUTHENTICATION
    elif isinstance(exc, ParserError):
        kind = SourceErrorKind.MALFORMED_RESPONSE
    else:
        kind = SourceErrorKind.NETWORK
    return SourceError(SourceName.AMADEUS, f"{type(exc).__name__}: {exc}", kind)


class AmadeusClient:
    """Async-friendly wrapper around the Amadeus Python SDK."""

    def __init__(
        self, *, client_id: str, client_secret: str, hostname: str = "test"
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._hostname = hostname
        self._sdk: Client | None = None

    def _ensure_sdk(self) -> Client:
        if self._sdk is None:
            if not self._client_id or not self._client_secret:
                raise SourceError(
                    SourceName.AMADEUS,
                    "FLIGHTS_AMADEUS_CLIENT_ID and FLIGHTS_AMADEUS_CLIENT_SECRET "
                    "must be set",
                    SourceErrorKind.AUTHENTICATION,
                )
            self._sdk = Client(
                client_id=self._client_id,
                client_secret=self._client_secret,
                hostname=self._hostname,
            )
            logger.info("Amadeus SDK initialised (hostname=%s)", self._hostname)
        return self._sdk

    async def search_flight_offers(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        *,
        return_date: str | None = None,
        adults: int = 1,
        non_stop: bool = False,
        max_price: int | None = None,
        currency_code: str = "PLN",
        max_results: int = 30,
    ) -> list[dict[str, Any]]:
        """Search for flight offers using GET /v2/shopping/flight-offers.

        Parameters
        ----------
        origin:
            IATA origin code (e.g. ``KRK``).
        destination:
            IATA destination code (e.g. ``LHR``).
        departure_date:
            ISO-8601 date string (``YYYY-MM-DD``).
        return_date:
            Optional return date for round-trip searches.
        adults:
            Number of adult passengers (1-9).
        non_stop:
            If True, return only non-stop flights.
        max_price:
            Optional upper bound on the total price.
        currency_code:
            ISO currency code for prices.
        max_results:
            Maximum number of offers to return (up to 250).
        """
        sdk = self._ensure_sdk()
        params: dict[str, Any] = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date,
            "adults": adults,
            "currencyCode": currency_code,
            "max": max_results,
            "nonStop": "true" if non_stop else "false",
        }
        if return_date:
            params["returnDate"] = return_date
        if max_price is not None:
            params["maxPrice"] = max_price

        def _call() -> list[dict[str, Any]]:
            try:
                resp = sdk.shopping.flight_offers_search.get(**params)
            except ResponseError as exc:
                logger.error("Amadeus flight search failed: %s", exc)
                raise _to_source_error(exc) from exc
            data = resp.data
            if not isinstance(data, list):
                raise SourceError(
                    SourceName.AMADEUS,
                    "flight-offers 'data' is not a list",
                    SourceErrorKind.MALFORMED_RESPONSE,
                )
            return data

        return await asyncio.to_thread(_call)

    async def close(self) -> None:
        """No-op: the SDK manages its own HTTP lifecycle."""
        self._sdk = None
