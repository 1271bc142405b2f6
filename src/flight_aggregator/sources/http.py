"""Shared helpers for HTTP-backed sources."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from flight_aggregator.errors import SourceError, SourceErrorKind

logger = logging.getLogger(__name__)

_AUTH_STATUSES = frozenset({401, 403})

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "application/json",
}


def build_client(
    source: str,
    *,
    base_url: str,
    timeout: float,
    headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the AsyncClient a source uses for all its calls."""
    logger.debug("Creating HTTP client for %s (%s)", source, base_url)
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(timeout),
        transport=transport,
    )


def raise_for_response(source: str, resp: httpx.Response) -> None:
    """Translate a non-2xx response into a :class:`SourceError`."""
    if resp.is_success:
        return
    kind = (
        SourceErrorKind.AUTHENTICATION
        if resp.status_code in _AUTH_STATUSES
        else SourceErrorKind.NETWORK
    )
    msg = f"HTTP {resp.status_code} {resp.reason_phrase}".rstrip()
    raise SourceError(source, msg, kind)


async def get_json(
    client: httpx.AsyncClient,
    source: str,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    empty_on: frozenset[int] = frozenset(),
) -> Any:
    """``GET`` *url* and return the decoded JSON body.

    Statuses listed in *empty_on* return ``None`` instead of raising.

    Transport failures, error statuses and undecodable bodies all surface as
    :class:`SourceError` attributed to *source*.
    """
    try:
        resp = await client.get(url, params=params)
    except httpx.TransportError as exc:
        msg = f"{type(exc).__name__}: {exc}"
        raise SourceError(source, msg, SourceErrorKind.NETWORK) from exc
    if resp.status_code in empty_on:
        return None
    raise_for_response(source, resp)
    try:
        return resp.json()
    except ValueError as exc:
        msg = f"invalid JSON body: {exc}"
        raise SourceError(source, msg, SourceErrorKind.MALFORMED_RESPONSE) from exc


def require_mapping(source: str, payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        msg = f"expected a JSON object, got {type(payload).__name__}"
        raise SourceError(source, msg, SourceErrorKind.MALFORMED_RESPONSE)
    return payload
