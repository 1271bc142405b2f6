"""Provider health probes: credentials present and endpoint reachable."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel

from flight_aggregator.schemas import SearchRequest

if TYPE_CHECKING:
    from collections.abc import Sequence

    from flight_aggregator.sources.base import BaseSource

logger = logging.getLogger(__name__)

_PROBE_ORIGIN = "KRK"
_PROBE_DESTINATION = "LHR"


class HealthResult(BaseModel):
    """Outcome of probing one source.

    ``reachable`` is ``None`` when the probe was skipped for lack of
    credentials.
    """

    provider: str
    credentials: bool
    reachable: bool | None = None
    response_ms: int | None = None
    error: str | None = None

    @property
    def status(self) -> str:
        if self.reachable is None:
            return "skipped"
        return "reachable" if self.reachable else "FAILED"


def _probe_request() -> SearchRequest:
    return SearchRequest(
        origin=_PROBE_ORIGIN,
        destination=_PROBE_DESTINATION,
        date_from=date.today() + timedelta(days=1),
        passengers=1,
        max_stops=1,
    )


async def check_source(source: BaseSource, timeout: float = 10.0) -> HealthResult:
    """Run a small probe search against *source*, bounded by *timeout*."""
    result = HealthResult(provider=source.name, credentials=source.is_available())
    if not result.credentials:
        return result

    start = time.monotonic()
    try:
        await asyncio.wait_for(source.search(_probe_request()), timeout=timeout)
    except TimeoutError:
        result.reachable = False
        result.error = f"Timeout ({timeout:g}s)"
    except Exception as exc:  # noqa: BLE001
        logger.debug("Health probe for %s failed", source.name, exc_info=exc)
        result.reachable = False
        result.error = str(exc) or type(exc).__name__
    else:
        result.reachable = True
    result.response_ms = int((time.monotonic() - start) * 1000)
    return result


async def check_sources(
    sources: Sequence[BaseSource], timeout: float = 10.0
) -> list[HealthResult]:
    """Probe every source concurrently."""
    return list(
        await asyncio.gather(*(check_source(source, timeout) for source in sources))
    )


def format_health_table(results: Sequence[HealthResult]) -> str:
    widths = (12, 13, 12, 10, 30)
    header = " | ".join(
        title.ljust(w)
        for title, w in zip(
            ("Provider", "Credentials", "Status", "Time", "Error"), widths, strict=True
        )
    )
    lines = [header, "-+-".join("-" * w for w in widths)]
    for r in results:
        cells = (
            r.provider,
            "OK" if r.credentials else "missing",
            r.status,
            f"{r.response_ms}ms" if r.response_ms is not None else "-",
            (r.error or "-")[: widths[-1]],
        )
        lines.append(
            " | ".join(cell.ljust(w) for cell, w in zip(cells, widths, strict=True))
        )

    working = sum(1 for r in results if r.reachable)
    with_creds = sum(1 for r in results if r.credentials)
    lines.append("")
    lines.append(
        f"Summary: {with_creds}/{len(results)} providers have credentials, "
        f"{working}/{len(results)} reachable"
    )
    return "\n".join(lines)
