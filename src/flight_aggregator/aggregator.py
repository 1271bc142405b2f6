"""Fan-out search across flight sources with caching, dedupe and ordering."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from flight_aggregator.cache import ResultCache
from flight_aggregator.errors import SourceError, SourceErrorKind

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence

    from flight_aggregator.schemas import (
        DestinationOffer,
        ExploreRequest,
        FlightOffer,
        SearchRequest,
    )
    from flight_aggregator.sources.base import BaseSource

logger = logging.getLogger(__name__)


class SourceFailure(BaseModel):
    """Diagnostic record for one source that failed during a fan-out."""

    model_config = ConfigDict(frozen=True)

    source: str
    operation: str
    error: str
    kind: SourceErrorKind | None = None
    duration_ms: int = 0


def dedupe_flights(offers: Iterable[FlightOffer]) -> list[FlightOffer]:
    """Keep the cheapest offer per :attr:`FlightOffer.dedup_key`.

    On equal prices the first offer seen wins.
    """
    groups: dict[str, FlightOffer] = {}
    for offer in offers:
        existing = groups.get(offer.dedup_key)
        if existing is None or offer.price < existing.price:
            groups[offer.dedup_key] = offer
    return list(groups.values())


def dedupe_destinations(offers: Iterable[DestinationOffer]) -> list[DestinationOffer]:
    """Keep the cheapest offer per destination; first seen wins ties."""
    groups: dict[str, DestinationOffer] = {}
    for offer in offers:
        existing = groups.get(offer.destination)
        if existing is None or offer.price < existing.price:
            groups[offer.destination] = offer
    return list(groups.values())


class FlightAggregator:
    """Orchestrates cache lookup, concurrent source fan-out and merging.

    Built once at startup from an explicit list of sources and held for the
    lifetime of the process.  Per-source failures never fail a call: they are
    logged, passed to *on_source_error* and left out of the result.
    """

    def __init__(
        self,
        sources: Sequence[BaseSource],
        *,
        cache: ResultCache | None = None,
        on_source_error: Callable[[SourceFailure], None] | None = None,
    ) -> None:
        self._sources = tuple(sources)
        self._cache = cache if cache is not None else ResultCache()
        self._on_source_error = on_source_error

    @property
    def sources(self) -> tuple[BaseSource, ...]:
        return self._sources

    @property
    def cache(self) -> ResultCache:
        return self._cache

    def active_sources(
        self,
        source_filter: Iterable[str] | None = None,
        *,
        explore: bool = False,
    ) -> list[BaseSource]:
        """Available sources, narrowed to *source_filter* when it is non-empty."""
        allowed = set(source_filter) if source_filter else None
        active: list[BaseSource] = []
        for source in self._sources:
            if explore and not source.supports_explore:
                continue
            if allowed is not None and source.name not in allowed:
                continue
            if not source.is_available():
                continue
            active.append(source)
        return active

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def search(
        self,
        request: SearchRequest,
        source_filter: Iterable[str] | None = None,
    ) -> list[FlightOffer]:
        """Search every active source and return deduplicated offers.

        Results are ordered by price, then duration; the sort is stable, so
        offers tied on both keep the order the sources were configured in.
        """
        source_filter = _normalize_filter(source_filter)
        key = ResultCache.build_key("search", request, source_filter)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return list(cached)

        active = self.active_sources(source_filter)
        candidates: list[FlightOffer] = await self._fan_out(
            "search", active, lambda source: source.search(request)
        )

        merged = dedupe_flights(candidates)
        merged.sort(key=lambda f: (f.price, f.duration_minutes))

        logger.info(
            "Merged %d offers from %d source(s) into %d unique flights",
            len(candidates),
            len(active),
            len(merged),
        )
        self._cache.set(key, tuple(merged))
        return merged

    async def explore(
        self,
        request: ExploreRequest,
        source_filter: Iterable[str] | None = None,
    ) -> list[DestinationOffer]:
        """Cheapest destinations across explore-capable sources.

        The limit is applied after the global dedupe and sort.
        """
        source_filter = _normalize_filter(source_filter)
        key = ResultCache.build_key("explore", request, source_filter)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return list(cached)

        active = self.active_sources(source_filter, explore=True)
        candidates: list[DestinationOffer] = await self._fan_out(
            "explore", active, lambda source: source.explore(request)
        )

        merged = dedupe_destinations(candidates)
        merged.sort(key=lambda d: d.price)
        merged = merged[: request.limit]

        logger.info(
            "Merged %d destinations from %d source(s) into %d results",
            len(candidates),
            len(active),
            len(merged),
        )
        self._cache.set(key, tuple(merged))
        return merged

    async def close(self) -> None:
        """Close every source's underlying client."""
        await asyncio.gather(*(source.close() for source in self._sources))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _fan_out(
        self,
        operation: str,
        sources: Sequence[BaseSource],
        call: Callable[[BaseSource], Awaitable[list[Any]]],
    ) -> list[Any]:
        """Call every source concurrently and wait for all of them to settle.

        Returns the successful results flattened in source order.
        """
        if not sources:
            logger.info("No active sources for %s", operation)
            return []

        outcomes = await asyncio.gather(
            *(self._timed(call, source) for source in sources)
        )

        flattened: list[Any] = []
        for source, (result, elapsed_ms) in zip(sources, outcomes, strict=True):
            if isinstance(result, Exception):
                self._record_failure(operation, source, result, elapsed_ms)
                continue
            flattened.extend(result)
        return flattened

    @staticmethod
    async def _timed(
        call: Callable[[BaseSource], Awaitable[list[Any]]],
        source: BaseSource,
    ) -> tuple[list[Any] | Exception, int]:
        start = time.monotonic()
        try:
            result: list[Any] | Exception = await call(source)
        except Exception as exc:  # noqa: BLE001
            result = exc
        return result, int((time.monotonic() - start) * 1000)

    def _record_failure(
        self,
        operation: str,
        source: BaseSource,
        exc: Exception,
        elapsed_ms: int,
    ) -> None:
        kind = exc.kind if isinstance(exc, SourceError) else None
        failure = SourceFailure(
            source=source.name,
            operation=operation,
            error=str(exc) or type(exc).__name__,
            kind=kind,
            duration_ms=elapsed_ms,
        )
        if isinstance(exc, SourceError):
            logger.warning("Source %s failed during %s: %s", source.name, operation, exc)
        else:
            logger.warning(
                "Source %s raised unexpected %s during %s",
                source.name,
                type(exc).__name__,
                operation,
                exc_info=exc,
            )
        if self._on_source_error is not None:
            self._on_source_error(failure)


def _normalize_filter(source_filter: Iterable[str] | None) -> frozenset[str] | None:
    if not source_filter:
        return None
    return frozenset(str(name) for name in source_filter) or None
