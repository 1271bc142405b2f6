"""TTL-keyed memoization of aggregated result sets."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from flight_aggregator.errors import CacheKeyError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass(slots=True)
class _CacheEntry:
    value: Any
    expires_at: float


class ResultCache:
    """In-memory TTL cache keyed by canonical request fingerprints.

    Eviction is lazy: a stale entry is removed only when it is read (or by
    :meth:`purge_expired`), so entries for requests that are never repeated
    stay in memory until the process exits or :meth:`clear` is called.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._store: dict[str, _CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or ``None`` on a miss or stale entry."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires_at:
                del self._store[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store *value* for *ttl* seconds, replacing any previous entry."""
        ttl = self._default_ttl if ttl is None else ttl
        with self._lock:
            self._store[key] = _CacheEntry(value=value, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def purge_expired(self) -> int:
        """Drop every stale entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            stale = [k for k, e in self._store.items() if now > e.expires_at]
            for key in stale:
                del self._store[key]
        if stale:
            logger.debug("Purged %d expired cache entries", len(stale))
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    @staticmethod
    def build_key(
        operation: str,
        request: BaseModel,
        source_filter: Iterable[str] | None = None,
    ) -> str:
        """Build a deterministic key from an operation tag and a request.

        The request is dumped to JSON with sorted keys and the source filter
        is sorted, so field order and filter order never change the key. An
        empty filter is equivalent to no filter.
        """
        sources = sorted(set(source_filter)) if source_filter else None
        try:
            payload = json.dumps(
                {
                    "op": operation,
                    "request": request.model_dump(mode="json"),
                    "sources": sources,
                },
                sort_keys=True,
                separators=(",", ":"),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            msg = f"Cannot build cache key for {operation!r}: {exc}"
            raise CacheKeyError(msg) from exc
        digest = hashlib.sha256(payload.encode()).hexdigest()
        return f"{operation}:{digest}"
