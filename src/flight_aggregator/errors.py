"""Exception hierarchy for the aggregation engine."""

from __future__ import annotations

from enum import StrEnum


class AggregatorError(Exception):
    """Base class for all flight aggregator errors."""


class SourceErrorKind(StrEnum):
    """Failure class of a single source call."""

    NETWORK = "NETWORK"
    AUTHENTICATION = "AUTHENTICATION"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"


class SourceError(AggregatorError):
    """One source's call failed.

    Never fatal to the aggregator: it is recorded against *source* and the
    source's contribution is dropped from the merged result.
    """

    def __init__(self, source: str, message: str, kind: SourceErrorKind) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.kind = kind


class CatastrophicError(AggregatorError):
    """Internal invariant violation; propagates to the caller."""


class CacheKeyError(CatastrophicError):
    """A request could not be encoded into a canonical cache key."""
