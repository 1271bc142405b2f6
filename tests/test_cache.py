"""ResultCache tests: TTL semantics and canonical keys."""

from __future__ import annotations

import threading
from datetime import date

import pytest
from pydantic import BaseModel

from flight_aggregator.cache import ResultCache
from flight_aggregator.errors import CacheKeyError, CatastrophicError
from flight_aggregator.schemas import SearchRequest

from .conftest import FakeClock


def test_get_returns_value_until_expiry(clock: FakeClock):
    cache = ResultCache(default_ttl=60, clock=clock)
    cache.set("k", [1, 2])

    clock.advance(60)
    assert cache.get("k") == [1, 2]

    clock.advance(0.001)
    assert cache.get("k") is None


def test_stale_entry_is_evicted_on_read(clock: FakeClock):
    cache = ResultCache(default_ttl=10, clock=clock)
    cache.set("k", "v")
    clock.advance(11)

    assert len(cache) == 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_missing_key_returns_none():
    assert ResultCache().get("nope") is None


def test_set_overwrites_and_resets_expiry(clock: FakeClock):
    cache = ResultCache(default_ttl=10, clock=clock)
    cache.set("k", "old")
    clock.advance(8)
    cache.set("k", "new")
    clock.advance(8)

    assert cache.get("k") == "new"


def test_explicit_ttl_overrides_default(clock: FakeClock):
    cache = ResultCache(default_ttl=300, clock=clock)
    cache.set("k", "v", ttl=1)
    clock.advance(2)

    assert cache.get("k") is None


def test_clear_and_purge_expired(clock: FakeClock):
    cache = ResultCache(default_ttl=10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl=100)
    clock.advance(20)

    assert cache.purge_expired() == 1
    assert cache.get("b") == 2

    cache.clear()
    assert len(cache) == 0


def test_len_waits_for_the_lock(clock: FakeClock):
    cache = ResultCache(default_ttl=10, clock=clock)
    cache.set("a", 1)
    sizes: list[int] = []
    reader = threading.Thread(target=lambda: sizes.append(len(cache)))

    with cache._lock:
        reader.start()
        reader.join(timeout=0.05)
        assert reader.is_alive()
        assert sizes == []

    reader.join(timeout=1)
    assert sizes == [1]


# ---------------------------------------------------------------------------
# build_key
# ---------------------------------------------------------------------------


def _request(**overrides) -> SearchRequest:
    fields = {"origin": "KRK", "destination": "LHR", "date_from": date(2030, 5, 10)}
    fields.update(overrides)
    return SearchRequest(**fields)


def test_key_is_independent_of_field_order():
    a = SearchRequest(origin="KRK", destination="LHR", date_from=date(2030, 5, 10), passengers=2)
    b = SearchRequest(passengers=2, date_from=date(2030, 5, 10), destination="LHR", origin="KRK")

    assert ResultCache.build_key("search", a) == ResultCache.build_key("search", b)


def test_key_is_independent_of_filter_order_and_duplicates():
    req = _request()
    assert ResultCache.build_key("search", req, ["kiwi", "ryanair"]) == (
        ResultCache.build_key("search", req, ["ryanair", "kiwi", "kiwi"])
    )


def test_empty_filter_equals_no_filter():
    req = _request()
    assert ResultCache.build_key("search", req, []) == ResultCache.build_key("search", req)


@pytest.mark.parametrize(
    ("left", "right"),
    [
        (("search", {}, None), ("explore", {}, None)),
        (("search", {}, None), ("search", {"max_stops": 0}, None)),
        (("search", {}, None), ("search", {}, ["kiwi"])),
    ],
)
def test_different_inputs_produce_different_keys(left, right):
    op_a, fields_a, filter_a = left
    op_b, fields_b, filter_b = right
    assert ResultCache.build_key(op_a, _request(**fields_a), filter_a) != (
        ResultCache.build_key(op_b, _request(**fields_b), filter_b)
    )


def test_unencodable_request_raises_catastrophic_error():
    class Opaque(BaseModel):
        model_config = {"arbitrary_types_allowed": True}

        payload: object

    with pytest.raises(CacheKeyError) as excinfo:
        ResultCache.build_key("search", Opaque(payload=object()))
    assert isinstance(excinfo.value, CatastrophicError)
