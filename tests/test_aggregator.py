"""FlightAggregator tests: fan-out, partial failure, dedupe, ordering, caching."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from flight_aggregator.aggregator import FlightAggregator, SourceFailure
from flight_aggregator.cache import ResultCache
from flight_aggregator.errors import SourceErrorKind

from .conftest import (
    FakeClock,
    FakeExploreSource,
    FakeSource,
    make_destination,
    make_offer,
    source_error,
)

# ---------------------------------------------------------------------------
# search: merging
# ---------------------------------------------------------------------------


async def test_same_flight_from_three_sources_keeps_first_cheapest(search_request):
    sources = [
        FakeSource("alpha", [make_offer(source="alpha", price=420)]),
        FakeSource("beta", [make_offer(source="beta", price=390)]),
        FakeSource("gamma", [make_offer(source="gamma", price=390)]),
    ]
    aggregator = FlightAggregator(sources)

    result = await aggregator.search(search_request)

    assert len(result) == 1
    assert result[0].price == 390
    assert result[0].source == "beta"


async def test_dedupe_key_uses_calendar_day_route_and_flight(search_request):
    morning = datetime(2030, 5, 10, 6, 0, tzinfo=UTC)
    evening = datetime(2030, 5, 10, 21, 0, tzinfo=UTC)
    next_day = datetime(2030, 5, 11, 6, 0, tzinfo=UTC)
    offers = [
        make_offer(departure=morning, price=300),
        make_offer(departure=evening, price=250),  # same day: duplicate
        make_offer(departure=next_day, price=310),
        make_offer(flight_number="LO283", price=320),
        make_offer(destination="LGW", price=330),
    ]
    aggregator = FlightAggregator([FakeSource("alpha", offers)])

    result = await aggregator.search(search_request)

    keys = [offer.dedup_key for offer in result]
    assert len(keys) == len(set(keys)) == 4
    assert [offer.price for offer in result] == [250, 310, 320, 330]


async def test_sorted_by_price_then_duration_with_stable_ties(search_request):
    offers = [
        make_offer(flight_number="A1", price=500, duration=100),
        make_offer(flight_number="A2", price=200, duration=300),
        make_offer(flight_number="A3", price=200, duration=120),
        make_offer(flight_number="A4", price=200, duration=120, offer_id="second"),
    ]
    result = await FlightAggregator([FakeSource("alpha", offers)]).search(search_request)

    assert [o.flight_number for o in result] == ["A3", "A4", "A2", "A1"]
    for left, right in zip(result, result[1:]):
        assert (left.price, left.duration_minutes) <= (right.price, right.duration_minutes)


# ---------------------------------------------------------------------------
# search: partial failure and source selection
# ---------------------------------------------------------------------------


async def test_one_failing_source_does_not_fail_search(search_request):
    failures: list[SourceFailure] = []
    sources = [
        FakeSource("alpha", [make_offer(flight_number="LO1", price=300)]),
        FakeSource("beta", error=source_error("beta", SourceErrorKind.AUTHENTICATION)),
        FakeSource("gamma", [make_offer(flight_number="LO2", price=200)]),
    ]
    aggregator = FlightAggregator(sources, on_source_error=failures.append)

    result = await aggregator.search(search_request)

    assert [o.flight_number for o in result] == ["LO2", "LO1"]
    assert len(failures) == 1
    assert failures[0].source == "beta"
    assert failures[0].operation == "search"
    assert failures[0].kind is SourceErrorKind.AUTHENTICATION


async def test_unexpected_exception_is_recorded_without_kind(search_request):
    failures: list[SourceFailure] = []
    sources = [
        FakeSource("alpha", error=RuntimeError("parser bug")),
        FakeSource("beta", [make_offer()]),
    ]
    aggregator = FlightAggregator(sources, on_source_error=failures.append)

    result = await aggregator.search(search_request)

    assert len(result) == 1
    assert failures[0].kind is None
    assert "parser bug" in failures[0].error


async def test_all_sources_failing_returns_empty_list(search_request):
    sources = [FakeSource(n, error=source_error(n)) for n in ("alpha", "beta")]
    assert await FlightAggregator(sources).search(search_request) == []


async def test_no_sources_returns_empty_list(search_request):
    assert await FlightAggregator([]).search(search_request) == []


async def test_unavailable_sources_are_never_called(search_request):
    offline = FakeSource("offline", [make_offer()], available=False)
    online = FakeSource("online", [make_offer(source="online", flight_number="X1")])

    result = await FlightAggregator([offline, online]).search(search_request)

    assert offline.search_calls == 0
    assert [o.source for o in result] == ["online"]


async def test_source_filter_limits_fan_out(search_request):
    alpha = FakeSource("alpha", [make_offer(source="alpha")])
    beta = FakeSource("beta", [make_offer(source="beta", flight_number="B1")])
    aggregator = FlightAggregator([alpha, beta])

    result = await aggregator.search(search_request, {"beta"})

    assert alpha.search_calls == 0
    assert beta.search_calls == 1
    assert [o.source for o in result] == ["beta"]


async def test_empty_filter_means_all_sources(search_request):
    alpha = FakeSource("alpha", [make_offer(source="alpha")])
    beta = FakeSource("beta", [make_offer(source="beta", flight_number="B1")])

    await FlightAggregator([alpha, beta]).search(search_request, [])

    assert alpha.search_calls == beta.search_calls == 1


@pytest.mark.timeout(5)
async def test_sources_are_queried_concurrently(search_request):
    sources = [FakeSource(n, [make_offer(source=n)], delay=0.2) for n in "abcde"]
    loop = asyncio.get_running_loop()

    start = loop.time()
    await FlightAggregator(sources).search(search_request)

    assert loop.time() - start < 0.8


# ---------------------------------------------------------------------------
# search: caching
# ---------------------------------------------------------------------------


async def test_repeat_search_is_served_from_cache(search_request, clock: FakeClock):
    source = FakeSource("alpha", [make_offer()])
    aggregator = FlightAggregator([source], cache=ResultCache(300, clock=clock))

    first = await aggregator.search(search_request)
    clock.advance(299)
    second = await aggregator.search(search_request)

    assert second == first
    assert source.search_calls == 1


async def test_search_recomputes_after_ttl(search_request, clock: FakeClock):
    source = FakeSource("alpha", [make_offer()])
    aggregator = FlightAggregator([source], cache=ResultCache(300, clock=clock))

    await aggregator.search(search_request)
    clock.advance(301)
    await aggregator.search(search_request)

    assert source.search_calls == 2


async def test_different_filters_are_cached_separately(search_request):
    source = FakeSource("alpha", [make_offer()])
    aggregator = FlightAggregator([source])

    await aggregator.search(search_request)
    await aggregator.search(search_request, ["alpha"])

    assert source.search_calls == 2


async def test_empty_results_are_cached(search_request):
    source = FakeSource("alpha", [])
    aggregator = FlightAggregator([source])

    await aggregator.search(search_request)
    await aggregator.search(search_request)

    assert source.search_calls == 1


async def test_mutating_returned_list_does_not_touch_cache(search_request):
    aggregator = FlightAggregator([FakeSource("alpha", [make_offer()])])

    first = await aggregator.search(search_request)
    first.clear()

    assert len(await aggregator.search(search_request)) == 1


# ---------------------------------------------------------------------------
# explore
# ---------------------------------------------------------------------------


async def test_explore_skips_search_only_sources(explore_request):
    search_only = FakeSource("alpha")
    explorer = FakeExploreSource("beta", [make_destination("LHR", 300, source="beta")])

    result = await FlightAggregator([search_only, explorer]).explore(explore_request)

    assert [d.destination for d in result] == ["LHR"]
    assert search_only.search_calls == 0


async def test_explore_dedupes_sorts_then_limits(explore_request):
    # each source alone would fill the limit; truncation happens after merge
    first = [make_destination(code, price) for code, price in [
        ("AAA", 500), ("BBB", 100), ("CCC", 450), ("DDD", 700), ("EEE", 650), ("FFF", 800),
    ]]
    second = [make_destination(code, price, source="beta") for code, price in [
        ("AAA", 90), ("GGG", 120), ("HHH", 130), ("III", 900), ("JJJ", 950), ("KKK", 990),
    ]]
    sources = [
        FakeExploreSource("alpha", first),
        FakeExploreSource("beta", second),
    ]

    result = await FlightAggregator(sources).explore(explore_request)

    assert [(d.destination, d.price) for d in result] == [
        ("AAA", 90),
        ("BBB", 100),
        ("GGG", 120),
        ("HHH", 130),
        ("CCC", 450),
    ]
    assert len({d.destination for d in result}) == len(result) <= explore_request.limit


async def test_explore_tolerates_failures_and_caches(explore_request):
    failures: list[SourceFailure] = []
    broken = FakeExploreSource("alpha", error=source_error("alpha"))
    working = FakeExploreSource("beta", [make_destination("LHR", 300, source="beta")])
    aggregator = FlightAggregator([broken, working], on_source_error=failures.append)

    first = await aggregator.explore(explore_request)
    second = await aggregator.explore(explore_request)

    assert first == second
    assert working.explore_calls == 1
    assert [f.operation for f in failures] == ["explore"]


async def test_close_closes_every_source():
    sources = [FakeSource("alpha"), FakeExploreSource("beta")]
    await FlightAggregator(sources).close()
    assert all(s.closed for s in sources)
