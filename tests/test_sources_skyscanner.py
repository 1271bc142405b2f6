"""Sky-Scrapper source tests against canned RapidAPI payloads."""

from __future__ import annotations

from datetime import UTC, date, datetime

import httpx
import pytest

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.rate_limiter import RateLimiter
from flight_aggregator.schemas import ExploreRequest, SearchRequest
from flight_aggregator.sources.skyscanner import SkyscannerSource
from flight_aggregator.sources.skyscanner.response_parser import parse_search_response


def _item(item_id: str, price: float, stops: int = 0) -> dict:
    return {
        "id": item_id,
        "price": {"raw": price, "formatted": f"{price} zł"},
        "deeplink": f"https://www.skyscanner.net/{item_id}",
        "legs": [
            {
                "id": f"leg-{item_id}",
                "originPlaceId": "95673502",
                "destinationPlaceId": "95565050",
                "departure": "2030-05-10T06:00:00",
                "arrival": "2030-05-10T08:35:00",
                "durationInMinutes": 215,
                "stopCount": stops,
                "segments": [
                    {
                        "marketingCarrierId": -32222,
                        "flightNumber": "3925",
                        "marketingCarrier": {"name": "LOT", "alternateId": "LO"},
                    }
                ],
            }
        ],
    }


def _payload(*items: dict) -> dict:
    return {
        "status": True,
        "data": {
            "context": {
                "places": [
                    {"entityId": "95673502", "iata": "KRK"},
                    {"entityId": "95565050", "iata": "LHR"},
                ],
                "carriers": [{"id": -32222, "name": "LOT Polish Airlines", "alternateId": "LO"}],
            },
            "itineraries": {
                "buckets": [
                    {"id": "Best", "items": list(items)},
                    {"id": "Cheapest", "items": list(items[:1])},
                ]
            },
        },
    }


def _source(handler) -> SkyscannerSource:
    return SkyscannerSource(
        api_key="rapid-key",
        rate_limiter=RateLimiter(10, 10),
        transport=httpx.MockTransport(handler),
    )


def test_parse_resolves_places_and_carriers():
    offers = parse_search_response(
        _payload(_item("a", 640), _item("b", 590, stops=2)),
        origin="KRK",
        destination="LHR",
        max_stops=1,
        max_price=None,
        currency="PLN",
    )

    # "a" listed in two buckets is kept once; "b" has too many stops
    assert len(offers) == 1
    offer = offers[0]
    assert offer.id == "skyscanner-a"
    assert offer.airline == "LOT Polish Airlines"
    assert offer.flight_number == "LO3925"
    assert (offer.origin, offer.destination) == ("KRK", "LHR")
    assert offer.departure_time == datetime(2030, 5, 10, 4, 0, tzinfo=UTC)
    assert offer.duration_minutes == 215
    assert offer.deep_link == "https://www.skyscanner.net/a"


def test_parse_applies_price_ceiling():
    offers = parse_search_response(
        _payload(_item("a", 640), _item("b", 590)),
        origin="KRK",
        destination="LHR",
        max_stops=2,
        max_price=600,
        currency="PLN",
    )

    assert [o.id for o in offers] == ["skyscanner-b"]


def test_rejected_request_raises():
    with pytest.raises(SourceError) as excinfo:
        parse_search_response(
            {"status": False, "message": "You are not subscribed to this API."},
            origin="KRK",
            destination="LHR",
            max_stops=1,
            max_price=None,
            currency="PLN",
        )
    assert "not subscribed" in str(excinfo.value)


async def test_search_sends_rapidapi_headers(search_request: SearchRequest):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_payload(_item("a", 640)))

    source = _source(handler)
    try:
        offers = await source.search(search_request)
    finally:
        await source.close()

    assert len(offers) == 1
    [request] = seen
    assert request.url.path == "/api/v2/flights/searchFlightsWebComplete"
    assert request.headers["X-RapidAPI-Key"] == "rapid-key"
    assert request.headers["X-RapidAPI-Host"] == "sky-scrapper.p.rapidapi.com"
    assert request.url.params["originSkyId"] == search_request.origin
    assert request.url.params["date"] == search_request.date_from.isoformat()
    assert "returnDate" not in request.url.params


async def test_explore_reports_countries_for_the_window():
    payload = {
        "status": True,
        "data": [
            {
                "Meta": {"CountryId": "ES", "CountryNameEnglish": "Spain"},
                "Payload": {"Price": 310, "CurrencyId": "PLN"},
            },
            {
                "Meta": {"CountryId": "JP", "CountryNameEnglish": "Japan"},
                "Payload": {"Price": 2900, "CurrencyId": "PLN"},
            },
        ],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/flights/searchFlightEverywhere"
        assert request.url.params["travelDate"] == "2030-06-01"
        return httpx.Response(200, json=payload)

    source = _source(handler)
    request = ExploreRequest(
        origin="KRK", date_from=date(2030, 6, 1), date_to=date(2030, 6, 30), max_price=1000
    )
    try:
        [dest] = await source.explore(request)
    finally:
        await source.close()

    assert dest.destination == "ES"
    assert dest.destination_name == "Spain"
    assert (dest.departure_date, dest.return_date) == (date(2030, 6, 1), date(2030, 6, 30))


async def test_unauthorized_is_an_authentication_error(search_request: SearchRequest):
    source = _source(lambda request: httpx.Response(403))
    try:
        with pytest.raises(SourceError) as excinfo:
            await source.search(search_request)
    finally:
        await source.close()
    assert excinfo.value.kind is SourceErrorKind.AUTHENTICATION


def test_unavailable_without_key():
    assert SkyscannerSource(api_key="").is_available() is False
