"""Parse Kiwi Tequila /v2/search responses into offers."""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timezone
from typing import Any

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.schemas import (
    CabinClass,
    DestinationOffer,
    FlightOffer,
    SourceName,
)
from flight_aggregator.sources.airports import airport_zone, parse_wall_clock

logger = logging.getLogger(__name__)


def _point(
    leg: dict[str, Any], itinerary: dict[str, Any], kind: str
) -> tuple[str | None, str | None]:
    """``(local, utc)`` times of one departure or arrival, kept as a pair."""
    holder = leg if leg.get(f"local_{kind}") else itinerary
    return holder.get(f"local_{kind}"), holder.get(f"utc_{kind}")


def _localized(local: str | None, utc: str | None, airport: str) -> datetime:
    """Airport-local time carrying its real UTC offset.

    Kiwi suffixes local times with a ``Z`` they do not have.  The offset is
    recovered from the UTC twin, or from the airport's zone without one.
    """
    if not local:
        if not utc:
            msg = f"no time given for {airport}"
            raise ValueError(msg)
        return parse_wall_clock(utc).replace(tzinfo=UTC)
    wall = parse_wall_clock(local)
    if utc:
        return wall.replace(tzinfo=timezone(wall - parse_wall_clock(utc)))
    return wall.replace(tzinfo=airport_zone(airport) or UTC)


def _parse_date(value: str | None) -> date | None:
    if not value:
        return None
    return datetime.fromisoformat(value).date()


def _itineraries(raw: dict[str, Any]) -> list[dict[str, Any]]:
    data = raw.get("data")
    if data is None:
        return []
    if not isinstance(data, list):
        msg = "'data' is not a list"
        raise SourceError(SourceName.KIWI, msg, SourceErrorKind.MALFORMED_RESPONSE)
    return data


def _outbound_legs(itinerary: dict[str, Any]) -> list[dict[str, Any]]:
    route = itinerary.get("route") or []
    return [leg for leg in route if not leg.get("return")]


def _to_offer(itinerary: dict[str, Any], currency: str) -> FlightOffer:
    legs = _outbound_legs(itinerary)
    first = legs[0] if legs else {}
    last = legs[-1] if legs else {}

    airline_code = first.get("airline", "")
    flight_number = f"{airline_code}{first['flight_no']}" if first else ""
    airlines = itinerary.get("airlines") or []

    departure = _localized(*_point(first, itinerary, "departure"), itinerary["flyFrom"])
    arrival = _localized(*_point(last, itinerary, "arrival"), itinerary["flyTo"])

    duration = itinerary.get("duration") or {}
    seconds = duration.get("departure") or duration.get("total") or 0
    if not seconds:
        seconds = (arrival - departure).total_seconds()

    bags_price = itinerary.get("bags_price") or {}
    first_bag = bags_price.get("1", bags_price.get(1, 0))

    return FlightOffer(
        id=f"kiwi-{itinerary['id']}",
        source=SourceName.KIWI,
        airline=", ".join(airlines) or airline_code or "Unknown",
        airline_code=airline_code,
        flight_number=flight_number,
        origin=itinerary["flyFrom"],
        destination=itinerary["flyTo"],
        departure_time=departure,
        arrival_time=arrival,
        duration_minutes=round(seconds / 60),
        stops=max(0, len(legs) - 1),
        price=float(itinerary["price"]),
        currency=currency,
        deep_link=itinerary.get("deep_link"),
        cabin_class=CabinClass.ECONOMY,
        baggage_included=first_bag == 0,
    )


def parse_search_response(raw: dict[str, Any], *, currency: str) -> list[FlightOffer]:
    """Convert Kiwi ``data[]`` itineraries into :class:`FlightOffer` objects.

    One offer per itinerary, described by its outbound legs. Itineraries that
    cannot be normalized are skipped.
    """
    offers: list[FlightOffer] = []
    for itinerary in _itineraries(raw):
        try:
            offers.append(_to_offer(itinerary, currency))
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            logger.debug("Skipping malformed Kiwi itinerary: %s", exc)

    logger.info("Parsed %d offers from Kiwi response", len(offers))
    return offers


def parse_explore_response(
    raw: dict[str, Any], *, currency: str
) -> list[DestinationOffer]:
    """Convert a ``fly_to=anywhere`` response into destination offers."""
    offers: list[DestinationOffer] = []
    for itinerary in _itineraries(raw):
        try:
            inbound = [
                leg for leg in itinerary.get("route") or [] if leg.get("return")
            ]
            return_date = (
                _parse_date(inbound[0].get("local_departure")) if inbound else None
            )
            offers.append(
                DestinationOffer(
                    destination=itinerary["flyTo"],
                    destination_name=itinerary.get("cityTo") or "",
                    price=float(itinerary["price"]),
                    currency=currency,
                    departure_date=_parse_date(itinerary.get("local_departure")),
                    return_date=return_date,
                    source=SourceName.KIWI,
                    deep_link=itinerary.get("deep_link"),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Skipping malformed Kiwi destination: %s", exc)

    logger.info("Parsed %d destinations from Kiwi response", len(offers))
    return offers
