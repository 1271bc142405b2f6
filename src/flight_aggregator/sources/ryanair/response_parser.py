"""Parse Ryanair fare-finder responses."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.schemas import (
    CabinClass,
    DestinationOffer,
    FlightOffer,
    SourceName,
)
from flight_aggregator.sources.airports import local_schedule, parse_wall_clock

logger = logging.getLogger(__name__)


def _malformed(message: str) -> SourceError:
    return SourceError(SourceName.RYANAIR, message, SourceErrorKind.MALFORMED_RESPONSE)


def parse_cheapest_per_day(
    raw: dict[str, Any],
    *,
    origin: str,
    destination: str,
    date_from: date,
    date_to: date,
    max_price: float | None,
    currency: str,
) -> list[FlightOffer]:
    """Turn a ``cheapestPerDay`` month into offers inside [date_from, date_to].

    The endpoint has no flight numbers, so a synthetic
    ``FR-<origin>-<destination>`` is used; it stays unique per day, which is
    all deduplication needs.  Sold-out days and fares above *max_price* are
    dropped.
    """
    fares = (raw.get("outbound") or {}).get("fares")
    if fares is None:
        return []
    if not isinstance(fares, list):
        raise _malformed("'outbound.fares' is not a list")

    offers: list[FlightOffer] = []
    for fare in fares:
        try:
            price = fare.get("price")
            if not price or not fare.get("departureDate") or fare.get("unavailable"):
                continue
            if fare.get("soldOut"):
                continue

            day = parse_wall_clock(fare["departureDate"]).date()
            if not date_from <= day <= date_to:
                continue
            value = float(price["value"])
            if max_price is not None and value > max_price:
                continue

            arrival_raw = fare.get("arrivalDate")
            if not arrival_raw:
                logger.debug("Ryanair fare on %s has no arrival time", day)
                continue
            departure, arrival, duration = local_schedule(
                origin, destination, fare["departureDate"], arrival_raw
            )
            if arrival <= departure:
                logger.debug("Ryanair fare on %s arrives before it departs", day)
                continue

            offers.append(
                FlightOffer(
                    id=f"ryanair-{origin}-{destination}-{day.isoformat()}",
                    source=SourceName.RYANAIR,
                    airline="Ryanair",
                    airline_code="FR",
                    flight_number=f"FR-{origin}-{destination}",
                    origin=origin,
                    destination=destination,
                    departure_time=departure,
                    arrival_time=arrival,
                    duration_minutes=duration,
                    stops=0,
                    price=value,
                    currency=price.get("currencyCode") or currency,
                    cabin_class=CabinClass.ECONOMY,
                    baggage_included=False,
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.debug("Skipping malformed Ryanair fare: %s", exc)

    return offers


def _iso_day(value: str | None) -> date | None:
    if not value:
        return None
    return datetime.fromisoformat(value).date()


def parse_round_trip_fares(
    raw: dict[str, Any], *, max_price: float | None, currency: str
) -> list[DestinationOffer]:
    """Convert ``roundTripFares`` into one destination offer per fare."""
    fares = raw.get("fares")
    if fares is None:
        return []
    if not isinstance(fares, list):
        raise _malformed("'fares' is not a list")

    offers: list[DestinationOffer] = []
    for fare in fares:
        try:
            outbound = fare["outbound"]
            inbound = fare.get("inbound") or {}
            summary_price = (fare.get("summary") or {}).get("price")
            if summary_price:
                total = float(summary_price["value"])
            else:
                total = float(outbound["price"]["value"]) + float(
                    (inbound.get("price") or {}).get("value", 0)
                )
            if max_price is not None and total > max_price:
                continue

            airport = outbound.get("arrivalAirport") or {}
            city = (airport.get("city") or {}).get("name")
            offers.append(
                DestinationOffer(
                    destination=airport.get("iataCode") or airport["name"],
                    destination_name=city or airport.get("name") or "",
                    price=total,
                    currency=outbound["price"].get("currencyCode") or currency,
                    departure_date=_iso_day(outbound.get("departureDate")),
                    return_date=_iso_day(inbound.get("departureDate")),
                    source=SourceName.RYANAIR,
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.debug("Skipping malformed Ryanair round trip: %s", exc)

    logger.info("Parsed %d destinations from Ryanair", len(offers))
    return offers
