"""Parse Amadeus flight-offers responses into FlightOffer objects."""

from __future__ import annotations

import logging
import re
from typing import Any

from flight_aggregator.schemas import CabinClass, FlightOffer, SourceName
from flight_aggregator.sources.airports import local_schedule

logger = logging.getLogger(__name__)

_CABIN_MAP: dict[str, CabinClass] = {
    "ECONOMY": CabinClass.ECONOMY,
    "PREMIUM_ECONOMY": CabinClass.PREMIUM_ECONOMY,
    "BUSINESS": CabinClass.BUSINESS,
    "FIRST": CabinClass.FIRST,
}

# ISO-8601 duration → minutes (e.g. "PT2H30M" → 150)
_DURATION_RE = re.compile(r"P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?")


def parse_duration(iso_dur: str) -> int:
    """Convert an ISO-8601 duration string to minutes."""
    m = _DURATION_RE.fullmatch(iso_dur or "")
    if not m:
        return 0
    days = int(m.group(1) or 0)
    hours = int(m.group(2) or 0)
    minutes = int(m.group(3) or 0)
    return days * 24 * 60 + hours * 60 + minutes


def _first_fare_details(offer: dict[str, Any]) -> dict[str, Any]:
    traveler_pricings = offer.get("travelerPricings") or []
    if not traveler_pricings:
        return {}
    fare_details = traveler_pricings[0].get("fareDetailsBySegment") or []
    return fare_details[0] if fare_details else {}


def _to_offer(offer: dict[str, Any], default_currency: str) -> FlightOffer | None:
    itineraries = offer.get("itineraries") or []
    if not itineraries:
        return None

    # Outbound itinerary only
    itin = itineraries[0]
    segments = itin.get("segments") or []
    if not segments:
        return None

    first_seg = segments[0]
    last_seg = segments[-1]

    price_data = offer.get("price") or {}
    total = price_data.get("grandTotal") or price_data.get("total")
    if not total:
        return None

    carrier_code = first_seg.get("carrierCode", "")
    fare_details = _first_fare_details(offer)
    bag_info = fare_details.get("includedCheckedBags") or {}
    origin = first_seg["departure"]["iataCode"]
    destination = last_seg["arrival"]["iataCode"]
    departure, arrival, duration = local_schedule(
        origin,
        destination,
        first_seg["departure"]["at"],
        last_seg["arrival"].get("at"),
        parse_duration(itin.get("duration", "")),
    )

    return FlightOffer(
        id=f"amadeus-{offer.get('id', '')}",
        source=SourceName.AMADEUS,
        airline=carrier_code or "Unknown",
        airline_code=carrier_code,
        flight_number=f"{carrier_code}{first_seg.get('number', '')}",
        origin=origin,
        destination=destination,
        departure_time=departure,
        arrival_time=arrival,
        duration_minutes=duration,
        stops=len(segments) - 1,
        price=float(total),
        currency=price_data.get("currency") or default_currency,
        cabin_class=_CABIN_MAP.get(fare_details.get("cabin", ""), CabinClass.ECONOMY),
        baggage_included=bool(bag_info.get("quantity", 0) > 0 or bag_info.get("weight")),
    )


def parse_flight_offers(
    offers: list[dict[str, Any]], *, currency: str
) -> list[FlightOffer]:
    """Convert the ``data`` array of a Flight Offers Search response.

    One :class:`FlightOffer` per offer, built from its first (outbound)
    itinerary; connections count as stops.  Offers without itineraries,
    segments or a price are skipped.
    """
    flights: list[FlightOffer] = []
    for offer in offers:
        try:
            parsed = _to_offer(offer, currency)
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Skipping malformed Amadeus offer: %s", exc)
            continue
        if parsed is not None:
            flights.append(parsed)

    logger.info("Parsed %d flight offers from Amadeus", len(flights))
    return flights
