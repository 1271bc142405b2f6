"""Parse FlightAPI.io trip responses into FlightOffer objects."""

from __future__ import annotations

import logging
from typing import Any

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.schemas import CabinClass, FlightOffer, SourceName
from flight_aggregator.sources.airports import local_schedule

logger = logging.getLogger(__name__)

# Amounts above this are in thousandths of the currency unit
_MINOR_UNIT_THRESHOLD = 1000


def normalize_price(amount: float) -> float:
    """FlightAPI mixes whole-unit and thousandth-unit amounts."""
    if amount > _MINOR_UNIT_THRESHOLD:
        return float(round(amount / 1000))
    return float(amount)


def _index(raw: dict[str, Any], table: str) -> dict[str, dict[str, Any]]:
    rows = raw.get(table) or []
    if not isinstance(rows, list):
        msg = f"'{table}' is not a list"
        raise SourceError(SourceName.FLIGHTAPI, msg, SourceErrorKind.MALFORMED_RESPONSE)
    return {str(row["id"]): row for row in rows if isinstance(row, dict) and "id" in row}


def parse_trip_response(
    raw: dict[str, Any],
    *,
    origin: str,
    destination: str,
    max_stops: int,
    max_price: float | None,
    currency: str,
) -> list[FlightOffer]:
    """Join itineraries with their legs, segments, carriers and places.

    Each itinerary becomes one offer described by its first (outbound) leg
    and priced by its first pricing option.  Itineraries over *max_stops*
    or *max_price* are dropped.
    """
    places = _index(raw, "places")
    carriers = _index(raw, "carriers")
    legs = _index(raw, "legs")
    segments = _index(raw, "segments")

    offers: list[FlightOffer] = []
    for itinerary in raw.get("itineraries") or []:
        try:
            pricing = (itinerary.get("pricing_options") or [None])[0]
            if not pricing:
                continue
            price = normalize_price((pricing.get("price") or {}).get("amount") or 0)
            if max_price is not None and price > max_price:
                continue

            leg = legs[str(itinerary["leg_ids"][0])]
            stops = int(leg.get("stop_count") or 0)
            if stops > max_stops:
                continue

            segment_ids = leg.get("segment_ids") or []
            segment = segments.get(str(segment_ids[0]), {}) if segment_ids else {}
            carrier = carriers.get(str(segment.get("marketing_carrier_id")), {})
            airline_code = carrier.get("alt_id") or ""

            leg_origin = places.get(str(leg.get("origin_place_id")), {}).get("alt_id") or origin
            leg_destination = (
                places.get(str(leg.get("destination_place_id")), {}).get("alt_id")
                or destination
            )
            departure, arrival, duration = local_schedule(
                leg_origin,
                leg_destination,
                leg["departure"],
                leg.get("arrival"),
                int(leg.get("duration") or 0),
            )
            items = pricing.get("items") or [{}]

            offers.append(
                FlightOffer(
                    id=f"flightapi-{itinerary.get('id', '')}",
                    source=SourceName.FLIGHTAPI,
                    airline=carrier.get("name") or "Unknown",
                    airline_code=airline_code,
                    flight_number=(
                        f"{airline_code}{segment.get('marketing_flight_number', '')}"
                        if segment
                        else ""
                    ),
                    origin=leg_origin,
                    destination=leg_destination,
                    departure_time=departure,
                    arrival_time=arrival,
                    duration_minutes=duration,
                    stops=stops,
                    price=price,
                    currency=currency,
                    deep_link=items[0].get("url"),
                    cabin_class=CabinClass.ECONOMY,
                )
            )
        except (KeyError, TypeError, ValueError, IndexError, AttributeError) as exc:
            logger.debug("Skipping malformed FlightAPI itinerary: %s", exc)

    logger.info("Parsed %d offers from FlightAPI", len(offers))
    return offers
