"""Parse SerpAPI Google Flights responses into FlightOffer objects."""

from __future__ import annotations

import logging
from typing import Any

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.schemas import CabinClass, FlightOffer, SourceName
from flight_aggregator.sources.airports import local_schedule

logger = logging.getLogger(__name__)

_CABIN_MAP: dict[str, CabinClass] = {
    "economy": CabinClass.ECONOMY,
    "premium economy": CabinClass.PREMIUM_ECONOMY,
    "business": CabinClass.BUSINESS,
    "first": CabinClass.FIRST,
}


def _to_offer(option: dict[str, Any], index: int, currency: str) -> FlightOffer:
    legs: list[dict[str, Any]] = option["flights"]
    first = legs[0]
    last = legs[-1]

    raw_number = str(first.get("flight_number") or "")
    airline_code = raw_number.split()[0] if raw_number.split() else ""
    flight_number = raw_number.replace(" ", "")
    origin = first["departure_airport"]["id"]
    destination = last["arrival_airport"]["id"]
    departure, arrival, duration = local_schedule(
        origin,
        destination,
        first["departure_airport"]["time"],
        last["arrival_airport"].get("time"),
        int(option.get("total_duration") or 0),
    )

    return FlightOffer(
        id=f"serpapi-{flight_number or index}-{departure:%Y%m%d}",
        source=SourceName.SERPAPI,
        airline=first.get("airline") or "Unknown",
        airline_code=airline_code,
        flight_number=flight_number,
        origin=origin,
        destination=destination,
        departure_time=departure,
        arrival_time=arrival,
        duration_minutes=duration,
        stops=len(legs) - 1,
        price=float(option["price"]),
        currency=currency,
        cabin_class=_CABIN_MAP.get(
            str(first.get("travel_class", "")).lower(), CabinClass.ECONOMY
        ),
    )


def parse_search_response(raw: dict[str, Any], *, currency: str) -> list[FlightOffer]:
    """Flatten ``best_flights`` and ``other_flights`` into offers.

    Options without a price (SerpAPI omits it when fares are unavailable)
    or with unparseable legs are skipped.
    """
    if "error" in raw and not raw.get("best_flights") and not raw.get("other_flights"):
        error = str(raw["error"])
        # SerpAPI reports "no results" as an error string, not a status code
        if "hasn't returned any results" in error:
            return []
        raise SourceError(SourceName.SERPAPI, error, SourceErrorKind.NETWORK)

    options: list[dict[str, Any]] = []
    for category in ("best_flights", "other_flights"):
        block = raw.get(category) or []
        if not isinstance(block, list):
            msg = f"'{category}' is not a list"
            raise SourceError(SourceName.SERPAPI, msg, SourceErrorKind.MALFORMED_RESPONSE)
        options.extend(block)

    offers: list[FlightOffer] = []
    for index, option in enumerate(options):
        try:
            offers.append(_to_offer(option, index, currency))
        except (KeyError, TypeError, ValueError, IndexError) as exc:
            logger.debug("Skipping malformed SerpAPI option: %s", exc)

    logger.info("Parsed %d offers from SerpAPI response", len(offers))
    return offers
