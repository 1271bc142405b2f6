"""Parse Sky-Scrapper responses into offers."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from flight_aggregator.errors import SourceError, SourceErrorKind
from flight_aggregator.schemas import (
    CabinClass,
    DestinationOffer,
    FlightOffer,
    SourceName,
)
from flight_aggregator.sources.airports import local_schedule

logger = logging.getLogger(__name__)


def _check_status(raw: dict[str, Any]) -> None:
    # Errors come back as HTTP 200 with ``status: false``
    if raw.get("status") is False:
        message = str(raw.get("message") or "request rejected")
        raise SourceError(SourceName.SKYSCANNER, message, SourceErrorKind.NETWORK)


def _by_key(items: Any, key: str) -> dict[str, dict[str, Any]]:
    if not isinstance(items, list):
        return {}
    return {str(item[key]): item for item in items if isinstance(item, dict) and key in item}


def _to_offer(
    item: dict[str, Any],
    places: dict[str, dict[str, Any]],
    carriers: dict[str, dict[str, Any]],
    *,
    origin: str,
    destination: str,
    currency: str,
) -> FlightOffer:
    leg = item["legs"][0]
    segments = leg.get("segments") or []
    segment = segments[0] if segments else {}
    marketing = segment.get("marketingCarrier") or {}
    carrier = carriers.get(str(segment.get("marketingCarrierId")), {})

    airline_code = carrier.get("alternateId") or marketing.get("alternateId") or ""
    flight_number = (
        f"{marketing.get('alternateId', '')}{segment.get('flightNumber', '')}"
        if segment
        else ""
    )
    leg_origin = (
        places.get(str(leg.get("originPlaceId")), {}).get("iata")
        or leg.get("originStationCode")
        or origin
    )
    leg_destination = (
        places.get(str(leg.get("destinationPlaceId")), {}).get("iata")
        or leg.get("destinationStationCode")
        or destination
    )
    departure, arrival, duration = local_schedule(
        leg_origin,
        leg_destination,
        leg["departure"],
        leg.get("arrival"),
        int(leg.get("durationInMinutes") or 0),
    )

    return FlightOffer(
        id=f"skyscanner-{item.get('id') or leg.get('id', '')}",
        source=SourceName.SKYSCANNER,
        airline=carrier.get("name") or marketing.get("name") or "Unknown",
        airline_code=airline_code,
        flight_number=flight_number,
        origin=leg_origin,
        destination=leg_destination,
        departure_time=departure,
        arrival_time=arrival,
        duration_minutes=duration,
        stops=int(leg.get("stopCount") or 0),
        price=float((item.get("price") or {})["raw"]),
        currency=currency,
        deep_link=item.get("deeplink"),
        cabin_class=CabinClass.ECONOMY,
    )


def parse_search_response(
    raw: dict[str, Any],
    *,
    origin: str,
    destination: str,
    max_stops: int,
    max_price: float | None,
    currency: str,
) -> list[FlightOffer]:
    """Flatten every itinerary bucket into offers.

    The same itinerary is listed in several buckets ("Best", "Cheapest",
    ...); it is kept once.  Offers over *max_stops* or *max_price* are
    dropped.
    """
    _check_status(raw)
    data = raw.get("data") or {}
    context = data.get("context") or {}
    places = _by_key(context.get("places"), "entityId")
    carriers = _by_key(context.get("carriers"), "id")

    buckets = (data.get("itineraries") or {}).get("buckets") or []
    if not isinstance(buckets, list):
        msg = "'itineraries.buckets' is not a list"
        raise SourceError(SourceName.SKYSCANNER, msg, SourceErrorKind.MALFORMED_RESPONSE)

    offers: list[FlightOffer] = []
    seen: set[str] = set()
    for bucket in buckets:
        if not isinstance(bucket, dict):
            continue
        for item in bucket.get("items") or []:
            try:
                offer = _to_offer(
                    item,
                    places,
                    carriers,
                    origin=origin,
                    destination=destination,
                    currency=currency,
                )
            except (KeyError, TypeError, ValueError, IndexError, AttributeError) as exc:
                logger.debug("Skipping malformed Sky-Scrapper itinerary: %s", exc)
                continue
            if offer.id in seen:
                continue
            seen.add(offer.id)
            if offer.stops > max_stops:
                continue
            if max_price is not None and offer.price > max_price:
                continue
            offers.append(offer)

    logger.info("Parsed %d offers from Sky-Scrapper", len(offers))
    return offers


def parse_everywhere_response(
    raw: dict[str, Any],
    *,
    date_from: date,
    date_to: date,
    max_price: float | None,
    currency: str,
) -> list[DestinationOffer]:
    """Convert ``searchFlightEverywhere`` results into destination offers.

    Results are per country and carry no dates; the requested window is
    reported instead.
    """
    _check_status(raw)
    items = raw.get("data")
    if items is None:
        return []
    if not isinstance(items, list):
        msg = "'data' is not a list"
        raise SourceError(SourceName.SKYSCANNER, msg, SourceErrorKind.MALFORMED_RESPONSE)

    offers: list[DestinationOffer] = []
    for item in items:
        try:
            meta = item.get("Meta") or {}
            payload = item.get("Payload") or {}
            price = float(payload["Price"])
            if max_price is not None and price > max_price:
                continue
            offers.append(
                DestinationOffer(
                    destination=meta["CountryId"],
                    destination_name=meta.get("CountryNameEnglish") or "",
                    price=price,
                    currency=payload.get("CurrencyId") or currency,
                    departure_date=date_from,
                    return_date=date_to,
                    source=SourceName.SKYSCANNER,
                )
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.debug("Skipping malformed Sky-Scrapper destination: %s", exc)

    return offers
