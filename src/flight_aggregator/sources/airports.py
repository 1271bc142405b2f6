"""Airport time zones for sources that report local wall-clock times.

Amadeus, SerpAPI, Ryanair, Sky-Scrapper and FlightAPI all send departure
and arrival times as the clock on the wall at each airport, with no UTC
offset.  Departure and arrival are therefore in two different zones and
must never be compared as-is.  Each wall clock is attached to its own
airport's IANA zone, looked up in the ``airportsdata`` IATA table.
"""

from __future__ import annotations

import functools
import logging
from datetime import UTC, datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import airportsdata

logger = logging.getLogger(__name__)


@functools.cache
def _airports() -> dict[str, Any]:
    return airportsdata.load("IATA")


@functools.cache
def airport_zone(code: str) -> ZoneInfo | None:
    """IANA zone of the airport with IATA *code*, or ``None`` when unknown."""
    airport = _airports().get(code.strip().upper())
    tz_name = (airport or {}).get("tz")
    if not tz_name:
        return None
    try:
        return ZoneInfo(tz_name)
    except ZoneInfoNotFoundError:
        logger.warning("Unknown time zone %r for airport %s", tz_name, code)
        return None


def parse_wall_clock(value: str) -> datetime:
    """Naive wall-clock time; any offset or ``Z`` suffix on *value* is dropped."""
    return datetime.fromisoformat(value).replace(tzinfo=None)


def local_schedule(
    origin: str,
    destination: str,
    departure: str,
    arrival: str | None,
    duration_minutes: int = 0,
) -> tuple[datetime, datetime, int]:
    """Timezone-aware ``(departure, arrival, duration_minutes)``.

    *departure* is a wall clock at *origin* and *arrival* one at
    *destination*.  With both zones known the two clocks are localized
    independently.  Otherwise the departure keeps its wall clock (tagged
    UTC when the origin is unknown, so its calendar day stays the local
    one) and the arrival is derived from the duration.

    A zero *duration_minutes* means the source did not report one; it is
    then computed from the localized times.
    """
    departure_wall = parse_wall_clock(departure)
    origin_zone = airport_zone(origin)
    destination_zone = airport_zone(destination)

    if origin_zone is not None and destination_zone is not None and arrival:
        dep = departure_wall.replace(tzinfo=origin_zone)
        arr = parse_wall_clock(arrival).replace(tzinfo=destination_zone)
        if duration_minutes <= 0:
            duration_minutes = int((arr - dep).total_seconds() // 60)
        return dep, arr, duration_minutes

    dep = departure_wall.replace(tzinfo=origin_zone or UTC)
    if duration_minutes > 0 or not arrival:
        return dep, dep + timedelta(minutes=duration_minutes), duration_minutes

    # Neither zones nor a duration: the raw wall clocks are all there is
    logger.debug("No time zone for %s or %s; using wall clocks", origin, destination)
    arr = parse_wall_clock(arrival).replace(tzinfo=dep.tzinfo)
    return dep, arr, int((arr - dep).total_seconds() // 60)
