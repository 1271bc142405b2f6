"""Markdown rendering of aggregated results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from flight_aggregator.schemas import SourceName

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from flight_aggregator.schemas import DestinationOffer, FlightOffer


def format_duration(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"


def _format_dt(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def _format_price(price: float, currency: str) -> str:
    return f"{price:g} {currency}"


def format_flights_table(flights: Sequence[FlightOffer]) -> str:
    if not flights:
        return "No flights found."

    lines = [
        f"Found **{len(flights)}** flights:\n",
        "| # | Price | Airline | Flight | Route | Departure | Arrival "
        "| Duration | Stops | Source | Baggage |",
        "|---|-------|---------|--------|-------|-----------|---------"
        "|----------|-------|--------|---------|",
    ]
    for i, f in enumerate(flights, 1):
        link = f"[Book]({f.deep_link})" if f.deep_link else f.source
        lines.append(
            f"| {i} | **{_format_price(f.price, f.currency)}** | {f.airline} "
            f"| {f.flight_number} | {f.origin}→{f.destination} "
            f"| {_format_dt(f.departure_time)} | {_format_dt(f.arrival_time)} "
            f"| {format_duration(f.duration_minutes)} | {f.stops} | {link} "
            f"| {'Yes' if f.baggage_included else 'No'} |"
        )
    return "\n".join(lines)


def format_explore_table(results: Sequence[DestinationOffer]) -> str:
    if not results:
        return "No destinations found."

    lines = [
        f"Found **{len(results)}** cheap destinations:\n",
        "| # | Destination | Price | Dates | Source |",
        "|---|-------------|-------|-------|--------|",
    ]
    for i, r in enumerate(results, 1):
        dest = (
            f"{r.destination_name} ({r.destination})"
            if r.destination_name
            else r.destination
        )
        departure = r.departure_date.isoformat() if r.departure_date else "?"
        ret = r.return_date.isoformat() if r.return_date else "?"
        link = f"[Book]({r.deep_link})" if r.deep_link else r.source
        lines.append(
            f"| {i} | **{dest}** | **{_format_price(r.price, r.currency)}** "
            f"| {departure} → {ret} | {link} |"
        )
    return "\n".join(lines)


def format_compare_table(
    flights: Sequence[FlightOffer], origin: str, destination: str, date: str
) -> str:
    """One row per known source with its cheapest offer, N/A when it has none.

    Expects *flights* already sorted by price.
    """
    if not flights:
        return "No prices found from any source."

    cheapest: dict[str, FlightOffer] = {}
    for f in flights:
        cheapest.setdefault(f.source, f)

    lines = [
        f"## Price Comparison: {origin} → {destination} on {date}\n",
        "| Source | Cheapest | Airline | Flight | Stops | Duration | Baggage |",
        "|--------|----------|---------|--------|-------|----------|---------|",
    ]
    names = [str(s) for s in SourceName]
    names += sorted(s for s in cheapest if s not in names)
    for name in names:
        f = cheapest.get(name)
        if f is None:
            lines.append(f"| {name} | N/A | - | - | - | - | - |")
            continue
        lines.append(
            f"| {name} | **{_format_price(f.price, f.currency)}** | {f.airline} "
            f"| {f.flight_number} | {f.stops} | {format_duration(f.duration_minutes)} "
            f"| {'Yes' if f.baggage_included else 'No'} |"
        )
    return "\n".join(lines)
