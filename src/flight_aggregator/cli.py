"""Command-line interface for the flight aggregator."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from datetime import date
from typing import TYPE_CHECKING

import click
from pydantic import ValidationError

from flight_aggregator import config
from flight_aggregator.config import AggregatorSettings
from flight_aggregator.errors import AggregatorError
from flight_aggregator.formatting import (
    format_compare_table,
    format_explore_table,
    format_flights_table,
)
from flight_aggregator.health import check_sources, format_health_table
from flight_aggregator.schemas import ExploreRequest, SearchRequest, SourceName
from flight_aggregator.sources import build_aggregator, build_sources

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from typing import TypeVar

    from flight_aggregator.aggregator import FlightAggregator

    T = TypeVar("T")

logger = logging.getLogger(__name__)

_SOURCE_CHOICE = click.Choice([s.value for s in SourceName])


def _parse_date(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> date | None:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from exc


def _run(
    settings: AggregatorSettings,
    action: Callable[[FlightAggregator], Awaitable[T]],
) -> T:
    """Build the aggregator, run *action* on it and close its sources."""

    async def _main() -> T:
        aggregator = build_aggregator(settings)
        try:
            return await action(aggregator)
        finally:
            await aggregator.close()

    try:
        return asyncio.run(_main())
    except AggregatorError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _build(model: type[T], **fields: object) -> T:
    try:
        return model(**fields)  # type: ignore[call-arg]
    except ValidationError as exc:
        raise click.UsageError(str(exc)) from exc


@click.group()
@click.option("--log-level", default="WARNING", help="Logging level")
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    """Flight aggregator: search every configured source at once."""
    logging.basicConfig(
        level=log_level.upper(), format="%(levelname)s: %(message)s", stream=sys.stderr
    )
    ctx.obj = config.settings


@cli.command("search")
@click.argument("origin")
@click.argument("destination")
@click.argument("date_from", callback=_parse_date)
@click.option("--date-to", callback=_parse_date, help="End of flexible window")
@click.option("--return-from", callback=_parse_date, help="Return date")
@click.option("--return-to", callback=_parse_date, help="End of return window")
@click.option("--passengers", default=1, show_default=True, type=int)
@click.option("--max-stops", default=1, show_default=True, type=int)
@click.option("--max-price", type=float, help="Price ceiling")
@click.option("--source", "sources", multiple=True, type=_SOURCE_CHOICE)
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.pass_obj
def search(
    settings: AggregatorSettings,
    origin: str,
    destination: str,
    date_from: date,
    date_to: date | None,
    return_from: date | None,
    return_to: date | None,
    passengers: int,
    max_stops: int,
    max_price: float | None,
    sources: tuple[str, ...],
    json_output: bool,
) -> None:
    """Search flights ORIGIN → DESTINATION departing DATE_FROM."""
    request = _build(
        SearchRequest,
        origin=origin,
        destination=destination,
        date_from=date_from,
        date_to=date_to,
        return_date_from=return_from,
        return_date_to=return_to,
        passengers=passengers,
        max_stops=max_stops,
        max_price=max_price,
    )
    flights = _run(settings, lambda agg: agg.search(request, sources))
    if json_output:
        click.echo(json.dumps([f.model_dump(mode="json") for f in flights], indent=2))
    else:
        click.echo(format_flights_table(flights))


@cli.command("explore")
@click.argument("origin")
@click.argument("date_from", callback=_parse_date)
@click.argument("date_to", callback=_parse_date)
@click.option("--max-price", type=float, help="Maximum budget")
@click.option("--nights-min", default=2, show_default=True, type=int)
@click.option("--nights-max", default=7, show_default=True, type=int)
@click.option("--limit", default=15, show_default=True, type=int)
@click.option("--source", "sources", multiple=True, type=_SOURCE_CHOICE)
@click.option("--json-output", is_flag=True, help="Output as JSON")
@click.pass_obj
def explore(
    settings: AggregatorSettings,
    origin: str,
    date_from: date,
    date_to: date,
    max_price: float | None,
    nights_min: int,
    nights_max: int,
    limit: int,
    sources: tuple[str, ...],
    json_output: bool,
) -> None:
    """Cheapest destinations from ORIGIN between DATE_FROM and DATE_TO."""
    request = _build(
        ExploreRequest,
        origin=origin,
        date_from=date_from,
        date_to=date_to,
        max_price=max_price,
        nights_min=nights_min,
        nights_max=nights_max,
        limit=limit,
    )
    results = _run(settings, lambda agg: agg.explore(request, sources))
    if json_output:
        click.echo(json.dumps([r.model_dump(mode="json") for r in results], indent=2))
    else:
        click.echo(format_explore_table(results))


@cli.command("compare")
@click.argument("origin")
@click.argument("destination")
@click.argument("flight_date", metavar="DATE", callback=_parse_date)
@click.option("--return-date", callback=_parse_date, help="Return date")
@click.pass_obj
def compare(
    settings: AggregatorSettings,
    origin: str,
    destination: str,
    flight_date: date,
    return_date: date | None,
) -> None:
    """Compare the cheapest fare per source for one route and date."""
    request = _build(
        SearchRequest,
        origin=origin,
        destination=destination,
        date_from=flight_date,
        return_date_from=return_date,
        passengers=1,
        max_stops=2,
    )
    flights = _run(settings, lambda agg: agg.search(request))
    click.echo(
        format_compare_table(
            flights, request.origin, request.destination, flight_date.isoformat()
        )
    )


@cli.command("health")
@click.pass_obj
def health(settings: AggregatorSettings) -> None:
    """Check credentials and reachability of every provider."""
    sources = build_sources(settings)

    async def _main():  # type: ignore[no-untyped-def]
        try:
            return await check_sources(sources, timeout=settings.health_check_timeout)
        finally:
            await asyncio.gather(*(s.close() for s in sources))

    results = asyncio.run(_main())
    click.echo(f"Checking {len(results)} providers...\n")
    click.echo(format_health_table(results))
    sys.exit(0 if any(r.reachable for r in results) else 1)


if __name__ == "__main__":
    cli()
