"""Command-line interface for cronbits."""

import logging
from datetime import datetime, timezone
from typing import Annotated, Optional
from zoneinfo import ZoneInfoNotFoundError

import typer

from cronbits.config import get_config
from cronbits.exceptions import CronError
from cronbits.expression import CronExpression, validate_expression
from cronbits.timezones import resolve_zone

app = typer.Typer(
    name="cronbits",
    help="Parse cron expressions and compute their next occurrences",
    add_completion=False,
)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Cron expression toolkit."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _resolve_seconds(seconds: Optional[bool]) -> bool:
    return get_config().include_seconds if seconds is None else seconds


@app.command(name="next")
def next_cmd(
    expression: Annotated[str, typer.Argument(help="Cron expression or macro such as @daily")],
    from_: Annotated[
        Optional[str],
        typer.Option("--from", "-f", help="ISO-8601 start time (default: now)"),
    ] = None,
    tz: Annotated[
        str,
        typer.Option("--tz", "-z", help="IANA timezone to evaluate the expression in"),
    ] = "UTC",
    count: Annotated[
        int,
        typer.Option("--count", "-n", min=1, help="Number of occurrences to print"),
    ] = 1,
    seconds: Annotated[
        Optional[bool],
        typer.Option("--seconds/--no-seconds", help="Expression has a leading seconds field"),
    ] = None,
    inclusive: Annotated[
        bool,
        typer.Option("--inclusive", help="Allow the start time itself to match"),
    ] = False,
) -> None:
    """Print the next occurrences of a cron expression."""
    try:
        zone = resolve_zone(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        typer.echo(f"Error: Unknown timezone: {tz} ({e})", err=True)
        raise typer.Exit(1)

    if from_ is None:
        start = datetime.now(timezone.utc)
    else:
        try:
            start = datetime.fromisoformat(from_)
        except ValueError:
            typer.echo(f"Error: Invalid start time: {from_}", err=True)
            raise typer.Exit(1)
        if start.tzinfo is None:
            start = start.replace(tzinfo=zone)

    try:
        expr = CronExpression.parse(expression, include_seconds=_resolve_seconds(seconds))
        occurrences = list(expr.iter(start, zone, limit=count, inclusive=inclusive))
    except CronError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not occurrences:
        typer.echo("No occurrence")
        raise typer.Exit(1)

    for occurrence in occurrences:
        typer.echo(occurrence.isoformat())


@app.command(name="validate")
def validate_cmd(
    expression: Annotated[str, typer.Argument(help="Cron expression or macro such as @daily")],
    seconds: Annotated[
        Optional[bool],
        typer.Option("--seconds/--no-seconds", help="Expression has a leading seconds field"),
    ] = None,
) -> None:
    """Check that a cron expression parses."""
    errors = validate_expression(expression, include_seconds=_resolve_seconds(seconds))
    if errors:
        for error in errors:
            typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(1)

    typer.echo("Valid")


if __name__ == "__main__":
    app()
