"""Show computed sunrise/sunset times."""

from __future__ import annotations

from datetime import datetime

import click
from rich.console import Console
from rich.table import Table

from nightswitch.cli.helpers import format_hour
from nightswitch.common.solar import compute_sun_times, is_valid_location, reference_sun_times


@click.command()
@click.option("--lat", "latitude", type=float, default=None, help="Latitude (default: stored location)")
@click.option("--lon", "longitude", type=float, default=None, help="Longitude (default: stored location)")
@click.option("--date", "date_str", default=None, help="Date as YYYY-MM-DD (default: today)")
@click.option("--offset", type=float, default=None, help="Offset in hours (default: configured offset)")
@click.pass_context
def suntimes(
    ctx: click.Context,
    latitude: float | None,
    longitude: float | None,
    date_str: str | None,
    offset: float | None,
) -> None:
    """Compare nightswitch's sun times with astral's for one day."""
    time_settings = ctx.obj["settings"].time
    console = Console()

    if latitude is None or longitude is None:
        if not time_settings.location:
            console.print("[red]No stored location.[/red] Pass --lat and --lon or run 'nightswitch location'.")
            raise SystemExit(1)
        latitude, longitude = time_settings.location
    if not is_valid_location(latitude, longitude):
        console.print(f"[red]Invalid location: {latitude}, {longitude}[/red]")
        raise SystemExit(1)

    if date_str:
        try:
            day = datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            raise click.BadParameter(f"{date_str} is not YYYY-MM-DD", param_hint="--date")
        now = day.replace(hour=12).astimezone()
    else:
        now = datetime.now().astimezone()
    if offset is None:
        offset = time_settings.offset

    computed = compute_sun_times(now, latitude, longitude, offset)
    plain = compute_sun_times(now, latitude, longitude)
    reference = reference_sun_times(now, latitude, longitude)

    table = Table(title=f"Sun times for {now.date()} at {latitude:.4f}, {longitude:.4f}")
    table.add_column("Source", style="bold")
    table.add_column("Sunrise", justify="right")
    table.add_column("Sunset", justify="right")
    table.add_row(f"scheduled (offset {offset:+.2f}h)", format_hour(computed.sunrise), format_hour(computed.sunset))
    table.add_row("NOAA", format_hour(plain.sunrise), format_hour(plain.sunset))
    if reference:
        table.add_row("astral", format_hour(reference.sunrise), format_hour(reference.sunset), style="dim")
    else:
        table.add_row("astral", "-", "-", style="dim")
    console.print(table)
    if reference is None:
        console.print("[dim]The sun does not rise or set on this day (polar day or night).[/dim]")
