"""Store the last known location."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from nightswitch.cli.helpers import save_store
from nightswitch.common.exceptions import SettingsError
from nightswitch.config.store import SettingsStore


@click.command()
@click.argument("latitude", type=float, required=False)
@click.argument("longitude", type=float, required=False)
@click.option("--clear", is_flag=True, help="Forget the stored location")
@click.pass_context
def location(ctx: click.Context, latitude: float | None, longitude: float | None, clear: bool) -> None:
    """Set the location used when the provider cannot locate you."""
    console = Console()
    store = SettingsStore(ctx.obj["settings"].time, name="time")

    if clear:
        value = None
    elif latitude is not None and longitude is not None:
        value = (latitude, longitude)
    else:
        current = store.get("location")
        console.print(f"Location: {current[0]:.4f}, {current[1]:.4f}" if current else "Location: [dim]unknown[/dim]")
        return

    try:
        changed = store.update({"location": value})
    except SettingsError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)
    if changed:
        console.print(f"[green]Saved[/green] location to {save_store(ctx, 'time', store)}")
    else:
        console.print("[dim]Nothing changed.[/dim]")
