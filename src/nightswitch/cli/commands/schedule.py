"""Edit the manual schedule."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from nightswitch.cli.helpers import format_hour, parse_hour, save_store
from nightswitch.common.exceptions import SettingsError
from nightswitch.config.store import SettingsStore


@click.command()
@click.option("--sunrise", default=None, help="Switch to day at HH:MM")
@click.option("--sunset", default=None, help="Switch to night at HH:MM")
@click.option("--offset", type=float, default=None, help="Hours added to sunrise and removed from sunset")
@click.option("--manual/--auto", default=None, help="Use the manual schedule or the location")
@click.option("--keybinding", default=None, help="On-demand shortcut, empty to disable")
@click.pass_context
def schedule(
    ctx: click.Context,
    sunrise: str | None,
    sunset: str | None,
    offset: float | None,
    manual: bool | None,
    keybinding: str | None,
) -> None:
    """Edit the schedule. Without options, show it."""
    console = Console()
    store = SettingsStore(ctx.obj["settings"].time, name="time")

    values: dict[str, object] = {}
    if sunrise is not None:
        values["sunrise"] = parse_hour(sunrise)
    if sunset is not None:
        values["sunset"] = parse_hour(sunset)
    if offset is not None:
        values["offset"] = offset
    if manual is not None:
        values["manual-schedule"] = manual
    if keybinding is not None:
        values["nightthemeswitcher-ondemand-keybinding"] = keybinding

    if values:
        try:
            changed = store.update(values)
        except SettingsError as e:
            console.print(f"[red]{escape(str(e))}[/red]")
            raise SystemExit(1)
        if changed:
            path = save_store(ctx, "time", store)
            console.print(f"[green]Saved[/green] {', '.join(changed)} to {path}")
        else:
            console.print("[dim]Nothing changed.[/dim]")

    mode = "manual" if store.get("manual-schedule") else "location"
    console.print(
        f"Mode: [bold]{mode}[/bold]  "
        f"sunrise {format_hour(store.get('sunrise'))}  sunset {format_hour(store.get('sunset'))}  "
        f"offset {store.get('offset'):+.2f}h"
    )
