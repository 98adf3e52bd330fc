"""Show the schedule and what it says right now."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table

from nightswitch.cli.helpers import format_hour
from nightswitch.common.solar import compute_sun_times, is_valid_location
from nightswitch.schedule.resolver import decimal_hour, resolve_time
from nightswitch.schedule.timer import local_now


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def status(ctx: click.Context, as_json: bool) -> None:
    """Show the schedule and the state it resolves to now."""
    settings = ctx.obj["settings"]
    time_settings = settings.time
    console = Console()
    now = local_now()

    sunrise, sunset = time_settings.sunrise, time_settings.sunset
    source = "manual schedule"
    location = time_settings.location
    if not time_settings.manual_schedule:
        if location and is_valid_location(*location):
            times = compute_sun_times(now, location[0], location[1], time_settings.offset)
            sunrise, sunset = times.sunrise, times.sunset
            source = "sun times"
        else:
            source = "stored times (no location yet)"

    state = resolve_time(decimal_hour(now), sunrise, sunset)
    state_str = state.value if state else "unchanged (sunrise == sunset)"

    if as_json:
        data = {
            "now": now.isoformat(timespec="seconds"),
            "manual_schedule": time_settings.manual_schedule,
            "source": source,
            "location": list(location) if location else None,
            "offset": time_settings.offset,
            "sunrise": round(sunrise, 4),
            "sunset": round(sunset, 4),
            "state": state.value if state else None,
            "switchers": {
                "commands": settings.commands.enabled,
                "gtk_theme": settings.gtk_variants.enabled,
                "icon_theme": settings.icon_variants.enabled,
                "cursor_theme": settings.cursor_variants.enabled,
            },
        }
        console.print_json(json.dumps(data))
        return

    table = Table(title="nightswitch", show_header=False)
    table.add_column("Label", style="bold", min_width=12)
    table.add_column("Value")

    style = {"day": "yellow", "night": "blue"}.get(state_str, "dim")
    table.add_row("Now", now.strftime("%Y-%m-%d %H:%M:%S %Z"))
    table.add_row("State", f"[{style}]{state_str}[/{style}]")
    table.add_row("Source", source)
    table.add_row("Sunrise", format_hour(sunrise))
    table.add_row("Sunset", format_hour(sunset))
    if not time_settings.manual_schedule:
        table.add_row("Offset", f"{time_settings.offset:+.2f}h")
        table.add_row("Location", f"{location[0]:.4f}, {location[1]:.4f}" if location else "[dim]unknown[/dim]")
    keybinding = time_settings.nightthemeswitcher_ondemand_keybinding
    table.add_row("Shortcut", keybinding or "[dim]none[/dim]")

    enabled = [name for name, on in (
        ("commands", settings.commands.enabled),
        ("GTK theme", settings.gtk_variants.enabled),
        ("icon theme", settings.icon_variants.enabled),
        ("cursor theme", settings.cursor_variants.enabled),
    ) if on]
    table.add_row("Switching", ", ".join(enabled) if enabled else "[dim]color scheme only[/dim]")

    console.print(table)
