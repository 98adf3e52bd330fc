"""Run the switching daemon."""

from __future__ import annotations

import asyncio
import logging

import click
from rich.console import Console
from rich.markup import escape

from nightswitch.common.exceptions import NightswitchError
from nightswitch.config.loader import resolve_path
from nightswitch.runtime.daemon import NightswitchDaemon


def _log_to_file(path_str: str) -> None:
    path = resolve_path(path_str)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    logging.getLogger().addHandler(handler)


@click.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Run the day/night switching daemon in the foreground."""
    settings = ctx.obj["settings"]
    console = Console()

    if settings.logging.file:
        _log_to_file(settings.logging.file)

    mode = "manual schedule" if settings.time.manual_schedule else f"location ({settings.location_provider.kind})"
    console.print(f"[bold]Starting nightswitch[/bold] ({mode}, {settings.desktop.backend} desktop backend)")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    daemon = NightswitchDaemon(settings, ctx.obj["settings_file"])
    try:
        asyncio.run(daemon.run())
    except NightswitchError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)
