"""Flip day/night in the running daemon."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from nightswitch.common.exceptions import DaemonNotRunningError
from nightswitch.config.loader import resolve_path
from nightswitch.runtime.daemon import send_toggle


@click.command()
@click.pass_context
def toggle(ctx: click.Context) -> None:
    """Switch to the opposite of the current state until the schedule catches up.

    Bind your desktop shortcut to this command.
    """
    settings = ctx.obj["settings"]
    console = Console()
    try:
        pid = send_toggle(resolve_path(settings.daemon.pid_file))
    except DaemonNotRunningError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        console.print("Start it with 'nightswitch run'.")
        raise SystemExit(1)
    console.print(f"[green]Toggled[/green] (daemon pid {pid})")
