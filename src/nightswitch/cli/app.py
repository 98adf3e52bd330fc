"""nightswitch CLI entrypoint."""

from __future__ import annotations

import logging

import click

# Suppress noisy httpx request logs in normal mode
logging.getLogger("httpx").setLevel(logging.WARNING)

from rich.console import Console
from rich.markup import escape

from nightswitch.common.exceptions import ConfigError
from nightswitch.config.loader import load_settings, settings_path


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_context(settings_file: str | None) -> dict:
    """Load settings for the subcommands."""
    return {
        "settings": load_settings(settings_file),
        "settings_file": settings_file,
        "settings_path": settings_path(settings_file),
    }


@click.group()
@click.option("--settings", "-s", default=None, help="Path to settings.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, settings: str | None, verbose: bool) -> None:
    """nightswitch: switch the desktop between day and night."""
    ctx.ensure_object(dict)
    try:
        ctx.obj.update(build_context(settings))
    except ConfigError as e:
        Console().print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)
    level = "DEBUG" if verbose else ctx.obj["settings"].logging.level
    setup_logging(level)


# Import and register commands
from nightswitch.cli.commands.location import location  # noqa: E402
from nightswitch.cli.commands.run import run  # noqa: E402
from nightswitch.cli.commands.schedule import schedule  # noqa: E402
from nightswitch.cli.commands.status import status  # noqa: E402
from nightswitch.cli.commands.suntimes import suntimes  # noqa: E402
from nightswitch.cli.commands.toggle import toggle  # noqa: E402

cli.add_command(location)
cli.add_command(run)
cli.add_command(schedule)
cli.add_command(status)
cli.add_command(suntimes)
cli.add_command(toggle)
