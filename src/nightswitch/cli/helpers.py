"""Shared formatting and persistence for CLI commands."""

from __future__ import annotations

import re

import click

from nightswitch.config.loader import save_settings
from nightswitch.config.store import SettingsStore

_HOUR_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def format_hour(hour: float) -> str:
    """7.5 -> '07:30'."""
    minutes = int(round(hour * 60)) % (24 * 60)
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_hour(value: str) -> float:
    """'07:30' or '7.5' -> 7.5."""
    match = _HOUR_RE.match(value.strip())
    if match:
        hours, minutes = int(match.group(1)), int(match.group(2))
        if hours > 23 or minutes > 59:
            raise click.BadParameter(f"{value} is not a time of day")
        return hours + minutes / 60
    try:
        return float(value)
    except ValueError:
        raise click.BadParameter(f"{value} is not HH:MM or decimal hours")


def save_store(ctx: click.Context, section: str, store: SettingsStore) -> str:
    """Write one edited section back to the settings file. Returns the path."""
    settings = ctx.obj["settings"].model_copy(update={section: store.model})
    ctx.obj["settings"] = settings
    return str(save_settings(settings, ctx.obj["settings_file"]))
