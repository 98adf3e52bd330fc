"""Load, validate and save the YAML settings file."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from nightswitch.common.exceptions import ConfigError
from nightswitch.config.models import AppSettings

DEFAULT_SETTINGS_PATH = "~/.nightswitch/settings.yaml"


def resolve_path(path_str: str | Path) -> Path:
    """Expand ~ and env vars in a path string."""
    return Path(os.path.expandvars(os.path.expanduser(str(path_str))))


def settings_path(path: str | Path | None = None) -> Path:
    return resolve_path(path or DEFAULT_SETTINGS_PATH)


def load_settings(path: str | Path | None = None) -> AppSettings:
    """Load application settings from YAML file. A missing file yields defaults."""
    resolved = settings_path(path)
    if not resolved.exists():
        return AppSettings()
    try:
        with open(resolved) as f:
            data = yaml.safe_load(f) or {}
        return AppSettings(**data)
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {resolved}: {e}") from e
    except (TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid settings in {resolved}: {e}") from e


def save_settings(settings: AppSettings, path: str | Path | None = None) -> Path:
    """Write settings back to YAML, creating the parent directory if needed."""
    resolved = settings_path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    with open(resolved, "w") as f:
        yaml.safe_dump(settings.model_dump(mode="json"), f, sort_keys=False)
    return resolved
