"""Custom exception hierarchy for nightswitch."""

from __future__ import annotations


class NightswitchError(Exception):
    """Base exception for all nightswitch errors."""


class ConfigError(NightswitchError):
    """Invalid or missing configuration."""


class SettingsError(NightswitchError):
    """A runtime settings write was rejected."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(f"Invalid value for '{key}': {message}")


class LocationUnavailableError(NightswitchError):
    """The location provider could not produce coordinates."""


class DesktopError(NightswitchError):
    """Desktop settings backend unavailable or failing."""


class DaemonNotRunningError(NightswitchError):
    """No running daemon found for the configured pid file."""

    def __init__(self, pid_file: str):
        self.pid_file = pid_file
        super().__init__(f"No running nightswitch daemon (pid file: {pid_file})")
