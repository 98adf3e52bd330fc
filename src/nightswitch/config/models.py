"""Pydantic models for configuration validation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator

from nightswitch.common.solar import is_valid_location


class TimeSettings(BaseModel):
    manual_schedule: bool = False
    sunrise: float = 6.0  # decimal hours
    sunset: float = 20.0
    offset: float = 0.0
    location: tuple[float, float] | None = None  # (latitude, longitude)
    nightthemeswitcher_ondemand_keybinding: str = ""

    @field_validator("sunrise", "sunset")
    @classmethod
    def _hour_in_range(cls, v: float) -> float:
        if not 0 <= v < 24:
            raise ValueError("hour must be in [0, 24)")
        return v

    @field_validator("location")
    @classmethod
    def _location_in_range(cls, v: tuple[float, float] | None) -> tuple[float, float] | None:
        if v is not None and not is_valid_location(*v):
            raise ValueError("latitude must be in [-90, 90] and longitude in [-180, 180]")
        return v


class CommandsSettings(BaseModel):
    enabled: bool = False
    sunrise: str = ""
    sunset: str = ""


class ThemeVariantSettings(BaseModel):
    enabled: bool = False
    day: str = ""
    night: str = ""


class InterfaceSettings(BaseModel):
    """Mirror of the desktop interface keys nightswitch reads and writes."""

    color_scheme: Literal["default", "prefer-dark", "prefer-light"] = "default"
    gtk_theme: str = "Adwaita"
    icon_theme: str = "Adwaita"
    cursor_theme: str = "Adwaita"


class LocationProviderSettings(BaseModel):
    kind: Literal["ip", "static", "none"] = "ip"
    url: str = "https://ipapi.co/json/"
    timeout_sec: float = 10.0
    latitude: float | None = None
    longitude: float | None = None


class DesktopSettings(BaseModel):
    backend: Literal["gsettings", "memory"] = "gsettings"
    interface_schema: str = "org.gnome.desktop.interface"
    notifications: bool = True


class DaemonSettings(BaseModel):
    poll_interval_sec: float = 1.0
    suntimes_interval_sec: float = 3600.0
    pid_file: str = "~/.nightswitch/nightswitch.pid"


class LoggingSettings(BaseModel):
    level: str = "INFO"
    file: str = "~/.nightswitch/nightswitch.log"


class AppSettings(BaseModel):
    time: TimeSettings = TimeSettings()
    commands: CommandsSettings = CommandsSettings()
    gtk_variants: ThemeVariantSettings = ThemeVariantSettings()
    icon_variants: ThemeVariantSettings = ThemeVariantSettings()
    cursor_variants: ThemeVariantSettings = ThemeVariantSettings()
    location_provider: LocationProviderSettings = LocationProviderSettings()
    desktop: DesktopSettings = DesktopSettings()
    daemon: DaemonSettings = DaemonSettings()
    logging: LoggingSettings = LoggingSettings()
