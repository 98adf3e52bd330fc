"""Set GTK, icon and cursor themes to their day or night variant.

A theme the user picks by hand is remembered as the variant for the
current time.
"""

from __future__ import annotations

import logging

from nightswitch.common.signals import Subscription
from nightswitch.config.store import SettingsStore
from nightswitch.schedule.models import TimeState
from nightswitch.schedule.timer import Timer
from nightswitch.switchers.base import Switcher

logger = logging.getLogger(__name__)


class SwitcherTheme(Switcher):
    def __init__(
        self,
        name: str,
        timer: Timer,
        settings: SettingsStore,
        system_settings: SettingsStore,
        theme_key: str,
    ):
        super().__init__(name=name, timer=timer, settings=settings, callback=self._on_timer_time)
        self._system_settings = system_settings
        self._theme_key = theme_key
        self._settings_connections: list[Subscription] = []

    def enable(self) -> None:
        if self._settings.get("enabled"):
            self._connect_settings()
        super().enable()

    def disable(self) -> None:
        self._disconnect_settings()
        super().disable()

    def _connect_settings(self) -> None:
        self._settings_connections = [
            self._settings.connect("day", self._on_variant_changed),
            self._settings.connect("night", self._on_variant_changed),
            self._system_settings.connect(self._theme_key, self._on_system_theme_changed),
        ]

    def _disconnect_settings(self) -> None:
        for connection in self._settings_connections:
            connection.dispose()
        self._settings_connections = []

    def _on_variant_changed(self, key: str) -> None:
        logger.debug("%s %s variant changed to '%s'.", key.capitalize(), self.name, self._settings.get(key))
        self._update_system_theme()

    def _on_system_theme_changed(self, _key: str) -> None:
        theme = self._system_settings.get(self._theme_key)
        logger.debug("System %s changed to '%s'.", self.name, theme)
        self._update_current_variant()

    def _on_timer_time(self, _time: TimeState) -> None:
        self._update_system_theme()

    def _update_current_variant(self) -> None:
        time = self._timer.time
        if time is TimeState.UNKNOWN:
            return
        self._settings.set(time.value, self._system_settings.get(self._theme_key))

    def _update_system_theme(self) -> None:
        time = self._timer.time
        if time is TimeState.UNKNOWN:
            return
        variant = self._settings.get(time.value)
        if not variant:
            return
        logger.debug("Setting the %s %s variant...", time.value, self.name)
        self._system_settings.set(self._theme_key, variant)


def build_theme_switchers(
    timer: Timer,
    gtk_settings: SettingsStore,
    icon_settings: SettingsStore,
    cursor_settings: SettingsStore,
    interface_settings: SettingsStore,
) -> list[SwitcherTheme]:
    return [
        SwitcherTheme("GTK theme", timer, gtk_settings, interface_settings, "gtk-theme"),
        SwitcherTheme("Icon theme", timer, icon_settings, interface_settings, "icon-theme"),
        SwitcherTheme("Cursor theme", timer, cursor_settings, interface_settings, "cursor-theme"),
    ]
