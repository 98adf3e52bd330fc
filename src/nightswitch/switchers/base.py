"""Switchers apply the Timer's state to something concrete."""

from __future__ import annotations

import logging
from typing import Callable

from nightswitch.common.signals import Subscription
from nightswitch.config.store import SettingsStore
from nightswitch.schedule.models import TimeState
from nightswitch.schedule.timer import Timer

logger = logging.getLogger(__name__)


class Switcher:
    """Run `callback(time)` on every state change while `enabled` is set."""

    def __init__(
        self,
        name: str,
        timer: Timer,
        settings: SettingsStore,
        callback: Callable[[TimeState], None],
    ):
        self.name = name
        self._timer = timer
        self._settings = settings
        self._callback = callback
        self._status_connection: Subscription | None = None
        self._timer_connection: Subscription | None = None

    @property
    def active(self) -> bool:
        return self._timer_connection is not None

    def enable(self) -> None:
        logger.debug("Enabling %s switcher...", self.name)
        self._watch_status()
        if self._settings.get("enabled"):
            self._connect_timer()
            self._on_time_changed(self._timer.time)
        logger.debug("%s switcher enabled.", self.name)

    def disable(self) -> None:
        logger.debug("Disabling %s switcher...", self.name)
        self._disconnect_timer()
        self._unwatch_status()
        logger.debug("%s switcher disabled.", self.name)

    def _watch_status(self) -> None:
        self._status_connection = self._settings.connect("enabled", self._on_status_changed)

    def _unwatch_status(self) -> None:
        if self._status_connection is not None:
            self._status_connection.dispose()
            self._status_connection = None

    def _connect_timer(self) -> None:
        self._timer_connection = self._timer.state_changed.connect(self._on_time_changed)

    def _disconnect_timer(self) -> None:
        if self._timer_connection is not None:
            self._timer_connection.dispose()
            self._timer_connection = None

    def _on_status_changed(self, _key: str) -> None:
        logger.info("%s switching has been %s.", self.name,
                    "enabled" if self._settings.get("enabled") else "disabled")
        self.disable()
        self.enable()

    def _on_time_changed(self, time: TimeState) -> None:
        self._callback(time)
