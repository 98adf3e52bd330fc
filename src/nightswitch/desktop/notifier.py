"""User-facing advisories."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol

from nightswitch.common.exceptions import DesktopError
from nightswitch.desktop.process import run_command
from nightswitch.runtime.scheduler import Scheduler

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None: ...


class DesktopNotifier:
    """Desktop notification through `notify-send`, always mirrored to the log."""

    def __init__(
        self,
        scheduler: Scheduler,
        enabled: bool = True,
        runner: Callable[[list[str]], Awaitable[int]] = run_command,
    ):
        self._scheduler = scheduler
        self._enabled = enabled
        self._runner = runner

    def notify(self, title: str, body: str) -> None:
        logger.warning("%s: %s", title, body)
        if self._enabled:
            self._scheduler.spawn(self._send(title, body))

    async def _send(self, title: str, body: str) -> None:
        try:
            await self._runner(["notify-send", "--app-name=nightswitch",
                                "--icon=dialog-information-symbolic", title, body])
        except DesktopError as e:
            logger.warning("Cannot show notification: %s", e)
