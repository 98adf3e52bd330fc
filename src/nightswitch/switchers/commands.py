"""Run the user's sunrise/sunset shell commands."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from nightswitch.common.exceptions import DesktopError
from nightswitch.config.store import SettingsStore
from nightswitch.desktop.process import run_command
from nightswitch.runtime.scheduler import Scheduler
from nightswitch.schedule.models import TimeState
from nightswitch.schedule.timer import Timer
from nightswitch.switchers.base import Switcher

logger = logging.getLogger(__name__)


class SwitcherCommands(Switcher):
    """`sunrise` runs on the switch to day, `sunset` on the switch to night."""

    def __init__(
        self,
        timer: Timer,
        settings: SettingsStore,
        scheduler: Scheduler,
        runner: Callable[[list[str]], Awaitable[int]] = run_command,
    ):
        super().__init__(name="Command", timer=timer, settings=settings, callback=self._run_for)
        self._scheduler = scheduler
        self._runner = runner

    def _run_for(self, time: TimeState) -> None:
        if time is TimeState.UNKNOWN:
            return
        command = self._settings.get("sunrise" if time is TimeState.DAY else "sunset")
        if not command:
            return
        self._scheduler.spawn(self._spawn(time, command))

    async def _spawn(self, time: TimeState, command: str) -> None:
        try:
            status = await self._runner(["sh", "-c", command])
        except DesktopError as e:
            logger.error("Cannot run %s command: %s", time.value, e)
            return
        logger.debug("Spawned %s command (exit status %s).", time.value, status)
