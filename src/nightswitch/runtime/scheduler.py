"""Repeating timers and background tasks on the asyncio event loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Coroutine, Protocol

logger = logging.getLogger(__name__)


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Clock/scheduler collaborator used by the Timer and the switchers."""

    def call_every(self, interval: float, callback: Callable[[], Any]) -> Handle: ...

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> Handle: ...


class RepeatingHandle:
    """Re-arms `loop.call_later` after each run until cancelled."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], Any]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._timer: asyncio.TimerHandle | None = loop.call_later(interval, self._run)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _run(self) -> None:
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            logger.exception("Repeating callback %r failed", self._callback)
        if not self._cancelled:
            self._timer = self._loop.call_later(self._interval, self._run)


class AsyncioScheduler:
    """Scheduler bound to a running asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()
        self._tasks: set[asyncio.Task] = set()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def call_every(self, interval: float, callback: Callable[[], Any]) -> RepeatingHandle:
        return RepeatingHandle(self._loop, interval, callback)

    def spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = self._loop.create_task(coro)
        # Keep a strong reference until the task finishes.
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background task failed: %s", exc)

    async def shutdown(self) -> None:
        """Cancel outstanding tasks and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
