"""Global on-demand shortcut registration."""

from __future__ import annotations

import logging
import signal
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class KeybindingRegistrar(Protocol):
    def add(self, name: str, accelerator: str, callback: Callable[[], None]) -> None: ...

    def remove(self, name: str) -> None: ...


class SignalKeybindings:
    """Route a shortcut to a Unix signal delivered to the daemon.

    The desktop shortcut itself is bound by the user to `nightswitch toggle`,
    which sends `signum` to the running daemon. The daemon installs
    `activate` as the handler of `signum` for its whole run; registering a
    keybinding only swaps the callback it dispatches to.
    """

    def __init__(self, signum: int = signal.SIGUSR1):
        self._signum = signum
        self._registered: str | None = None
        self._callback: Callable[[], None] | None = None

    @property
    def signum(self) -> int:
        return self._signum

    @property
    def registered(self) -> str | None:
        return self._registered

    def add(self, name: str, accelerator: str, callback: Callable[[], None]) -> None:
        self._registered = name
        self._callback = callback
        logger.info("Keybinding %s (%s) listens on %s; bind the shortcut to 'nightswitch toggle'",
                    name, accelerator, signal.Signals(self._signum).name)

    def remove(self, name: str) -> None:
        if self._registered != name:
            return
        self._registered = None
        self._callback = None
        logger.debug("Keybinding %s removed", name)

    def activate(self) -> None:
        if self._callback is None:
            logger.info("Ignoring %s: no on-demand keybinding is set", signal.Signals(self._signum).name)
            return
        self._callback()
