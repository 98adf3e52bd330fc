"""Minimal in-process publish/subscribe used between engine components."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Subscription:
    """Handle returned by Signal.connect. Disposing twice is a no-op."""

    def __init__(self, signal: Signal, callback: Callable[..., Any]):
        self._signal = signal
        self.callback = callback
        self.active = True

    def dispose(self) -> None:
        if not self.active:
            return
        self.active = False
        self._signal._remove(self)


class Signal:
    """Ordered list of callbacks invoked on emit.

    A callback raising an exception is logged and does not prevent delivery to
    the remaining subscribers.
    """

    def __init__(self, name: str = "signal"):
        self._name = name
        self._subscriptions: list[Subscription] = []

    def connect(self, callback: Callable[..., Any]) -> Subscription:
        sub = Subscription(self, callback)
        self._subscriptions.append(sub)
        return sub

    def emit(self, *args: Any) -> None:
        # Iterate a copy: callbacks may connect or dispose while we deliver.
        for sub in list(self._subscriptions):
            if not sub.active:
                continue
            try:
                sub.callback(*args)
            except Exception:
                logger.exception("Subscriber of %s failed", self._name)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def _remove(self, sub: Subscription) -> None:
        try:
            self._subscriptions.remove(sub)
        except ValueError:
            pass
