from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from nightswitch.common.exceptions import LocationUnavailableError
from nightswitch.common.signals import Signal
from nightswitch.config.models import InterfaceSettings, TimeSettings
from nightswitch.config.store import SettingsStore
from nightswitch.schedule.timer import Timer

CEST = timezone(timedelta(hours=2))


class FakeHandle:
    def __init__(self, interval=None, callback=None, coro=None):
        self.interval = interval
        self.callback = callback
        self.coro = coro
        self.cancelled = False
        self.started = False

    def cancel(self):
        self.cancelled = True
        if self.coro is not None and not self.started:
            self.coro.close()


class FakeScheduler:
    def __init__(self):
        self.repeating: list[FakeHandle] = []
        self.tasks: list[FakeHandle] = []

    def call_every(self, interval, callback):
        handle = FakeHandle(interval=interval, callback=callback)
        self.repeating.append(handle)
        return handle

    def spawn(self, coro):
        handle = FakeHandle(coro=coro)
        self.tasks.append(handle)
        return handle

    def fire(self, interval=1.0):
        for handle in list(self.repeating):
            if not handle.cancelled and handle.interval == interval:
                handle.callback()

    def run_tasks(self):
        ran = 0
        while True:
            pending = [h for h in self.tasks if not h.cancelled and not h.started]
            if not pending:
                return ran
            handle = pending[0]
            handle.started = True
            asyncio.run(handle.coro)
            ran += 1

    def active(self):
        return [h for h in self.repeating if not h.cancelled] + [
            h for h in self.tasks if not h.cancelled and not h.started
        ]


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, hour: int, minute: int = 0, second: int = 0, days: int = 0):
        base = self.now.replace(hour=hour, minute=minute, second=second) + timedelta(days=days)
        self.now = base


class FakeKeybindings:
    def __init__(self):
        self.registered: dict[str, tuple[str, object]] = {}
        self.added = 0

    def add(self, name, accelerator, callback):
        self.registered[name] = (accelerator, callback)
        self.added += 1

    def remove(self, name):
        self.registered.pop(name, None)

    def press(self, name):
        _, callback = self.registered[name]
        callback()


class FakeNotifier:
    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def notify(self, title, body):
        self.messages.append((title, body))


class FakeLocationProvider:
    def __init__(self, coords=None):
        self.coords = coords
        self.calls = 0
        self._last = None
        self._updates = Signal("location")

    async def locate(self):
        self.calls += 1
        if self.coords is None:
            raise LocationUnavailableError("no fix")
        if self._last is not None and self.coords != self._last:
            self._updates.emit(self.coords)
        self._last = self.coords
        return self.coords

    def subscribe(self, callback):
        return self._updates.connect(callback)

    def push(self, coords):
        self.coords = coords
        self._updates.emit(coords)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 6, 21, 12, 0, 0, tzinfo=CEST))


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def keybindings():
    return FakeKeybindings()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_timer(clock, scheduler, keybindings, notifier):
    def _make(location_provider=None, color_scheme="default", interface=None, **time_values):
        settings = SettingsStore(TimeSettings(**time_values), name="time")
        if interface is None:
            interface = SettingsStore(InterfaceSettings(color_scheme=color_scheme), name="interface")
        provider = location_provider or FakeLocationProvider()
        timer = Timer(settings, interface, scheduler, provider, keybindings, notifier, clock=clock)
        emitted = []
        timer.state_changed.connect(emitted.append)
        return timer, settings, interface, emitted

    return _make
