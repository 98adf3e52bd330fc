"""Long-running process: Timer, switchers and settings persistence."""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from pathlib import Path

from nightswitch.common.exceptions import ConfigError, DaemonNotRunningError
from nightswitch.config.loader import load_settings, resolve_path, save_settings, settings_path
from nightswitch.config.models import AppSettings, InterfaceSettings
from nightswitch.config.store import SettingsStore
from nightswitch.desktop.gsettings import GSettingsStore
from nightswitch.desktop.keybindings import SignalKeybindings
from nightswitch.desktop.notifier import DesktopNotifier
from nightswitch.location.providers import build_location_provider
from nightswitch.runtime.scheduler import AsyncioScheduler
from nightswitch.schedule.timer import Timer
from nightswitch.switchers.base import Switcher
from nightswitch.switchers.commands import SwitcherCommands
from nightswitch.switchers.theme import build_theme_switchers

logger = logging.getLogger(__name__)

STORED_SECTIONS = ("time", "commands", "gtk_variants", "icon_variants", "cursor_variants")
SETTINGS_POLL_INTERVAL_SEC = 2.0
TOGGLE_SIGNAL = signal.SIGUSR1


def build_stores(settings: AppSettings) -> dict[str, SettingsStore]:
    return {section: SettingsStore(getattr(settings, section), name=section) for section in STORED_SECTIONS}


def write_pid_file(pid_file: Path) -> None:
    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(f"{os.getpid()}\n")


def read_pid(pid_file: Path) -> int:
    try:
        return int(pid_file.read_text().strip())
    except (OSError, ValueError) as e:
        raise DaemonNotRunningError(str(pid_file)) from e


def send_toggle(pid_file: Path) -> int:
    """Ask the running daemon to flip day/night. Returns its pid."""
    pid = read_pid(pid_file)
    try:
        os.kill(pid, TOGGLE_SIGNAL)
    except ProcessLookupError as e:
        raise DaemonNotRunningError(str(pid_file)) from e
    return pid


class NightswitchDaemon:
    """Owns every component for the lifetime of `nightswitch run`."""

    def __init__(self, settings: AppSettings, settings_file: str | Path | None = None):
        self._settings = settings
        self._settings_file = settings_file
        self._pid_file = resolve_path(settings.daemon.pid_file)
        self.stores = build_stores(settings)
        self._mtime: float | None = None
        self._stop: asyncio.Event | None = None
        self.timer: Timer | None = None
        self.switchers: list[Switcher] = []

    async def run(self) -> None:
        """Run until SIGINT/SIGTERM. SIGUSR1 toggles day/night."""
        loop = asyncio.get_running_loop()
        scheduler = AsyncioScheduler(loop)
        interface = self._build_interface(scheduler)
        self._stop = asyncio.Event()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.stop)
        keybindings = SignalKeybindings(TOGGLE_SIGNAL)
        loop.add_signal_handler(TOGGLE_SIGNAL, keybindings.activate)

        self.timer = Timer(
            settings=self.stores["time"],
            interface_settings=interface,
            scheduler=scheduler,
            location_provider=build_location_provider(self._settings.location_provider),
            keybindings=keybindings,
            notifier=DesktopNotifier(scheduler, enabled=self._settings.desktop.notifications),
            poll_interval=self._settings.daemon.poll_interval_sec,
            suntimes_interval=self._settings.daemon.suntimes_interval_sec,
        )
        self.switchers = [
            *build_theme_switchers(
                self.timer,
                self.stores["gtk_variants"],
                self.stores["icon_variants"],
                self.stores["cursor_variants"],
                interface,
            ),
            SwitcherCommands(self.timer, self.stores["commands"], scheduler),
        ]

        for store in self.stores.values():
            store.connect_any(self._on_settings_changed)
        self._mtime = self._settings_mtime()
        watcher = scheduler.call_every(SETTINGS_POLL_INTERVAL_SEC, self._reload_if_changed)
        write_pid_file(self._pid_file)

        logger.info("Daemon started (%s schedule).",
                    "manual" if self.stores["time"].get("manual-schedule") else "location based")
        self.timer.enable()
        for switcher in self.switchers:
            switcher.enable()
        try:
            await self._stop.wait()
        finally:
            for switcher in self.switchers:
                switcher.disable()
            self.timer.disable()
            watcher.cancel()
            await scheduler.shutdown()
            for sig in (signal.SIGINT, signal.SIGTERM, TOGGLE_SIGNAL):
                loop.remove_signal_handler(sig)
            self._pid_file.unlink(missing_ok=True)
            logger.info("Daemon stopped.")

    def stop(self) -> None:
        logger.info("Shutdown signal received")
        if self._stop is not None:
            self._stop.set()

    def _build_interface(self, scheduler: AsyncioScheduler) -> SettingsStore:
        if self._settings.desktop.backend == "memory":
            return SettingsStore(InterfaceSettings(), name="interface")
        interface = GSettingsStore(scheduler, self._settings.desktop.interface_schema)
        interface.load()
        scheduler.spawn(interface.monitor())
        return interface

    def current_settings(self) -> AppSettings:
        return self._settings.model_copy(update={name: store.model for name, store in self.stores.items()})

    def _on_settings_changed(self, changed: list[str]) -> None:
        path = save_settings(self.current_settings(), self._settings_file)
        self._mtime = path.stat().st_mtime
        logger.debug("Saved %s to %s", ", ".join(changed), path)

    def _settings_mtime(self) -> float | None:
        path = settings_path(self._settings_file)
        return path.stat().st_mtime if path.exists() else None

    def _reload_if_changed(self) -> None:
        mtime = self._settings_mtime()
        if mtime is None or mtime == self._mtime:
            return
        self._mtime = mtime
        try:
            reloaded = load_settings(self._settings_file)
        except ConfigError as e:
            logger.error("Keeping current settings: %s", e)
            return
        logger.info("Settings file changed, applying.")
        for name, store in self.stores.items():
            store.update(getattr(reloaded, name).model_dump())
