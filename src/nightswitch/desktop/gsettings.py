"""Desktop interface settings mirrored through the `gsettings` command line tool."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from collections import Counter, deque
from typing import Awaitable, Callable

from nightswitch.common.exceptions import DesktopError, SettingsError
from nightswitch.config.models import InterfaceSettings
from nightswitch.config.store import SettingsStore
from nightswitch.desktop.process import run_command
from nightswitch.runtime.scheduler import Handle, Scheduler

logger = logging.getLogger(__name__)


def parse_gvariant_string(text: str) -> str:
    """Turn gsettings' printed string (`'Adwaita-dark'`) back into a str."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        text = text[1:-1]
    return text.replace("\\'", "'").replace('\\"', '"')


def parse_monitor_line(line: str) -> tuple[str, str] | None:
    """Split a `gsettings monitor` line (`color-scheme: 'prefer-dark'`)."""
    key, sep, value = line.strip().partition(": ")
    if not sep:
        return None
    return key, parse_gvariant_string(value)


class GSettingsStore(SettingsStore[InterfaceSettings]):
    """Interface settings backed by a gsettings schema.

    Local writes update the cache, notify subscribers synchronously and are
    queued for a single writer task that runs `gsettings set` in order, so the
    desktop always ends on the latest value. External changes arrive through
    `monitor()`. Every value written is counted per key and its echo is
    dropped, even when later writes have already moved the cache on.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        schema: str = "org.gnome.desktop.interface",
        runner: Callable[[list[str]], Awaitable[int]] = run_command,
    ):
        super().__init__(InterfaceSettings(), name=schema)
        self._scheduler = scheduler
        self._schema = schema
        self._runner = runner
        self._applying_external = False
        self._queue: deque[tuple[str, str]] = deque()
        self._echoes: dict[str, Counter[str]] = {}
        self._writer: Handle | None = None

    def load(self) -> None:
        """Read the current values synchronously."""
        values = {key: self._read(key) for key in self.keys()}
        try:
            self._model = InterfaceSettings(**{k.replace("-", "_"): v for k, v in values.items()})
        except ValueError as e:
            raise DesktopError(f"Unexpected value in {self._schema}: {e}") from e
        logger.debug("Loaded %s: %s", self._schema, values)

    def apply_external(self, key: str, value: str) -> None:
        if key not in self.keys():
            return
        echoes = self._echoes.get(key)
        if echoes and echoes[value] > 0:
            echoes[value] -= 1
            logger.debug("Dropping echo of our own write %s=%s", key, value)
            return
        if value == str(self.get(key)) and self._writer is None:
            # Nothing in flight: any remaining counts belong to coalesced notifications.
            self._echoes.pop(key, None)
        self._applying_external = True
        try:
            self.set(key, value)
        except SettingsError as e:
            logger.warning("Ignoring %s change: %s", self._schema, e)
        finally:
            self._applying_external = False

    async def monitor(self) -> None:
        """Follow `gsettings monitor` until cancelled."""
        try:
            proc = await asyncio.create_subprocess_exec(
                "gsettings", "monitor", self._schema,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            raise DesktopError(f"Cannot monitor {self._schema}: {e}") from e

        try:
            assert proc.stdout is not None
            async for raw in proc.stdout:
                parsed = parse_monitor_line(raw.decode(errors="replace"))
                if parsed:
                    self.apply_external(*parsed)
        finally:
            if proc.returncode is None:
                proc.terminate()
                await proc.wait()

    def _commit(self, changed: list[str]) -> None:
        if self._applying_external:
            return
        for key in changed:
            value = str(self.get(key))
            self._queue.append((key, value))
            self._echoes.setdefault(key, Counter())[value] += 1
        if self._writer is None:
            self._writer = self._scheduler.spawn(self._write_queued())

    async def _write_queued(self) -> None:
        try:
            while self._queue:
                key, value = self._queue.popleft()
                try:
                    await self._runner(["gsettings", "set", self._schema, key, value])
                except DesktopError as e:
                    logger.error("Cannot write %s %s: %s", self._schema, key, e)
                    self._echoes[key][value] -= 1
        finally:
            self._writer = None

    def _read(self, key: str) -> str:
        try:
            result = subprocess.run(
                ["gsettings", "get", self._schema, key],
                capture_output=True, text=True, check=True, timeout=5,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise DesktopError(f"Cannot read {self._schema} {key}: {e}") from e
        return parse_gvariant_string(result.stdout)
