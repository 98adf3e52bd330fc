"""Async subprocess helpers."""

from __future__ import annotations

import asyncio
import logging

from nightswitch.common.exceptions import DesktopError

logger = logging.getLogger(__name__)


async def run_command(argv: list[str]) -> int:
    """Run `argv` to completion and return its exit status."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise DesktopError(f"Cannot run {argv[0]}: {e}") from e
    _, stderr = await proc.communicate()
    if proc.returncode:
        logger.warning("%s exited with %d: %s", argv[0], proc.returncode,
                       stderr.decode(errors="replace").strip())
    return proc.returncode
