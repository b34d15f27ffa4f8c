from __future__ import annotations

import asyncio
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from swaproute.utils.logging import get_logger
from swaproute.utils.time import format_duration, parse_iso_or_none, to_iso, utc

logger = get_logger(__name__)

HEARTBEAT_MARKER = "[heartbeat]"
_HEARTBEAT_RE = re.compile(r"\[heartbeat\] (.+)")


@dataclass
class HeartbeatStatus:
    count: int = 0
    last: datetime | None = None
    last_line: str | None = None

    @property
    def malformed(self) -> bool:
        return self.last_line is not None and self.last is None

    def age_seconds(self, now: datetime | None = None) -> int | None:
        if self.last is None:
            return None
        now = now or utc()
        return int((now - self.last).total_seconds())


def read_heartbeats(path: Path) -> HeartbeatStatus:
    """Scan a heartbeat log. A missing file reads as zero heartbeats."""
    status = HeartbeatStatus()
    if not path.exists():
        return status

    with open(path, encoding="utf-8") as f:
        for line in f:
            if HEARTBEAT_MARKER in line:
                status.count += 1
                status.last_line = line.strip()

    if status.last_line is not None:
        match = _HEARTBEAT_RE.search(status.last_line)
        status.last = parse_iso_or_none(match.group(1).strip()) if match else None

    return status


class Heartbeat:
    """Appends a heartbeat line every ``interval`` seconds until stopped."""

    def __init__(self, path: Path, interval: float = 5.0):
        self.path = path
        self.interval = interval
        self.beats = 0
        self._started = time.monotonic()
        self._task: asyncio.Task[None] | None = None

    @property
    def uptime(self) -> str:
        return format_duration(int(time.monotonic() - self._started))

    def beat(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(f"{HEARTBEAT_MARKER} {to_iso(utc())}\n")
        self.beats += 1
        logger.debug(f"Heartbeat #{self.beats}, up {self.uptime}")

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self.beat)
            except OSError as e:
                logger.error(f"Failed to write heartbeat to {self.path}: {e}")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None:
            self._started = time.monotonic()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def __aenter__(self) -> Heartbeat:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()
