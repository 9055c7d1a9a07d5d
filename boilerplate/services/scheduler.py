"""Daily background jobs running on the event loop."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


def seconds_until_hour(hour: int, now: dt.datetime | None = None) -> float:
    """Seconds from ``now`` (local time) to the next ``hour``:00."""
    now = now or dt.datetime.now()
    target = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if target <= now:
        target += dt.timedelta(days=1)
    return (target - now).total_seconds()


class DailyJob:
    """Runs ``func`` in a worker thread once a day at ``hour``:00.

    The blocking work never runs on the event loop, and a failing run is
    logged without stopping later runs.
    """

    def __init__(self, name: str, hour: int, func: Callable[[], Any]) -> None:
        self.name = name
        self.hour = hour
        self._func = func
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None

    async def run_once(self) -> None:
        try:
            await asyncio.to_thread(self._func)
        except Exception:  # noqa: BLE001
            logger.exception("Scheduled job %s failed", self.name)

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(seconds_until_hour(self.hour))
            logger.info("Starting scheduled job %s", self.name)
            await self.run_once()

    async def start(self) -> None:
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info("Job %s scheduled (daily at %02d:00)", self.name, self.hour)

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
