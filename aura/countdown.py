"""The mission countdown: a 1 Hz wall-clock interval independent of frame rate."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


def countdown_step(remaining: int) -> tuple[int, bool]:
    """Return (next_remaining, expired) for one tick."""
    if remaining <= 1:
        return 0, True
    return remaining - 1, False


def format_clock(seconds: int) -> str:
    """180 -> "3:00", 9 -> "0:09"."""
    seconds = max(seconds, 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


class Countdown:
    """Calls `on_tick` every `interval` seconds until it returns True or is cancelled.

    The callback owns the remaining-time value; this class only schedules.
    """

    def __init__(self, on_tick: Callable[[], bool], interval: float = 1.0) -> None:
        self._on_tick = on_tick
        self._interval = interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    def cancel(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        # Deadlines count from the start; a slow tick does not push later ones back.
        loop = asyncio.get_running_loop()
        deadline = loop.time()
        while True:
            deadline += self._interval
            await asyncio.sleep(max(deadline - loop.time(), 0))
            if self._on_tick():
                logger.debug("countdown finished")
                return
