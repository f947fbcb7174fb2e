"""Frame-driven simulation loop.

Runs as an asyncio task at roughly `fps` frames per second and hands each
frame's delta time (from a monotonic clock) to a step callback. The step
must be synchronous and fast; it never waits on the dialogue service.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class SimulationLoop:
    def __init__(
        self,
        step: Callable[[float], None],
        fps: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._step = step
        self._frame = 1.0 / fps
        self._clock = clock
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.debug("simulation loop started (%.1f fps)", 1.0 / self._frame)

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _run(self) -> None:
        last = self._clock()
        while True:
            await asyncio.sleep(self._frame)
            now = self._clock()
            dt, last = now - last, now
            self._step(dt)
