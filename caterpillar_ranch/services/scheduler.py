"""Countdown scheduler driving every running game's tick()"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class CountdownScheduler:
    """
    Calls tick() once per interval on the event loop.

    All timer side effects happen inside tick(), so tests can skip the
    loop entirely and call advance() instead of waiting on a wall clock.
    """

    def __init__(
        self,
        tick: Callable[[], int],
        interval: float = 1.0,
        maintenance: Optional[Callable[[], dict]] = None,
        maintenance_every: int = 60,
    ):
        self._tick = tick
        self.interval = interval
        self._maintenance = maintenance
        self.maintenance_every = maintenance_every
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def advance(self, seconds: int = 1) -> int:
        """Run `seconds` ticks synchronously; returns games completed"""
        completed = 0
        for _ in range(seconds):
            completed += self._tick()
            self.ticks += 1
            if self._maintenance and self.ticks % self.maintenance_every == 0:
                result = self._maintenance()
                logger.debug(f"Maintenance: {result}")
        return completed

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.advance(1)
            except Exception:
                logger.exception("Countdown tick failed")

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info(f"Countdown scheduler started ({self.interval}s interval)")

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Countdown scheduler stopped")
