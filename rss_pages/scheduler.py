from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

logger = logging.getLogger(__name__)

Job = Callable[[], Awaitable[Any]]


class Scheduler:
    """
    Runs `job` once at start and then every `interval` seconds.

    A trigger that fires while the previous run is still in flight is skipped,
    so two runs never touch the store at the same time. `stop` cancels the
    timer and any run in progress.
    """

    def __init__(self, job: Job, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.job = job
        self.interval = interval
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._runs: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def trigger(self) -> bool:
        """Run the job now unless a run is in flight. Returns whether it ran."""
        if self._lock.locked():
            logger.warning("Previous cycle still running; skipping this trigger")
            return False
        async with self._lock:
            try:
                await self.job()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Scheduled job failed")
        return True

    async def _loop(self) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            # runs go in their own task so a slow cycle does not delay the clock
            run = asyncio.create_task(self.trigger())
            self._runs.add(run)
            run.add_done_callback(self._runs.discard)
            next_at += self.interval
            await asyncio.sleep(max(0.0, next_at - loop.time()))

    def start(self) -> None:
        if self.running:
            return
        logger.info("Scheduler started (every %.0f s)", self.interval)
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        tasks = [t for t in (self._task, *self._runs) if t is not None]
        self._task = None
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("Scheduler stopped")

    async def __aenter__(self) -> "Scheduler":
        self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()
