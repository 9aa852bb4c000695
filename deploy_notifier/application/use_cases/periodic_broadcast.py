"""
Periodic Broadcast Use Case

Architectural Intent:
- Re-broadcasts the Deployment on a fixed interval so elapsed times keep
  ticking in the channel between events
- Runs as a cancellable asyncio task with an explicit stop signal, set
  either by the deployment finishing or by shutdown
"""

import asyncio
import logging
from typing import Optional

from deploy_notifier.application.use_cases.broadcast_status import BroadcastStatus

logger = logging.getLogger(__name__)


class PeriodicBroadcast:
    def __init__(self, broadcast: BroadcastStatus, interval_seconds: float = 15):
        self.broadcast = broadcast
        self.interval_seconds = interval_seconds
        self._stop: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Schedule the periodic task on the running event loop."""
        if self.running:
            return self._task
        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        self._task = self._loop.create_task(self.run(), name="periodic-broadcast")
        return self._task

    def stop(self) -> None:
        """Signal the task to exit at its next wakeup. Safe from any thread."""
        if self._stop is None or self._loop is None:
            return
        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None
        if running_loop is self._loop:
            self._stop.set()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._stop.set)

    async def wait(self) -> None:
        if self._task is not None:
            await self._task

    async def run(self) -> None:
        if self._stop is None:
            self._stop = asyncio.Event()
        deployment = self.broadcast.deployment
        logger.info("Periodic broadcast every %ss", self.interval_seconds)

        while True:
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
                logger.info("Periodic broadcast stopped")
                return
            except asyncio.TimeoutError:
                pass

            if deployment.done:
                logger.info("Deployment done, periodic broadcast finished")
                return

            try:
                await self.broadcast.execute()
            except Exception as e:
                logger.error("Periodic broadcast failed: %s", e, exc_info=True)
