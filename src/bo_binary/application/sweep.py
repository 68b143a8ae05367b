"""SweepRunner — periodic in-process trigger for the pending-order sweep.

The first pass runs immediately at startup so orders orphaned by a restart
are settled without waiting a full interval.
"""

import asyncio
import logging

from src.bo_binary.application.service import BinaryOrderService

logger = logging.getLogger(__name__)


class SweepRunner:
    def __init__(self, service: BinaryOrderService, interval_seconds: float) -> None:
        self._service = service
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="binary-order-sweep")
        logger.info("Pending-order sweep started (every %ss)", self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def run_once(self) -> int:
        """One sweep pass; a failed pass is logged and the loop keeps going."""
        try:
            return await self._service.process_pending_orders()
        except Exception:
            logger.exception("Pending-order sweep failed")
            return 0

    async def _loop(self) -> None:
        while True:
            await self.run_once()
            await asyncio.sleep(self._interval)
