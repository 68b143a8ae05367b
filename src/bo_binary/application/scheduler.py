"""SettlementScheduler — per-order settlement timers.

Process-local and non-durable: the pending-order sweep is what guarantees
every order is eventually settled. Timers only make settlement prompt.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from src.bo_binary.domain.models import BinaryOrder
from src.bo_common.datetime_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

SettleHandler = Callable[[BinaryOrder], Awaitable[None]]


class SettlementScheduler:
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._handler: SettleHandler | None = None

    def set_handler(self, handler: SettleHandler) -> None:
        self._handler = handler

    def has(self, order_id: str) -> bool:
        return order_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    async def schedule(self, order: BinaryOrder) -> None:
        """Arm a one-shot timer for the order's expiry; settle now if already expired."""
        handler = self._handler
        if handler is None:
            raise RuntimeError("SettlementScheduler has no settle handler")

        delay = (ensure_utc(order.closed_at) - self._clock()).total_seconds()
        if delay <= 0:
            logger.warning("Order %s closed_at is in the past. Processing immediately.", order.id)
            await handler(order)
            return

        self.cancel(order.id)
        self._tasks[order.id] = asyncio.create_task(
            self._fire(order, delay, handler), name=f"settle-{order.id}"
        )
        logger.debug("Order %s settlement scheduled in %.1fs", order.id, delay)

    def cancel(self, order_id: str) -> bool:
        """Disarm and forget the order's timer. Returns False if none was armed."""
        task = self._tasks.pop(order_id, None)
        if task is None:
            return False
        if task is not asyncio.current_task():
            task.cancel()
        return True

    def discard(self, order_id: str) -> None:
        """Forget the entry without cancelling; used once settlement has run."""
        self._tasks.pop(order_id, None)

    async def shutdown(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _fire(self, order: BinaryOrder, delay: float, handler: SettleHandler) -> None:
        try:
            await asyncio.sleep(delay)
            await handler(order)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Scheduled settlement of order %s failed", order.id)
        finally:
            if self._tasks.get(order.id) is asyncio.current_task():
                del self._tasks[order.id]
