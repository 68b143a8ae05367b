"""Global service-availability gate.

The unblock time (epoch ms) lives in Redis so every worker process sees the
same ban. ``check`` returns a Result rather than raising; callers convert an
``Err`` into a 503 where the ban must abort the operation.
"""

import logging

import redis.asyncio as aioredis

from src.bo_common.datetime_utils import format_wait_time, to_epoch_ms, utc_now
from src.bo_common.result import Err, ErrorKind, Ok

logger = logging.getLogger(__name__)

BAN_KEY = "exchange:ban:unblock_time"


class BanGate:
    def __init__(self, redis: aioredis.Redis) -> None:
        self._redis = redis

    async def load_ban_status(self) -> int:
        """Return the unblock time in epoch ms, 0 when no ban is recorded."""
        raw = await self._redis.get(BAN_KEY)
        if not raw:
            return 0
        try:
            return int(raw)
        except ValueError:
            logger.error("Corrupt ban status %r, ignoring", raw)
            return 0

    async def handle_ban_status(self, unblock_time: int) -> bool:
        """True while the ban is active; clears an expired ban."""
        if unblock_time <= 0:
            return False
        if to_epoch_ms(utc_now()) < unblock_time:
            return True
        await self._redis.delete(BAN_KEY)
        return False

    async def ban_for(self, duration_ms: int) -> None:
        unblock_time = to_epoch_ms(utc_now()) + duration_ms
        await self._redis.set(BAN_KEY, str(unblock_time), px=duration_ms)
        logger.warning("Exchange ban recorded for %d ms", duration_ms)

    async def check(self) -> Ok[None] | Err:
        unblock_time = await self.load_ban_status()
        if await self.handle_ban_status(unblock_time):
            wait_ms = unblock_time - to_epoch_ms(utc_now())
            return Err(
                ErrorKind.SERVICE_UNAVAILABLE,
                f"Service temporarily unavailable. Please try again in {format_wait_time(wait_ms)}.",
            )
        return Ok(None)
