"""Exchange acquisition with a bounded retry loop.

``acquire`` returns ``Ok(feed)`` once a connection is established (and caches
it), or ``Err(SERVICE_UNAVAILABLE)`` after every attempt failed.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from src.bo_common.result import Err, ErrorKind, Ok
from src.bo_exchange.domain.price_feed import PriceFeedProtocol

logger = logging.getLogger(__name__)


class ExchangeManager:
    def __init__(
        self,
        connect: Callable[[], Awaitable[PriceFeedProtocol | None]],
        attempts: int = 3,
        backoff_ms: int = 500,
    ) -> None:
        self._connect = connect
        self._attempts = max(attempts, 1)
        self._backoff_s = backoff_ms / 1000
        self._feed: PriceFeedProtocol | None = None

    async def acquire(self) -> Ok[PriceFeedProtocol] | Err:
        if self._feed is not None:
            return Ok(self._feed)

        for attempt in range(1, self._attempts + 1):
            try:
                feed = await self._connect()
            except Exception as exc:  # noqa: BLE001 -- reported as Err after the last attempt
                logger.warning("Exchange connect attempt %d/%d failed: %s", attempt, self._attempts, exc)
                feed = None
            if feed is not None:
                self._feed = feed
                return Ok(feed)
            if attempt < self._attempts:
                await asyncio.sleep(self._backoff_s)

        return Err(
            ErrorKind.SERVICE_UNAVAILABLE,
            "Service temporarily unavailable. Please try again later.",
        )

    async def close(self) -> None:
        if self._feed is not None:
            await self._feed.close()
            self._feed = None
