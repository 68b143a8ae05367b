"""Candle-history scans over an order's lifetime.

Both scans page through 1-minute candles from order creation to expiry and
stop at the first candle satisfying their condition. A scan also stops when a
page comes back empty or the cursor fails to advance. Candles opening at or
after expiry, and candles without a high or low, are not considered.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from src.bo_common.datetime_utils import to_epoch_ms
from src.bo_common.enums import BinaryOrderSide
from src.bo_exchange.domain.models import ONE_MINUTE_MS, Candle
from src.bo_exchange.domain.price_feed import PriceFeedProtocol

logger = logging.getLogger(__name__)

CANDLE_TIMEFRAME = "1m"
CANDLE_PAGE_LIMIT = 1000


async def scan_candles(
    feed: PriceFeedProtocol,
    symbol: str,
    start: datetime,
    end: datetime,
    condition: Callable[[Candle], bool],
) -> bool:
    """True as soon as one candle in [start, end) satisfies ``condition``."""
    until = to_epoch_ms(end)
    cursor = to_epoch_ms(start)

    while cursor < until:
        candles = await feed.fetch_ohlcv(symbol, CANDLE_TIMEFRAME, cursor, CANDLE_PAGE_LIMIT)
        if not candles:
            logger.warning("No OHLCV data for %s from %d to %d", symbol, cursor, until)
            return False

        for candle in candles:
            if candle.timestamp >= until:
                return False
            if not candle.has_range:
                continue
            if condition(candle):
                return True

        last_time = candles[-1].timestamp
        if last_time <= cursor:
            logger.warning("No progress in OHLCV time for %s, stopping scan", symbol)
            return False
        cursor = last_time + ONE_MINUTE_MS

    return False


async def check_barrier_touched(
    feed: PriceFeedProtocol,
    symbol: str,
    start: datetime,
    end: datetime,
    barrier: Decimal,
) -> bool:
    """TOUCH_NO_TOUCH: did any candle's range include the barrier?

    A fetch error counts as not touched.
    """
    try:
        return await scan_candles(
            feed, symbol, start, end, lambda c: c.low <= barrier <= c.high
        )
    except Exception:
        logger.exception("Error fetching OHLCV for TOUCH_NO_TOUCH check on %s", symbol)
        return False


async def check_turbo_breach(
    feed: PriceFeedProtocol,
    symbol: str,
    start: datetime,
    end: datetime,
    barrier: Decimal,
    side: str,
) -> bool:
    """TURBO: did price cross the knock-out barrier?

    UP is knocked out by a low below the barrier, DOWN by a high above it.
    A fetch error counts as a breach.
    """
    if side == BinaryOrderSide.UP:
        condition: Callable[[Candle], bool] = lambda c: c.low < barrier  # noqa: E731
    else:
        condition = lambda c: c.high > barrier  # noqa: E731
    try:
        return await scan_candles(feed, symbol, start, end, condition)
    except Exception:
        logger.exception("Error fetching OHLCV for TURBO breach check on %s", symbol)
        return True
