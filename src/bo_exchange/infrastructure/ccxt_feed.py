"""ccxt-backed PriceFeed.

Wraps one ``ccxt.async_support`` exchange instance. When the exchange answers
with DDoS protection / rate limiting, the ban gate is tripped so new trading
operations are rejected with a retryable 503 until the ban expires.
"""

import logging
from typing import Any

import ccxt.async_support as ccxt

from config.settings import Settings
from src.bo_common.decimals import to_decimal
from src.bo_exchange.application.ban_gate import BanGate
from src.bo_exchange.domain.models import Candle, Ticker

logger = logging.getLogger(__name__)

_DEFAULT_BAN_MS = 60_000


def create_exchange(settings: Settings) -> Any:
    """Instantiate the configured ccxt exchange (not yet connected)."""
    exchange_class = getattr(ccxt, settings.EXCHANGE_ID)
    config: dict[str, Any] = {"enableRateLimit": True}
    if settings.EXCHANGE_API_KEY and settings.EXCHANGE_API_SECRET:
        config["apiKey"] = settings.EXCHANGE_API_KEY
        config["secret"] = settings.EXCHANGE_API_SECRET
    return exchange_class(config)


class CcxtPriceFeed:
    def __init__(self, exchange: Any, ban_gate: BanGate | None = None) -> None:
        self._exchange = exchange
        self._ban_gate = ban_gate

    @property
    def exchange_id(self) -> str:
        return str(getattr(self._exchange, "id", "unknown"))

    async def connect(self) -> "CcxtPriceFeed":
        """Load markets once; raises if the exchange is unreachable."""
        await self._call(self._exchange.load_markets)
        return self

    async def fetch_ticker(self, symbol: str) -> Ticker:
        raw = await self._call(self._exchange.fetch_ticker, symbol)
        return Ticker(symbol=symbol, last=to_decimal((raw or {}).get("last")))

    async def fetch_ohlcv(
        self, symbol: str, timeframe: str, since_ms: int, limit: int
    ) -> list[Candle]:
        rows = await self._call(
            self._exchange.fetch_ohlcv, symbol, timeframe, since_ms, limit
        )
        return [Candle.from_ohlcv(row) for row in rows or []]

    async def close(self) -> None:
        await self._exchange.close()

    async def _call(self, fn: Any, *args: Any) -> Any:
        try:
            return await fn(*args)
        except (ccxt.DDoSProtection, ccxt.RateLimitExceeded) as exc:
            logger.warning("Exchange %s throttled us: %s", self.exchange_id, exc)
            if self._ban_gate is not None:
                await self._ban_gate.ban_for(_DEFAULT_BAN_MS)
            raise
