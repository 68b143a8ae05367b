"""PriceFeed Protocol — the only view of the exchange the order engine has.

Implementations may raise on transient failures; callers decide whether a
failure aborts (order creation) or is tolerated (settlement).
"""

from typing import Protocol

from src.bo_exchange.domain.models import Candle, Ticker


class PriceFeedProtocol(Protocol):
    async def fetch_ticker(self, symbol: str) -> Ticker: ...

    async def fetch_ohlcv(
        self, symbol: str, timeframe: str, since_ms: int, limit: int
    ) -> list[Candle]: ...

    async def close(self) -> None: ...
