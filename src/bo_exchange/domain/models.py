"""Price feed value objects — pure dataclasses."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.bo_common.decimals import to_decimal

ONE_MINUTE_MS = 60_000


@dataclass(frozen=True)
class Ticker:
    symbol: str
    last: Decimal | None


@dataclass(frozen=True)
class Candle:
    timestamp: int                 # candle open time, epoch ms
    open: Decimal | None           # None when the exchange left the field empty
    high: Decimal | None
    low: Decimal | None
    close: Decimal | None
    volume: Decimal | None

    @property
    def has_range(self) -> bool:
        return self.low is not None and self.high is not None

    @classmethod
    def from_ohlcv(cls, row: list[Any]) -> "Candle":
        """Build from the exchange's [timestamp, open, high, low, close, volume] row.

        Fields the exchange left empty stay None.
        """
        timestamp, open_, high, low, close, volume = row[:6]
        return cls(
            timestamp=int(timestamp),
            open=to_decimal(open_),
            high=to_decimal(high),
            low=to_decimal(low),
            close=to_decimal(close),
            volume=to_decimal(volume),
        )
