"""Builders shared by the unit tests."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.bo_binary.domain.models import BinaryOrder
from src.bo_exchange.domain.models import Candle

NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)


def make_order(**kwargs) -> BinaryOrder:
    defaults = dict(
        id="ord-1",
        user_id="user-1",
        symbol="BTC/USDT",
        type="RISE_FALL",
        side="RISE",
        amount=Decimal("100"),
        price=Decimal("100"),
        closed_at=NOW + timedelta(minutes=5),
        created_at=NOW - timedelta(minutes=5),
    )
    defaults.update(kwargs)
    return BinaryOrder(**defaults)


def _dec(value: str | None) -> Decimal | None:
    return None if value is None else Decimal(value)


def make_candle(
    timestamp: int,
    low: str | None = "100",
    high: str | None = "100",
    close: str | None = "100",
) -> Candle:
    return Candle(
        timestamp=timestamp,
        open=_dec(close),
        high=_dec(high),
        low=_dec(low),
        close=_dec(close),
        volume=Decimal("1"),
    )


def make_session_factory(db):
    """async_sessionmaker double: every ``async with factory() as s`` yields ``db``."""
    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=db)
    session_cm.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=session_cm)
