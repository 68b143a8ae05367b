"""Domain models for bo_market — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.bo_common.decimals import ZERO, to_decimal


@dataclass
class ExchangeMarket:
    id: str
    currency: str                 # base, e.g. BTC
    pair: str                     # quote, e.g. USDT
    status: bool
    metadata: dict[str, Any] | None = field(default=None)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def symbol(self) -> str:
        return f"{self.currency}/{self.pair}"


@dataclass(frozen=True)
class AmountLimits:
    min: Decimal
    max: Decimal

    def contains(self, amount: Decimal) -> bool:
        return self.min <= amount <= self.max


def amount_limits_from_metadata(metadata: dict[str, Any]) -> AmountLimits:
    """Read metadata.limits.amount.{min,max}; anything missing counts as 0."""
    amount = (metadata.get("limits") or {}).get("amount") or {}
    return AmountLimits(
        min=to_decimal(amount.get("min")) or ZERO,
        max=to_decimal(amount.get("max")) or ZERO,
    )
