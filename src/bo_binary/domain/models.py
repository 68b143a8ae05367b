"""Binary order domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bo_common.enums import (
    SETTLED_STATUSES,
    TERMINAL_STATUSES,
    BinaryOrderStatus,
    DurationType,
)


@dataclass
class BinaryOrder:
    id: str
    user_id: str
    symbol: str                  # BASE/QUOTE
    type: str                    # BinaryOrderType value
    side: str                    # BinaryOrderSide value, valid set depends on type
    amount: Decimal
    price: Decimal               # entry price captured at creation
    closed_at: datetime          # expiry, immutable
    status: str = BinaryOrderStatus.PENDING.value
    profit: Decimal = Decimal("0")
    is_demo: bool = False
    barrier: Decimal | None = None
    strike_price: Decimal | None = None
    payout_per_point: Decimal | None = None
    duration_type: str = DurationType.TIME.value
    close_price: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def base_currency(self) -> str:
        return self.symbol.split("/")[0]

    @property
    def quote_currency(self) -> str:
        return self.symbol.split("/")[1]

    @property
    def is_pending(self) -> bool:
        return self.status == BinaryOrderStatus.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_settled(self) -> bool:
        return self.status in SETTLED_STATUSES
