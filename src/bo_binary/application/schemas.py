# src/bo_binary/application/schemas.py
import base64
import json
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from src.bo_binary.domain.models import BinaryOrder
from src.bo_common.datetime_utils import ensure_utc

# ---------------------------------------------------------------------------
# Cursor helpers
# ---------------------------------------------------------------------------


def cursor_encode(created_at: datetime, order_id: str) -> str:
    """Encode the last row's (created_at, id) into an opaque Base64 cursor."""
    payload = json.dumps({"ts": ensure_utc(created_at).isoformat(), "id": order_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> tuple[datetime, str] | None:
    """Decode a cursor string. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return datetime.fromisoformat(payload["ts"]), str(payload["id"])
    except Exception:
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateBinaryOrderRequest(BaseModel):
    currency: str = Field(..., min_length=1, max_length=20)
    pair: str = Field(..., min_length=1, max_length=20)
    amount: Decimal = Field(..., gt=0)
    side: str
    type: str
    closed_at: datetime
    is_demo: bool = False
    duration_type: str | None = None
    barrier: Decimal | None = None
    strike_price: Decimal | None = None
    payout_per_point: Decimal | None = None

    @field_validator("currency", "pair")
    @classmethod
    def upper_symbol(cls, v: str) -> str:
        if v != v.strip() or "/" in v:
            raise ValueError("must not contain whitespace or '/'")
        return v.upper()


class CancelBinaryOrderRequest(BaseModel):
    # Early-sale cut in percent; absent means a full refund
    percentage: Decimal | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BinaryOrderResponse(BaseModel):
    id: str
    user_id: str
    symbol: str
    type: str
    side: str
    status: str
    amount: Decimal
    price: Decimal
    profit: Decimal
    is_demo: bool
    closed_at: datetime
    barrier: Decimal | None = None
    strike_price: Decimal | None = None
    payout_per_point: Decimal | None = None
    duration_type: str
    close_price: Decimal | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: BinaryOrder) -> "BinaryOrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            symbol=order.symbol,
            type=order.type,
            side=order.side,
            status=order.status,
            amount=order.amount,
            price=order.price,
            profit=order.profit,
            is_demo=order.is_demo,
            closed_at=order.closed_at,
            barrier=order.barrier,
            strike_price=order.strike_price,
            payout_per_point=order.payout_per_point,
            duration_type=order.duration_type,
            close_price=order.close_price,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class BinaryOrderListResponse(BaseModel):
    items: list[BinaryOrderResponse]
    next_cursor: str | None
    has_more: bool


class MessageResponse(BaseModel):
    message: str


class ProcessPendingResponse(BaseModel):
    processed: int
