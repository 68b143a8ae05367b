"""Outcome evaluation — pure functions, no I/O.

profit is the amount won on top of the returned stake. For every type except
TURBO it is ``amount * pct / 100`` with a per-type percentage; TURBO pays
``|close - barrier| * payout_per_point - amount``.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from src.bo_binary.domain.models import BinaryOrder
from src.bo_common.decimals import HUNDRED, ZERO, to_decimal
from src.bo_common.enums import BinaryOrderSide, BinaryOrderStatus, BinaryOrderType

logger = logging.getLogger(__name__)

DEFAULT_PROFIT_PERCENTAGE = Decimal("87")


def parse_profit_percentage(raw: object) -> Decimal:
    """Unset, non-numeric, NaN or negative -> 87."""
    value = to_decimal(raw)
    if value is None or value < ZERO:
        if raw not in (None, ""):
            logger.warning(
                "Invalid profit percentage %r, using %s", raw, DEFAULT_PROFIT_PERCENTAGE
            )
        return DEFAULT_PROFIT_PERCENTAGE
    return value


@dataclass(frozen=True)
class ProfitConfig:
    percentages: Mapping[BinaryOrderType, Decimal]

    @classmethod
    def from_raw(cls, raw: Mapping[BinaryOrderType, object]) -> "ProfitConfig":
        return cls(
            percentages={t: parse_profit_percentage(raw.get(t)) for t in BinaryOrderType}
        )

    @classmethod
    def from_settings(cls, settings: Any) -> "ProfitConfig":
        return cls.from_raw(
            {
                BinaryOrderType.RISE_FALL: settings.BINARY_PROFIT,
                BinaryOrderType.HIGHER_LOWER: settings.BINARY_HIGHER_LOWER_PROFIT,
                BinaryOrderType.TOUCH_NO_TOUCH: settings.BINARY_TOUCH_NO_TOUCH_PROFIT,
                BinaryOrderType.CALL_PUT: settings.BINARY_CALL_PUT_PROFIT,
                BinaryOrderType.TURBO: settings.BINARY_TURBO_PROFIT,
            }
        )

    def for_type(self, order_type: str) -> Decimal:
        return self.percentages.get(BinaryOrderType(order_type), DEFAULT_PROFIT_PERCENTAGE)


@dataclass(frozen=True)
class OrderOutcome:
    status: BinaryOrderStatus
    profit: Decimal
    close_price: Decimal


_Verdict = tuple[BinaryOrderStatus, Decimal]


def _win(order: BinaryOrder, pct: Decimal) -> _Verdict:
    return BinaryOrderStatus.WIN, order.amount * pct / HUNDRED


def _loss() -> _Verdict:
    return BinaryOrderStatus.LOSS, ZERO


def _directional(
    order: BinaryOrder,
    close_price: Decimal,
    reference: Decimal,
    up_side: BinaryOrderSide,
    pct: Decimal,
) -> _Verdict:
    """Shared shape of RISE_FALL, HIGHER_LOWER and CALL_PUT."""
    if close_price == reference:
        return BinaryOrderStatus.DRAW, ZERO
    favorable = close_price > reference if order.side == up_side else close_price < reference
    return _win(order, pct) if favorable else _loss()


def _rise_fall(order: BinaryOrder, close_price: Decimal, pct: Decimal, **_: bool) -> _Verdict:
    return _directional(order, close_price, order.price, BinaryOrderSide.RISE, pct)


def _higher_lower(order: BinaryOrder, close_price: Decimal, pct: Decimal, **_: bool) -> _Verdict:
    if not order.barrier:
        logger.error("HIGHER_LOWER order %s missing barrier. Defaulting to LOSS.", order.id)
        return _loss()
    return _directional(order, close_price, order.barrier, BinaryOrderSide.HIGHER, pct)


def _touch_no_touch(
    order: BinaryOrder, close_price: Decimal, pct: Decimal, *, touched: bool, **_: bool
) -> _Verdict:
    wants_touch = order.side == BinaryOrderSide.TOUCH
    return _win(order, pct) if touched == wants_touch else _loss()


def _call_put(order: BinaryOrder, close_price: Decimal, pct: Decimal, **_: bool) -> _Verdict:
    if not order.strike_price:
        logger.error("CALL_PUT order %s missing strike_price. Defaulting to LOSS.", order.id)
        return _loss()
    return _directional(order, close_price, order.strike_price, BinaryOrderSide.CALL, pct)


def _turbo(
    order: BinaryOrder, close_price: Decimal, pct: Decimal, *, turbo_breached: bool, **_: bool
) -> _Verdict:
    barrier, per_point = order.barrier, order.payout_per_point
    if not barrier or not per_point:
        logger.error(
            "TURBO order %s missing barrier or payout_per_point. Defaulting to LOSS.", order.id
        )
        return _loss()
    if turbo_breached:
        return _loss()
    if close_price == barrier:
        return BinaryOrderStatus.DRAW, ZERO

    if order.side == BinaryOrderSide.UP:
        distance = close_price - barrier
    else:
        distance = barrier - close_price
    if distance < ZERO:
        return _loss()

    payout_value = distance * per_point
    if payout_value > order.amount:
        return BinaryOrderStatus.WIN, payout_value - order.amount
    if payout_value == order.amount:
        return BinaryOrderStatus.DRAW, ZERO
    return _loss()


_EVALUATORS: dict[BinaryOrderType, Callable[..., _Verdict]] = {
    BinaryOrderType.RISE_FALL: _rise_fall,
    BinaryOrderType.HIGHER_LOWER: _higher_lower,
    BinaryOrderType.TOUCH_NO_TOUCH: _touch_no_touch,
    BinaryOrderType.CALL_PUT: _call_put,
    BinaryOrderType.TURBO: _turbo,
}


def evaluate_outcome(
    order: BinaryOrder,
    close_price: Decimal,
    profit_config: ProfitConfig,
    touched: bool = False,
    turbo_breached: bool = False,
) -> OrderOutcome:
    try:
        order_type = BinaryOrderType(order.type)
    except ValueError:
        logger.error("Order %s has unknown type %s. Defaulting to LOSS.", order.id, order.type)
        return OrderOutcome(BinaryOrderStatus.LOSS, ZERO, close_price)

    status, profit = _EVALUATORS[order_type](
        order,
        close_price,
        profit_config.for_type(order_type),
        touched=touched,
        turbo_breached=turbo_breached,
    )
    return OrderOutcome(status=status, profit=profit, close_price=close_price)


def apply_final_payout(
    status: str, amount: Decimal, profit: Decimal, balance: Decimal
) -> Decimal:
    """Wallet balance after settlement; the stake was already debited at creation."""
    if status == BinaryOrderStatus.WIN:
        return balance + amount + profit
    if status == BinaryOrderStatus.DRAW:
        return balance + amount
    return balance


def cancellation_refund(amount: Decimal, percentage: Decimal | None) -> Decimal:
    """Stake returned on early sale: amount minus |percentage|% of it, never negative."""
    if percentage is None:
        return amount
    refund = amount - amount * abs(percentage) / HUNDRED
    return max(refund, ZERO)
