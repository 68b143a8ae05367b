"""Contract-type rules: valid sides, required fields, early-sell windows.

Every contract type has exactly one entry in CONTRACT_RULES; one generic
validator consumes the table. Adding a BinaryOrderType without a rule fails
at import time.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from src.bo_common.decimals import is_positive_number
from src.bo_common.enums import BinaryOrderSide, BinaryOrderType, DurationType
from src.bo_common.errors import CancellationWindowError, InvalidInputError


@dataclass(frozen=True)
class ContractRule:
    valid_sides: tuple[BinaryOrderSide, ...]
    requires_barrier: bool = False
    requires_strike_price: bool = False
    requires_payout_per_point: bool = False
    # None: duration type not accepted from the client, always TIME
    duration_types: tuple[DurationType, ...] | None = None


CONTRACT_RULES: dict[BinaryOrderType, ContractRule] = {
    BinaryOrderType.RISE_FALL: ContractRule(
        valid_sides=(BinaryOrderSide.RISE, BinaryOrderSide.FALL),
    ),
    BinaryOrderType.HIGHER_LOWER: ContractRule(
        valid_sides=(BinaryOrderSide.HIGHER, BinaryOrderSide.LOWER),
        requires_barrier=True,
    ),
    BinaryOrderType.TOUCH_NO_TOUCH: ContractRule(
        valid_sides=(BinaryOrderSide.TOUCH, BinaryOrderSide.NO_TOUCH),
        requires_barrier=True,
    ),
    BinaryOrderType.CALL_PUT: ContractRule(
        valid_sides=(BinaryOrderSide.CALL, BinaryOrderSide.PUT),
        requires_strike_price=True,
        requires_payout_per_point=True,
    ),
    BinaryOrderType.TURBO: ContractRule(
        valid_sides=(BinaryOrderSide.UP, BinaryOrderSide.DOWN),
        requires_barrier=True,
        requires_payout_per_point=True,
        duration_types=(DurationType.TIME, DurationType.TICKS),
    ),
}

_missing_rules = set(BinaryOrderType) - CONTRACT_RULES.keys()
if _missing_rules:
    raise RuntimeError(f"No contract rule for: {sorted(t.value for t in _missing_rules)}")

# Types whose persisted row keeps each optional field
BARRIER_TYPES = frozenset(t for t, r in CONTRACT_RULES.items() if r.requires_barrier)
STRIKE_PRICE_TYPES = frozenset(t for t, r in CONTRACT_RULES.items() if r.requires_strike_price)
PAYOUT_PER_POINT_TYPES = frozenset(
    t for t, r in CONTRACT_RULES.items() if r.requires_payout_per_point
)
DURATION_TYPE_TYPES = frozenset(t for t, r in CONTRACT_RULES.items() if r.duration_types)

CALL_PUT_SELL_CUTOFF = timedelta(seconds=60)
TURBO_SELL_CUTOFF = timedelta(seconds=15)


def parse_order_type(value: str) -> BinaryOrderType:
    try:
        return BinaryOrderType(value)
    except ValueError:
        raise InvalidInputError(f"Invalid type: {value}") from None


def validate_create_order_input(
    type: str,
    side: str,
    barrier: object = None,
    strike_price: object = None,
    payout_per_point: object = None,
    duration_type: str | None = None,
) -> BinaryOrderType:
    """Check side and type-specific fields; report every violation at once."""
    order_type = parse_order_type(type)
    rule = CONTRACT_RULES[order_type]
    errors: list[str] = []

    if side not in {s.value for s in rule.valid_sides}:
        errors.append(f"Invalid side: {side}")
    if rule.requires_barrier and not is_positive_number(barrier):
        errors.append("barrier is required and must be a positive number")
    if rule.requires_strike_price and not is_positive_number(strike_price):
        errors.append("strike_price is required and must be a positive number")
    if rule.requires_payout_per_point and not is_positive_number(payout_per_point):
        errors.append("payout_per_point is required and must be a positive number")
    if rule.duration_types is not None:
        if not duration_type:
            errors.append("duration_type is required")
        elif duration_type not in {d.value for d in rule.duration_types}:
            errors.append(f"Invalid duration_type: {duration_type}")

    if errors:
        raise InvalidInputError(", ".join(errors))
    return order_type


def check_cancellation_window(
    order_type: str, duration_type: str, closed_at: datetime, now: datetime
) -> None:
    """Raise CancellationWindowError if the contract may not be sold early now."""
    remaining = closed_at - now
    if order_type == BinaryOrderType.CALL_PUT:
        if remaining <= CALL_PUT_SELL_CUTOFF:
            raise CancellationWindowError(
                "Cannot sell the CALL/PUT contract within 60 seconds of expiry."
            )
    elif order_type == BinaryOrderType.TURBO:
        if duration_type == DurationType.TICKS:
            raise CancellationWindowError(
                "Cannot sell a TURBO contract with TICKS duration early."
            )
        if remaining <= TURBO_SELL_CUTOFF:
            raise CancellationWindowError(
                "Cannot sell the TURBO contract within 15 seconds of expiry."
            )
