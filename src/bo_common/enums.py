"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class BinaryOrderType(str, Enum):
    RISE_FALL = "RISE_FALL"
    HIGHER_LOWER = "HIGHER_LOWER"
    TOUCH_NO_TOUCH = "TOUCH_NO_TOUCH"
    CALL_PUT = "CALL_PUT"
    TURBO = "TURBO"


class BinaryOrderSide(str, Enum):
    RISE = "RISE"
    FALL = "FALL"
    HIGHER = "HIGHER"
    LOWER = "LOWER"
    TOUCH = "TOUCH"
    NO_TOUCH = "NO_TOUCH"
    CALL = "CALL"
    PUT = "PUT"
    UP = "UP"
    DOWN = "DOWN"


class BinaryOrderStatus(str, Enum):
    PENDING = "PENDING"
    WIN = "WIN"
    LOSS = "LOSS"
    DRAW = "DRAW"
    CANCELED = "CANCELED"


TERMINAL_STATUSES = frozenset(
    {
        BinaryOrderStatus.WIN,
        BinaryOrderStatus.LOSS,
        BinaryOrderStatus.DRAW,
        BinaryOrderStatus.CANCELED,
    }
)

# Outcomes that settle the ledger (CANCELED is refunded by cancel_order instead)
SETTLED_STATUSES = frozenset(
    {BinaryOrderStatus.WIN, BinaryOrderStatus.LOSS, BinaryOrderStatus.DRAW}
)


class DurationType(str, Enum):
    TIME = "TIME"
    TICKS = "TICKS"


class WalletType(str, Enum):
    SPOT = "SPOT"


class TransactionType(str, Enum):
    BINARY_ORDER = "BINARY_ORDER"


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
