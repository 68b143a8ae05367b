"""Domain models for bo_wallet — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Wallet:
    id: str
    user_id: str
    currency: str
    type: str                # WalletType value
    balance: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Transaction:
    id: str
    user_id: str
    wallet_id: str
    type: str                # TransactionType value
    status: str              # TransactionStatus value
    amount: Decimal
    fee: Decimal
    reference_id: str        # binary order id, 1:1
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
