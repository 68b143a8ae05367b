"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.

Every method runs inside the caller's transaction; the ``*_for_update``
variants take a row lock that is held until that transaction ends.
"""

from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_wallet.domain.models import Transaction, Wallet


class WalletRepositoryProtocol(Protocol):
    async def get_spot_wallet_for_update(
        self, db: AsyncSession, user_id: str, currency: str
    ) -> Wallet | None: ...

    async def get_wallet_for_update(
        self, db: AsyncSession, wallet_id: str
    ) -> Wallet | None: ...

    async def set_balance(
        self, db: AsyncSession, wallet_id: str, balance: Decimal
    ) -> None: ...

    async def create_transaction(
        self, db: AsyncSession, transaction: Transaction
    ) -> Transaction: ...

    async def get_transaction_by_reference(
        self, db: AsyncSession, reference_id: str, for_update: bool = False
    ) -> Transaction | None: ...

    async def mark_transaction_completed(
        self, db: AsyncSession, transaction_id: str
    ) -> None: ...

    async def delete_transaction(
        self, db: AsyncSession, transaction_id: str
    ) -> None: ...
