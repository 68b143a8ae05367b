"""WalletRepository — concrete implementation of WalletRepositoryProtocol.

Wallet and transaction rows are locked with SELECT ... FOR UPDATE and then
rewritten; the lock serializes settlement and cancellation of the same order.

Transaction ownership: The CALLER (application service) is responsible for
committing or rolling back the session; nothing here commits.
"""

from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_common.enums import TransactionStatus, WalletType
from src.bo_common.errors import InternalError
from src.bo_wallet.domain.models import Transaction, Wallet

# ---------------------------------------------------------------------------
# SQL: wallets
# ---------------------------------------------------------------------------

_WALLET_COLUMNS = "id, user_id, currency, type, balance, created_at, updated_at"

_GET_SPOT_WALLET_FOR_UPDATE_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE user_id = :user_id AND currency = :currency AND type = :type
    FOR UPDATE
""")

_GET_WALLET_FOR_UPDATE_SQL = text(f"""
    SELECT {_WALLET_COLUMNS}
    FROM wallets
    WHERE id = :id
    FOR UPDATE
""")

_SET_BALANCE_SQL = text("""
    UPDATE wallets
    SET balance = :balance,
        updated_at = NOW()
    WHERE id = :id
""")

# ---------------------------------------------------------------------------
# SQL: transactions
# ---------------------------------------------------------------------------

_TRANSACTION_COLUMNS = """
    id, user_id, wallet_id, type, status, amount, fee,
    description, reference_id, created_at, updated_at
"""

_INSERT_TRANSACTION_SQL = text(f"""
    INSERT INTO transactions
        (id, user_id, wallet_id, type, status, amount, fee, description, reference_id)
    VALUES
        (:id, :user_id, :wallet_id, :type, :status, :amount, :fee, :description, :reference_id)
    RETURNING {_TRANSACTION_COLUMNS}
""")

_GET_TRANSACTION_BY_REFERENCE_SQL = text(f"""
    SELECT {_TRANSACTION_COLUMNS}
    FROM transactions
    WHERE reference_id = :reference_id
""")

_GET_TRANSACTION_BY_REFERENCE_FOR_UPDATE_SQL = text(f"""
    SELECT {_TRANSACTION_COLUMNS}
    FROM transactions
    WHERE reference_id = :reference_id
    FOR UPDATE
""")

_COMPLETE_TRANSACTION_SQL = text("""
    UPDATE transactions
    SET status = :status,
        updated_at = NOW()
    WHERE id = :id
""")

_DELETE_TRANSACTION_SQL = text("DELETE FROM transactions WHERE id = :id")


def _row_to_wallet(row: object) -> Wallet:
    return Wallet(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        currency=row.currency,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        wallet_id=str(row.wallet_id),  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        amount=Decimal(row.amount),  # type: ignore[attr-defined]
        fee=Decimal(row.fee),  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class WalletRepository:
    """Concrete repository — row locks are held until the caller's transaction ends."""

    async def get_spot_wallet_for_update(
        self, db: AsyncSession, user_id: str, currency: str
    ) -> Wallet | None:
        result = await db.execute(
            _GET_SPOT_WALLET_FOR_UPDATE_SQL,
            {"user_id": user_id, "currency": currency, "type": WalletType.SPOT.value},
        )
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def get_wallet_for_update(
        self, db: AsyncSession, wallet_id: str
    ) -> Wallet | None:
        result = await db.execute(_GET_WALLET_FOR_UPDATE_SQL, {"id": wallet_id})
        row = result.fetchone()
        return _row_to_wallet(row) if row else None

    async def set_balance(
        self, db: AsyncSession, wallet_id: str, balance: Decimal
    ) -> None:
        await db.execute(_SET_BALANCE_SQL, {"id": wallet_id, "balance": balance})

    async def create_transaction(
        self, db: AsyncSession, transaction: Transaction
    ) -> Transaction:
        result = await db.execute(
            _INSERT_TRANSACTION_SQL,
            {
                "id": transaction.id,
                "user_id": transaction.user_id,
                "wallet_id": transaction.wallet_id,
                "type": transaction.type,
                "status": transaction.status,
                "amount": transaction.amount,
                "fee": transaction.fee,
                "description": transaction.description,
                "reference_id": transaction.reference_id,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Transaction insert returned no rows")
        return _row_to_transaction(row)

    async def get_transaction_by_reference(
        self, db: AsyncSession, reference_id: str, for_update: bool = False
    ) -> Transaction | None:
        sql = (
            _GET_TRANSACTION_BY_REFERENCE_FOR_UPDATE_SQL
            if for_update
            else _GET_TRANSACTION_BY_REFERENCE_SQL
        )
        result = await db.execute(sql, {"reference_id": reference_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def mark_transaction_completed(
        self, db: AsyncSession, transaction_id: str
    ) -> None:
        await db.execute(
            _COMPLETE_TRANSACTION_SQL,
            {"id": transaction_id, "status": TransactionStatus.COMPLETED.value},
        )

    async def delete_transaction(
        self, db: AsyncSession, transaction_id: str
    ) -> None:
        await db.execute(_DELETE_TRANSACTION_SQL, {"id": transaction_id})
