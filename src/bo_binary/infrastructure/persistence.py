# src/bo_binary/infrastructure/persistence.py
"""BinaryOrderRepository — raw SQL persistence implementation."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_binary.domain.models import BinaryOrder
from src.bo_common.errors import InternalError

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, user_id, symbol, type, side, status, price, profit, amount, is_demo,
    closed_at, barrier, strike_price, payout_per_point, duration_type,
    close_price, created_at, updated_at
"""

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO binary_orders (id, user_id, symbol, type, side, status,
        price, profit, amount, is_demo, closed_at,
        barrier, strike_price, payout_per_point, duration_type)
    VALUES (:id, :user_id, :symbol, :type, :side, :status,
        :price, :profit, :amount, :is_demo, :closed_at,
        :barrier, :strike_price, :payout_per_point, :duration_type)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM binary_orders WHERE id = :id
""")

_GET_ORDER_BY_ID_FOR_UPDATE_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM binary_orders WHERE id = :id
    FOR UPDATE
""")

_GET_ORDER_FOR_USER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM binary_orders WHERE id = :id AND user_id = :user_id
""")

_LIST_BY_STATUS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM binary_orders
    WHERE status = :status
    ORDER BY closed_at ASC
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM binary_orders
    WHERE user_id = :user_id
      AND (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
          OR (
              created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
              AND CAST(id AS TEXT) < CAST(:cursor_id AS TEXT)
          )
      )
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")

_APPLY_OUTCOME_SQL = text("""
    UPDATE binary_orders
    SET status = :status, profit = :profit, close_price = :close_price,
        updated_at = NOW()
    WHERE id = :id
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _dec(value: Any) -> Decimal | None:
    return None if value is None else Decimal(value)


def _row_to_order(row: Any) -> BinaryOrder:
    """Convert a DB result row to a BinaryOrder domain object."""
    return BinaryOrder(
        id=str(row.id),
        user_id=row.user_id,
        symbol=row.symbol,
        type=row.type,
        side=row.side,
        status=row.status,
        price=Decimal(row.price),
        profit=Decimal(row.profit),
        amount=Decimal(row.amount),
        is_demo=bool(row.is_demo),
        closed_at=row.closed_at,
        barrier=_dec(row.barrier),
        strike_price=_dec(row.strike_price),
        payout_per_point=_dec(row.payout_per_point),
        duration_type=row.duration_type,
        close_price=_dec(row.close_price),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class BinaryOrderRepository:
    """Concrete implementation of BinaryOrderRepositoryProtocol using raw SQL."""

    async def save(self, db: AsyncSession, order: BinaryOrder) -> BinaryOrder:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "id": order.id,
                "user_id": order.user_id,
                "symbol": order.symbol,
                "type": order.type,
                "side": order.side,
                "status": order.status,
                "price": order.price,
                "profit": order.profit,
                "amount": order.amount,
                "is_demo": order.is_demo,
                "closed_at": order.closed_at,
                "barrier": order.barrier,
                "strike_price": order.strike_price,
                "payout_per_point": order.payout_per_point,
                "duration_type": order.duration_type,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Binary order insert returned no rows")
        return _row_to_order(row)

    async def get_by_id(
        self, db: AsyncSession, order_id: str, for_update: bool = False
    ) -> BinaryOrder | None:
        sql = _GET_ORDER_BY_ID_FOR_UPDATE_SQL if for_update else _GET_ORDER_BY_ID_SQL
        result = await db.execute(sql, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def get_for_user(
        self, db: AsyncSession, user_id: str, order_id: str
    ) -> BinaryOrder | None:
        result = await db.execute(
            _GET_ORDER_FOR_USER_SQL, {"id": order_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_by_status(self, db: AsyncSession, status: str) -> list[BinaryOrder]:
        result = await db.execute(_LIST_BY_STATUS_SQL, {"status": status})
        return [_row_to_order(row) for row in result.fetchall()]

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        cursor: tuple[datetime, str] | None,
        limit: int,
    ) -> list[BinaryOrder]:
        cursor_ts, cursor_id = cursor if cursor else (None, None)
        result = await db.execute(
            _LIST_BY_USER_SQL,
            {
                "user_id": user_id,
                "status": status,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]

    async def apply_outcome(
        self,
        db: AsyncSession,
        order_id: str,
        status: str,
        profit: Decimal,
        close_price: Decimal,
    ) -> None:
        await db.execute(
            _APPLY_OUTCOME_SQL,
            {
                "id": order_id,
                "status": status,
                "profit": profit,
                "close_price": close_price,
            },
        )
