"""BinaryOrderRepository Protocol — interface contract for persistence layer."""

from datetime import datetime
from decimal import Decimal
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_binary.domain.models import BinaryOrder


class BinaryOrderRepositoryProtocol(Protocol):
    async def save(self, db: AsyncSession, order: BinaryOrder) -> BinaryOrder: ...

    async def get_by_id(
        self, db: AsyncSession, order_id: str, for_update: bool = False
    ) -> BinaryOrder | None: ...

    async def get_for_user(
        self, db: AsyncSession, user_id: str, order_id: str
    ) -> BinaryOrder | None: ...

    async def list_by_status(self, db: AsyncSession, status: str) -> list[BinaryOrder]: ...

    async def list_by_user(
        self,
        db: AsyncSession,
        user_id: str,
        status: str | None,
        cursor: tuple[datetime, str] | None,
        limit: int,
    ) -> list[BinaryOrder]: ...

    async def apply_outcome(
        self,
        db: AsyncSession,
        order_id: str,
        status: str,
        profit: Decimal,
        close_price: Decimal,
    ) -> None: ...
