"""SQLAlchemy ORM model for the binary_orders table (DDL reference only — queries use raw SQL)."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from src.bo_common.database import Base


class BinaryOrderORM(Base):
    __tablename__ = "binary_orders"

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    symbol: Mapped[str] = mapped_column(String(41), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False, default="PENDING")
    price: Mapped[Decimal] = mapped_column(Numeric(30, 15), nullable=False)
    profit: Mapped[Decimal] = mapped_column(Numeric(30, 15), nullable=False, default=0)
    amount: Mapped[Decimal] = mapped_column(Numeric(30, 15), nullable=False)
    is_demo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    closed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    barrier: Mapped[Decimal | None] = mapped_column(Numeric(30, 15), nullable=True)
    strike_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 15), nullable=True)
    payout_per_point: Mapped[Decimal | None] = mapped_column(Numeric(30, 15), nullable=True)
    duration_type: Mapped[str] = mapped_column(String(10), nullable=False, default="TIME")
    close_price: Mapped[Decimal | None] = mapped_column(Numeric(30, 15), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
