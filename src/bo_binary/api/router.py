# src/bo_binary/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.bo_binary.application.schemas import (
    BinaryOrderListResponse,
    BinaryOrderResponse,
    CancelBinaryOrderRequest,
    CreateBinaryOrderRequest,
    MessageResponse,
    ProcessPendingResponse,
)
from src.bo_binary.application.service import BinaryOrderService
from src.bo_common.database import get_db_session
from src.bo_gateway.auth.dependencies import get_current_user, require_operator
from src.bo_gateway.user.db_models import UserModel

router = APIRouter(prefix="/binary/orders", tags=["binary-orders"])


def get_binary_order_service(request: Request) -> BinaryOrderService:
    """The service is built once in the app lifespan (it owns the settlement timers)."""
    return request.app.state.binary_order_service  # type: ignore[no-any-return]


ServiceDep = Annotated[BinaryOrderService, Depends(get_binary_order_service)]
UserDep = Annotated[UserModel, Depends(get_current_user)]
OperatorDep = Annotated[UserModel, Depends(require_operator)]
DbDep = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("", response_model=BinaryOrderResponse, status_code=201)
async def create_order(
    req: CreateBinaryOrderRequest,
    current_user: UserDep,
    db: DbDep,
    svc: ServiceDep,
) -> BinaryOrderResponse:
    order = await svc.create_order(
        db,
        str(current_user.id),
        currency=req.currency,
        pair=req.pair,
        amount=req.amount,
        side=req.side,
        type=req.type,
        closed_at=req.closed_at,
        is_demo=req.is_demo,
        duration_type=req.duration_type,
        barrier=req.barrier,
        strike_price=req.strike_price,
        payout_per_point=req.payout_per_point,
    )
    return BinaryOrderResponse.from_domain(order)


@router.post("/process-pending", response_model=ProcessPendingResponse)
async def process_pending_orders(
    operator: OperatorDep,
    svc: ServiceDep,
) -> ProcessPendingResponse:
    processed = await svc.process_pending_orders(should_broadcast=True)
    return ProcessPendingResponse(processed=processed)


@router.post("/{order_id}/cancel", response_model=MessageResponse)
async def cancel_order(
    order_id: str,
    current_user: UserDep,
    db: DbDep,
    svc: ServiceDep,
    req: CancelBinaryOrderRequest | None = None,
) -> MessageResponse:
    percentage = req.percentage if req else None
    result = await svc.cancel_order(db, str(current_user.id), order_id, percentage)
    return MessageResponse(**result)


@router.get("", response_model=BinaryOrderListResponse)
async def list_orders(
    current_user: UserDep,
    db: DbDep,
    svc: ServiceDep,
    status: str | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor"),
) -> BinaryOrderListResponse:
    return await svc.list_orders(db, str(current_user.id), status, limit, cursor)


@router.get("/{order_id}", response_model=BinaryOrderResponse)
async def get_order(
    order_id: str,
    current_user: UserDep,
    db: DbDep,
    svc: ServiceDep,
) -> BinaryOrderResponse:
    order = await svc.get_order(db, str(current_user.id), order_id)
    return BinaryOrderResponse.from_domain(order)
