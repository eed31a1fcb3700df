"""
Order Endpoints

Orders page (paginated table), kanban board, staff notifications,
the admin order form and status changes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    ErrorResponse,
    KanbanBoard,
    MessageResponse,
    OrderCreate,
    OrderNotification,
    OrderStatusUpdate,
    OrderView,
    PaginatedOrders,
    PaymentStatusUpdate,
)
from restaurant_admin.services import orders as order_service
from restaurant_admin.services import storefront as storefront_service

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=PaginatedOrders, summary="List Orders (paginated)")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    search: Optional[str] = Query(None),
    status: str = Query("all"),
    db: AsyncSession = Depends(get_db),
) -> PaginatedOrders:
    """Search matches id, number, customer name and phone."""
    return await order_service.paginate_orders(db, page=page, limit=limit, search=search, status=status)


@router.get("/all", response_model=list[OrderView])
async def list_all_orders(db: AsyncSession = Depends(get_db)) -> list[OrderView]:
    return await order_service.list_orders(db)


@router.get("/kanban", response_model=KanbanBoard)
async def kanban(db: AsyncSession = Depends(get_db)) -> KanbanBoard:
    return await order_service.kanban_board(db)


@router.get("/notifications", response_model=list[OrderNotification])
async def notifications(db: AsyncSession = Depends(get_db)) -> list[OrderNotification]:
    return await order_service.pending_notifications(db)


@router.get("/{order_id}", response_model=OrderView, responses={404: {"model": ErrorResponse}})
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)) -> OrderView:
    return await order_service.get_order(db, order_id)


@router.get("/{order_id}/receipt", response_class=HTMLResponse)
async def order_receipt(order_id: int, db: AsyncSession = Depends(get_db)) -> HTMLResponse:
    return HTMLResponse(await storefront_service.receipt(db, order_id))


@router.post(
    "",
    response_model=OrderView,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Create Order (admin form)",
)
async def create_order(payload: OrderCreate, db: AsyncSession = Depends(get_db)) -> OrderView:
    return await order_service.create_order(db, payload)


@router.put("/{order_id}", response_model=OrderView, responses={404: {"model": ErrorResponse}})
async def update_order(order_id: int, payload: OrderCreate, db: AsyncSession = Depends(get_db)) -> OrderView:
    """Replaces the order items. The order number is kept."""
    return await order_service.update_order(db, order_id, payload)


@router.patch("/{order_id}/status", response_model=OrderView, responses={409: {"model": ErrorResponse}})
async def update_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderView:
    return await order_service.update_order_status(db, order_id, payload.status)


@router.patch("/{order_id}/payment-status", response_model=OrderView, responses={409: {"model": ErrorResponse}})
async def update_payment_status(
    order_id: int,
    payload: PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderView:
    return await order_service.update_payment_status(db, order_id, payload.payment_status)


@router.delete("/{order_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def delete_order(order_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await order_service.delete_order(db, order_id)
    return MessageResponse(message=f"Order #{order_id} deleted")
