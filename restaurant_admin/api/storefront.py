"""
Storefront Endpoints

Public menu, restaurant status, customer checkout and order tracking.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    ActiveOrderView,
    CheckoutResponse,
    ErrorResponse,
    MenuCategory,
    PaymentMethodView,
    RestaurantStatus,
    StorefrontCheckout,
    TrackedOrder,
)
from restaurant_admin.services import restaurant as restaurant_service
from restaurant_admin.services import storefront as storefront_service

router = APIRouter(prefix="/api/store", tags=["Storefront"])


@router.get("/menu", response_model=list[MenuCategory])
async def menu(db: AsyncSession = Depends(get_db)) -> list[MenuCategory]:
    return await storefront_service.menu(db)


@router.get("/status", response_model=RestaurantStatus)
async def status(db: AsyncSession = Depends(get_db)) -> RestaurantStatus:
    return await storefront_service.restaurant_status(db)


@router.get("/payment-methods", response_model=list[PaymentMethodView])
async def payment_methods(db: AsyncSession = Depends(get_db)):
    return await restaurant_service.list_payment_methods(db, enabled_only=True)


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def checkout(payload: StorefrontCheckout, db: AsyncSession = Depends(get_db)) -> CheckoutResponse:
    return await storefront_service.checkout(db, payload)


@router.get("/orders/{order_id}/active", response_model=Optional[ActiveOrderView])
async def active_order(order_id: int, db: AsyncSession = Depends(get_db)) -> Optional[ActiveOrderView]:
    """null once the order is delivered or canceled."""
    return await storefront_service.active_order(db, order_id)


@router.get("/orders/{order_id}", response_model=TrackedOrder, responses={404: {"model": ErrorResponse}})
async def track_order(order_id: int, db: AsyncSession = Depends(get_db)) -> TrackedOrder:
    return await storefront_service.track_order(db, order_id)


@router.get("/orders/{order_id}/receipt", response_class=HTMLResponse)
async def receipt(order_id: int, db: AsyncSession = Depends(get_db)) -> HTMLResponse:
    return HTMLResponse(await storefront_service.receipt(db, order_id))
