"""
Point-of-Sale Endpoints
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    CategoryView,
    ErrorResponse,
    PaymentMethodView,
    PosCheckout,
    PosCheckoutResponse,
    ProductView,
)
from restaurant_admin.services import catalog as catalog_service
from restaurant_admin.services import pos as pos_service
from restaurant_admin.services import restaurant as restaurant_service

router = APIRouter(prefix="/api/pos", tags=["POS"])


@router.get("/categories", response_model=list[CategoryView])
async def pos_categories(db: AsyncSession = Depends(get_db)):
    return await catalog_service.list_categories(db)


@router.get("/products", response_model=list[ProductView])
async def pos_products(db: AsyncSession = Depends(get_db)) -> list[ProductView]:
    """Products available for sale."""
    return await catalog_service.list_products(db, available=True)


@router.get("/payment-methods", response_model=list[PaymentMethodView])
async def pos_payment_methods(db: AsyncSession = Depends(get_db)):
    return await restaurant_service.list_payment_methods(db, enabled_only=True)


@router.post(
    "/checkout",
    response_model=PosCheckoutResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def pos_checkout(payload: PosCheckout, db: AsyncSession = Depends(get_db)) -> PosCheckoutResponse:
    """Counter sale: paid immediately, recorded as an in-store order."""
    return await pos_service.checkout(db, payload)
