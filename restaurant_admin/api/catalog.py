"""
Catalog Endpoints

Categories, products and addons.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    AddonCreate,
    AddonUpdate,
    AddonView,
    CategoryCreate,
    CategoryMove,
    CategoryUpdate,
    CategoryView,
    ErrorResponse,
    MessageResponse,
    ProductCreate,
    ProductUpdate,
    ProductView,
)
from restaurant_admin.services import catalog as catalog_service

router = APIRouter(prefix="/api", tags=["Catalog"])


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/categories", response_model=list[CategoryView])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await catalog_service.list_categories(db)


@router.post("/categories", response_model=CategoryView, status_code=201)
async def create_category(payload: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await catalog_service.create_category(db, payload)


@router.put("/categories/{category_id}", response_model=CategoryView, responses={404: {"model": ErrorResponse}})
async def update_category(category_id: int, payload: CategoryUpdate, db: AsyncSession = Depends(get_db)):
    return await catalog_service.update_category(db, category_id, payload)


@router.post("/categories/{category_id}/move", response_model=list[CategoryView])
async def move_category(category_id: int, payload: CategoryMove, db: AsyncSession = Depends(get_db)):
    """Returns the categories in their new order."""
    return await catalog_service.move_category(db, category_id, payload.direction)


@router.delete(
    "/categories/{category_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await catalog_service.delete_category(db, category_id)
    return MessageResponse(message=f"Category #{category_id} deleted")


# =============================================================================
# PRODUCTS
# =============================================================================

@router.get("/products", response_model=list[ProductView])
async def list_products(
    category_id: Optional[int] = Query(None),
    available: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> list[ProductView]:
    return await catalog_service.list_products(db, category_id=category_id, available=available)


@router.get("/products/{product_id}", response_model=ProductView, responses={404: {"model": ErrorResponse}})
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)) -> ProductView:
    return await catalog_service.get_product(db, product_id)


@router.get("/products/{product_id}/addons", response_model=list[AddonView])
async def product_addons(product_id: int, db: AsyncSession = Depends(get_db)):
    """Available addons linked to the product plus the global ones."""
    return await catalog_service.addons_for_product(db, product_id)


@router.post("/products", response_model=ProductView, status_code=201, responses={404: {"model": ErrorResponse}})
async def create_product(payload: ProductCreate, db: AsyncSession = Depends(get_db)) -> ProductView:
    return await catalog_service.create_product(db, payload)


@router.put("/products/{product_id}", response_model=ProductView, responses={404: {"model": ErrorResponse}})
async def update_product(product_id: int, payload: ProductUpdate, db: AsyncSession = Depends(get_db)) -> ProductView:
    return await catalog_service.update_product(db, product_id, payload)


@router.post("/products/{product_id}/toggle", response_model=ProductView)
async def toggle_product(product_id: int, db: AsyncSession = Depends(get_db)) -> ProductView:
    return await catalog_service.toggle_availability(db, product_id)


@router.delete("/products/{product_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await catalog_service.delete_product(db, product_id)
    return MessageResponse(message=f"Product #{product_id} deleted")


# =============================================================================
# ADDONS
# =============================================================================

@router.get("/addons", response_model=list[AddonView])
async def list_addons(db: AsyncSession = Depends(get_db)):
    return await catalog_service.list_addons(db)


@router.get("/addons/{addon_id}", response_model=AddonView, responses={404: {"model": ErrorResponse}})
async def get_addon(addon_id: int, db: AsyncSession = Depends(get_db)):
    return await catalog_service.get_addon(db, addon_id)


@router.post("/addons", response_model=AddonView, status_code=201)
async def create_addon(payload: AddonCreate, db: AsyncSession = Depends(get_db)):
    return await catalog_service.create_addon(db, payload)


@router.put("/addons/{addon_id}", response_model=AddonView, responses={404: {"model": ErrorResponse}})
async def update_addon(addon_id: int, payload: AddonUpdate, db: AsyncSession = Depends(get_db)):
    return await catalog_service.update_addon(db, addon_id, payload)


@router.delete(
    "/addons/{addon_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_addon(addon_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await catalog_service.delete_addon(db, addon_id)
    return MessageResponse(message=f"Addon #{addon_id} deleted")
