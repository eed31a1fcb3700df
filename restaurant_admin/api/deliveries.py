"""
Delivery Endpoints

Deliveries page actions plus the driver and region settings.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.database import get_db
from restaurant_admin.schemas import (
    DriverAssign,
    DriverCreate,
    DriverUpdate,
    DriverView,
    ErrorResponse,
    MessageResponse,
    OrderView,
    PaginatedDeliveries,
    RegionCreate,
    RegionSelect,
    RegionUpdate,
    RegionView,
)
from restaurant_admin.services import deliveries as delivery_service

router = APIRouter(prefix="/api", tags=["Deliveries"])


# =============================================================================
# DELIVERIES
# =============================================================================

@router.get("/deliveries", response_model=PaginatedDeliveries)
async def list_deliveries(
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    scope: Literal["active", "completed"] = Query("active"),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> PaginatedDeliveries:
    return await delivery_service.paginate_deliveries(db, page=page, limit=limit, scope=scope, search=search)


@router.post("/deliveries/{order_id}/region", response_model=OrderView, responses={404: {"model": ErrorResponse}})
async def select_region(order_id: int, payload: RegionSelect, db: AsyncSession = Depends(get_db)) -> OrderView:
    return await delivery_service.select_region(db, order_id, payload.region_id)


@router.post("/deliveries/{order_id}/driver", response_model=OrderView, responses={400: {"model": ErrorResponse}})
async def assign_driver(order_id: int, payload: DriverAssign, db: AsyncSession = Depends(get_db)) -> OrderView:
    return await delivery_service.assign_driver(db, order_id, payload.driver_id)


@router.post("/deliveries/{order_id}/confirm", response_model=OrderView, responses={400: {"model": ErrorResponse}})
async def confirm_delivery(order_id: int, db: AsyncSession = Depends(get_db)) -> OrderView:
    return await delivery_service.confirm_delivery(db, order_id)


# =============================================================================
# DRIVERS
# =============================================================================

@router.get("/drivers", response_model=list[DriverView])
async def list_drivers(db: AsyncSession = Depends(get_db)):
    return await delivery_service.list_drivers(db)


@router.get("/drivers/available", response_model=list[DriverView])
async def available_drivers(db: AsyncSession = Depends(get_db)):
    return await delivery_service.available_drivers(db)


@router.post("/drivers", response_model=DriverView, status_code=201)
async def create_driver(payload: DriverCreate, db: AsyncSession = Depends(get_db)):
    return await delivery_service.create_driver(db, payload)


@router.put("/drivers/{driver_id}", response_model=DriverView, responses={404: {"model": ErrorResponse}})
async def update_driver(driver_id: int, payload: DriverUpdate, db: AsyncSession = Depends(get_db)):
    return await delivery_service.update_driver(db, driver_id, payload)


@router.delete("/drivers/{driver_id}", response_model=MessageResponse)
async def delete_driver(driver_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await delivery_service.delete_driver(db, driver_id)
    return MessageResponse(message=f"Driver #{driver_id} deleted")


# =============================================================================
# REGIONS
# =============================================================================

@router.get("/regions", response_model=list[RegionView])
async def list_regions(db: AsyncSession = Depends(get_db)):
    return await delivery_service.list_regions(db)


@router.post("/regions", response_model=RegionView, status_code=201)
async def create_region(payload: RegionCreate, db: AsyncSession = Depends(get_db)):
    return await delivery_service.create_region(db, payload)


@router.put("/regions/{region_id}", response_model=RegionView, responses={404: {"model": ErrorResponse}})
async def update_region(region_id: int, payload: RegionUpdate, db: AsyncSession = Depends(get_db)):
    return await delivery_service.update_region(db, region_id, payload)


@router.delete("/regions/{region_id}", response_model=MessageResponse)
async def delete_region(region_id: int, db: AsyncSession = Depends(get_db)) -> MessageResponse:
    await delivery_service.delete_region(db, region_id)
    return MessageResponse(message=f"Region #{region_id} deleted")
