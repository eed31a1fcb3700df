"""
Delivery Tracking Service

Active and completed delivery listings plus the actions of the deliveries
page: choose a region, assign a driver, confirm the delivery. Also the
driver and region settings.

Lifecycle of a delivery order:
    pending  --assign driver-->  in_progress  --confirm-->  completed
"""

import logging
from typing import Literal, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.core.errors import BusinessRuleError, NotFoundError
from restaurant_admin.models import (
    DeliveryRegion,
    DeliveryStatus,
    Driver,
    DriverStatus,
    Order,
    OrderStatus,
    OrderType,
    utcnow,
)
from restaurant_admin.schemas import (
    DriverCreate,
    DriverUpdate,
    OrderView,
    PaginatedDeliveries,
    RegionCreate,
    RegionUpdate,
)
from restaurant_admin.services.events import publish_order_change
from restaurant_admin.services.orders import (
    clamp_page_size,
    event_payload,
    load_order,
    not_archived,
    order_load_options,
    pagination_meta,
    to_order_view,
)

logger = logging.getLogger(__name__)

ACTIVE_DELIVERY_STATUSES = (DeliveryStatus.PENDING, DeliveryStatus.IN_PROGRESS)


async def paginate_deliveries(
    db: AsyncSession,
    page: int = 1,
    limit: Optional[int] = None,
    scope: Literal["active", "completed"] = "active",
    search: Optional[str] = None,
) -> PaginatedDeliveries:
    """
    One page of deliveries.

    Active deliveries are sorted by creation, completed ones by completion,
    newest first in both cases.
    """
    page = max(page, 1)
    limit = clamp_page_size(limit)

    if scope == "completed":
        filters = [Order.delivery_status == DeliveryStatus.COMPLETED]
        ordering = (Order.delivery_completed_at.desc(), Order.id.desc())
    else:
        filters = [Order.delivery_status.in_(ACTIVE_DELIVERY_STATUSES)]
        ordering = (Order.created_at.desc(), Order.id.desc())
    filters.append(not_archived())

    if search and search.strip():
        pattern = f"%{search.strip()}%"
        filters.append(or_(
            Order.customer_name.ilike(pattern),
            Order.number.ilike(pattern),
            Order.delivery_address.ilike(pattern),
        ))

    total_count = await db.scalar(select(func.count(Order.id)).where(*filters)) or 0
    result = await db.execute(
        select(Order)
        .options(*order_load_options())
        .where(*filters)
        .order_by(*ordering)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    deliveries = [to_order_view(o) for o in result.scalars().all()]

    return PaginatedDeliveries(deliveries=deliveries, **pagination_meta(total_count, page, limit))


async def _delivery_order(db: AsyncSession, order_id: int) -> Order:
    order = await load_order(db, order_id)
    if order.order_type != OrderType.DELIVERY:
        raise BusinessRuleError(f"Order #{order.number} is not a delivery order")
    return order


async def _reload_and_publish(db: AsyncSession, order_id: int) -> OrderView:
    order = await load_order(db, order_id)
    await publish_order_change("UPDATE", new=event_payload(order))
    return to_order_view(order)


async def select_region(db: AsyncSession, order_id: int, region_id: int) -> OrderView:
    """
    Set the region; its fee becomes the delivery fee and the total follows.

    Only while the delivery is pending: once a driver is out the fee is fixed.
    """
    order = await _delivery_order(db, order_id)
    if order.delivery_status not in (None, DeliveryStatus.PENDING):
        raise BusinessRuleError(
            f"Order #{order.number} delivery is already {order.delivery_status.value}",
            detail="The region can only change before a driver is assigned",
        )
    region = await db.get(DeliveryRegion, region_id)
    if region is None:
        raise NotFoundError("Delivery region", region_id)

    order.delivery_region_id = region.id
    order.delivery_fee = region.fee
    order.total = max(0.0, round(order.subtotal + region.fee - (order.discount or 0.0), 2))
    order.delivery_status = DeliveryStatus.PENDING
    await db.commit()
    logger.info(f"Order #{order.number} region set to {region.name} (fee {region.fee:.2f})")

    return await _reload_and_publish(db, order_id)


async def assign_driver(db: AsyncSession, order_id: int, driver_id: int) -> OrderView:
    """Start the delivery with a driver, who becomes unavailable."""
    order = await _delivery_order(db, order_id)
    if order.delivery_region_id is None:
        raise BusinessRuleError(
            f"Order #{order.number} has no delivery region",
            detail="Select a region first",
        )
    if order.delivery_status not in (None, DeliveryStatus.PENDING):
        raise BusinessRuleError(f"Order #{order.number} delivery is already {order.delivery_status.value}")

    driver = await db.get(Driver, driver_id)
    if driver is None:
        raise NotFoundError("Driver", driver_id)
    if driver.status == DriverStatus.ON_DELIVERY:
        raise BusinessRuleError(f"Driver {driver.name} is already on a delivery")

    order.delivery_driver_id = driver.id
    order.delivery_status = DeliveryStatus.IN_PROGRESS
    order.delivery_started_at = utcnow()
    driver.status = DriverStatus.ON_DELIVERY
    await db.commit()
    logger.info(f"Order #{order.number} assigned to driver {driver.name}")

    return await _reload_and_publish(db, order_id)


async def confirm_delivery(db: AsyncSession, order_id: int) -> OrderView:
    """Complete the delivery: order delivered, driver available again."""
    order = await _delivery_order(db, order_id)
    if order.delivery_status != DeliveryStatus.IN_PROGRESS:
        raise BusinessRuleError(
            f"Order #{order.number} has no delivery in progress",
            detail="Assign a driver first",
        )

    order.delivery_status = DeliveryStatus.COMPLETED
    order.delivery_completed_at = utcnow()
    order.status = OrderStatus.DELIVERED
    if order.delivery_driver_id is not None:
        driver = await db.get(Driver, order.delivery_driver_id)
        if driver is not None:
            driver.status = DriverStatus.ACTIVE
    await db.commit()
    logger.info(f"Order #{order.number} delivered")

    return await _reload_and_publish(db, order_id)


# =============================================================================
# DRIVERS
# =============================================================================

async def list_drivers(db: AsyncSession) -> list[Driver]:
    result = await db.execute(select(Driver).order_by(Driver.name))
    return list(result.scalars().all())


async def available_drivers(db: AsyncSession) -> list[Driver]:
    """Drivers not currently on a delivery, by name."""
    result = await db.execute(
        select(Driver).where(Driver.status != DriverStatus.ON_DELIVERY).order_by(Driver.name)
    )
    return list(result.scalars().all())


async def _get_driver(db: AsyncSession, driver_id: int) -> Driver:
    driver = await db.get(Driver, driver_id)
    if driver is None:
        raise NotFoundError("Driver", driver_id)
    return driver


async def create_driver(db: AsyncSession, payload: DriverCreate) -> Driver:
    driver = Driver(**payload.model_dump())
    db.add(driver)
    await db.commit()
    await db.refresh(driver)
    logger.info(f"Driver #{driver.id} created: {driver.name}")
    return driver


async def update_driver(db: AsyncSession, driver_id: int, payload: DriverUpdate) -> Driver:
    driver = await _get_driver(db, driver_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(driver, key, value)
    await db.commit()
    await db.refresh(driver)
    return driver


async def delete_driver(db: AsyncSession, driver_id: int) -> None:
    driver = await _get_driver(db, driver_id)
    if driver.status == DriverStatus.ON_DELIVERY:
        raise BusinessRuleError(f"Driver {driver.name} is on a delivery")
    await db.delete(driver)
    await db.commit()
    logger.info(f"Driver #{driver_id} deleted")


# =============================================================================
# REGIONS
# =============================================================================

async def list_regions(db: AsyncSession) -> list[DeliveryRegion]:
    result = await db.execute(select(DeliveryRegion).order_by(DeliveryRegion.name))
    return list(result.scalars().all())


async def _get_region(db: AsyncSession, region_id: int) -> DeliveryRegion:
    region = await db.get(DeliveryRegion, region_id)
    if region is None:
        raise NotFoundError("Delivery region", region_id)
    return region


async def create_region(db: AsyncSession, payload: RegionCreate) -> DeliveryRegion:
    region = DeliveryRegion(**payload.model_dump())
    db.add(region)
    await db.commit()
    await db.refresh(region)
    logger.info(f"Region #{region.id} created: {region.name} (fee {region.fee:.2f})")
    return region


async def update_region(db: AsyncSession, region_id: int, payload: RegionUpdate) -> DeliveryRegion:
    region = await _get_region(db, region_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(region, key, value)
    await db.commit()
    await db.refresh(region)
    return region


async def delete_region(db: AsyncSession, region_id: int) -> None:
    region = await _get_region(db, region_id)
    in_use = await db.scalar(select(func.count(Order.id)).where(Order.delivery_region_id == region_id))
    if in_use:
        raise BusinessRuleError(f"Region {region.name} is used by {in_use} order(s)")
    await db.delete(region)
    await db.commit()
    logger.info(f"Region #{region_id} deleted")
