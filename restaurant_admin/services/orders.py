"""
Order Service

Queries and forms behind the orders dashboard:
    - Paginated/search listing and full listing
    - Admin create/update/delete
    - Status and payment status changes (validated against the action tables)
    - Kanban board and staff notifications

Every write publishes an order change event once committed.

Usage:
    from restaurant_admin.services import orders

    page = await orders.paginate_orders(db, page=1, limit=10, search="maria")
"""

import logging
from math import ceil
from typing import Iterable, Optional

from sqlalchemy import String, cast, func, not_, or_, select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant_admin.core.config import get_settings
from restaurant_admin.core.errors import BusinessRuleError, NotFoundError
from restaurant_admin.models import (
    DeliveryRegion,
    DeliveryStatus,
    Order,
    OrderItem,
    OrderItemAddon,
    OrderStatus,
    OrderType,
    PaymentStatus,
    Product,
    ProductAddon,
)
from restaurant_admin.schemas import (
    CustomerView,
    DriverView,
    KanbanBoard,
    OrderCreate,
    OrderItemAddonView,
    OrderItemInput,
    OrderItemView,
    OrderNotification,
    OrderView,
    PaginatedOrders,
    RegionView,
)
from restaurant_admin.services import pricing
from restaurant_admin.services.events import publish_order_change
from restaurant_admin.services.order_status import (
    ensure_payment_transition,
    ensure_status_transition,
    get_payment_actions,
    get_status_actions,
    get_status_config,
)

logger = logging.getLogger(__name__)
settings = get_settings()

# Orders whose number carries this prefix were archived and are hidden everywhere
ARCHIVED_PREFIX = "DELETED_"

KANBAN_COLUMNS = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY)


# =============================================================================
# QUERY HELPERS
# =============================================================================

def not_archived():
    """Filter clause excluding archived orders."""
    return or_(
        Order.number.is_(None),
        not_(Order.number.startswith(ARCHIVED_PREFIX, autoescape=True)),
    )


def order_load_options() -> list:
    """Eager loads needed to build an OrderView without lazy IO."""
    return [
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.items).selectinload(OrderItem.addons).selectinload(OrderItemAddon.addon),
        selectinload(Order.driver),
        selectinload(Order.region),
    ]


def newest_first() -> tuple:
    return (Order.created_at.desc(), Order.id.desc())


def pagination_meta(total_count: int, page: int, limit: int) -> dict:
    total_pages = ceil(total_count / limit) if limit else 0
    return {
        "total_count": total_count,
        "total_pages": total_pages,
        "current_page": page,
        "has_next_page": page < total_pages,
        "has_previous_page": page > 1,
    }


def clamp_page_size(limit: Optional[int]) -> int:
    if not limit or limit < 1:
        return settings.default_page_size
    return min(limit, settings.max_page_size)


def to_order_view(order: Order) -> OrderView:
    """Shape an order row (with eager loaded relations) for the dashboards."""
    items = []
    for item in order.items:
        items.append(OrderItemView(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product.name if item.product else "Removed product",
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
            notes=item.notes,
            addons=[
                OrderItemAddonView(
                    id=a.id,
                    addon_id=a.addon_id,
                    name=a.addon.name if a.addon else "Removed addon",
                    quantity=a.quantity,
                    unit_price=a.unit_price,
                    total_price=a.total_price,
                )
                for a in item.addons
            ],
        ))

    return OrderView(
        id=order.id,
        number=order.number,
        order_type=order.order_type,
        customer=CustomerView(name=order.customer_name, phone=order.customer_phone),
        status=order.status,
        status_label=get_status_config(order.status).label,
        payment_method=order.payment_method,
        payment_status=order.payment_status,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee or 0.0,
        discount=order.discount or 0.0,
        total=order.total,
        notes=order.notes,
        table_number=order.table_number,
        delivery_address=order.delivery_address,
        delivery_status=order.delivery_status,
        region=RegionView.model_validate(order.region) if order.region else None,
        driver=DriverView.model_validate(order.driver) if order.driver else None,
        delivery_started_at=order.delivery_started_at,
        delivery_completed_at=order.delivery_completed_at,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=items,
        allowed_actions=get_status_actions(order.status),
        payment_actions=get_payment_actions(order.payment_status),
    )


def event_payload(order: Order) -> dict:
    """Row summary carried by change events."""
    return {
        "id": order.id,
        "number": order.number,
        "status": order.status.value,
        "payment_status": order.payment_status.value,
        "order_type": order.order_type.value,
        "customer_name": order.customer_name,
        "total": order.total,
        "delivery_status": order.delivery_status.value if order.delivery_status else None,
    }


async def load_order(db: AsyncSession, order_id: int) -> Order:
    """
    Fetch an order with its relations.

    Raises:
        NotFoundError: If the order does not exist
    """
    result = await db.execute(
        select(Order)
        .options(*order_load_options())
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


# =============================================================================
# NUMBERING AND ITEMS
# =============================================================================

async def next_order_number(db: AsyncSession) -> str:
    """
    Sequential order number: last numbered order + 1, zero padded.

    Archived orders are ignored. A non-numeric last number restarts at 1.
    """
    result = await db.execute(
        select(Order.number)
        .where(Order.number.is_not(None), not_archived())
        .order_by(*newest_first())
        .limit(1)
    )
    last = result.scalar_one_or_none()
    try:
        last_number = int(last)
    except (TypeError, ValueError):
        last_number = 0
    return str(last_number + 1).zfill(settings.order_number_width)


async def build_order_items(
    db: AsyncSession,
    lines: Iterable[OrderItemInput],
    strict_addons: bool = True,
) -> tuple[list[OrderItem], float]:
    """
    Price cart lines against the catalog.

    Unit prices include the selected addons.

    Args:
        lines: Requested products, quantities and addons
        strict_addons: When False an unknown addon is kept at price 0
            instead of being rejected

    Returns:
        (unsaved OrderItem rows, subtotal)

    Raises:
        NotFoundError: Unknown product (or addon when strict)
    """
    lines = list(lines)
    product_ids = {line.product_id for line in lines}
    addon_ids = {a.addon_id for line in lines for a in line.addons}

    products = {}
    if product_ids:
        result = await db.execute(select(Product).where(Product.id.in_(product_ids)))
        products = {p.id: p for p in result.scalars().all()}

    addons = {}
    if addon_ids:
        result = await db.execute(select(ProductAddon).where(ProductAddon.id.in_(addon_ids)))
        addons = {a.id: a for a in result.scalars().all()}

    items = []
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            raise NotFoundError("Product", line.product_id)

        addon_rows = []
        for selected in line.addons:
            addon = addons.get(selected.addon_id)
            if addon is None:
                if strict_addons:
                    raise NotFoundError("Addon", selected.addon_id)
                logger.warning(f"Addon #{selected.addon_id} not found, recording at price 0")
                price = 0.0
            else:
                price = addon.price
            addon_rows.append(OrderItemAddon(
                addon_id=addon.id if addon else None,
                quantity=selected.quantity,
                unit_price=price,
                total_price=pricing.line_total(price, selected.quantity),
            ))

        unit_price = pricing.line_unit_price(
            product.price, [(a.unit_price, a.quantity) for a in addon_rows]
        )
        items.append(OrderItem(
            product_id=product.id,
            quantity=line.quantity,
            unit_price=unit_price,
            total_price=pricing.line_total(unit_price, line.quantity),
            notes=line.notes,
            addons=addon_rows,
        ))

    subtotal = pricing.cart_subtotal(item.total_price for item in items)
    return items, subtotal


async def _region_fee(db: AsyncSession, payload: OrderCreate) -> tuple[Optional[DeliveryRegion], float]:
    if payload.order_type != OrderType.DELIVERY or payload.delivery_region_id is None:
        return None, 0.0
    region = await db.get(DeliveryRegion, payload.delivery_region_id)
    if region is None:
        raise NotFoundError("Delivery region", payload.delivery_region_id)
    return region, pricing.delivery_fee_for(payload.order_type, region.fee)


def _apply_form(order: Order, payload: OrderCreate, region: Optional[DeliveryRegion]) -> None:
    """Copy the admin form fields that depend on the order type."""
    is_delivery = payload.order_type == OrderType.DELIVERY
    order.order_type = payload.order_type
    order.customer_name = payload.customer_name
    order.customer_phone = payload.customer_phone
    order.payment_method = payload.payment_method
    order.notes = payload.notes
    order.table_number = payload.table_number if payload.order_type == OrderType.INSTORE else None
    order.delivery_address = payload.delivery_address if is_delivery else None
    order.delivery_region_id = region.id if region else None
    if is_delivery and order.delivery_status is None:
        order.delivery_status = DeliveryStatus.PENDING
    if not is_delivery:
        order.delivery_status = None


# =============================================================================
# QUERIES
# =============================================================================

async def list_orders(db: AsyncSession) -> list[OrderView]:
    """Every order with items and addons, newest first."""
    result = await db.execute(
        select(Order).options(*order_load_options()).where(not_archived()).order_by(*newest_first())
    )
    return [to_order_view(o) for o in result.scalars().all()]


async def paginate_orders(
    db: AsyncSession,
    page: int = 1,
    limit: Optional[int] = None,
    search: Optional[str] = None,
    status: Optional[str] = "all",
) -> PaginatedOrders:
    """
    One page of orders. Count and data queries share the same filters.

    Search matches id, number, customer name and phone (case-insensitive).
    """
    page = max(page, 1)
    limit = clamp_page_size(limit)

    filters = [not_archived()]
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        filters.append(or_(
            cast(Order.id, String).ilike(pattern),
            Order.number.ilike(pattern),
            Order.customer_name.ilike(pattern),
            Order.customer_phone.ilike(pattern),
        ))
    if status and status != "all":
        try:
            filters.append(Order.status == OrderStatus(status))
        except ValueError:
            raise BusinessRuleError(
                f"Invalid status '{status}'",
                detail=f"Options: {['all'] + [s.value for s in OrderStatus]}",
            )

    total_count = await db.scalar(select(func.count(Order.id)).where(*filters)) or 0

    result = await db.execute(
        select(Order)
        .options(*order_load_options())
        .where(*filters)
        .order_by(*newest_first())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    orders = [to_order_view(o) for o in result.scalars().all()]

    return PaginatedOrders(orders=orders, **pagination_meta(total_count, page, limit))


async def get_order(db: AsyncSession, order_id: int) -> OrderView:
    return to_order_view(await load_order(db, order_id))


async def kanban_board(db: AsyncSession) -> KanbanBoard:
    """Orders in the kitchen columns, oldest first so the queue reads top-down."""
    result = await db.execute(
        select(Order)
        .options(*order_load_options())
        .where(Order.status.in_(KANBAN_COLUMNS), not_archived())
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    columns = {status: [] for status in KANBAN_COLUMNS}
    for order in result.scalars().all():
        columns[order.status].append(to_order_view(order))

    return KanbanBoard(
        pending=columns[OrderStatus.PENDING],
        preparing=columns[OrderStatus.PREPARING],
        ready=columns[OrderStatus.READY],
    )


async def pending_notifications(db: AsyncSession) -> list[OrderNotification]:
    """Pending orders presented as staff notifications."""
    result = await db.execute(
        select(Order)
        .where(Order.status == OrderStatus.PENDING, not_archived())
        .order_by(*newest_first())
    )
    return [
        OrderNotification(
            id=f"order-{order.id}",
            order_id=order.id,
            title="New order received",
            message=f"Order #{order.number} - Customer: {order.customer_name}",
            created_at=order.created_at,
        )
        for order in result.scalars().all()
    ]


# =============================================================================
# WRITES
# =============================================================================

async def create_order(db: AsyncSession, payload: OrderCreate) -> OrderView:
    """Admin order form: pending order and payment, no discount."""
    region, delivery_fee = await _region_fee(db, payload)
    items, subtotal = await build_order_items(db, payload.items, strict_addons=False)
    totals = pricing.order_totals(subtotal, delivery_fee)

    order = Order(
        number=await next_order_number(db),
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        subtotal=totals["subtotal"],
        delivery_fee=totals["delivery_fee"],
        discount=0.0,
        total=totals["total"],
        items=items,
    )
    _apply_form(order, payload, region)

    db.add(order)
    await db.commit()
    logger.info(f"Order #{order.number} created for {order.customer_name} ({order.order_type.value})")

    order = await load_order(db, order.id)
    await publish_order_change("INSERT", new=event_payload(order))
    return to_order_view(order)


async def update_order(db: AsyncSession, order_id: int, payload: OrderCreate) -> OrderView:
    """Replace the form fields and every item. The order number is kept."""
    order = await load_order(db, order_id)
    region, delivery_fee = await _region_fee(db, payload)
    items, subtotal = await build_order_items(db, payload.items, strict_addons=False)
    totals = pricing.order_totals(subtotal, delivery_fee, order.discount or 0.0)

    _apply_form(order, payload, region)
    order.items = items
    order.subtotal = totals["subtotal"]
    order.delivery_fee = totals["delivery_fee"]
    order.total = totals["total"]

    await db.commit()
    logger.info(f"Order #{order.number} updated")

    order = await load_order(db, order_id)
    await publish_order_change("UPDATE", new=event_payload(order))
    return to_order_view(order)


async def update_order_status(db: AsyncSession, order_id: int, status: OrderStatus) -> OrderView:
    order = await load_order(db, order_id)
    ensure_status_transition(order.status, status)

    previous = order.status
    order.status = status
    await db.commit()
    logger.info(f"Order #{order.number} status: {previous.value} -> {status.value}")

    order = await load_order(db, order_id)
    await publish_order_change("UPDATE", new=event_payload(order), old={"id": order.id, "status": previous.value})
    return to_order_view(order)


async def update_payment_status(db: AsyncSession, order_id: int, payment_status: PaymentStatus) -> OrderView:
    order = await load_order(db, order_id)
    ensure_payment_transition(order.payment_status, payment_status)

    previous = order.payment_status
    order.payment_status = payment_status
    await db.commit()
    logger.info(f"Order #{order.number} payment: {previous.value} -> {payment_status.value}")

    order = await load_order(db, order_id)
    await publish_order_change(
        "UPDATE", new=event_payload(order), old={"id": order.id, "payment_status": previous.value}
    )
    return to_order_view(order)


async def delete_order(db: AsyncSession, order_id: int) -> None:
    """Remove the item addons, then the items, then the order."""
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    number = order.number

    item_ids = select(OrderItem.id).where(OrderItem.order_id == order_id)
    await db.execute(delete(OrderItemAddon).where(OrderItemAddon.order_item_id.in_(item_ids)))
    await db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
    await db.execute(delete(Order).where(Order.id == order_id))
    await db.commit()
    logger.info(f"Order #{number} deleted")

    await publish_order_change("DELETE", old={"id": order_id, "number": number})
