"""
Storefront Service

Public side of the restaurant:
    - Menu with product addons
    - Restaurant status (open now, today's hours, delivery window)
    - Customer checkout
    - Active order banner, order tracking and printable receipt

Usage:
    from restaurant_admin.services import storefront

    response = await storefront.checkout(db, payload)
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from jinja2 import Environment, PackageLoader, select_autoescape
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.core.config import get_settings
from restaurant_admin.core.errors import BusinessRuleError, NotFoundError
from restaurant_admin.models import (
    DeliveryStatus,
    Order,
    OrderStatus,
    OrderType,
    PaymentStatus,
    Product,
)
from restaurant_admin.schemas import (
    ActiveOrderView,
    AddonView,
    CheckoutResponse,
    MenuCategory,
    MenuProduct,
    RestaurantStatus,
    RestaurantView,
    StorefrontCheckout,
    TrackedOrder,
)
from restaurant_admin.services import catalog, pricing, restaurant as restaurant_service
from restaurant_admin.services.events import publish_order_change
from restaurant_admin.services.formatting import (
    compose_address,
    format_currency,
    format_phone,
    normalize_phone,
)
from restaurant_admin.services.order_status import (
    get_status_config,
    is_active_status,
    tracking_progress,
)
from restaurant_admin.services.orders import (
    build_order_items,
    event_payload,
    load_order,
    next_order_number,
    to_order_view,
)

logger = logging.getLogger(__name__)
settings = get_settings()

templates = Environment(
    loader=PackageLoader("restaurant_admin", "templates"),
    autoescape=select_autoescape(["html"]),
)
templates.filters["currency"] = format_currency
templates.filters["phone"] = format_phone


# =============================================================================
# MENU / STATUS
# =============================================================================

async def menu(db: AsyncSession) -> list[MenuCategory]:
    """Categories in display order with their available products and addons."""
    categories = await catalog.list_categories(db)
    result = await db.execute(
        select(Product).where(Product.available.is_(True)).order_by(Product.name)
    )
    products = result.scalars().all()

    sections = []
    for category in categories:
        entries = []
        for product in (p for p in products if p.category_id == category.id):
            addons = await catalog.addons_for_product(db, product.id)
            entries.append(MenuProduct(
                id=product.id,
                name=product.name,
                description=product.description,
                price=product.price,
                image_url=product.image_url,
                featured=product.featured,
                addons=[AddonView.model_validate(a) for a in addons],
            ))
        sections.append(MenuCategory(
            id=category.id,
            name=category.name,
            description=category.description,
            image_url=category.image_url,
            products=entries,
        ))
    return sections


async def restaurant_status(db: AsyncSession, now: Optional[datetime] = None) -> RestaurantStatus:
    now = now or restaurant_service.local_now()
    restaurant = await restaurant_service.get_restaurant(db)
    hours = await restaurant_service.list_business_hours(db)
    window = await restaurant_service.current_delivery_time(db, now)

    return RestaurantStatus(
        restaurant=RestaurantView.model_validate(restaurant) if restaurant else None,
        is_open=restaurant_service.is_open_at(hours, now),
        today_hours=restaurant_service.today_hours(hours, now),
        business_days=restaurant_service.business_days_summary(hours),
        delivery_time=window,
    )


# =============================================================================
# CHECKOUT
# =============================================================================

async def checkout(
    db: AsyncSession,
    payload: StorefrontCheckout,
    now: Optional[datetime] = None,
) -> CheckoutResponse:
    """
    Place a customer order.

    Raises:
        BusinessRuleError: Empty cart, restaurant closed, or below the minimum order value
        NotFoundError: Unknown product or addon in the cart
    """
    now = now or restaurant_service.local_now()

    if not payload.items:
        raise BusinessRuleError("Cart is empty", detail="Add at least one product")

    if not await restaurant_service.is_open_now(db, now):
        raise BusinessRuleError("Restaurant is closed", detail="Orders are accepted during business hours only")

    restaurant = await restaurant_service.get_restaurant(db)
    items, subtotal = await build_order_items(db, payload.items)

    if restaurant and restaurant.min_order_value and subtotal < restaurant.min_order_value:
        raise BusinessRuleError(
            "Order below minimum value",
            detail=f"Minimum order is {format_currency(restaurant.min_order_value)}",
        )

    delivery_fee = pricing.delivery_fee_for(
        payload.order_type, restaurant.delivery_fee if restaurant else None
    )
    totals = pricing.order_totals(subtotal, delivery_fee)
    is_delivery = payload.order_type == OrderType.DELIVERY

    order = Order(
        number=await next_order_number(db),
        order_type=payload.order_type,
        customer_name=payload.customer_name.strip(),
        customer_phone=normalize_phone(payload.customer_phone),
        payment_method=payload.payment_method,
        payment_status=PaymentStatus.PENDING,
        status=OrderStatus.PENDING,
        notes=payload.notes or None,
        subtotal=totals["subtotal"],
        delivery_fee=totals["delivery_fee"],
        discount=0.0,
        total=totals["total"],
        table_number=payload.table_number if payload.order_type == OrderType.INSTORE else None,
        delivery_address=compose_address(**payload.address.model_dump()) if is_delivery else None,
        delivery_status=DeliveryStatus.PENDING if is_delivery else None,
        items=items,
    )
    db.add(order)
    await db.commit()

    logger.info(
        f"Storefront order #{order.number} from {order.customer_name} "
        f"({order.order_type.value}, total {order.total:.2f})"
    )
    await publish_order_change("INSERT", new=event_payload(order))

    return CheckoutResponse(
        message="Order placed successfully!",
        order_id=order.id,
        number=order.number,
        total=order.total,
        estimated_time=now + timedelta(minutes=settings.estimated_order_minutes),
    )


# =============================================================================
# TRACKING
# =============================================================================

async def active_order(db: AsyncSession, order_id: int) -> Optional[ActiveOrderView]:
    """The order when it is still in progress, None once delivered or canceled."""
    order = await db.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    if not is_active_status(order.status):
        return None
    return ActiveOrderView(
        id=order.id,
        number=order.number,
        status=order.status,
        status_label=get_status_config(order.status).label,
    )


async def track_order(db: AsyncSession, order_id: int) -> TrackedOrder:
    order = await load_order(db, order_id)
    return TrackedOrder(
        order=to_order_view(order),
        payment_method_name=await restaurant_service.payment_method_name(db, order.payment_method),
        progress=tracking_progress(order.status),
        is_active=is_active_status(order.status),
    )


def order_type_label(order: Order) -> str:
    if order.delivery_address:
        return "Delivery"
    if order.table_number:
        return f"Table {order.table_number}"
    return "Takeaway"


async def receipt(db: AsyncSession, order_id: int) -> str:
    """Printable HTML receipt for an order."""
    order = await load_order(db, order_id)
    restaurant = await restaurant_service.get_restaurant(db)

    template = templates.get_template("receipt.html")
    return template.render(
        restaurant=restaurant,
        restaurant_name=restaurant.name if restaurant else settings.restaurant_name,
        order=to_order_view(order),
        order_type=order_type_label(order),
        payment_method=await restaurant_service.payment_method_name(db, order.payment_method),
    )
