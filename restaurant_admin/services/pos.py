"""
Point-of-sale checkout.

Counter sales are recorded as paid instore orders for a walk-in customer.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_admin.core.config import get_settings
from restaurant_admin.core.errors import BusinessRuleError
from restaurant_admin.models import (
    Order,
    OrderStatus,
    OrderType,
    PaymentMethod,
    PaymentStatus,
)
from restaurant_admin.schemas import PosCheckout, PosCheckoutResponse
from restaurant_admin.services import pricing
from restaurant_admin.services.events import publish_order_change
from restaurant_admin.services.orders import (
    build_order_items,
    event_payload,
    next_order_number,
)

logger = logging.getLogger(__name__)
settings = get_settings()


async def checkout(db: AsyncSession, payload: PosCheckout) -> PosCheckoutResponse:
    """
    Close a counter sale.

    Raises:
        BusinessRuleError: Empty cart, or missing/disabled payment method
        NotFoundError: Unknown product or addon in the cart
    """
    if not payload.items:
        raise BusinessRuleError("Cart is empty", detail="Add at least one product")

    if payload.payment_method_id is None:
        raise BusinessRuleError("Select a payment method")
    method = await db.get(PaymentMethod, payload.payment_method_id)
    if method is None or not method.enabled:
        raise BusinessRuleError(
            "Payment method unavailable",
            detail=f"Payment method #{payload.payment_method_id} is not enabled",
        )

    items, subtotal = await build_order_items(db, payload.items)
    totals = pricing.pos_totals(subtotal, payload.tax_percentage, payload.discount)

    order = Order(
        number=await next_order_number(db),
        order_type=OrderType.INSTORE,
        customer_name=settings.walk_in_customer_name,
        customer_phone="-",
        status=OrderStatus.PENDING,
        payment_method=str(method.id),
        payment_status=PaymentStatus.PAID,
        subtotal=totals["subtotal"],
        delivery_fee=0.0,
        discount=totals["discount"],
        total=totals["total"],
        notes=payload.notes,
        items=items,
    )
    db.add(order)
    await db.commit()

    logger.info(
        f"POS sale #{order.number}: {len(items)} line(s), total {totals['total']:.2f} "
        f"via {method.name}"
    )
    await publish_order_change("INSERT", new=event_payload(order))

    return PosCheckoutResponse(
        order_id=order.id,
        number=order.number,
        subtotal=totals["subtotal"],
        tax=totals["tax"],
        discount=totals["discount"],
        total=totals["total"],
    )
