"""
Cart and order arithmetic shared by the admin form, the POS and the storefront.

All amounts are rounded to cents when they leave this module.
"""

from typing import Iterable, Optional

from restaurant_admin.core.config import get_settings
from restaurant_admin.models import OrderType


def line_unit_price(base_price: float, addons: Iterable[tuple[float, Optional[int]]] = ()) -> float:
    """
    Unit price of a cart line with its addons.

    Args:
        base_price: Product price
        addons: (price, quantity) pairs, quantity defaults to 1
    """
    extras = sum(price * (quantity or 1) for price, quantity in addons)
    return round(base_price + extras, 2)


def line_total(unit_price: float, quantity: int) -> float:
    return round(unit_price * quantity, 2)


def cart_subtotal(line_totals: Iterable[float]) -> float:
    return round(sum(line_totals), 2)


def pos_totals(subtotal: float, tax_percentage: float = 0.0, discount: float = 0.0) -> dict[str, float]:
    """Counter checkout totals. The total never goes below zero."""
    tax = round(subtotal * tax_percentage / 100, 2)
    total = max(0.0, round(subtotal + tax - discount, 2))
    return {
        "subtotal": round(subtotal, 2),
        "tax": tax,
        "discount": round(discount, 2),
        "total": total,
    }


def order_totals(subtotal: float, delivery_fee: float = 0.0, discount: float = 0.0) -> dict[str, float]:
    total = max(0.0, round(subtotal + delivery_fee - discount, 2))
    return {
        "subtotal": round(subtotal, 2),
        "delivery_fee": round(delivery_fee, 2),
        "discount": round(discount, 2),
        "total": total,
    }


def delivery_fee_for(order_type: OrderType, fee: Optional[float] = None) -> float:
    """
    Delivery fee charged for an order.

    Only delivery orders pay a fee. When no region or restaurant fee is
    known the configured default applies.
    """
    if OrderType(order_type) != OrderType.DELIVERY:
        return 0.0
    if fee is None:
        return get_settings().default_delivery_fee
    return round(fee, 2)


def calculate_trend(current: float, previous: float) -> float:
    """Percentage change from `previous` to `current`, 0 when there is no baseline."""
    if not previous:
        return 0.0
    return round((current - previous) / previous * 100, 1)
