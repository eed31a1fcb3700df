"""
Order Status Tables

Static lookups used by every order view:
    - status -> label / badge variant / icon
    - payment status -> label / badge variant
    - status -> allowed next statuses
    - payment status -> allowed next payment statuses

Usage:
    from restaurant_admin.services.order_status import ensure_status_transition

    ensure_status_transition(order.status, OrderStatus.PREPARING)
"""

from dataclasses import dataclass
from typing import Union

from restaurant_admin.core.errors import InvalidTransitionError
from restaurant_admin.models import OrderStatus, PaymentStatus


@dataclass(frozen=True)
class StatusConfig:
    """Display configuration of a status badge."""
    label: str
    variant: str
    icon: str = ""


STATUS_CONFIG: dict[OrderStatus, StatusConfig] = {
    OrderStatus.PENDING: StatusConfig("Pending", "outline", "clock"),
    OrderStatus.CONFIRMED: StatusConfig("Confirmed", "secondary", "check"),
    OrderStatus.PREPARING: StatusConfig("Preparing", "default", "clock"),
    OrderStatus.READY: StatusConfig("Ready", "default", "check"),
    OrderStatus.OUT_FOR_DELIVERY: StatusConfig("Out for delivery", "default", "truck"),
    OrderStatus.DELIVERED: StatusConfig("Delivered", "success", "check"),
    OrderStatus.CANCELED: StatusConfig("Canceled", "destructive", "ban"),
}

PAYMENT_STATUS_CONFIG: dict[PaymentStatus, StatusConfig] = {
    PaymentStatus.PENDING: StatusConfig("Pending", "outline"),
    PaymentStatus.PAID: StatusConfig("Paid", "success"),
    PaymentStatus.FAILED: StatusConfig("Failed", "destructive"),
    PaymentStatus.REFUNDED: StatusConfig("Refunded", "secondary"),
}

STATUS_ACTIONS: dict[OrderStatus, list[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.PREPARING, OrderStatus.CANCELED],
    OrderStatus.CONFIRMED: [OrderStatus.PREPARING, OrderStatus.CANCELED],
    OrderStatus.PREPARING: [OrderStatus.READY],
    OrderStatus.READY: [OrderStatus.OUT_FOR_DELIVERY],
    OrderStatus.OUT_FOR_DELIVERY: [OrderStatus.DELIVERED],
    OrderStatus.DELIVERED: [],
    OrderStatus.CANCELED: [],
}

PAYMENT_ACTIONS: dict[PaymentStatus, list[PaymentStatus]] = {
    PaymentStatus.PENDING: [PaymentStatus.PAID, PaymentStatus.FAILED],
    PaymentStatus.PAID: [PaymentStatus.REFUNDED],
    PaymentStatus.FAILED: [PaymentStatus.PENDING],
    PaymentStatus.REFUNDED: [],
}

# Customer-facing tracker ladder. Confirmed is shown as pending.
TRACKING_STEPS: list[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]


def get_status_config(status: Union[OrderStatus, str]) -> StatusConfig:
    """Label, variant and icon for an order status."""
    return STATUS_CONFIG[OrderStatus(status)]


def get_payment_status_config(status: Union[PaymentStatus, str]) -> StatusConfig:
    """Label and variant for a payment status."""
    return PAYMENT_STATUS_CONFIG[PaymentStatus(status)]


def get_status_actions(status: Union[OrderStatus, str]) -> list[OrderStatus]:
    """Statuses an order may move to from `status`."""
    return list(STATUS_ACTIONS[OrderStatus(status)])


def get_payment_actions(status: Union[PaymentStatus, str]) -> list[PaymentStatus]:
    """Payment statuses reachable from `status`."""
    return list(PAYMENT_ACTIONS[PaymentStatus(status)])


def ensure_status_transition(
    current: Union[OrderStatus, str],
    target: Union[OrderStatus, str],
) -> None:
    """
    Validate an order status change.

    Setting the current status again is accepted as a no-op.

    Raises:
        InvalidTransitionError: If `target` is not an allowed action
    """
    current, target = OrderStatus(current), OrderStatus(target)
    if current == target:
        return
    allowed = get_status_actions(current)
    if target not in allowed:
        raise InvalidTransitionError(
            "status", current.value, target.value, [s.value for s in allowed]
        )


def ensure_payment_transition(
    current: Union[PaymentStatus, str],
    target: Union[PaymentStatus, str],
) -> None:
    """
    Validate a payment status change.

    Raises:
        InvalidTransitionError: If `target` is not an allowed action
    """
    current, target = PaymentStatus(current), PaymentStatus(target)
    if current == target:
        return
    allowed = get_payment_actions(current)
    if target not in allowed:
        raise InvalidTransitionError(
            "payment status", current.value, target.value, [s.value for s in allowed]
        )


def is_active_status(status: Union[OrderStatus, str]) -> bool:
    """An order is active until it is delivered or canceled."""
    return OrderStatus(status) not in (OrderStatus.DELIVERED, OrderStatus.CANCELED)


def tracking_progress(status: Union[OrderStatus, str]) -> int:
    """Percentage of the tracker ladder reached by `status`."""
    status = OrderStatus(status)
    if status == OrderStatus.CANCELED:
        return 0
    if status == OrderStatus.CONFIRMED:
        status = OrderStatus.PENDING
    index = TRACKING_STEPS.index(status)
    return round((index + 1) / len(TRACKING_STEPS) * 100)
