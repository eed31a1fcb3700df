"""
Tests for the order status tables and transition checks.
"""

import pytest

from restaurant_admin.core.errors import InvalidTransitionError
from restaurant_admin.models import OrderStatus, PaymentStatus
from restaurant_admin.services.order_status import (
    ensure_payment_transition,
    ensure_status_transition,
    get_payment_actions,
    get_payment_status_config,
    get_status_actions,
    get_status_config,
    is_active_status,
    tracking_progress,
)


class TestStatusTables:
    """Every status has a badge and an action list."""

    def test_every_status_has_config(self):
        for status in OrderStatus:
            config = get_status_config(status)
            assert config.label
            assert config.variant

    def test_every_payment_status_has_config(self):
        for status in PaymentStatus:
            assert get_payment_status_config(status).label

    def test_lookup_accepts_plain_strings(self):
        assert get_status_config("out_for_delivery").label == "Out for delivery"

    def test_pending_actions(self):
        assert get_status_actions(OrderStatus.PENDING) == [OrderStatus.PREPARING, OrderStatus.CANCELED]

    def test_final_statuses_have_no_actions(self):
        assert get_status_actions(OrderStatus.DELIVERED) == []
        assert get_status_actions(OrderStatus.CANCELED) == []
        assert get_payment_actions(PaymentStatus.REFUNDED) == []

    def test_actions_are_copies(self):
        """Callers cannot mutate the shared table."""
        actions = get_status_actions(OrderStatus.PENDING)
        actions.clear()
        assert get_status_actions(OrderStatus.PENDING)


class TestTransitions:

    def test_allowed_transition(self):
        ensure_status_transition(OrderStatus.PREPARING, OrderStatus.READY)

    def test_same_status_is_noop(self):
        ensure_status_transition(OrderStatus.DELIVERED, OrderStatus.DELIVERED)

    def test_skipping_a_step_is_refused(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            ensure_status_transition(OrderStatus.PENDING, OrderStatus.DELIVERED)
        assert exc_info.value.status_code == 409
        assert exc_info.value.allowed == ["preparing", "canceled"]

    def test_payment_refund_only_after_paid(self):
        ensure_payment_transition(PaymentStatus.PAID, PaymentStatus.REFUNDED)
        with pytest.raises(InvalidTransitionError):
            ensure_payment_transition(PaymentStatus.PENDING, PaymentStatus.REFUNDED)


class TestTracking:

    @pytest.mark.parametrize("status,expected", [
        (OrderStatus.PENDING, 20),
        (OrderStatus.CONFIRMED, 20),
        (OrderStatus.PREPARING, 40),
        (OrderStatus.READY, 60),
        (OrderStatus.OUT_FOR_DELIVERY, 80),
        (OrderStatus.DELIVERED, 100),
        (OrderStatus.CANCELED, 0),
    ])
    def test_progress(self, status, expected):
        assert tracking_progress(status) == expected

    def test_active_statuses(self):
        assert is_active_status(OrderStatus.READY)
        assert not is_active_status(OrderStatus.DELIVERED)
        assert not is_active_status(OrderStatus.CANCELED)
