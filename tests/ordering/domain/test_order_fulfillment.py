"""Tests for carrier tracking and the implicit move to shipped."""

from datetime import UTC, datetime

import pytest
from ordering.errors import InvalidStateTransition
from ordering.order.order import Order, OrderStatus

ADDRESS = {"street": "1 Ring Road", "city": "Accra", "state": "GA", "zip_code": "00233", "country": "GH"}


def _order_at(*statuses):
    order = Order.place(
        order_number="ORD2026000000001AB",
        customer_id="cust-1",
        lines=[
            {"product_id": "P1", "name": "Cup", "image": None, "unit_price": 10.0, "quantity": 1, "line_total": 10.0}
        ],
        payment_method="credit_card",
        shipping_address=ADDRESS,
    )
    for status in statuses:
        order.change_status(status)
    return order


class TestTracking:
    def test_tracking_ships_a_processing_order(self):
        order = _order_at("confirmed", "processing")

        transition = order.add_tracking("TRK-1", carrier="DHL")

        assert order.status == OrderStatus.SHIPPED.value
        assert order.tracking_number == "TRK-1"
        assert order.carrier == "DHL"
        assert order.shipped_at is not None
        assert transition.previous is OrderStatus.PROCESSING
        assert order.history[-1].note == "Tracking: TRK-1"

    def test_tracking_ships_a_pending_order(self):
        order = _order_at()
        order.add_tracking("TRK-2")

        assert order.status == "shipped"

    def test_explicit_ship_date_is_kept(self):
        shipped_at = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        order = _order_at("confirmed")
        order.add_tracking("TRK-3", shipped_at=shipped_at)

        assert order.shipped_at == shipped_at

    def test_delivered_order_only_updates_tracking(self):
        order = _order_at("confirmed", "processing", "shipped", "delivered")
        history_length = len(order.history)

        transition = order.add_tracking("TRK-4")

        assert transition is None
        assert order.status == "delivered"
        assert order.tracking_number == "TRK-4"
        assert len(order.history) == history_length

    def test_cancelled_order_rejects_tracking(self):
        order = _order_at("cancelled")

        with pytest.raises(InvalidStateTransition) as exc:
            order.add_tracking("TRK-5")
        assert exc.value.requested == "shipped"
        assert order.tracking_number is None
