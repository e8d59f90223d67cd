"""Tests that Order behaviour raises the expected domain events."""

import json

from ordering.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    PaymentRecorded,
    TrackingAdded,
)
from ordering.order.order import Order

ADDRESS = {"street": "1 Ring Road", "city": "Accra", "state": "GA", "zip_code": "00233", "country": "GH"}


def _order():
    return Order.place(
        order_number="ORD2026000000001AB",
        customer_id="cust-1",
        lines=[
            {"product_id": "P1", "name": "Cup", "image": None, "unit_price": 10.0, "quantity": 2, "line_total": 20.0}
        ],
        payment_method="credit_card",
        shipping_address=ADDRESS,
    )


def _event_types(order):
    return [type(event) for event in order._events]


def test_placement_raises_order_placed():
    order = _order()

    assert _event_types(order) == [OrderPlaced]
    event = order._events[0]
    assert event.order_number == "ORD2026000000001AB"
    assert event.total == 20.0
    assert json.loads(event.items)[0]["product_id"] == "P1"


def test_payment_raises_payment_recorded_then_status_change():
    order = _order()
    order._events.clear()

    order.record_payment("txn-1")

    assert _event_types(order) == [PaymentRecorded, OrderStatusChanged]
    assert order._events[1].previous_status == "pending"
    assert order._events[1].new_status == "confirmed"


def test_cancel_of_paid_order_raises_cancel_and_refund():
    order = _order()
    order.record_payment("txn-1")
    order._events.clear()

    order.cancel("cust-1", "customer")

    assert _event_types(order) == [OrderStatusChanged, OrderCancelled, OrderRefunded]


def test_tracking_raises_tracking_added():
    order = _order()
    order._events.clear()

    order.add_tracking("TRK-1")

    assert _event_types(order) == [TrackingAdded, OrderStatusChanged]
