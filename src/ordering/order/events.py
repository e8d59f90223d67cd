"""Domain events for the Order aggregate.

All events are versioned, immutable facts raised by the aggregate and written
to the event store when the unit of work commits. They form the audit trail
of money and stock movements next to the order's own status history.
"""

from protean.fields import DateTime, Float, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order and its stock was reserved."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    subtotal = Float(required=True)
    tax = Float()
    shipping_cost = Float()
    discount = Float()
    total = Float(required=True)
    currency = String(default="USD")
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The order moved from one status to another."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    actor_id = Identifier()
    note = String()
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentRecorded:
    """An external authority captured the payment for the order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    transaction_id = String(required=True)
    amount = Float(required=True)
    currency = String(default="USD")
    payment_method = String()
    paid_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderRefunded:
    """Money was returned to the customer."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    refund_amount = Float(required=True)
    currency = String(default="USD")
    actor_id = Identifier()
    refunded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled before fulfilment."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    reason = String(required=True)
    cancelled_by = Identifier(required=True)
    actor_role = String()
    cancelled_at = DateTime(required=True)


@ordering.event(part_of="Order")
class TrackingAdded:
    """A carrier tracking number was attached to the order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    tracking_number = String(required=True)
    carrier = String()
    shipped_at = DateTime(required=True)
