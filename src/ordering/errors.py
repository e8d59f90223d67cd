"""Typed failures raised by the ordering core.

Rule violations derive from Protean's ``ValidationError`` and carry a
``messages`` dict keyed by the offending field; missing things derive from
``ObjectNotFoundError``. The HTTP adapter maps each family to a status code.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class OrderNotFound(ObjectNotFoundError):
    def __init__(self, reference):
        self.reference = reference
        super().__init__(f"Order {reference} not found")


class ProductNotFound(ObjectNotFoundError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class CustomerNotFound(ObjectNotFoundError):
    def __init__(self, customer_id):
        self.customer_id = customer_id
        super().__init__(f"Customer {customer_id} not found")


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------
class Forbidden(ProteanException):
    def __init__(self, actor_id, action):
        self.actor_id = actor_id
        self.action = action
        super().__init__(f"Actor {actor_id} is not allowed to {action}")


# ---------------------------------------------------------------------------
# Rule violations
# ---------------------------------------------------------------------------
class InsufficientStock(ValidationError):
    def __init__(self, product_id, available, requested):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            {"quantity": [f"Insufficient stock for {product_id}: {available} available, {requested} requested"]}
        )


class InvalidStateTransition(ValidationError):
    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__({"status": [f"Cannot transition from {current} to {requested}"]})


class AlreadyPaid(ValidationError):
    def __init__(self, order_id):
        self.order_id = order_id
        super().__init__({"payment": [f"Payment for order {order_id} is already completed"]})


class PaymentNotCompleted(ValidationError):
    def __init__(self, order_id, payment_status):
        self.order_id = order_id
        self.payment_status = payment_status
        super().__init__({"payment": [f"Cannot refund order {order_id}: payment is {payment_status}"]})


class RefundExceedsTotal(ValidationError):
    def __init__(self, refund_amount, total):
        self.refund_amount = refund_amount
        self.total = total
        super().__init__({"refund_amount": [f"Refund amount {refund_amount} exceeds order total {total}"]})


class PaymentDeclined(ValidationError):
    def __init__(self, order_id, reason):
        self.order_id = order_id
        self.reason = reason
        super().__init__({"payment": [f"Payment for order {order_id} was declined: {reason}"]})


class ProductUnavailable(ValidationError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__({"items": [f"Product {product_id} is no longer available"]})


class NegativeTotal(ValidationError):
    def __init__(self, total):
        self.total = total
        super().__init__({"discount": [f"Discount would make the order total negative ({total})"]})


class EmptyCart(ValidationError):
    def __init__(self, customer_id):
        self.customer_id = customer_id
        super().__init__({"cart": [f"Cart for customer {customer_id} is empty"]})
