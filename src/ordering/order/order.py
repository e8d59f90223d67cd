"""Order aggregate: the core of the ordering domain.

An Order is created exactly once, when a customer checks out, and afterwards
only moves through status, payment and shipping changes. Line items are price
snapshots taken at placement, so later catalogue changes never alter a placed
order. Every status change, including the initial one, appends a
``StatusChange`` to the order's history; history is never rewritten.

State Machine (see ``ordering.order.lifecycle``):
    PENDING → CONFIRMED → PROCESSING → SHIPPED → DELIVERED → REFUNDED
    PENDING/CONFIRMED/PROCESSING → CANCELLED
    any non-terminal status → REFUNDED (explicit refund)

Implicit transitions:
    payment captured while PENDING     → CONFIRMED
    tracking added before SHIPPED      → SHIPPED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.errors import (
    AlreadyPaid,
    Forbidden,
    InvalidStateTransition,
    NegativeTotal,
    PaymentNotCompleted,
    RefundExceedsTotal,
)
from ordering.order import lifecycle
from ordering.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
    PaymentRecorded,
    TrackingAdded,
)
from ordering.order.lifecycle import OrderStatus, Transition
from ordering.order.pricing import compute_totals, to_cents


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    BANK_TRANSFER = "bank_transfer"
    CASH_ON_DELIVERY = "cash_on_delivery"


class ShippingMethod(Enum):
    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"
    PICKUP = "pickup"


class Currency(Enum):
    USD = "USD"
    EUR = "EUR"
    GHS = "GHS"
    GBP = "GBP"


class ActorRole(Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


# States from which a customer or admin may cancel
_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.CONFIRMED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships. Captured at checkout and never changed afterwards."""

    street = String(required=True, max_length=100)
    city = String(required=True, max_length=50)
    state = String(required=True, max_length=50)
    zip_code = String(required=True, max_length=20)
    country = String(required=True, max_length=50)


@ordering.value_object(part_of="Order")
class PaymentDetails:
    """Payment bookkeeping for the order. Replaced wholesale on every change."""

    method = String(required=True, choices=PaymentMethod)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=100)
    paid_at = DateTime()
    refunded_at = DateTime()
    refund_amount = Float(min_value=0.0)


@ordering.value_object(part_of="Order")
class OrderNotes:
    customer = String(max_length=500)
    admin = String(max_length=500)
    internal = String(max_length=500)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """Snapshot of one product's name, price and quantity at placement time."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    line_total = Float(required=True, min_value=0.0)


@ordering.entity(part_of="Order")
class StatusChange:
    """One entry of the append-only status history."""

    sequence = Integer(required=True, min_value=1)
    status = String(required=True, choices=OrderStatus)
    changed_at = DateTime(required=True)
    actor_id = Identifier()
    note = String(max_length=500)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, unique=True, max_length=30)
    customer_id = Identifier(required=True)
    items = HasMany(OrderLine)
    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, choices=Currency, default=Currency.USD.value)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment = ValueObject(PaymentDetails)
    shipping_address = ValueObject(ShippingAddress)
    shipping_method = String(choices=ShippingMethod, default=ShippingMethod.STANDARD.value)
    tracking_number = String(max_length=50)
    carrier = String(max_length=50)
    shipped_at = DateTime()
    estimated_delivery_at = DateTime()
    delivered_at = DateTime()
    status_history = HasMany(StatusChange)
    notes = ValueObject(OrderNotes)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_its_components(self):
        expected = to_cents(
            (self.subtotal or 0.0) + (self.tax or 0.0) + (self.shipping_cost or 0.0) - (self.discount or 0.0)
        )
        if to_cents(self.total or 0.0) != expected:
            raise ValidationError({"total": [f"Total {self.total} does not match its components ({expected})"]})

    @invariant.post
    def subtotal_must_match_its_lines(self):
        expected = to_cents(sum(item.line_total for item in self.items))
        if to_cents(self.subtotal or 0.0) != expected:
            raise ValidationError({"subtotal": [f"Subtotal {self.subtotal} does not match its lines ({expected})"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        lines,
        payment_method,
        shipping_address,
        tax_rate=0.0,
        shipping_cost=0.0,
        discount=0.0,
        currency=Currency.USD.value,
        shipping_method=ShippingMethod.STANDARD.value,
        notes=None,
    ):
        """Create a new pending order from priced line snapshots.

        Args:
            order_number: Unique human-facing number (see ``numbering``).
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, name, image, unit_price,
                quantity and line_total.
            payment_method: One of ``PaymentMethod`` values.
            shipping_address: Dict with street, city, state, zip_code, country.
            notes: Optional dict with customer, admin, internal.
        """
        if not lines:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        totals = compute_totals(
            [line["line_total"] for line in lines],
            tax_rate=tax_rate,
            shipping_cost=shipping_cost,
            discount=discount,
        )
        if totals.total < 0:
            raise NegativeTotal(totals.total)

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            items=[OrderLine(**line) for line in lines],
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping_cost=totals.shipping_cost,
            discount=totals.discount,
            total=totals.total,
            currency=currency,
            status=OrderStatus.PENDING.value,
            payment=PaymentDetails(method=payment_method),
            shipping_address=ShippingAddress(**shipping_address),
            shipping_method=shipping_method,
            notes=OrderNotes(**(notes or {})),
            status_history=[
                StatusChange(
                    sequence=1,
                    status=OrderStatus.PENDING.value,
                    changed_at=now,
                    actor_id=customer_id,
                    note="Order placed",
                )
            ],
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                items=json.dumps(lines),
                subtotal=totals.subtotal,
                tax=totals.tax,
                shipping_cost=totals.shipping_cost,
                discount=totals.discount,
                total=totals.total,
                currency=currency,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def history(self):
        """Status history in the order it was recorded."""
        return sorted(self.status_history, key=lambda change: change.sequence)

    def is_owned_by(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)

    def is_visible_to(self, actor_id, actor_role) -> bool:
        return actor_role == ActorRole.ADMIN.value or self.is_owned_by(actor_id)

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _next_sequence(self):
        return max((change.sequence for change in self.status_history), default=0) + 1

    def _record_status(self, transition: Transition, actor_id=None):
        now = datetime.now(UTC)
        self.status = transition.status.value
        self.add_status_history(
            StatusChange(
                sequence=self._next_sequence(),
                status=transition.status.value,
                changed_at=now,
                actor_id=actor_id,
                note=transition.note,
            )
        )
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=transition.previous.value,
                new_status=transition.status.value,
                actor_id=actor_id,
                note=transition.note,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def change_status(self, requested, actor_id=None, note=None) -> Transition:
        """Apply a caller-requested status change through the transition table."""
        transition = lifecycle.transition(self.status, requested, note)
        if transition.status is OrderStatus.DELIVERED:
            self.delivered_at = datetime.now(UTC)
        self._record_status(transition, actor_id)
        return transition

    def cancel(self, actor_id, actor_role, reason=None) -> Transition:
        """Cancel a pending or confirmed order.

        Only the owning customer or an admin may cancel. A completed payment
        is refunded in full as part of the same change.
        """
        if not self.is_visible_to(actor_id, actor_role):
            raise Forbidden(actor_id, f"cancel order {self.order_number}")

        current = OrderStatus(self.status)
        if current not in _CANCELLABLE_STATES:
            raise InvalidStateTransition(current.value, OrderStatus.CANCELLED.value)

        note = reason or "Order cancelled by customer"
        transition = lifecycle.transition(current, OrderStatus.CANCELLED, note)
        self.cancellation_reason = note
        self._record_status(transition, actor_id)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=note,
                cancelled_by=str(actor_id),
                actor_role=actor_role,
                cancelled_at=self.updated_at,
            )
        )

        if self.payment.status == PaymentStatus.COMPLETED.value:
            self.refund(actor_id=actor_id)
        return transition

    # -------------------------------------------------------------------
    # Payment & refund
    # -------------------------------------------------------------------
    def record_payment(self, transaction_id):
        """Record a captured payment; auto-confirms a pending order."""
        if self.payment.status == PaymentStatus.COMPLETED.value:
            raise AlreadyPaid(str(self.id))
        if lifecycle.is_terminal(self.status):
            raise InvalidStateTransition(self.status, OrderStatus.CONFIRMED.value)

        now = datetime.now(UTC)
        self.payment = PaymentDetails(
            method=self.payment.method,
            status=PaymentStatus.COMPLETED.value,
            transaction_id=transaction_id,
            paid_at=now,
        )

        self.raise_(
            PaymentRecorded(
                order_id=str(self.id),
                transaction_id=transaction_id,
                amount=self.total,
                currency=self.currency,
                payment_method=self.payment.method,
                paid_at=now,
            )
        )

        if OrderStatus(self.status) is OrderStatus.PENDING:
            self._record_status(
                lifecycle.transition(OrderStatus.PENDING, OrderStatus.CONFIRMED, "Auto-confirmed after payment")
            )

    def refund(self, refund_amount=None, actor_id=None) -> Transition | None:
        """Refund a completed payment.

        A non-terminal order moves to REFUNDED whatever its position in the
        pipeline. A cancelled order keeps its status; only the payment
        changes. Returns the status transition when one happened.
        """
        if self.payment.status != PaymentStatus.COMPLETED.value:
            raise PaymentNotCompleted(str(self.id), self.payment.status)

        amount = self.total if refund_amount is None else to_cents(refund_amount)
        if amount <= 0:
            raise ValidationError({"refund_amount": ["Refund amount must be positive"]})
        if amount > self.total:
            raise RefundExceedsTotal(amount, self.total)

        now = datetime.now(UTC)
        self.payment = PaymentDetails(
            method=self.payment.method,
            status=PaymentStatus.REFUNDED.value,
            transaction_id=self.payment.transaction_id,
            paid_at=self.payment.paid_at,
            refunded_at=now,
            refund_amount=amount,
        )

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                refund_amount=amount,
                currency=self.currency,
                actor_id=actor_id,
                refunded_at=now,
            )
        )

        if lifecycle.is_terminal(self.status):
            return None

        transition = Transition(
            previous=OrderStatus(self.status),
            status=OrderStatus.REFUNDED,
            note=f"Refunded {amount:.2f} {self.currency}",
        )
        self._record_status(transition, actor_id)
        return transition

    # -------------------------------------------------------------------
    # Fulfilment
    # -------------------------------------------------------------------
    def add_tracking(
        self,
        tracking_number,
        shipped_at=None,
        carrier=None,
        estimated_delivery_at=None,
        actor_id=None,
    ) -> Transition | None:
        """Attach carrier tracking; moves the order to SHIPPED if it is not there yet."""
        current = OrderStatus(self.status)
        if lifecycle.is_terminal(current):
            raise InvalidStateTransition(current.value, OrderStatus.SHIPPED.value)

        shipped_at = shipped_at or datetime.now(UTC)
        with atomic_change(self):
            self.tracking_number = tracking_number
            self.carrier = carrier
            self.shipped_at = shipped_at
            if estimated_delivery_at:
                self.estimated_delivery_at = estimated_delivery_at

        self.raise_(
            TrackingAdded(
                order_id=str(self.id),
                tracking_number=tracking_number,
                carrier=carrier,
                shipped_at=shipped_at,
            )
        )

        if not lifecycle.precedes(current, OrderStatus.SHIPPED):
            return None

        transition = Transition(previous=current, status=OrderStatus.SHIPPED, note=f"Tracking: {tracking_number}")
        self._record_status(transition, actor_id)
        return transition
