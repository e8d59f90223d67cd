"""OrderManager: the one component that mutates stock and orders.

Every public operation is a single unit of work from the caller's point of
view. Operations on an existing order hold that order's lock from loading
through commit, so two concurrent cancellations (or a
cancellation racing a refund) cannot both give stock back: the second one
finds the order already terminal and fails.

Stock moves only through the inventory ledger's atomic ``adjust_stock``.
Placement reserves stock before the order is written and releases it again
if the write fails. Entering ``cancelled`` or ``refunded`` for the first time
restores it just before the change is committed and takes it again if the
commit fails, so an error never leaves a terminal order holding stock.
"""

import json
from collections import defaultdict
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.cart.validation import CartValidator, ValidationReport
from ordering.errors import (
    AlreadyPaid,
    CustomerNotFound,
    Forbidden,
    InsufficientStock,
    InvalidStateTransition,
    NegativeTotal,
    OrderNotFound,
    PaymentDeclined,
    ProductNotFound,
    ProductUnavailable,
)
from ordering.gateways import get_carts, get_customers, get_payment_authority
from ordering.inventory import get_ledger
from ordering.order import lifecycle
from ordering.order.cancellation import CancelOrder
from ordering.order.creation import PlaceOrder
from ordering.order.lifecycle import OrderStatus
from ordering.order.order import (
    Currency,
    Order,
    PaymentMethod,
    PaymentStatus,
    ShippingMethod,
)
from ordering.order.payment import ProcessPayment
from ordering.order.pricing import compute_totals, line_total, to_cents
from ordering.order.refund import ProcessRefund
from ordering.order.reservation import KeyedLocks, reserve_lines, restore_lines
from ordering.order.status import UpdateOrderStatus
from ordering.order.tracking import AddTracking
from ordering.settings import order_settings

logger = structlog.get_logger(__name__)

ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "country")

# Shared by every OrderManager in the process
_order_locks = KeyedLocks()


@dataclass(frozen=True)
class OrderPage:
    orders: list
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0


@dataclass(frozen=True)
class OrderStatistics:
    period_days: int
    total_orders: int
    total_revenue: float
    average_order_value: float
    delivered_orders: int
    pending_orders: int


class OrderManager:
    def __init__(self, ledger=None, customers=None, carts=None, payment_authority=None) -> None:
        self._ledger = ledger
        self._customers = customers
        self._carts = carts
        self._payment_authority = payment_authority

    # -------------------------------------------------------------------
    # Collaborators
    # -------------------------------------------------------------------
    @property
    def ledger(self):
        return self._ledger or get_ledger()

    @property
    def customers(self):
        return self._customers or get_customers()

    @property
    def carts(self):
        return self._carts or get_carts()

    @property
    def payment_authority(self):
        return self._payment_authority or get_payment_authority()

    @property
    def orders(self):
        return current_domain.repository_for(Order)

    # -------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------
    def create_order(
        self,
        customer_id,
        items,
        payment_method,
        shipping_address,
        shipping_method=ShippingMethod.STANDARD.value,
        tax_rate=0.0,
        shipping_cost=0.0,
        discount=0.0,
        currency=Currency.USD.value,
        notes=None,
    ) -> Order:
        """Place an order for ``items`` (dicts with product_id and quantity).

        Raises:
            ValidationError: malformed input, inactive product or negative total.
            CustomerNotFound / ProductNotFound: unknown customer or product.
            InsufficientStock: a line cannot be reserved; nothing stays reserved.
        """
        self._validate_placement(
            items, payment_method, shipping_address, shipping_method, tax_rate, shipping_cost, discount, currency
        )

        if not self.customers.exists(customer_id):
            raise CustomerNotFound(customer_id)

        lines = [self._price_line(item) for item in items]
        totals = compute_totals(
            [line["line_total"] for line in lines],
            tax_rate=tax_rate,
            shipping_cost=shipping_cost,
            discount=discount,
        )
        if totals.total < 0:
            raise NegativeTotal(totals.total)

        try:
            reserve_lines(self.ledger, lines)
        except InsufficientStock as exc:
            logger.warning(
                "insufficient_stock",
                customer_id=str(customer_id),
                product_id=exc.product_id,
                available=exc.available,
                requested=exc.requested,
            )
            raise

        try:
            order_id = current_domain.process(
                PlaceOrder(
                    customer_id=customer_id,
                    lines=json.dumps(lines),
                    payment_method=payment_method,
                    shipping_address=json.dumps({key: shipping_address[key] for key in ADDRESS_FIELDS}),
                    shipping_method=shipping_method,
                    tax_rate=tax_rate,
                    shipping_cost=shipping_cost,
                    discount=discount,
                    currency=currency,
                    notes=json.dumps(notes) if notes else None,
                ),
                asynchronous=False,
            )
        except Exception:
            restore_lines(self.ledger, lines)
            logger.warning("order_not_persisted_stock_released", customer_id=str(customer_id), exc_info=True)
            raise

        self._clear_cart(customer_id)
        return self.orders.require(order_id)

    def _validate_placement(
        self, items, payment_method, shipping_address, shipping_method, tax_rate, shipping_cost, discount, currency
    ):
        errors = defaultdict(list)
        max_quantity = order_settings().max_line_quantity

        if not items:
            errors["items"].append("At least one item is required")
        for position, item in enumerate(items or [], start=1):
            if not item.get("product_id"):
                errors["items"].append(f"Item {position}: product_id is required")
            quantity = item.get("quantity")
            if isinstance(quantity, bool) or not isinstance(quantity, int) or not 1 <= quantity <= max_quantity:
                errors["items"].append(f"Item {position}: quantity must be an integer between 1 and {max_quantity}")

        if tax_rate is None or not 0 <= tax_rate <= 1:
            errors["tax_rate"].append("Tax rate must be between 0 and 1")
        if shipping_cost is None or shipping_cost < 0:
            errors["shipping_cost"].append("Shipping cost cannot be negative")
        if discount is None or discount < 0:
            errors["discount"].append("Discount cannot be negative")

        if currency not in {member.value for member in Currency}:
            errors["currency"].append(f"Unsupported currency '{currency}'")
        if payment_method not in {member.value for member in PaymentMethod}:
            errors["payment_method"].append(f"Unsupported payment method '{payment_method}'")
        if shipping_method not in {member.value for member in ShippingMethod}:
            errors["shipping_method"].append(f"Unsupported shipping method '{shipping_method}'")

        address = shipping_address or {}
        missing = [key for key in ADDRESS_FIELDS if not address.get(key)]
        if missing:
            errors["shipping_address"].append(f"Missing address fields: {', '.join(missing)}")

        if errors:
            raise ValidationError(dict(errors))

    def _price_line(self, item) -> dict:
        product = self.ledger.get_product(item["product_id"])
        if product is None:
            raise ProductNotFound(item["product_id"])
        if not product.is_active:
            raise ProductUnavailable(product.product_id)

        quantity = item["quantity"]
        return {
            "product_id": product.product_id,
            "name": product.name,
            "image": product.image,
            "unit_price": to_cents(product.price),
            "quantity": quantity,
            "line_total": line_total(product.price, quantity),
        }

    def _clear_cart(self, customer_id):
        try:
            self.carts.clear_cart(customer_id)
        except Exception:
            # The order stands; a stale cart is only an inconvenience
            logger.warning("cart_clear_failed", customer_id=str(customer_id), exc_info=True)

    # -------------------------------------------------------------------
    # Changes to an existing order
    # -------------------------------------------------------------------
    def _apply(self, order_id, command, decide=None) -> Order:
        """Run ``command`` under the order's lock.

        ``decide`` repeats the command's domain decision on a freshly loaded,
        never-saved copy of the order. When it shows the order leaving the
        pipeline for good, the reserved stock is given back before the command
        commits, and taken again if the command then fails.
        """
        with _order_locks.hold(order_id):
            released = []
            if decide is not None:
                preview = self.orders.require(order_id)
                transition = decide(preview)
                if transition is not None and transition.releases_stock:
                    released = list(preview.items)
                    restore_lines(self.ledger, released)

            try:
                current_domain.process(command, asynchronous=False)
            except Exception:
                if released:
                    reserve_lines(self.ledger, released)
                    logger.warning("stock_release_reverted", order_id=str(order_id), exc_info=True)
                raise

            order = self.orders.require(order_id)
            if released:
                logger.info("stock_restored", order_id=str(order.id), status=order.status, lines=len(released))
            return order

    def update_status(self, order_id, status, actor_id=None, note=None) -> Order:
        return self._apply(
            order_id,
            UpdateOrderStatus(order_id=order_id, status=status, actor_id=actor_id, note=note),
            decide=lambda order: order.change_status(status, actor_id=actor_id, note=note),
        )

    def process_payment(self, order_id, transaction_id) -> Order:
        return self._apply(order_id, ProcessPayment(order_id=order_id, transaction_id=transaction_id))

    def capture_payment(self, order_id) -> Order:
        """Ask the payment authority for the money, then record the payment.

        A declined capture raises ``PaymentDeclined`` and leaves the order
        exactly as it was.
        """
        with _order_locks.hold(order_id):
            order = self.orders.require(order_id)
            if order.payment.status == PaymentStatus.COMPLETED.value:
                raise AlreadyPaid(str(order.id))
            if lifecycle.is_terminal(order.status):
                raise InvalidStateTransition(order.status, OrderStatus.CONFIRMED.value)

            result = self.payment_authority.capture(
                order_id=str(order.id),
                amount=order.total,
                currency=order.currency,
                payment_method=order.payment.method,
            )
            if not result.success:
                logger.warning("payment_declined", order_id=str(order.id), reason=result.failure_reason)
                raise PaymentDeclined(str(order.id), result.failure_reason)

            return self.process_payment(order_id, result.transaction_id)

    def process_refund(self, order_id, refund_amount=None, actor_id=None) -> Order:
        return self._apply(
            order_id,
            ProcessRefund(order_id=order_id, refund_amount=refund_amount, actor_id=actor_id),
            decide=lambda order: order.refund(refund_amount=refund_amount, actor_id=actor_id),
        )

    def cancel_order(self, order_id, actor_id, actor_role, reason=None) -> Order:
        return self._apply(
            order_id,
            CancelOrder(order_id=order_id, actor_id=actor_id, actor_role=actor_role, reason=reason),
            decide=lambda order: order.cancel(actor_id, actor_role, reason=reason),
        )

    def add_tracking(
        self,
        order_id,
        tracking_number,
        shipped_at=None,
        carrier=None,
        estimated_delivery_at=None,
        actor_id=None,
    ) -> Order:
        return self._apply(
            order_id,
            AddTracking(
                order_id=order_id,
                tracking_number=tracking_number,
                shipped_at=shipped_at,
                carrier=carrier,
                estimated_delivery_at=estimated_delivery_at,
                actor_id=actor_id,
            ),
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def get_order(self, order_id, actor_id=None, actor_role=None) -> Order:
        order = self.orders.require(order_id)
        self._authorize_view(order, actor_id, actor_role)
        return order

    def get_order_by_number(self, order_number, actor_id=None, actor_role=None) -> Order:
        order = self.orders.find_by_order_number(order_number)
        if order is None:
            raise OrderNotFound(order_number)
        self._authorize_view(order, actor_id, actor_role)
        return order

    def _authorize_view(self, order, actor_id, actor_role):
        if actor_id is not None and not order.is_visible_to(actor_id, actor_role):
            raise Forbidden(actor_id, f"view order {order.order_number}")

    def customer_orders(self, customer_id, status=None, page=1, limit=10) -> OrderPage:
        if status is not None and status not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Unknown order status '{status}'"]})
        page, limit = max(int(page), 1), max(int(limit), 1)
        orders = self.orders.for_customer(customer_id, status=status)
        start = (page - 1) * limit
        return OrderPage(orders=orders[start : start + limit], page=page, limit=limit, total=len(orders))

    def orders_requiring_action(self) -> list[Order]:
        return self.orders.requiring_action()

    def order_statistics(self, period_days=30) -> OrderStatistics:
        since = datetime.now(UTC) - timedelta(days=period_days)
        orders = self.orders.placed_since(since)

        revenue = to_cents(sum(order.total for order in orders))
        return OrderStatistics(
            period_days=period_days,
            total_orders=len(orders),
            total_revenue=revenue,
            average_order_value=to_cents(revenue / len(orders)) if orders else 0.0,
            delivered_orders=sum(1 for order in orders if order.status == OrderStatus.DELIVERED.value),
            pending_orders=sum(1 for order in orders if order.status == OrderStatus.PENDING.value),
        )

    def validate_cart_for_checkout(self, customer_id) -> ValidationReport:
        return CartValidator(self.ledger, self.carts).validate(customer_id)
