"""Order placement: command and handler.

The command carries lines that are already priced and whose stock is
already reserved; OrderManager does both before dispatching it, and gives
the stock back if this handler fails.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.numbering import unique_order_number
from ordering.order.order import Currency, Order, PaymentMethod, ShippingMethod
from ordering.settings import order_settings

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of priced line dicts
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_address = Text(required=True)  # JSON: address dict
    shipping_method = String(choices=ShippingMethod, default=ShippingMethod.STANDARD.value)
    tax_rate = Float(default=0.0, min_value=0.0, max_value=1.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    currency = String(max_length=3, choices=Currency, default=Currency.USD.value)
    notes = Text()  # JSON: {customer, admin, internal}


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        repo = current_domain.repository_for(Order)
        order_number = unique_order_number(
            lambda number: repo.find_by_order_number(number) is not None,
            attempts=order_settings().order_number_attempts,
        )

        order = Order.place(
            order_number=order_number,
            customer_id=command.customer_id,
            lines=json.loads(command.lines),
            payment_method=command.payment_method,
            shipping_address=json.loads(command.shipping_address),
            tax_rate=command.tax_rate or 0.0,
            shipping_cost=command.shipping_cost or 0.0,
            discount=command.discount or 0.0,
            currency=command.currency or Currency.USD.value,
            shipping_method=command.shipping_method or ShippingMethod.STANDARD.value,
            notes=json.loads(command.notes) if command.notes else None,
        )
        repo.add(order)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order_number,
            customer_id=str(command.customer_id),
            total=order.total,
        )
        return str(order.id)
