"""Order payment: command and handler.

Recording a payment is idempotent in the strict sense: a second attempt on
a paid order fails with ``AlreadyPaid`` and leaves the order untouched.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ProcessPayment:
    order_id = Identifier(required=True)
    transaction_id = String(required=True, max_length=100)


@ordering.command_handler(part_of=Order)
class ProcessPaymentHandler:
    @handle(ProcessPayment)
    def process_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.require(command.order_id)
        order.record_payment(command.transaction_id)
        repo.add(order)

        logger.info(
            "payment_recorded",
            order_id=str(order.id),
            transaction_id=command.transaction_id,
            status=order.status,
        )
        return str(order.id)
