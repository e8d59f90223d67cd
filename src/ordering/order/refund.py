"""Order refund: command and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class ProcessRefund:
    order_id = Identifier(required=True)
    refund_amount = Float()  # Omitted means the full order total
    actor_id = Identifier()


@ordering.command_handler(part_of=Order)
class ProcessRefundHandler:
    @handle(ProcessRefund)
    def process_refund(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.require(command.order_id)
        transition = order.refund(refund_amount=command.refund_amount, actor_id=command.actor_id)
        repo.add(order)

        logger.info(
            "order_refunded",
            order_id=str(order.id),
            refund_amount=order.payment.refund_amount,
            status=order.status,
        )
        return transition
