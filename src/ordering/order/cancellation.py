"""Order cancellation: command and handler.

Cancelling a paid order refunds it in full in the same unit of work.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import ActorRole, Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=ActorRole)
    reason = String(max_length=500)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.require(command.order_id)
        transition = order.cancel(
            actor_id=command.actor_id,
            actor_role=command.actor_role,
            reason=command.reason,
        )
        repo.add(order)

        logger.info(
            "order_cancelled",
            order_id=str(order.id),
            cancelled_by=str(command.actor_id),
            payment_status=order.payment.status,
        )
        return transition
