"""Carrier tracking: command and handler."""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class AddTracking:
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=50)
    carrier = String(max_length=50)
    shipped_at = DateTime()
    estimated_delivery_at = DateTime()
    actor_id = Identifier()


@ordering.command_handler(part_of=Order)
class AddTrackingHandler:
    @handle(AddTracking)
    def add_tracking(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.require(command.order_id)
        transition = order.add_tracking(
            tracking_number=command.tracking_number,
            shipped_at=command.shipped_at,
            carrier=command.carrier,
            estimated_delivery_at=command.estimated_delivery_at,
            actor_id=command.actor_id,
        )
        repo.add(order)

        logger.info(
            "tracking_added",
            order_id=str(order.id),
            tracking_number=command.tracking_number,
            status=order.status,
        )
        return transition
