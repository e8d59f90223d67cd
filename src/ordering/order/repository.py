"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.errors import OrderNotFound
from ordering.order.lifecycle import OrderStatus
from ordering.order.order import Order


def _newest_first(orders):
    return sorted(orders, key=lambda order: order.created_at, reverse=True)


@ordering.repository(part_of=Order)
class OrderRepository:
    """Order lookups beyond the base CRUD operations."""

    def require(self, order_id) -> Order:
        """Load an order by id, raising ``OrderNotFound`` when it does not exist."""
        try:
            return self.get(order_id)
        except ObjectNotFoundError:
            raise OrderNotFound(order_id) from None

    def find_by_order_number(self, order_number: str) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        return results[0] if results else None

    def for_customer(self, customer_id, status: str | None = None) -> list[Order]:
        """A customer's orders, newest first, optionally narrowed to one status."""
        criteria = {"customer_id": str(customer_id)}
        if status:
            criteria["status"] = status
        return _newest_first(self._dao.query.filter(**criteria).all().items)

    def with_status(self, *statuses) -> list[Order]:
        orders = []
        for status in statuses:
            value = status.value if isinstance(status, OrderStatus) else status
            orders.extend(self._dao.query.filter(status=value).all().items)
        return _newest_first(orders)

    def requiring_action(self) -> list[Order]:
        """Orders an operator still has to confirm or start processing."""
        return self.with_status(OrderStatus.PENDING, OrderStatus.CONFIRMED)

    def placed_since(self, since) -> list[Order]:
        return _newest_first(self._dao.query.filter(created_at__gte=since).all().items)
