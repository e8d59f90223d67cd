"""Application tests for order lookups, listings and statistics."""

import pytest
from ordering.errors import Forbidden, OrderNotFound
from protean.exceptions import ValidationError


class TestLookup:
    def test_get_order(self, manager, place_order):
        order = place_order()

        assert manager.get_order(order.id).order_number == order.order_number

    def test_get_order_by_number(self, manager, place_order):
        order = place_order()

        assert manager.get_order_by_number(order.order_number).id == order.id

    def test_unknown_number(self, manager):
        with pytest.raises(OrderNotFound):
            manager.get_order_by_number("ORD000000000000XXX")

    def test_owner_and_admin_may_view(self, manager, place_order):
        order = place_order()

        assert manager.get_order(order.id, actor_id="cust-1", actor_role="customer").id == order.id
        assert manager.get_order(order.id, actor_id="admin-1", actor_role="admin").id == order.id

    def test_other_customer_may_not_view(self, manager, place_order):
        order = place_order()

        with pytest.raises(Forbidden):
            manager.get_order(order.id, actor_id="cust-2", actor_role="customer")
        with pytest.raises(Forbidden):
            manager.get_order_by_number(order.order_number, actor_id="cust-2", actor_role="customer")


class TestCustomerOrders:
    def test_newest_first_with_paging(self, manager, place_order):
        placed = [place_order(items=[{"product_id": "P1", "quantity": 1}]) for _ in range(3)]

        page = manager.customer_orders("cust-1", page=1, limit=2)

        assert page.total == 3
        assert page.pages == 2
        assert [order.id for order in page.orders] == [placed[2].id, placed[1].id]

    def test_filter_by_status(self, manager, place_order):
        first = place_order(items=[{"product_id": "P1", "quantity": 1}])
        place_order(items=[{"product_id": "P1", "quantity": 1}])
        manager.update_status(first.id, "confirmed")

        page = manager.customer_orders("cust-1", status="confirmed")

        assert [order.id for order in page.orders] == [first.id]

    def test_unknown_status_filter(self, manager):
        with pytest.raises(ValidationError):
            manager.customer_orders("cust-1", status="lost")

    def test_other_customers_orders_are_excluded(self, manager, place_order):
        place_order(customer_id="cust-2", items=[{"product_id": "P1", "quantity": 1}])

        assert manager.customer_orders("cust-1").total == 0


class TestOperatorViews:
    def test_orders_requiring_action(self, manager, place_order):
        pending = place_order(items=[{"product_id": "P1", "quantity": 1}])
        confirmed = place_order(items=[{"product_id": "P1", "quantity": 1}])
        shipped = place_order(items=[{"product_id": "P1", "quantity": 1}])
        manager.update_status(confirmed.id, "confirmed")
        manager.add_tracking(shipped.id, "TRK-1")

        ids = {order.id for order in manager.orders_requiring_action()}

        assert ids == {pending.id, confirmed.id}

    def test_statistics(self, manager, place_order):
        delivered = place_order(items=[{"product_id": "P1", "quantity": 3}])
        place_order(items=[{"product_id": "P1", "quantity": 1}])
        for status in ("confirmed", "processing", "shipped", "delivered"):
            manager.update_status(delivered.id, status)

        stats = manager.order_statistics(period_days=30)

        assert stats.total_orders == 2
        assert stats.total_revenue == 40.0
        assert stats.average_order_value == 20.0
        assert stats.delivered_orders == 1
        assert stats.pending_orders == 1

    def test_statistics_without_orders(self, manager):
        stats = manager.order_statistics()

        assert stats.total_orders == 0
        assert stats.average_order_value == 0.0


def test_invalid_payload_never_reaches_the_store(manager):
    with pytest.raises(ValidationError):
        manager.create_order("cust-1", [{"product_id": "P1"}], "credit_card", {})
