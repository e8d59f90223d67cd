"""Application tests for customer and admin cancellation."""

import pytest
from ordering.errors import Forbidden, InvalidStateTransition, OrderNotFound
from ordering.order.repository import OrderRepository


class TestCancellation:
    def test_paid_confirmed_order_is_cancelled_and_refunded(self, manager, place_order, ledger):
        order = place_order(items=[{"product_id": "P1", "quantity": 2}, {"product_id": "P2", "quantity": 1}])
        order = manager.process_payment(order.id, "txn-1")
        assert order.status == "confirmed"
        assert ledger.stock_of("P2") == 0

        order = manager.cancel_order(order.id, "cust-1", "customer", reason="Found it cheaper")

        assert order.status == "cancelled"
        assert order.cancellation_reason == "Found it cheaper"
        assert order.payment.status == "refunded"
        assert order.payment.refund_amount == order.total
        assert ledger.stock_of("P1") == 10
        assert ledger.stock_of("P2") == 1

    def test_unpaid_order_keeps_payment_pending(self, manager, place_order):
        order = place_order()

        order = manager.cancel_order(order.id, "cust-1", "customer")

        assert order.payment.status == "pending"
        assert order.history[-1].note == "Order cancelled by customer"

    def test_admin_may_cancel(self, manager, place_order, ledger):
        order = place_order()

        manager.cancel_order(order.id, "admin-1", "admin")

        assert ledger.stock_of("P1") == 10

    def test_other_customer_is_forbidden(self, manager, place_order, ledger):
        order = place_order()

        with pytest.raises(Forbidden):
            manager.cancel_order(order.id, "cust-2", "customer")

        assert manager.get_order(order.id).status == "pending"
        assert ledger.stock_of("P1") == 8

    def test_processing_order_cannot_be_cancelled(self, manager, place_order, ledger):
        order = place_order()
        manager.update_status(order.id, "confirmed")
        manager.update_status(order.id, "processing")

        with pytest.raises(InvalidStateTransition):
            manager.cancel_order(order.id, "cust-1", "customer")

        assert ledger.stock_of("P1") == 8

    def test_cancelling_twice_restores_once(self, manager, place_order, ledger):
        order = place_order()
        manager.update_status(order.id, "confirmed")
        manager.cancel_order(order.id, "cust-1", "customer")
        assert ledger.stock_of("P1") == 10

        with pytest.raises(InvalidStateTransition):
            manager.cancel_order(order.id, "cust-1", "customer")

        assert ledger.stock_of("P1") == 10

    def test_unknown_order(self, manager):
        with pytest.raises(OrderNotFound):
            manager.cancel_order("missing-order", "cust-1", "customer")


class TestCancellationWithFailingInfrastructure:
    def test_failed_restock_leaves_order_and_stock_untouched(self, manager, place_order, ledger, monkeypatch):
        order = place_order()
        adjust_stock = ledger.adjust_stock

        def refuse_restock(product_id, delta):
            if delta > 0:
                raise ConnectionError("inventory unavailable")
            return adjust_stock(product_id, delta)

        monkeypatch.setattr(ledger, "adjust_stock", refuse_restock)
        with pytest.raises(ConnectionError):
            manager.cancel_order(order.id, "cust-1", "customer")
        monkeypatch.undo()

        assert manager.get_order(order.id).status == "pending"
        assert ledger.stock_of("P1") == 8

        manager.cancel_order(order.id, "cust-1", "customer")

        assert ledger.stock_of("P1") == 10

    def test_failed_commit_takes_released_stock_back(self, manager, place_order, ledger, monkeypatch):
        order = place_order()

        def refuse_write(self, aggregate):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(OrderRepository, "add", refuse_write)
        with pytest.raises(RuntimeError):
            manager.cancel_order(order.id, "cust-1", "customer")
        monkeypatch.undo()

        assert manager.get_order(order.id).status == "pending"
        assert ledger.stock_of("P1") == 8

    def test_rejected_cancellation_never_touches_stock(self, manager, place_order, ledger, monkeypatch):
        order = place_order()
        adjustments = []
        adjust_stock = ledger.adjust_stock

        def recording(product_id, delta):
            adjustments.append((product_id, delta))
            return adjust_stock(product_id, delta)

        monkeypatch.setattr(ledger, "adjust_stock", recording)
        with pytest.raises(Forbidden):
            manager.cancel_order(order.id, "cust-2", "customer")

        assert adjustments == []
