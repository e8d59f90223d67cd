"""Application tests for pre-checkout cart validation."""

import pytest
from ordering.errors import EmptyCart


def test_valid_cart(manager, carts, ledger):
    carts.put("cust-1", [("P1", 2), ("P2", 1)])

    report = manager.validate_cart_for_checkout("cust-1")

    assert report.is_valid
    assert report.message == "Cart is valid for checkout"
    assert [check.message for check in report.items] == ["OK", "OK"]
    assert report.items[0].available_stock == 10
    assert ledger.stock_of("P1") == 10


def test_short_stock_is_reported(manager, carts):
    carts.put("cust-1", [("P2", 3)])

    report = manager.validate_cart_for_checkout("cust-1")

    assert not report.is_valid
    assert report.message == "Some items in your cart are not available"
    assert report.items[0].message == "Only 1 items available"
    assert report.items[0].requested_quantity == 3


def test_missing_and_inactive_products(manager, carts):
    carts.put("cust-1", [("P3", 1), ("GONE", 1), ("P1", 1)])

    report = manager.validate_cart_for_checkout("cust-1")

    assert [check.is_valid for check in report.items] == [False, False, True]
    assert report.items[0].message == "Product is no longer available"
    assert report.items[1].message == "Product is no longer available"


def test_empty_cart(manager):
    with pytest.raises(EmptyCart):
        manager.validate_cart_for_checkout("cust-1")


def test_validation_reserves_nothing(manager, carts, ledger, place_order):
    carts.put("cust-1", [("P2", 1)])
    assert manager.validate_cart_for_checkout("cust-1").is_valid

    place_order(customer_id="cust-2", items=[{"product_id": "P2", "quantity": 1}])

    assert not manager.validate_cart_for_checkout("cust-1").is_valid
