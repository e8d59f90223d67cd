"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from pytest_bdd import given, parsers, then

ADDRESS = {"street": "1 Ring Road", "city": "Accra", "state": "GA", "zip_code": "00233", "country": "GH"}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the failure raised by a When step."""
    return {"exc": None}


@pytest.fixture()
def attempt(error):
    """Run a When step action, capturing the failure instead of raising it."""

    def _attempt(action):
        try:
            return action()
        except Exception as exc:
            error["exc"] = exc
            return None

    return _attempt


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a registered customer "{customer_id}"'))
def _(customers, customer_id):
    customers.register(customer_id)


@given(parsers.cfparse('product "{product_id}" priced {price:f} with {stock:d} in stock'))
def _(ledger, product_id, price, stock):
    ledger.add_product(product_id, f"Product {product_id}", price, stock=stock)


@given(
    parsers.cfparse('"{customer_id}" has placed an order for {quantity:d} of "{product_id}"'),
    target_fixture="order",
)
def _(manager, customer_id, quantity, product_id):
    return manager.create_order(
        customer_id=customer_id,
        items=[{"product_id": product_id, "quantity": quantity}],
        payment_method="credit_card",
        shipping_address=ADDRESS,
    )


@given("the order has been paid", target_fixture="order")
def _(manager, order):
    return manager.process_payment(order.id, "txn-given")


@given(parsers.cfparse('the order has moved to "{status}"'), target_fixture="order")
def _(manager, order, status):
    return manager.update_status(order.id, status, actor_id="admin-1")


@given(parsers.cfparse('"{actor_id}" has cancelled the order'), target_fixture="order")
def _(manager, order, actor_id):
    return manager.cancel_order(order.id, actor_id, "customer")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(manager, order, status):
    assert manager.get_order(order.id).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def _(manager, order, status):
    assert manager.get_order(order.id).payment.status == status


@then(parsers.cfparse("the order total is {total:f}"))
def _(manager, order, total):
    assert manager.get_order(order.id).total == total


@then(parsers.cfparse('"{product_id}" has {stock:d} in stock'))
def _(ledger, product_id, stock):
    assert ledger.stock_of(product_id) == stock


@then(parsers.cfparse("the request fails with {error_name}"))
def _(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name
