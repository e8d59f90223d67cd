import pytest

ADDRESS = {
    "street": "1 Ring Road",
    "city": "Accra",
    "state": "Greater Accra",
    "zip_code": "00233",
    "country": "GH",
}


@pytest.fixture(scope="session")
def _ordering_domain():
    """Initialize the ordering domain once per session."""
    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _ordering_domain.domain_context()
    ctx.push()

    yield

    from ordering.gateways import reset_gateways
    from ordering.inventory import reset_ledger
    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()

    reset_ledger()
    reset_gateways()
    ctx.pop()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture
def ledger():
    from ordering.inventory import InMemoryInventoryLedger, set_ledger

    ledger = InMemoryInventoryLedger()
    ledger.add_product("P1", "Espresso Cup", 10.0, stock=10)
    ledger.add_product("P2", "Moka Pot", 25.5, stock=1)
    ledger.add_product("P3", "Retired Grinder", 99.0, stock=5, is_active=False)
    set_ledger(ledger)
    return ledger


@pytest.fixture
def customers():
    from ordering.gateways import InMemoryCustomerDirectory, set_customers

    directory = InMemoryCustomerDirectory(["cust-1", "cust-2"])
    set_customers(directory)
    return directory


@pytest.fixture
def carts():
    from ordering.gateways import InMemoryCartStore, set_carts

    store = InMemoryCartStore()
    set_carts(store)
    return store


@pytest.fixture
def payment_authority():
    from ordering.gateways import FakePaymentAuthority, set_payment_authority

    authority = FakePaymentAuthority()
    set_payment_authority(authority)
    return authority


@pytest.fixture
def manager(ledger, customers, carts, payment_authority):
    from ordering.order.manager import OrderManager

    return OrderManager()


@pytest.fixture
def place_order(manager):
    """Place an order for cust-1, defaulting to two units of P1."""

    def _place(items=None, customer_id="cust-1", **overrides):
        params = {
            "payment_method": "credit_card",
            "shipping_address": dict(ADDRESS),
        }
        params.update(overrides)
        return manager.create_order(
            customer_id=customer_id,
            items=items or [{"product_id": "P1", "quantity": 2}],
            **params,
        )

    return _place
