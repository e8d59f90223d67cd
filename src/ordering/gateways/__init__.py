"""Collaborator factory.

get_customers() / get_carts() / get_payment_authority() return the active
adapters, defaulting to the in-memory fakes; the matching set_*() functions
swap them (useful for tests), and reset_gateways() forgets all of them.
"""

import os

from ordering.gateways.fake_adapter import (
    FakePaymentAuthority,
    InMemoryCartStore,
    InMemoryCustomerDirectory,
)
from ordering.gateways.port import (
    CaptureResult,
    CartLine,
    CartStore,
    CustomerDirectory,
    PaymentAuthority,
)
from ordering.settings import order_settings

__all__ = [
    "CaptureResult",
    "CartLine",
    "CartStore",
    "CustomerDirectory",
    "FakePaymentAuthority",
    "InMemoryCartStore",
    "InMemoryCustomerDirectory",
    "PaymentAuthority",
    "get_carts",
    "get_customers",
    "get_payment_authority",
    "reset_gateways",
    "set_carts",
    "set_customers",
    "set_payment_authority",
]

_customers: CustomerDirectory | None = None
_carts: CartStore | None = None
_payment_authority: PaymentAuthority | None = None


def get_customers() -> CustomerDirectory:
    global _customers
    if _customers is None:
        _customers = InMemoryCustomerDirectory()
    return _customers


def set_customers(directory: CustomerDirectory) -> None:
    global _customers
    _customers = directory


def get_carts() -> CartStore:
    global _carts
    if _carts is None:
        _carts = InMemoryCartStore()
    return _carts


def set_carts(store: CartStore) -> None:
    global _carts
    _carts = store


def get_payment_authority() -> PaymentAuthority:
    """Return the current payment authority. Only ``PAYMENT_AUTHORITY=fake`` is built in."""
    global _payment_authority
    if _payment_authority is None:
        kind = os.environ.get("PAYMENT_AUTHORITY", "fake").lower()
        if kind != "fake":
            raise ValueError(f"Unknown PAYMENT_AUTHORITY '{kind}'")
        _payment_authority = FakePaymentAuthority(delay_seconds=order_settings().payment_capture_delay_seconds)
    return _payment_authority


def set_payment_authority(authority: PaymentAuthority) -> None:
    global _payment_authority
    _payment_authority = authority


def reset_gateways() -> None:
    global _customers, _carts, _payment_authority
    _customers = None
    _carts = None
    _payment_authority = None
