"""Ports for the collaborators the ordering core consumes but does not own.

- CustomerDirectory: does a customer exist?
- CartStore: the customer's current cart lines, and clearing them after checkout
- PaymentAuthority: an external system that captures money and answers yes or no
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class CaptureResult:
    """Result of a payment capture attempt."""

    success: bool
    transaction_id: str | None = None
    failure_reason: str | None = None


class CustomerDirectory(ABC):
    @abstractmethod
    def exists(self, customer_id: str) -> bool: ...


class CartStore(ABC):
    @abstractmethod
    def get_cart(self, customer_id: str) -> list[CartLine]:
        """Lines in the customer's cart; an empty list when there is no cart."""
        ...

    @abstractmethod
    def clear_cart(self, customer_id: str) -> None: ...


class PaymentAuthority(ABC):
    @abstractmethod
    def capture(self, order_id: str, amount: float, currency: str, payment_method: str) -> CaptureResult:
        """Capture ``amount`` for the order. Must always return, never block indefinitely."""
        ...
