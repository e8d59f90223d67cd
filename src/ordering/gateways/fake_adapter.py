"""In-memory collaborators for development and testing.

FakePaymentAuthority can be configured at runtime to approve or decline,
and to wait a bounded amount of time before answering like a slow gateway.
"""

import threading
import time
from uuid import uuid4

from ordering.gateways.port import (
    CaptureResult,
    CartLine,
    CartStore,
    CustomerDirectory,
    PaymentAuthority,
)

# Upper bound for the simulated gateway latency, in seconds
MAX_DELAY_SECONDS = 5.0


class InMemoryCustomerDirectory(CustomerDirectory):
    def __init__(self, customer_ids=()) -> None:
        self._customers = {str(customer_id) for customer_id in customer_ids}

    def register(self, customer_id: str) -> None:
        self._customers.add(str(customer_id))

    def exists(self, customer_id: str) -> bool:
        return str(customer_id) in self._customers


class InMemoryCartStore(CartStore):
    def __init__(self) -> None:
        self._carts: dict[str, list[CartLine]] = {}
        self._lock = threading.Lock()
        self.fail_on_clear = False

    def put(self, customer_id: str, lines) -> None:
        """Replace the customer's cart. ``lines`` are (product_id, quantity) pairs or CartLines."""
        cart = [line if isinstance(line, CartLine) else CartLine(str(line[0]), int(line[1])) for line in lines]
        with self._lock:
            self._carts[str(customer_id)] = cart

    def get_cart(self, customer_id: str) -> list[CartLine]:
        with self._lock:
            return list(self._carts.get(str(customer_id), []))

    def clear_cart(self, customer_id: str) -> None:
        if self.fail_on_clear:
            raise ConnectionError("Cart store unavailable")
        with self._lock:
            self._carts.pop(str(customer_id), None)


class FakePaymentAuthority(PaymentAuthority):
    """Configurable fake payment authority."""

    def __init__(self, delay_seconds: float = 0.0) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Card declined"
        self.delay_seconds = min(max(delay_seconds, 0.0), MAX_DELAY_SECONDS)
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Card declined", delay_seconds=None) -> None:
        """Configure authority behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        if delay_seconds is not None:
            self.delay_seconds = min(max(delay_seconds, 0.0), MAX_DELAY_SECONDS)

    def capture(self, order_id: str, amount: float, currency: str, payment_method: str) -> CaptureResult:
        self.calls.append(
            {
                "order_id": order_id,
                "amount": amount,
                "currency": currency,
                "payment_method": payment_method,
            }
        )

        if self.delay_seconds:
            time.sleep(self.delay_seconds)

        if self.should_succeed:
            return CaptureResult(success=True, transaction_id=f"fake_txn_{uuid4().hex[:12]}")
        return CaptureResult(success=False, failure_reason=self.failure_reason)
