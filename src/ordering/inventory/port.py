"""Inventory ledger port (abstract interface).

The ordering core never writes product stock directly. It reads product
snapshots and moves stock through ``adjust_stock``, which every adapter must
implement as a single atomic step: a decrement either applies in full or
fails with ``InsufficientStock`` and changes nothing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProductSnapshot:
    """What the ordering core needs to know about a product at one instant."""

    product_id: str
    name: str
    price: float
    stock: int
    is_active: bool = True
    image: str | None = None


class InventoryLedger(ABC):
    """Abstract catalogue and stock ledger."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductSnapshot | None:
        """Return the product, or None if the catalogue does not know it."""
        ...

    @abstractmethod
    def stock_of(self, product_id: str) -> int:
        """Current stock level. Raises ``ProductNotFound`` for unknown products."""
        ...

    @abstractmethod
    def adjust_stock(self, product_id: str, delta: int) -> int:
        """Atomically add ``delta`` to the product's stock and return the new level.

        Raises:
            ProductNotFound: the product does not exist.
            InsufficientStock: ``delta`` is negative and larger than the stock on hand.
        """
        ...
