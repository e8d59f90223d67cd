"""In-process inventory ledger.

Keeps products in a dict guarded by one lock, which makes every
``adjust_stock`` call a compare-and-decrement. Used for development, tests,
and as the default ledger.
"""

import threading
from dataclasses import replace

import structlog

from ordering.errors import InsufficientStock, ProductNotFound
from ordering.inventory.port import InventoryLedger, ProductSnapshot

logger = structlog.get_logger(__name__)


class InMemoryInventoryLedger(InventoryLedger):
    def __init__(self) -> None:
        self._products: dict[str, ProductSnapshot] = {}
        self._lock = threading.Lock()

    def add_product(
        self,
        product_id: str,
        name: str,
        price: float,
        stock: int,
        is_active: bool = True,
        image: str | None = None,
    ) -> ProductSnapshot:
        """Register (or replace) a product in the ledger."""
        product = ProductSnapshot(
            product_id=str(product_id),
            name=name,
            price=price,
            stock=stock,
            is_active=is_active,
            image=image,
        )
        with self._lock:
            self._products[product.product_id] = product
        return product

    def deactivate(self, product_id: str) -> None:
        with self._lock:
            product = self._require(product_id)
            self._products[product.product_id] = replace(product, is_active=False)

    def get_product(self, product_id: str) -> ProductSnapshot | None:
        with self._lock:
            return self._products.get(str(product_id))

    def stock_of(self, product_id: str) -> int:
        with self._lock:
            return self._require(product_id).stock

    def adjust_stock(self, product_id: str, delta: int) -> int:
        with self._lock:
            product = self._require(product_id)
            new_stock = product.stock + delta
            if new_stock < 0:
                raise InsufficientStock(product.product_id, product.stock, -delta)
            self._products[product.product_id] = replace(product, stock=new_stock)

        logger.debug("stock_adjusted", product_id=product.product_id, delta=delta, stock=new_stock)
        return new_stock

    def _require(self, product_id: str) -> ProductSnapshot:
        product = self._products.get(str(product_id))
        if product is None:
            raise ProductNotFound(product_id)
        return product
