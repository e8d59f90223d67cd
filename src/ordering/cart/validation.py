"""Pre-checkout cart validation.

Advisory only: the report reflects stock at the moment of the check and
reserves nothing, so a later order placement can still fail with
``InsufficientStock`` if another customer buys first.
"""

from dataclasses import dataclass, field

from ordering.errors import EmptyCart
from ordering.gateways.port import CartStore
from ordering.inventory.port import InventoryLedger

UNAVAILABLE = "Product is no longer available"
AVAILABLE = "OK"


@dataclass(frozen=True)
class ItemCheck:
    product_id: str
    name: str | None
    requested_quantity: int
    available_stock: int
    is_valid: bool
    message: str


@dataclass(frozen=True)
class ValidationReport:
    is_valid: bool
    message: str
    items: list[ItemCheck] = field(default_factory=list)


class CartValidator:
    def __init__(self, ledger: InventoryLedger, carts: CartStore) -> None:
        self._ledger = ledger
        self._carts = carts

    def validate(self, customer_id) -> ValidationReport:
        lines = self._carts.get_cart(customer_id)
        if not lines:
            raise EmptyCart(customer_id)

        checks = [self._check(line.product_id, line.quantity) for line in lines]
        is_valid = all(check.is_valid for check in checks)
        message = "Cart is valid for checkout" if is_valid else "Some items in your cart are not available"
        return ValidationReport(is_valid=is_valid, message=message, items=checks)

    def _check(self, product_id, quantity) -> ItemCheck:
        product = self._ledger.get_product(product_id)
        if product is None or not product.is_active:
            return ItemCheck(
                product_id=str(product_id),
                name=product.name if product else None,
                requested_quantity=quantity,
                available_stock=0,
                is_valid=False,
                message=UNAVAILABLE,
            )

        enough = product.stock >= quantity
        return ItemCheck(
            product_id=product.product_id,
            name=product.name,
            requested_quantity=quantity,
            available_stock=product.stock,
            is_valid=enough,
            message=AVAILABLE if enough else f"Only {product.stock} items available",
        )
