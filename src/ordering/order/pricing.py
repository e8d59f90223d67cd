"""Order monetary totals.

Amounts are computed with ``Decimal`` and rounded half-up to cents before
being stored as floats on the aggregate, so the same inputs always produce
the same totals regardless of float accumulation order.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def to_cents(amount) -> float:
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def line_total(unit_price, quantity) -> float:
    return to_cents(Decimal(str(unit_price)) * int(quantity))


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    tax: float
    shipping_cost: float
    discount: float
    total: float


def compute_totals(line_totals, tax_rate=0.0, shipping_cost=0.0, discount=0.0) -> OrderTotals:
    """Derive subtotal, tax and grand total from line totals.

    ``total`` may come out negative when the discount is larger than
    everything else; rejecting that is the caller's decision.
    """
    subtotal = sum((Decimal(str(amount)) for amount in line_totals), Decimal("0"))
    subtotal = subtotal.quantize(_CENT, rounding=ROUND_HALF_UP)
    tax = (subtotal * Decimal(str(tax_rate or 0))).quantize(_CENT, rounding=ROUND_HALF_UP)
    shipping = Decimal(str(shipping_cost or 0)).quantize(_CENT, rounding=ROUND_HALF_UP)
    off = Decimal(str(discount or 0)).quantize(_CENT, rounding=ROUND_HALF_UP)
    total = subtotal + tax + shipping - off

    return OrderTotals(
        subtotal=float(subtotal),
        tax=float(tax),
        shipping_cost=float(shipping),
        discount=float(off),
        total=float(total),
    )
