from ordering.order.pricing import compute_totals, line_total, to_cents


def test_line_total_multiplies_price_by_quantity():
    assert line_total(10.0, 2) == 20.0


def test_line_total_rounds_to_cents():
    assert line_total(0.1, 3) == 0.3


def test_to_cents_rounds_half_up():
    assert to_cents(2.675) == 2.68
    assert to_cents(1.005) == 1.01


def test_totals_with_tax_and_shipping():
    totals = compute_totals([20.0], tax_rate=0.1, shipping_cost=5.0, discount=0.0)

    assert totals.subtotal == 20.0
    assert totals.tax == 2.0
    assert totals.total == 27.0


def test_discount_reduces_total():
    totals = compute_totals([30.0, 12.5], tax_rate=0.0, shipping_cost=0.0, discount=2.5)

    assert totals.subtotal == 42.5
    assert totals.total == 40.0


def test_tax_is_rounded_to_cents():
    totals = compute_totals([33.33], tax_rate=0.075)

    assert totals.tax == 2.5
    assert totals.total == 35.83


def test_oversized_discount_yields_negative_total():
    totals = compute_totals([10.0], discount=15.0)

    assert totals.total == -5.0
