from __future__ import annotations

import itertools
from decimal import Decimal

from invoice_builder.calculator import InvoiceCalculator, compute_totals, line_total
from invoice_builder.schemas import LineItem


def test_line_total_multiplies_quantity_and_rate():
    assert line_total(LineItem(id=1, quantity=10, rate=500)) == Decimal("5000")
    assert line_total(LineItem(id=1, quantity="2.5", rate="4")) == Decimal("10")


def test_line_total_treats_unreadable_input_as_zero():
    assert line_total(LineItem(id=1, quantity="", rate=100)) == 0
    assert line_total(LineItem(id=1, quantity="abc", rate=100)) == 0
    assert line_total(LineItem(id=1, quantity=3, rate=None)) == 0
    assert line_total(LineItem(id=1, quantity=float("nan"), rate=5)) == 0


def test_line_total_reads_leading_number_like_a_form_field():
    assert line_total(LineItem(id=1, quantity="12abc", rate="1")) == Decimal("12")


def test_totals_for_single_item():
    totals = compute_totals([LineItem(id=1, description="Consulting Services", quantity=10, rate=500)])
    assert totals.subtotal == Decimal("5000")
    assert totals.tax == Decimal("900")
    assert totals.total == Decimal("5900")


def test_tax_is_rounded_to_cents():
    totals = compute_totals([LineItem(id=1, quantity=1, rate="0.05")])
    assert totals.tax == Decimal("0.01")
    assert totals.total == Decimal("0.06")


def test_totals_are_order_independent():
    items = [
        LineItem(id=1, quantity="0.1", rate="3"),
        LineItem(id=2, quantity=7, rate="19.99"),
        LineItem(id=3, quantity="2", rate="0.3"),
    ]
    expected = compute_totals(items)
    for perm in itertools.permutations(items):
        assert compute_totals(perm) == expected
    assert expected.subtotal == sum(line_total(item) for item in items)
    assert expected.total == expected.subtotal + expected.tax


def test_totals_of_zero_priced_items():
    totals = InvoiceCalculator().compute_totals([LineItem(id=1, description="Widget", quantity=2, rate=0)])
    assert totals.subtotal == 0
    assert totals.tax == 0
    assert totals.total == 0


def test_tax_rate_is_fixed():
    assert InvoiceCalculator.tax_rate == Decimal("0.18")


def test_huge_amounts_do_not_raise():
    totals = compute_totals([LineItem(id=1, quantity="1e20", rate="1e10")])
    assert totals.subtotal == Decimal("1e30")
    assert totals.tax == Decimal("1.8e29")
    assert totals.total == Decimal("1.18e30")


def test_overflowing_line_total_counts_as_zero():
    item = LineItem(id=1, quantity="1e999999", rate="10")
    assert line_total(item) == 0
    assert compute_totals([item, LineItem(id=2, quantity=2, rate=5)]).subtotal == Decimal("10")
