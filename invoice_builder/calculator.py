"""Line totals, subtotal, tax, and grand total for an invoice's items."""
from __future__ import annotations

from decimal import Decimal, localcontext
from typing import Iterable

from .schemas import LineItem, Totals
from .utils import MONEY_CONTEXT, TAX_RATE, finite_or_zero, quantize_money, to_number


class InvoiceCalculator:
    """Pure totals over the current item list; nothing is cached."""

    tax_rate = TAX_RATE

    def line_total(self, item: LineItem) -> Decimal:
        with localcontext(MONEY_CONTEXT):
            return finite_or_zero(to_number(item.quantity) * to_number(item.rate))

    def compute_totals(self, items: Iterable[LineItem]) -> Totals:
        # Overflowing amounts degrade to 0 rather than raising.
        with localcontext(MONEY_CONTEXT):
            subtotal = Decimal(0)
            for item in items:
                subtotal = finite_or_zero(subtotal + self.line_total(item))
            tax = finite_or_zero(quantize_money(subtotal * self.tax_rate))
            total = finite_or_zero(subtotal + tax)
        return Totals(subtotal=subtotal, tax=tax, total=total)


_default = InvoiceCalculator()


def line_total(item: LineItem) -> Decimal:
    return _default.line_total(item)


def compute_totals(items: Iterable[LineItem]) -> Totals:
    return _default.compute_totals(items)
