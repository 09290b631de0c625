"""Validation engine applying header, line-item, and business rules."""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from dateutil.relativedelta import relativedelta

from .calculator import compute_totals
from .schemas import Invoice, Totals, ValidationResult, ValidationStatus
from .utils import (
    DEFAULT_CURRENCY,
    DEFAULT_LOCALE,
    EMAIL_PATTERN,
    PHONE_PATTERN,
    PHONE_STRIP,
    format_currency,
    format_number,
    is_blank,
    parse_number,
)

MAX_QUANTITY = 1000
MAX_RATE = 100000
MAX_TOTAL = 1000000
MAX_ITEMS = 20


class InvoiceValidator:
    def __init__(self, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE) -> None:
        self.currency = currency
        self.locale = locale

    def _money(self, amount) -> str:
        return format_currency(amount, self.currency, self.locale)

    def validate(self, invoice: Invoice, totals: Optional[Totals] = None, today: Optional[date] = None) -> ValidationResult:
        if totals is None:
            totals = compute_totals(invoice.line_items)
        today = today or date.today()

        errors: Dict[str, str] = {}
        warnings: List[str] = []

        # Header
        if is_blank(invoice.client_name):
            errors["client_name"] = "Client name is required"
        elif len(invoice.client_name.strip()) < 2:
            warnings.append("Client name seems very short")

        if invoice.has_vendor and is_blank(invoice.vendor_name):
            errors["vendor_name"] = "Vendor name is required"
        if invoice.invoice_number is not None and is_blank(invoice.invoice_number):
            errors["invoice_number"] = "Invoice number is required"

        for field in ("client_email", "vendor_email"):
            value = getattr(invoice, field)
            if not is_blank(value) and not EMAIL_PATTERN.match(value.strip()):
                errors[field] = "Please enter a valid email address"
        for field in ("client_phone", "vendor_phone"):
            value = getattr(invoice, field)
            if not is_blank(value) and not PHONE_PATTERN.match(PHONE_STRIP.sub("", value)):
                errors[field] = "Please enter a valid phone number"

        # Dates
        if invoice.invoice_date and invoice.invoice_date > today + relativedelta(years=1):
            warnings.append("Invoice date is more than a year in the future")
        if invoice.due_date and invoice.invoice_date and invoice.due_date < invoice.invoice_date:
            errors["due_date"] = "Due date cannot be before invoice date"

        # Line items
        has_contributing_items = False
        for index, item in enumerate(invoice.line_items, start=1):
            description = item.description.strip()
            if not description:
                errors[f"{item.id}-description"] = "Description is required"
            elif len(description) < 3:
                warnings.append(f"Item {index}: Description seems very short")

            quantity = parse_number(item.quantity)
            if quantity is None or quantity <= 0:
                errors[f"{item.id}-quantity"] = "Quantity must be greater than 0"
            elif quantity > MAX_QUANTITY:
                warnings.append(f"Item {index}: Very high quantity ({format_number(quantity)})")

            rate = parse_number(item.rate)
            if rate is None or rate < 0:
                errors[f"{item.id}-rate"] = "Rate must be 0 or greater"
            elif rate == 0:
                warnings.append(f"Item {index}: Rate is set to 0")
            elif rate > MAX_RATE:
                warnings.append(f"Item {index}: Very high rate ({self._money(rate)})")

            if description and quantity is not None and quantity > 0 and rate is not None and rate >= 0:
                has_contributing_items = True

        # Business rules
        if totals.total == 0 and has_contributing_items:
            warnings.append("Invoice total is 0 - check your rates")
        elif totals.total > MAX_TOTAL:
            warnings.append(f"Very high invoice total: {self._money(totals.total)}")

        item_count = len(invoice.line_items)
        if item_count > MAX_ITEMS:
            warnings.append(f"High number of line items ({item_count})")

        if errors:
            return ValidationResult(
                status=ValidationStatus.INVALID,
                message=f"Found {len(errors)} error(s) that need to be fixed",
                details=list(errors.values()),
                errors=errors,
                warnings=warnings,
            )
        if warnings:
            return ValidationResult(
                status=ValidationStatus.VALID_WITH_WARNINGS,
                message="Invoice is valid but has some warnings",
                details=warnings,
                warnings=warnings,
            )
        details = [f"Client: {invoice.client_name.strip()}"]
        if invoice.has_vendor:
            details.append(f"Vendor: {invoice.vendor_name.strip()}")
        details += [f"Items: {item_count}", f"Total: {self._money(totals.total)}"]
        return ValidationResult(
            status=ValidationStatus.VALID,
            message="Invoice is valid and ready to use!",
            details=details,
        )
