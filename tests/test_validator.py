from __future__ import annotations

from datetime import date

import pytest

from invoice_builder.calculator import compute_totals
from invoice_builder.schemas import Invoice, LineItem, ValidationStatus
from invoice_builder.validator import InvoiceValidator

TODAY = date(2026, 10, 19)


def make_invoice(items=None, **header) -> Invoice:
    header.setdefault("client_name", "Acme Corp")
    header.setdefault("invoice_date", TODAY)
    if items is None:
        items = [LineItem(id=1, description="Consulting Services", quantity=10, rate=500)]
    return Invoice(line_items=items, **header)


def validate(invoice: Invoice):
    return InvoiceValidator().validate(invoice, today=TODAY)


def test_all_errors_are_collected():
    invoice = make_invoice(client_name="", items=[LineItem(id=7, description="", quantity="0", rate="-5")])
    result = validate(invoice)
    assert result.status is ValidationStatus.INVALID
    assert set(result.errors) == {"client_name", "7-description", "7-quantity", "7-rate"}
    assert result.message == "Found 4 error(s) that need to be fixed"
    assert result.details == [
        "Client name is required",
        "Description is required",
        "Quantity must be greater than 0",
        "Rate must be 0 or greater",
    ]
    assert result.warnings == []
    assert not result.is_valid


def test_zero_rate_item_gives_warnings_only():
    invoice = make_invoice(client_name="A", items=[LineItem(id=1, description="Widget", quantity=2, rate=0)])
    totals = compute_totals(invoice.line_items)
    result = InvoiceValidator().validate(invoice, totals, today=TODAY)
    assert result.status is ValidationStatus.VALID_WITH_WARNINGS
    assert result.message == "Invoice is valid but has some warnings"
    assert result.details == [
        "Client name seems very short",
        "Item 1: Rate is set to 0",
        "Invoice total is 0 - check your rates",
    ]
    assert result.errors == {}
    assert result.is_valid
    assert (totals.subtotal, totals.tax, totals.total) == (0, 0, 0)


def test_clean_invoice_is_valid_with_summary():
    result = validate(make_invoice())
    assert result.status is ValidationStatus.VALID
    assert result.message == "Invoice is valid and ready to use!"
    assert result.details == ["Client: Acme Corp", "Items: 1", "Total: ₹5,900.00"]


def test_summary_names_vendor_when_present():
    result = validate(make_invoice(vendor_name="Blue Ocean Pvt Ltd"))
    assert result.details[1] == "Vendor: Blue Ocean Pvt Ltd"


def test_due_date_before_invoice_date():
    result = validate(make_invoice(due_date=date(2026, 10, 1)))
    assert result.errors == {"due_date": "Due date cannot be before invoice date"}

    for due in (TODAY, date(2026, 11, 18)):
        assert "due_date" not in validate(make_invoice(due_date=due)).errors


def test_validation_is_idempotent():
    invoice = make_invoice(client_name="A", items=[LineItem(id=1, description="Wi", quantity=2000, rate=0)])
    validator = InvoiceValidator()
    assert validator.validate(invoice, today=TODAY) == validator.validate(invoice, today=TODAY)


@pytest.mark.parametrize("quantity, warned", [(1000, False), (1001, True)])
def test_quantity_warning_boundary(quantity, warned):
    result = validate(make_invoice(items=[LineItem(id=1, description="Bolts", quantity=quantity, rate=1)]))
    assert ("Item 1: Very high quantity (1001)" in result.warnings) is warned
    assert result.status is (ValidationStatus.VALID_WITH_WARNINGS if warned else ValidationStatus.VALID)


@pytest.mark.parametrize("rate, warned", [("100000", False), ("100000.01", True)])
def test_rate_warning_boundary(rate, warned):
    result = validate(make_invoice(items=[LineItem(id=1, description="Server rack", quantity=1, rate=rate)]))
    assert ("Item 1: Very high rate (₹1,00,000.01)" in result.warnings) is warned


@pytest.mark.parametrize("count, warned", [(20, False), (21, True)])
def test_item_count_warning_boundary(count, warned):
    items = [LineItem(id=i, description=f"Part {i}", quantity=1, rate=10) for i in range(1, count + 1)]
    result = validate(make_invoice(items=items))
    assert (f"High number of line items ({count})" in result.warnings) is warned


def test_unreadable_rate_is_an_error():
    result = validate(make_invoice(items=[LineItem(id=3, description="Design", quantity=1, rate="n/a")]))
    assert result.errors == {"3-rate": "Rate must be 0 or greater"}


def test_short_description_warning():
    result = validate(make_invoice(items=[LineItem(id=1, description=" ab ", quantity=1, rate=10)]))
    assert result.warnings == ["Item 1: Description seems very short"]


def test_very_high_total_warning():
    result = validate(make_invoice(items=[LineItem(id=1, description="Turbines", quantity=10, rate=100000)]))
    assert result.warnings == ["Very high invoice total: ₹11,80,000.00"]


def test_invoice_date_more_than_a_year_ahead():
    assert validate(make_invoice(invoice_date=date(2027, 10, 19))).warnings == []
    assert validate(make_invoice(invoice_date=date(2027, 10, 20))).warnings == [
        "Invoice date is more than a year in the future"
    ]


def test_optional_header_fields_only_checked_when_present():
    assert validate(make_invoice()).errors == {}
    result = validate(make_invoice(vendor_name=" ", invoice_number=""))
    assert result.errors == {
        "vendor_name": "Vendor name is required",
        "invoice_number": "Invoice number is required",
    }


@pytest.mark.parametrize(
    "email, ok",
    [("billing@acme.in", True), ("", True), ("not-an-email", False), ("a@b", False), ("a b@c.io", False)],
)
def test_email_format(email, ok):
    result = validate(make_invoice(client_email=email, vendor_email=email))
    assert ("client_email" not in result.errors) is ok
    assert ("vendor_email" not in result.errors) is ok


@pytest.mark.parametrize(
    "phone, ok",
    [("+91 98765-43210", True), ("(555) 123-4567", True), ("   ", True), ("0123 456", False), ("+12", False), ("12345678901234567", False)],
)
def test_phone_format(phone, ok):
    result = validate(make_invoice(client_phone=phone))
    assert ("client_phone" not in result.errors) is ok
    if not ok:
        assert result.errors["client_phone"] == "Please enter a valid phone number"


def test_huge_rate_is_reported_not_raised():
    result = validate(make_invoice(items=[LineItem(id=1, description="Bulk order", quantity=1, rate="1e30")]))
    assert result.status is ValidationStatus.VALID_WITH_WARNINGS
    assert result.warnings[0] == "Item 1: Very high rate (₹10,00,00,00,00,00,00,00,00,00,00,00,00,00,000.00)"
    assert result.warnings[1].startswith("Very high invoice total: ₹")


def test_overflowing_quantity_is_reported_not_raised():
    result = validate(make_invoice(items=[LineItem(id=1, description="Bulk order", quantity="1e999999", rate="10")]))
    assert result.status is ValidationStatus.VALID_WITH_WARNINGS
    assert "Invoice total is 0 - check your rates" in result.warnings


@pytest.mark.parametrize(
    "item",
    [
        LineItem(id=1, description="", quantity=2, rate=0),
        LineItem(id=1, description="Widget", quantity=0, rate=0),
        LineItem(id=1, description="Widget", quantity=2, rate="-1"),
    ],
)
def test_zero_total_without_contributing_items_does_not_warn(item):
    result = validate(make_invoice(items=[item]))
    assert "Invoice total is 0 - check your rates" not in result.warnings


@pytest.mark.parametrize(
    "items, expected",
    [
        ([LineItem(id=1, description="Widget", quantity=2, rate=0)], "Invoice total is 0 - check your rates"),
        ([LineItem(id=1, description="Turbines", quantity=10, rate=100000)], "Very high invoice total: ₹11,80,000.00"),
        (
            [
                LineItem(id=1, description="Sample", quantity=1, rate=0),
                LineItem(id=2, description="Turbines", quantity=10, rate=100000),
            ],
            "Very high invoice total: ₹11,80,000.00",
        ),
    ],
)
def test_total_warnings_exclude_each_other(items, expected):
    result = validate(make_invoice(items=items))
    total_warnings = [w for w in result.warnings if w.startswith(("Invoice total is 0", "Very high invoice total"))]
    assert total_warnings == [expected]


@pytest.mark.parametrize("quantity", ["abc", "", None, "-2"])
def test_unreadable_or_negative_quantity_is_an_error(quantity):
    result = validate(make_invoice(items=[LineItem(id=4, description="Widget", quantity=quantity, rate=10)]))
    assert result.errors == {"4-quantity": "Quantity must be greater than 0"}


@pytest.mark.parametrize("field, value", [("vendor_email", "hello@blueocean.in"), ("vendor_phone", "+91 98765 43210"), ("vendor_address", "Pune")])
def test_vendor_name_required_when_any_vendor_field_present(field, value):
    result = validate(make_invoice(**{field: value}))
    assert result.errors == {"vendor_name": "Vendor name is required"}
