"""Utility functions shared across the invoice builder."""
from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation, localcontext
from typing import List, Optional

from dateutil import parser

TAX_RATE = Decimal("0.18")
MONEY_QUANT = Decimal("0.01")
# Money arithmetic never traps: overflow gives Infinity and an unrepresentable quantize gives NaN.
MONEY_CONTEXT = Context(prec=100, rounding=ROUND_HALF_UP, traps=[])

DEFAULT_CURRENCY = "INR"
DEFAULT_LOCALE = "en-IN"
CURRENCY_SYMBOLS = {"INR": "₹", "USD": "$", "EUR": "€", "GBP": "£"}

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{3,14}$")
PHONE_STRIP = re.compile(r"[\s\-()]")
# Longest leading numeric prefix, the way a browser's parseFloat reads input.
NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_date(value: object) -> Optional[date]:
    """Parse a date string into a date object; returns None on failure."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parser.parse(str(value), dayfirst=False, yearfirst=True).date()
    except (ValueError, TypeError, OverflowError):
        try:
            return parser.parse(str(value), dayfirst=True, yearfirst=True).date()
        except (ValueError, TypeError, OverflowError):
            return None


def parse_number(value: object) -> Optional[Decimal]:
    """Read a user-entered quantity or rate; returns None when nothing numeric is there."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    match = NUMBER_PREFIX.match(str(value))
    if not match:
        return None
    try:
        number = Decimal(match.group(1))
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def to_number(value: object) -> Decimal:
    """Coerce to a number for arithmetic; anything unreadable counts as 0."""
    number = parse_number(value)
    return number if number is not None else Decimal(0)


def finite_or_zero(value: Decimal) -> Decimal:
    return value if value.is_finite() else Decimal(0)


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents; amounts too large to carry cents are returned unrounded."""
    with localcontext(MONEY_CONTEXT):
        rounded = value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)
    return rounded if rounded.is_finite() else value


def _group_digits(digits: str, locale: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    # Indian grouping: last three digits, then pairs (12,34,567).
    size = 2 if locale.endswith("-IN") else 3
    groups: List[str] = []
    while head:
        groups.insert(0, head[-size:])
        head = head[:-size]
    return ",".join(groups + [tail])


def format_currency(amount: object, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE) -> str:
    """Format an amount as fixed two-decimal currency, e.g. ``₹1,00,000.01``."""
    value = quantize_money(to_number(amount))
    sign = "-" if value < 0 else ""
    with localcontext(MONEY_CONTEXT):
        whole, _, fraction = f"{value.copy_abs():.2f}".partition(".")
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    return f"{sign}{symbol}{_group_digits(whole, locale)}.{fraction}"


def format_number(value: Decimal) -> str:
    """Render a parsed number without trailing zeros (``1001``, ``2.5``)."""
    if value == value.to_integral_value():
        return str(value.to_integral_value())
    return format(value.normalize(), "f")


def format_date(value: Optional[date], locale: str = DEFAULT_LOCALE) -> str:
    """Long-form date: ``19 October 2026``, or ``October 19, 2026`` for en-US."""
    if value is None:
        return ""
    month = value.strftime("%B")
    if locale == "en-US":
        return f"{month} {value.day}, {value.year}"
    return f"{value.day} {month} {value.year}"


def address_lines(address: Optional[str]) -> List[str]:
    """Split a multi-line address into its non-blank lines."""
    if not address:
        return []
    return [line.strip() for line in address.splitlines() if line.strip()]


def is_blank(value: Optional[str]) -> bool:
    return not (value or "").strip()
