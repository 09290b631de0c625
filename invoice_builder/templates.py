"""HTML preview templates: minimal, professional, and modern layouts."""
from __future__ import annotations

import html
from abc import ABC, abstractmethod
from typing import Dict, List, Type

from .calculator import line_total
from .schemas import Invoice, Totals
from .utils import DEFAULT_CURRENCY, DEFAULT_LOCALE, address_lines, format_currency, format_date, to_number


def _esc(value: object) -> str:
    return html.escape("" if value is None else str(value))


class Template(ABC):
    """A visual layout that turns an invoice and its totals into an HTML document."""

    name: str = ""
    title: str = "Invoice"
    accent: str = "#000000"

    def __init__(self, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE) -> None:
        self.currency = currency
        self.locale = locale

    def money(self, amount: object) -> str:
        return format_currency(amount, self.currency, self.locale)

    def item_rows(self, invoice: Invoice, cell_style: str) -> str:
        rows = []
        for i, item in enumerate(invoice.line_items, start=1):
            label = item.description.strip() or f"Item {i}"
            rows.append(f"""
        <tr>
            <td style="{cell_style}">{_esc(label)}</td>
            <td style="{cell_style} text-align:right;">{_esc(item.quantity or 0)}</td>
            <td style="{cell_style} text-align:right;">{self.money(to_number(item.rate))}</td>
            <td style="{cell_style} text-align:right;">{self.money(line_total(item))}</td>
        </tr>""")
        return "".join(rows)

    def party_block(self, label: str, name: object, address: object, email: object, phone: object) -> str:
        lines = [f"<strong>{_esc(name or label)}</strong>"]
        lines += [_esc(line) for line in address_lines(address)]
        lines += [_esc(v) for v in (email, phone) if v and str(v).strip()]
        return f'<div><div style="font-size:12px; text-transform:uppercase; color:#666;">{_esc(label)}</div>{"<br/>".join(lines)}</div>'

    def meta_block(self, invoice: Invoice) -> str:
        rows = []
        if invoice.invoice_number is not None:
            rows.append(("Invoice No", invoice.invoice_number))
        rows.append(("Invoice Date", format_date(invoice.invoice_date, self.locale)))
        if invoice.due_date is not None:
            rows.append(("Due Date", format_date(invoice.due_date, self.locale)))
        return "<br/>".join(f"{label}: {_esc(value)}" for label, value in rows)

    def totals_block(self, totals: Totals) -> str:
        return f"""
    <table style="margin-left:auto; font-size:14px;">
        <tr><td>Subtotal</td><td style="text-align:right; padding-left:24px;">{self.money(totals.subtotal)}</td></tr>
        <tr><td>GST (18%)</td><td style="text-align:right; padding-left:24px;">{self.money(totals.tax)}</td></tr>
        <tr><td><strong>Total</strong></td><td style="text-align:right; padding-left:24px;"><strong>{self.money(totals.total)}</strong></td></tr>
    </table>"""

    def document(self, body: str) -> str:
        return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{_esc(self.title)}</title></head>
<body style="margin:0; font-family:Helvetica, Arial, sans-serif; color:#222;">
{body}
</body>
</html>
"""

    @abstractmethod
    def render(self, invoice: Invoice, totals: Totals) -> str:
        ...


class MinimalTemplate(Template):
    name = "minimal"
    title = "Invoice"
    accent = "#333333"

    def render(self, invoice: Invoice, totals: Totals) -> str:
        cell = "padding:4px 0; border-bottom:1px solid #eee;"
        body = f"""
<div style="max-width:720px; margin:32px auto;">
    <h1 style="font-weight:300; letter-spacing:2px;">{_esc(self.title.upper())}</h1>
    <p>{self.meta_block(invoice)}</p>
    {self.party_block("Bill To", invoice.client_name, invoice.client_address, invoice.client_email, invoice.client_phone)}
    <table style="width:100%; border-collapse:collapse; margin-top:24px; font-size:14px;">
        <thead><tr><th style="text-align:left;">Description</th><th style="text-align:right;">Qty</th><th style="text-align:right;">Rate</th><th style="text-align:right;">Amount</th></tr></thead>
        <tbody>{self.item_rows(invoice, cell)}</tbody>
    </table>
    {self.totals_block(totals)}
</div>"""
        return self.document(body)


class ProfessionalTemplate(Template):
    name = "professional"
    title = "Tax Invoice"
    accent = "#1f3a5f"

    def render(self, invoice: Invoice, totals: Totals) -> str:
        cell = "padding:6px; border:1px solid #ddd;"
        vendor = ""
        if invoice.has_vendor:
            vendor = self.party_block("From", invoice.vendor_name, invoice.vendor_address, invoice.vendor_email, invoice.vendor_phone)
        body = f"""
<div style="max-width:780px; margin:24px auto; border:1px solid #ccc;">
    <div style="background:{self.accent}; color:#fff; padding:16px 24px; display:flex; justify-content:space-between;">
        <h1 style="margin:0;">{_esc(self.title)}</h1>
        <div style="text-align:right;">{self.meta_block(invoice)}</div>
    </div>
    <div style="padding:24px; display:flex; justify-content:space-between;">
        {vendor}
        {self.party_block("Bill To", invoice.client_name or "Client Name", invoice.client_address, invoice.client_email, invoice.client_phone)}
    </div>
    <div style="padding:0 24px 24px;">
        <table style="width:100%; border-collapse:collapse; font-size:14px;">
            <thead><tr style="background:#f5f5f5;"><th style="{cell} text-align:left;">Description</th><th style="{cell} text-align:right;">Qty</th><th style="{cell} text-align:right;">Rate</th><th style="{cell} text-align:right;">Amount</th></tr></thead>
            <tbody>{self.item_rows(invoice, cell)}</tbody>
        </table>
        {self.totals_block(totals)}
    </div>
</div>"""
        return self.document(body)


class ModernTemplate(Template):
    name = "modern"
    title = "Invoice"
    accent = "#4f46e5"

    def render(self, invoice: Invoice, totals: Totals) -> str:
        cell = "padding:10px 8px; border-bottom:1px solid #e5e7eb;"
        body = f"""
<div style="max-width:760px; margin:32px auto; border-radius:12px; overflow:hidden; box-shadow:0 4px 16px rgba(0,0,0,.08);">
    <div style="background:linear-gradient(135deg, {self.accent}, #7c3aed); color:#fff; padding:28px;">
        <h1 style="margin:0 0 8px;">{_esc(self.title)}</h1>
        <div>{self.meta_block(invoice)}</div>
    </div>
    <div style="padding:28px;">
        {self.party_block("Billed To", invoice.client_name or "Client Name", invoice.client_address, invoice.client_email, invoice.client_phone)}
        <table style="width:100%; border-collapse:collapse; margin-top:20px; font-size:14px;">
            <thead><tr style="color:{self.accent};"><th style="{cell} text-align:left;">Item</th><th style="{cell} text-align:right;">Qty</th><th style="{cell} text-align:right;">Rate</th><th style="{cell} text-align:right;">Total</th></tr></thead>
            <tbody>{self.item_rows(invoice, cell)}</tbody>
        </table>
        <div style="margin-top:16px; padding:16px; background:#eef2ff; border-radius:8px;">{self.totals_block(totals)}</div>
    </div>
</div>"""
        return self.document(body)


TEMPLATES: Dict[str, Type[Template]] = {
    cls.name: cls for cls in (MinimalTemplate, ProfessionalTemplate, ModernTemplate)
}


def template_names() -> List[str]:
    return sorted(TEMPLATES)


def get_template(name: str, currency: str = DEFAULT_CURRENCY, locale: str = DEFAULT_LOCALE) -> Template:
    try:
        cls = TEMPLATES[name.strip().lower()]
    except KeyError:
        raise KeyError(f"Unknown template {name!r}; choose one of: {', '.join(template_names())}") from None
    return cls(currency=currency, locale=locale)
