"""PDF export of a validated invoice, laid out with reportlab."""
from __future__ import annotations

import html
import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .calculator import compute_totals, line_total
from .schemas import ExportResult, Invoice, Totals
from .templates import Template, get_template
from .utils import CURRENCY_SYMBOLS, address_lines, format_date, to_number
from .validator import InvoiceValidator

logger = logging.getLogger(__name__)

UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe(part: str) -> str:
    return UNSAFE_FILENAME_CHARS.sub("_", part.strip()).strip("_")


class InvoiceExporter:
    """Render the current invoice to a PDF file once it passes validation."""

    def __init__(self, template: Optional[Template] = None, validator: Optional[InvoiceValidator] = None) -> None:
        self.template = template or get_template("professional")
        self.validator = validator or InvoiceValidator(self.template.currency, self.template.locale)
        self.exporting = False

    def build_filename(self, invoice: Invoice) -> str:
        parts = ["Invoice"]
        if invoice.invoice_number and _safe(invoice.invoice_number):
            parts.append(_safe(invoice.invoice_number))
        parts.append(_safe(invoice.client_name) or "Client")
        if invoice.invoice_date:
            parts.append(invoice.invoice_date.isoformat())
        return "_".join(parts) + ".pdf"

    def export(self, invoice: Invoice, output_dir: Path) -> ExportResult:
        totals = compute_totals(invoice.line_items)
        validation = self.validator.validate(invoice, totals)
        if not validation.is_valid:
            logger.info("Refusing to export %s: %s", invoice.display_id, validation.message)
            return ExportResult(success=False, error="Please fix validation errors before exporting", validation=validation)

        self.exporting = True
        try:
            output_dir = Path(output_dir)
            output_dir.mkdir(parents=True, exist_ok=True)
            path = output_dir / self.build_filename(invoice)
            path.write_bytes(self.render_pdf(invoice, totals))
        except Exception as exc:
            logger.exception("Failed to export invoice %s", invoice.display_id)
            return ExportResult(success=False, error=f"Failed to generate PDF: {exc}", validation=validation)
        finally:
            self.exporting = False

        logger.info("Exported invoice %s -> %s", invoice.display_id, path)
        return ExportResult(success=True, path=path, validation=validation)

    def _pdf_money(self, amount: object) -> str:
        # The standard PDF fonts have no glyph for some symbols (e.g. ₹); print the code instead.
        text = self.template.money(amount)
        code = self.template.currency.upper()
        symbol = CURRENCY_SYMBOLS.get(code)
        if symbol and not symbol.encode("cp1252", errors="ignore"):
            text = text.replace(symbol, f"{code} ")
        return text

    def render_pdf(self, invoice: Invoice, totals: Optional[Totals] = None) -> bytes:
        if totals is None:
            totals = compute_totals(invoice.line_items)
        template = self.template
        accent = colors.HexColor(template.accent)
        money = self._pdf_money

        def _on_page(canvas, doc):
            canvas.setTitle(invoice.invoice_number or template.title)
            canvas.setSubject("Invoice")
            canvas.setAuthor(invoice.vendor_name or "Invoice Builder")
            canvas.setCreator("Invoice Builder")

        buf = BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=18*mm, rightMargin=18*mm, topMargin=16*mm, bottomMargin=16*mm)
        styles = getSampleStyleSheet()
        style_n = styles["Normal"]
        style_b = styles["Heading4"]
        style_right = ParagraphStyle("right", parent=style_n, alignment=TA_RIGHT)
        style_title = ParagraphStyle("title", parent=styles["Title"], textColor=accent, alignment=0)

        story = [Paragraph(html.escape(template.title), style_title)]

        meta = []
        if invoice.invoice_number is not None:
            meta.append(f"Invoice No: {html.escape(invoice.invoice_number)}")
        meta.append(f"Invoice Date: {format_date(invoice.invoice_date, template.locale)}")
        if invoice.due_date is not None:
            meta.append(f"Due Date: {format_date(invoice.due_date, template.locale)}")

        vendor_lines = []
        if invoice.has_vendor:
            vendor_lines = [f"<b>{html.escape(invoice.vendor_name or '')}</b>"]
            vendor_lines += [html.escape(line) for line in address_lines(invoice.vendor_address)]
            vendor_lines += [html.escape(v) for v in (invoice.vendor_email, invoice.vendor_phone) if v and v.strip()]

        header = Table(
            [[Paragraph("<br/>".join(vendor_lines), style_n), Paragraph("<br/>".join(meta), style_right)]],
            colWidths=[110*mm, 64*mm],
        )
        header.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        story.append(header)
        story.append(Spacer(1, 6))

        story.append(Paragraph("<b>Bill To</b>", style_b))
        bill_to = [html.escape(invoice.client_name)]
        bill_to += [html.escape(line) for line in address_lines(invoice.client_address)]
        bill_to += [html.escape(v) for v in (invoice.client_email, invoice.client_phone) if v and v.strip()]
        story.extend(Paragraph(line, style_n) for line in bill_to if line)
        story.append(Spacer(1, 6))

        tbl_data = [["#", "Description", "Qty", "Rate", "Amount"]]
        for i, item in enumerate(invoice.line_items, start=1):
            tbl_data.append([
                str(i),
                Paragraph(html.escape(item.description.strip() or f"Item {i}"), style_n),
                str(item.quantity if item.quantity not in (None, "") else 0),
                money(to_number(item.rate)),
                money(line_total(item)),
            ])
        table = Table(tbl_data, repeatRows=1, colWidths=[10*mm, 84*mm, 20*mm, 30*mm, 30*mm])
        table.setStyle(TableStyle([
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("BACKGROUND", (0, 0), (-1, 0), accent),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("ALIGN", (2, 1), (4, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ]))
        story.append(table)
        story.append(Spacer(1, 6))

        totals_tbl = Table(
            [["Subtotal", money(totals.subtotal)], ["GST (18%)", money(totals.tax)], ["Total", money(totals.total)]],
            colWidths=[45*mm, 35*mm],
        )
        totals_tbl.setStyle(TableStyle([
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (0, -1), (-1, -1), 0.5, accent),
        ]))
        wrap = Table([[totals_tbl]], colWidths=[174*mm])
        wrap.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "RIGHT")]))
        story.append(wrap)

        doc.build(story, onFirstPage=_on_page, onLaterPages=_on_page)
        return buf.getvalue()
