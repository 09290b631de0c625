"""Command-line entrypoints for composing, validating, previewing, and exporting invoices."""
from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich import print
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .calculator import InvoiceCalculator
from .exporter import InvoiceExporter
from .schemas import Invoice, ValidationResult, ValidationStatus
from .settings import get_settings
from .state import InvoiceState
from .templates import get_template, template_names
from .utils import format_currency, parse_date
from .validator import InvoiceValidator

app = typer.Typer(add_completion=False, help="Invoice Builder CLI")

STATUS_STYLES = {
    ValidationStatus.VALID: "green",
    ValidationStatus.VALID_WITH_WARNINGS: "yellow",
    ValidationStatus.INVALID: "red",
}


def _load_invoice(json_path: Path) -> Invoice:
    try:
        data = json.loads(json_path.read_text(encoding="utf-8"))
        return Invoice.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        print(f"[red]Could not read invoice from {json_path}:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2)


def _print_result(result: ValidationResult) -> None:
    style = STATUS_STYLES[result.status]
    print(f"[bold {style}]{result.message}[/bold {style}]")
    for detail in result.details:
        print(f"- {escape(detail)}")


def _template(name: Optional[str]):
    settings = get_settings()
    try:
        return get_template(name or settings.default_template, settings.currency, settings.locale)
    except KeyError as exc:
        raise typer.BadParameter(str(exc.args[0])) from None


@app.callback()
def main_options(log_level: Optional[str] = typer.Option(None, help="Logging level (defaults to INVOICE_LOG_LEVEL)")) -> None:
    level = (log_level or get_settings().log_level).upper()
    logging.basicConfig(level=level, format="%(message)s", handlers=[RichHandler(show_path=False)], force=True)


@app.command()
def new(output: Path = typer.Option(..., help="Path to write a blank invoice JSON")) -> None:
    """Write a blank invoice with one empty line item."""
    state = InvoiceState()
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(state.invoice.model_dump_json(indent=2), encoding="utf-8")
    print(f"Blank invoice written to {output}")


@app.command()
def totals(input: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON file with one invoice")) -> None:
    """Print line totals, subtotal, GST, and grand total."""
    settings = get_settings()
    invoice = _load_invoice(input)
    calculator = InvoiceCalculator()

    def money(amount) -> str:
        return format_currency(amount, settings.currency, settings.locale)

    table = Table("#", "Description", "Qty", "Rate", "Amount")
    for i, item in enumerate(invoice.line_items, start=1):
        table.add_row(str(i), escape(item.description or f"Item {i}"), str(item.quantity), str(item.rate), money(calculator.line_total(item)))
    print(table)
    result = calculator.compute_totals(invoice.line_items)
    print(f"[bold]Subtotal:[/bold] {money(result.subtotal)}")
    print(f"[bold]GST (18%):[/bold] {money(result.tax)}")
    print(f"[bold]Total:[/bold] {money(result.total)}")


@app.command()
def validate(
    input: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON file with one invoice"),
    report: Optional[Path] = typer.Option(None, help="Optional path to write the validation result"),
    today: Optional[str] = typer.Option(None, help="Treat this date as today (YYYY-MM-DD)"),
) -> None:
    """Validate an invoice and classify it as valid, valid with warnings, or invalid."""
    settings = get_settings()
    invoice = _load_invoice(input)
    reference = parse_date(today) if today else None
    if today and reference is None:
        raise typer.BadParameter(f"Unreadable date: {today}", param_hint="--today")
    validator = InvoiceValidator(settings.currency, settings.locale)
    result = validator.validate(invoice, today=reference or date.today())
    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        print(f"Report written to {report}")
    _print_result(result)
    if not result.is_valid:
        raise typer.Exit(code=1)


@app.command()
def preview(
    input: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON file with one invoice"),
    output: Path = typer.Option(..., help="Path to write the HTML preview"),
    template: Optional[str] = typer.Option(None, help=f"One of: {', '.join(template_names())}"),
) -> None:
    """Render the invoice into an HTML preview."""
    invoice = _load_invoice(input)
    layout = _template(template)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(layout.render(invoice, InvoiceCalculator().compute_totals(invoice.line_items)), encoding="utf-8")
    print(f"Preview ({layout.name}) written to {output}")


@app.command()
def export(
    input: Path = typer.Option(..., exists=True, dir_okay=False, help="JSON file with one invoice"),
    output_dir: Optional[Path] = typer.Option(None, file_okay=False, help="Folder for the PDF (defaults to INVOICE_OUTPUT_DIR)"),
    template: Optional[str] = typer.Option(None, help=f"One of: {', '.join(template_names())}"),
) -> None:
    """Validate the invoice, then export it as a PDF."""
    invoice = _load_invoice(input)
    exporter = InvoiceExporter(_template(template))
    result = exporter.export(invoice, output_dir or get_settings().output_dir)
    if result.validation is not None:
        _print_result(result.validation)
    if not result.success:
        print(f"[red]{escape(result.error or '')}[/red]")
        raise typer.Exit(code=1)
    print(f"PDF written to {result.path}")


def main():
    app()


if __name__ == "__main__":
    main()
