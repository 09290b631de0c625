"""Data models used across calculator, validator, state, templates, and exporter."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import parse_date

NumberInput = Union[int, float, str, None]

LINE_ITEM_FIELDS = ("description", "quantity", "rate")
VENDOR_FIELDS = ("vendor_name", "vendor_email", "vendor_phone", "vendor_address")
HEADER_FIELDS = (
    "client_name",
    "invoice_date",
    "invoice_number",
    "due_date",
    "client_email",
    "client_phone",
    "client_address",
    "vendor_name",
    "vendor_email",
    "vendor_phone",
    "vendor_address",
)


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: int
    description: str = ""
    quantity: NumberInput = 1
    rate: NumberInput = 0


class Invoice(BaseModel):
    """Header fields plus the ordered line items.

    Optional header fields left as ``None`` are not part of the form at all;
    an empty string means the field is shown but was left blank.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    client_name: str = ""
    invoice_date: Optional[date] = Field(default_factory=date.today)
    invoice_number: Optional[str] = None
    due_date: Optional[date] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None
    vendor_name: Optional[str] = None
    vendor_email: Optional[str] = None
    vendor_phone: Optional[str] = None
    vendor_address: Optional[str] = None
    line_items: List[LineItem] = Field(default_factory=lambda: [LineItem(id=1)], min_length=1)

    @field_validator("invoice_date", "due_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: object) -> Optional[date]:
        return parse_date(value)

    @model_validator(mode="after")
    def _unique_item_ids(self) -> "Invoice":
        ids = [item.id for item in self.line_items]
        if len(ids) != len(set(ids)):
            raise ValueError("line item ids must be unique")
        return self

    def item(self, item_id: int) -> Optional[LineItem]:
        for item in self.line_items:
            if item.id == item_id:
                return item
        return None

    @property
    def has_vendor(self) -> bool:
        """True when the form carries any vendor field."""
        return any(getattr(self, f) is not None for f in VENDOR_FIELDS)

    @property
    def display_id(self) -> str:
        """Fallback identifier for messages and filenames."""
        return self.invoice_number or self.client_name.strip() or "<draft>"


class Totals(BaseModel):
    model_config = ConfigDict(frozen=True)

    subtotal: Decimal = Decimal(0)
    tax: Decimal = Decimal(0)
    total: Decimal = Decimal(0)


class ValidationStatus(str, Enum):
    VALID = "valid"
    VALID_WITH_WARNINGS = "valid_with_warnings"
    INVALID = "invalid"


class ValidationResult(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    status: ValidationStatus
    message: str
    details: List[str] = Field(default_factory=list)
    errors: Dict[str, str] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.status is not ValidationStatus.INVALID


class ExportResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    path: Optional[Path] = None
    error: Optional[str] = None
    validation: Optional[ValidationResult] = None
