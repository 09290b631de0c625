"""Immutable form state and the reducer that applies edits to it."""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, FrozenSet, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .calculator import compute_totals
from .schemas import HEADER_FIELDS, LINE_ITEM_FIELDS, Invoice, LineItem, NumberInput, Totals, ValidationResult
from .validator import InvoiceValidator

logger = logging.getLogger(__name__)


class AddLineItem(BaseModel):
    kind: Literal["add_item"] = "add_item"


class RemoveLineItem(BaseModel):
    """Remove an item; with ``deferred`` it is only hidden until finalized."""

    kind: Literal["remove_item"] = "remove_item"
    item_id: int
    deferred: bool = False


class FinalizeRemoval(BaseModel):
    kind: Literal["finalize_removal"] = "finalize_removal"
    item_id: int


class UpdateLineItem(BaseModel):
    kind: Literal["update_item"] = "update_item"
    item_id: int
    field: str
    value: NumberInput


class UpdateHeader(BaseModel):
    kind: Literal["update_header"] = "update_header"
    field: str
    value: Any = None


class ValidateInvoice(BaseModel):
    kind: Literal["validate"] = "validate"
    today: Optional[date] = None


Action = Union[AddLineItem, RemoveLineItem, FinalizeRemoval, UpdateLineItem, UpdateHeader, ValidateInvoice]


class InvoiceState(BaseModel):
    model_config = ConfigDict(frozen=True)

    invoice: Invoice = Field(default_factory=Invoice)
    errors: Dict[str, str] = Field(default_factory=dict)
    validation: Optional[ValidationResult] = None
    removing: FrozenSet[int] = frozenset()
    next_id: int = 2

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceState":
        return cls(invoice=invoice, next_id=max(item.id for item in invoice.line_items) + 1)

    @property
    def active_items(self) -> list[LineItem]:
        return [item for item in self.invoice.line_items if item.id not in self.removing]

    def current_invoice(self) -> Invoice:
        """The invoice as calculations and previews should see it."""
        if not self.removing:
            return self.invoice
        return self.invoice.model_copy(update={"line_items": self.active_items})

    def totals(self) -> Totals:
        return compute_totals(self.active_items)


def _edited(state: InvoiceState, invoice: Invoice, **changes) -> InvoiceState:
    # Any edit makes the last validation result stale.
    return state.model_copy(update={"invoice": invoice, "validation": None, **changes})


def _without_error(state: InvoiceState, key: str) -> Dict[str, str]:
    return {k: v for k, v in state.errors.items() if k != key}


def _replace_items(invoice: Invoice, items: list[LineItem]) -> Invoice:
    # Re-validate so the item-count and unique-id checks still apply.
    return Invoice.model_validate({**invoice.model_dump(), "line_items": items})


def apply_edit(state: InvoiceState, action: Action, validator: Optional[InvoiceValidator] = None) -> InvoiceState:
    """Return the state that results from ``action``; ``state`` is left untouched."""
    if isinstance(action, AddLineItem):
        new_id = max([state.next_id, *(item.id + 1 for item in state.invoice.line_items)])
        invoice = _replace_items(state.invoice, [*state.invoice.line_items, LineItem(id=new_id)])
        return _edited(state, invoice, next_id=new_id + 1)

    if isinstance(action, RemoveLineItem):
        active_ids = [item.id for item in state.active_items]
        if action.item_id not in active_ids or len(active_ids) <= 1:
            logger.debug("Ignoring removal of item %s (%d active items)", action.item_id, len(active_ids))
            return state
        if action.deferred:
            return _edited(state, state.invoice, removing=state.removing | {action.item_id})
        items = [item for item in state.invoice.line_items if item.id != action.item_id]
        return _edited(state, _replace_items(state.invoice, items))

    if isinstance(action, FinalizeRemoval):
        if action.item_id not in state.removing:
            return state
        items = [item for item in state.invoice.line_items if item.id != action.item_id]
        return _edited(state, _replace_items(state.invoice, items), removing=state.removing - {action.item_id})

    if isinstance(action, UpdateLineItem):
        if action.field not in LINE_ITEM_FIELDS:
            raise ValueError(f"Unknown line item field: {action.field}")
        target = state.invoice.item(action.item_id)
        if target is None:
            logger.debug("Ignoring update for unknown item %s", action.item_id)
            return state
        value = action.value
        if action.field == "description":
            value = "" if value is None else str(value)
        updated = target.model_copy(update={action.field: value})
        items = [updated if item.id == action.item_id else item for item in state.invoice.line_items]
        errors = _without_error(state, f"{action.item_id}-{action.field}")
        return _edited(state, _replace_items(state.invoice, items), errors=errors)

    if isinstance(action, UpdateHeader):
        if action.field not in HEADER_FIELDS:
            raise ValueError(f"Unknown header field: {action.field}")
        value = action.value
        if action.field == "client_name" and value is None:
            value = ""
        data = state.invoice.model_dump()
        data[action.field] = value
        invoice = Invoice.model_validate(data)
        return _edited(state, invoice, errors=_without_error(state, action.field))

    if isinstance(action, ValidateInvoice):
        validator = validator or InvoiceValidator()
        current = state.current_invoice()
        result = validator.validate(current, compute_totals(current.line_items), today=action.today)
        return state.model_copy(update={"errors": dict(result.errors), "validation": result})

    raise ValueError(f"Unsupported action: {action!r}")
