"""Deterministic reducer applying mutation requests to an invoice."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from voice_invoice.core.config import Settings, get_settings
from voice_invoice.schemas.invoice import Invoice, LineItem
from voice_invoice.schemas.mutations import (
    AddItem,
    ItemReference,
    ItemReferenceKind,
    Mutation,
    RemoveItem,
    ResetInvoice,
    SetCustomer,
    SetDueDate,
    SetInvoiceNumber,
    SetIssueDate,
    SetNotes,
    SetTaxRate,
    UpdateItem,
)
from voice_invoice.utils.calculations import ZERO, calculate_invoice_totals


class ApplyStatus(str, Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    NOOP = "noop"


@dataclass(frozen=True)
class ApplyResult:
    """The invoice after a mutation plus how the mutation was handled."""

    invoice: Invoice
    status: ApplyStatus
    reason: Optional[str] = None


def new_item_id() -> str:
    return uuid.uuid4().hex


def rebuild_invoice(invoice: Invoice, **changes: object) -> Invoice:
    """Copy ``invoice`` with ``changes`` and freshly derived totals."""

    data = {name: getattr(invoice, name) for name in Invoice.model_fields}
    data.update(changes)
    data.update(calculate_invoice_totals(data["items"], data["tax_rate"]))
    return Invoice(**data)


def resolve_reference(items: Tuple[LineItem, ...], target: ItemReference) -> Optional[int]:
    """Index of the referenced item, or ``None`` when nothing matches."""

    if target.kind is ItemReferenceKind.LAST:
        return len(items) - 1 if items else None
    if target.kind is ItemReferenceKind.POSITION:
        position = target.position or 0
        return position - 1 if 1 <= position <= len(items) else None
    for index, item in enumerate(items):
        if item.id == target.item_id:
            return index
    return None


def _negative(**values: Optional[Decimal]) -> Optional[str]:
    for name, value in values.items():
        if value is not None and value < ZERO:
            return f"{name.replace('_', ' ').capitalize()} cannot be negative"
    return None


class InvoiceStateEngine:
    """Pure reducer: ``(invoice, mutation) -> invoice'``.

    Semantically invalid mutations (negative amounts, blank descriptions)
    come back ``rejected`` with the invoice untouched; references to items
    that do not exist come back as ``noop``. Item ids come from
    ``id_factory`` and the reset date from ``today`` so tests can pin both.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        id_factory: Callable[[], str] | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._id_factory = id_factory or new_item_id
        self._today = today or date.today
        self._handlers: Dict[str, Callable[[Invoice, Mutation], ApplyResult]] = {
            "add_item": self._add_item,
            "remove_item": self._remove_item,
            "update_item": self._update_item,
            "set_customer": self._set_customer,
            "set_tax_rate": self._set_tax_rate,
            "set_invoice_number": self._set_invoice_number,
            "set_issue_date": self._set_issue_date,
            "set_due_date": self._set_due_date,
            "set_notes": self._set_notes,
            "reset_invoice": self._reset,
        }

    def new_invoice(self) -> Invoice:
        return Invoice.empty(self._today(), self.settings.due_in_days)

    def apply(self, invoice: Invoice, mutation: Mutation) -> ApplyResult:
        return self._handlers[mutation.kind](invoice, mutation)

    @staticmethod
    def _applied(invoice: Invoice, **changes: object) -> ApplyResult:
        return ApplyResult(rebuild_invoice(invoice, **changes), ApplyStatus.APPLIED)

    @staticmethod
    def _rejected(invoice: Invoice, reason: str) -> ApplyResult:
        return ApplyResult(invoice, ApplyStatus.REJECTED, reason)

    @staticmethod
    def _noop(invoice: Invoice, target: ItemReference) -> ApplyResult:
        return ApplyResult(invoice, ApplyStatus.NOOP, f"No {target.describe()} to change")

    def _add_item(self, invoice: Invoice, mutation: AddItem) -> ApplyResult:
        description = mutation.description.strip()
        if not description:
            return self._rejected(invoice, "Item description is empty")
        problem = _negative(quantity=mutation.quantity, unit_price=mutation.unit_price)
        if problem:
            return self._rejected(invoice, problem)

        item = LineItem.create(
            self._id_factory(), description, mutation.quantity, mutation.unit_price
        )
        return self._applied(invoice, items=invoice.items + (item,))

    def _remove_item(self, invoice: Invoice, mutation: RemoveItem) -> ApplyResult:
        index = resolve_reference(invoice.items, mutation.target)
        if index is None:
            return self._noop(invoice, mutation.target)
        items = invoice.items[:index] + invoice.items[index + 1:]
        return self._applied(invoice, items=items)

    def _update_item(self, invoice: Invoice, mutation: UpdateItem) -> ApplyResult:
        index = resolve_reference(invoice.items, mutation.target)
        if index is None:
            return self._noop(invoice, mutation.target)

        problem = _negative(quantity=mutation.quantity, unit_price=mutation.unit_price)
        if problem:
            return self._rejected(invoice, problem)

        current = invoice.items[index]
        description = current.description
        if mutation.description is not None:
            description = mutation.description.strip()
            if not description:
                return self._rejected(invoice, "Item description is empty")

        replacement = LineItem.create(
            current.id,
            description,
            current.quantity if mutation.quantity is None else mutation.quantity,
            current.unit_price if mutation.unit_price is None else mutation.unit_price,
        )
        items = invoice.items[:index] + (replacement,) + invoice.items[index + 1:]
        return self._applied(invoice, items=items)

    def _set_customer(self, invoice: Invoice, mutation: SetCustomer) -> ApplyResult:
        changes = {}
        if mutation.customer_name is not None:
            changes["customer_name"] = mutation.customer_name
        if mutation.customer_address is not None:
            changes["customer_address"] = mutation.customer_address
        return self._applied(invoice, **changes)

    def _set_tax_rate(self, invoice: Invoice, mutation: SetTaxRate) -> ApplyResult:
        problem = _negative(tax_rate=mutation.tax_rate)
        if problem:
            return self._rejected(invoice, problem)
        return self._applied(invoice, tax_rate=mutation.tax_rate)

    def _set_invoice_number(
        self, invoice: Invoice, mutation: SetInvoiceNumber
    ) -> ApplyResult:
        return self._applied(invoice, invoice_number=mutation.invoice_number)

    def _set_issue_date(self, invoice: Invoice, mutation: SetIssueDate) -> ApplyResult:
        return self._applied(invoice, issue_date=mutation.issue_date)

    def _set_due_date(self, invoice: Invoice, mutation: SetDueDate) -> ApplyResult:
        if mutation.due_date is not None:
            return self._applied(invoice, due_date=mutation.due_date)
        days = mutation.days_after_issue or 0
        if days < 0:
            return self._rejected(invoice, "Payment term cannot be negative")
        try:
            due_date = invoice.issue_date + timedelta(days=days)
        except OverflowError:
            return self._rejected(invoice, "Payment term is too long")
        return self._applied(invoice, due_date=due_date)

    def _set_notes(self, invoice: Invoice, mutation: SetNotes) -> ApplyResult:
        return self._applied(invoice, notes=mutation.notes)

    def _reset(self, invoice: Invoice, mutation: ResetInvoice) -> ApplyResult:
        return ApplyResult(self.new_invoice(), ApplyStatus.APPLIED)
