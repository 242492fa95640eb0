"""Narrow loosely typed command payloads into mutation requests."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, Optional

from voice_invoice.schemas.commands import (
    LAST_ITEM_TOKEN,
    CommandKind,
    Locale,
    StructuredCommand,
)
from voice_invoice.schemas.mutations import (
    AddItem,
    ItemReference,
    Mutation,
    RemoveItem,
    SetCustomer,
    SetDueDate,
    SetInvoiceNumber,
    SetIssueDate,
    SetNotes,
    SetTaxRate,
    UpdateItem,
)
from voice_invoice.utils.numbers import coerce_decimal, parse_date

logger = logging.getLogger(__name__)

ONE = Decimal("1")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _text(command: StructuredCommand, key: str) -> str:
    value = command.payload.get(key)
    return "" if value is None else str(value)


def _optional_text(command: StructuredCommand, key: str) -> Optional[str]:
    if key not in command.payload:
        return None
    return _text(command, key)


def _optional_number(command: StructuredCommand, key: str) -> Optional[Decimal]:
    if key not in command.payload:
        return None
    return coerce_decimal(command.payload[key], ZERO)


def _reference(command: StructuredCommand) -> ItemReference:
    token = _text(command, "itemId").strip()
    if token == LAST_ITEM_TOKEN:
        return ItemReference.last()
    if token.isdigit():
        return ItemReference.at_position(int(token))
    return ItemReference.by_id(token)


def _date(command: StructuredCommand, key: str):
    return parse_date(_text(command, key), day_first=command.locale is Locale.ES)


def _add_item(command: StructuredCommand) -> Mutation:
    return AddItem(
        description=_text(command, "description"),
        quantity=coerce_decimal(command.payload.get("quantity"), ONE),
        unit_price=coerce_decimal(command.payload.get("unitPrice"), ZERO),
    )


def _remove_item(command: StructuredCommand) -> Mutation:
    return RemoveItem(target=_reference(command))


def _update_item(command: StructuredCommand) -> Mutation:
    return UpdateItem(
        target=_reference(command),
        description=_optional_text(command, "description"),
        quantity=_optional_number(command, "quantity"),
        unit_price=_optional_number(command, "unitPrice"),
    )


def _update_customer(command: StructuredCommand) -> Mutation:
    return SetCustomer(
        customer_name=_optional_text(command, "customerName"),
        customer_address=_optional_text(command, "customerAddress"),
    )


def _set_tax(command: StructuredCommand) -> Mutation:
    percent = coerce_decimal(command.payload.get("taxRate"), ZERO)
    return SetTaxRate(tax_rate=percent / HUNDRED)


def _set_invoice_number(command: StructuredCommand) -> Mutation:
    return SetInvoiceNumber(invoice_number=_text(command, "invoiceNumber"))


def _set_notes(command: StructuredCommand) -> Mutation:
    return SetNotes(notes=_text(command, "notes"))


def _set_date(command: StructuredCommand) -> Optional[Mutation]:
    issue_date = _date(command, "date")
    if issue_date is None:
        logger.warning("Ignoring impossible invoice date %r", _text(command, "date"))
        return None
    return SetIssueDate(issue_date=issue_date)


def _set_due_date(command: StructuredCommand) -> Optional[Mutation]:
    if "dueInDays" in command.payload:
        days = coerce_decimal(command.payload["dueInDays"], ZERO)
        return SetDueDate(days_after_issue=int(days))

    due_date = _date(command, "dueDate")
    if due_date is None:
        logger.warning("Ignoring impossible due date %r", _text(command, "dueDate"))
        return None
    return SetDueDate(due_date=due_date)


_TRANSLATORS: Dict[CommandKind, Callable[[StructuredCommand], Optional[Mutation]]] = {
    CommandKind.ADD_ITEM: _add_item,
    CommandKind.REMOVE_ITEM: _remove_item,
    CommandKind.UPDATE_ITEM: _update_item,
    CommandKind.UPDATE_CUSTOMER: _update_customer,
    CommandKind.SET_TAX: _set_tax,
    CommandKind.SET_INVOICE_NUMBER: _set_invoice_number,
    CommandKind.SET_DATE: _set_date,
    CommandKind.SET_DUE_DATE: _set_due_date,
    CommandKind.SET_NOTES: _set_notes,
}

# Kinds that never touch the invoice.
NO_MUTATION_KINDS = frozenset(
    {CommandKind.SHOW_PREVIEW, CommandKind.GENERATE_PDF, CommandKind.UNKNOWN}
)


def translate(command: StructuredCommand) -> Optional[Mutation]:
    """Return the mutation request for ``command``, or ``None`` if it has none."""

    if command.kind in NO_MUTATION_KINDS:
        return None
    return _TRANSLATORS[command.kind](command)
