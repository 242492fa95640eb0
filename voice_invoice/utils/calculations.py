"""Pure arithmetic helpers for invoice totals."""

from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, Protocol

ZERO = Decimal("0")


class HasTotal(Protocol):
    total: Decimal


def calculate_item_total(quantity: Decimal, unit_price: Decimal) -> Decimal:
    return quantity * unit_price


def calculate_subtotal(items: Iterable[HasTotal]) -> Decimal:
    """Sum of all item totals before tax."""

    return sum((item.total for item in items), ZERO)


def calculate_tax(subtotal: Decimal, tax_rate: Decimal) -> Decimal:
    return subtotal * tax_rate


def calculate_total(subtotal: Decimal, tax: Decimal) -> Decimal:
    return subtotal + tax


def calculate_invoice_totals(
    items: Iterable[HasTotal], tax_rate: Decimal
) -> Dict[str, Decimal]:
    """Return ``subtotal``, ``tax`` and ``total`` for ``items`` at ``tax_rate``."""

    subtotal = calculate_subtotal(items)
    tax = calculate_tax(subtotal, tax_rate)
    return {
        "subtotal": subtotal,
        "tax": tax,
        "total": calculate_total(subtotal, tax),
    }
