from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from voice_invoice.schemas.invoice import Invoice, LineItem


def test_empty_invoice_is_due_thirty_days_later():
    invoice = Invoice.empty(date(2024, 1, 15))

    assert invoice.due_date == date(2024, 2, 14)
    assert invoice.items == ()
    assert invoice.subtotal == invoice.tax == invoice.total == 0
    assert invoice.tax_rate == 0


def test_line_item_total_is_derived():
    item = LineItem.create("a", "Widget", Decimal("5"), Decimal("20"))

    assert item.total == Decimal("100")


def test_line_item_rejects_inconsistent_total():
    with pytest.raises(ValidationError):
        LineItem(
            id="a",
            description="Widget",
            quantity=Decimal("5"),
            unit_price=Decimal("20"),
            total=Decimal("99"),
        )


def test_line_item_rejects_negative_quantity():
    with pytest.raises(ValidationError):
        LineItem.create("a", "Widget", Decimal("-1"), Decimal("20"))


def test_invoice_rejects_totals_that_disagree_with_items():
    item = LineItem.create("a", "Widget", Decimal("2"), Decimal("10"))

    with pytest.raises(ValidationError):
        Invoice(
            issue_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            items=(item,),
            subtotal=Decimal("20"),
            tax=Decimal("0"),
            total=Decimal("25"),
        )


def test_invoice_rejects_negative_tax_rate():
    with pytest.raises(ValidationError):
        Invoice(
            issue_date=date(2024, 1, 1),
            due_date=date(2024, 1, 31),
            tax_rate=Decimal("-0.1"),
        )


def test_invoice_round_trips_through_json_shape():
    item = LineItem.create("a", "Widget", Decimal("2.5"), Decimal("4.10"))
    invoice = Invoice(
        issue_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        items=(item,),
        tax_rate=Decimal("0.21"),
        subtotal=Decimal("10.250"),
        tax=Decimal("10.250") * Decimal("0.21"),
        total=Decimal("10.250") * Decimal("1.21"),
    )

    restored = Invoice.model_validate(invoice.model_dump(mode="json"))

    assert restored == invoice
