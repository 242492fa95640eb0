from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from voice_invoice.schemas.invoice import Invoice
from voice_invoice.schemas.mutations import (
    AddItem,
    ItemReference,
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
from voice_invoice.services.engine import ApplyStatus, resolve_reference
from voice_invoice.utils.calculations import calculate_invoice_totals

TODAY = date(2024, 3, 1)


def _apply_all(engine, invoice, *mutations):
    for mutation in mutations:
        invoice = engine.apply(invoice, mutation).invoice
    return invoice


def _assert_consistent(invoice: Invoice) -> None:
    totals = calculate_invoice_totals(invoice.items, invoice.tax_rate)
    assert invoice.subtotal == totals["subtotal"]
    assert invoice.tax == totals["tax"]
    assert invoice.total == invoice.subtotal + invoice.tax
    for item in invoice.items:
        assert item.total == item.quantity * item.unit_price


def test_new_invoice_uses_clock_and_payment_term(engine):
    invoice = engine.new_invoice()

    assert invoice.issue_date == TODAY
    assert invoice.due_date == date(2024, 3, 31)
    assert invoice.items == ()


def test_widget_tax_and_removal_scenario(engine):
    invoice = engine.new_invoice()

    result = engine.apply(
        invoice, AddItem(description="Widget", quantity=Decimal("5"), unit_price=Decimal("20"))
    )
    assert result.status is ApplyStatus.APPLIED
    invoice = result.invoice
    assert invoice.items[0].id == "item-1"
    assert invoice.items[0].total == Decimal("100")
    assert invoice.subtotal == Decimal("100")
    assert invoice.total == Decimal("100")

    invoice = engine.apply(invoice, SetTaxRate(tax_rate=Decimal("0.1"))).invoice
    assert invoice.tax == Decimal("10")
    assert invoice.total == Decimal("110")

    invoice = engine.apply(invoice, RemoveItem(target=ItemReference.last())).invoice
    assert invoice.items == ()
    assert invoice.subtotal == invoice.tax == invoice.total == 0
    assert invoice.tax_rate == Decimal("0.1")


def test_totals_stay_consistent_over_a_session(engine):
    invoice = engine.new_invoice()
    steps = [
        AddItem(description="laptops", quantity=Decimal("5"), unit_price=Decimal("999")),
        AddItem(description="flour", quantity=Decimal("2.5"), unit_price=Decimal("3.20")),
        SetTaxRate(tax_rate=Decimal("0.21")),
        UpdateItem(target=ItemReference.at_position(1), quantity=Decimal("3")),
        AddItem(description="service", unit_price=Decimal("50")),
        RemoveItem(target=ItemReference.at_position(2)),
        SetTaxRate(tax_rate=Decimal("0.075")),
        UpdateItem(target=ItemReference.last(), unit_price=Decimal("49.99")),
    ]

    for mutation in steps:
        invoice = engine.apply(invoice, mutation).invoice
        _assert_consistent(invoice)

    assert [item.description for item in invoice.items] == ["laptops", "service"]


def test_remove_last_on_empty_invoice_is_noop(engine):
    invoice = engine.new_invoice()

    result = engine.apply(invoice, RemoveItem(target=ItemReference.last()))

    assert result.status is ApplyStatus.NOOP
    assert result.invoice == invoice
    assert result.reason == "No last item to change"


@pytest.mark.parametrize(
    "target",
    [ItemReference.at_position(3), ItemReference.at_position(0), ItemReference.by_id("nope")],
)
def test_missing_references_are_noops(engine, target):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        AddItem(description="a", unit_price=Decimal("1")),
        AddItem(description="b", unit_price=Decimal("2")),
    )

    for mutation in (RemoveItem(target=target), UpdateItem(target=target, quantity=Decimal("9"))):
        result = engine.apply(invoice, mutation)
        assert result.status is ApplyStatus.NOOP
        assert result.invoice is invoice


def test_remove_by_id_and_position(engine):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        AddItem(description="a", unit_price=Decimal("1")),
        AddItem(description="b", unit_price=Decimal("2")),
        AddItem(description="c", unit_price=Decimal("3")),
    )

    invoice = engine.apply(invoice, RemoveItem(target=ItemReference.by_id("item-2"))).invoice
    assert [item.id for item in invoice.items] == ["item-1", "item-3"]

    invoice = engine.apply(invoice, RemoveItem(target=ItemReference.at_position(1))).invoice
    assert [item.id for item in invoice.items] == ["item-3"]
    assert invoice.subtotal == Decimal("3")


def test_update_keeps_id_and_position(engine):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        AddItem(description="a", quantity=Decimal("2"), unit_price=Decimal("10")),
        AddItem(description="b", unit_price=Decimal("5")),
    )

    result = engine.apply(
        invoice,
        UpdateItem(target=ItemReference.at_position(1), description="oak chairs", unit_price=Decimal("12")),
    )

    first = result.invoice.items[0]
    assert result.status is ApplyStatus.APPLIED
    assert first.id == "item-1"
    assert first.description == "oak chairs"
    assert first.quantity == Decimal("2")
    assert first.total == Decimal("24")
    assert result.invoice.subtotal == Decimal("29")


@pytest.mark.parametrize(
    "mutation, reason",
    [
        (AddItem(description="x", quantity=Decimal("-1"), unit_price=Decimal("5")), "Quantity cannot be negative"),
        (AddItem(description="x", unit_price=Decimal("-5")), "Unit price cannot be negative"),
        (AddItem(description="   "), "Item description is empty"),
        (SetTaxRate(tax_rate=Decimal("-0.05")), "Tax rate cannot be negative"),
        (UpdateItem(target=ItemReference.last(), quantity=Decimal("-2")), "Quantity cannot be negative"),
        (UpdateItem(target=ItemReference.last(), description=""), "Item description is empty"),
        (SetDueDate(days_after_issue=-3), "Payment term cannot be negative"),
        (SetDueDate(days_after_issue=99999999), "Payment term is too long"),
        (SetDueDate(days_after_issue=10**12), "Payment term is too long"),
    ],
)
def test_invalid_mutations_are_rejected_without_change(engine, mutation, reason):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        AddItem(description="a", unit_price=Decimal("10")),
        SetTaxRate(tax_rate=Decimal("0.1")),
    )

    result = engine.apply(invoice, mutation)

    assert result.status is ApplyStatus.REJECTED
    assert result.reason == reason
    assert result.invoice == invoice


def test_set_customer_keeps_unmentioned_field(engine):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        SetCustomer(customer_name="john smith"),
        SetCustomer(customer_address="123 main street"),
    )

    assert invoice.customer_name == "john smith"
    assert invoice.customer_address == "123 main street"


def test_header_fields(engine):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        SetInvoiceNumber(invoice_number="inv-001"),
        SetIssueDate(issue_date=date(2024, 5, 1)),
        SetDueDate(days_after_issue=15),
        SetNotes(notes="thank you"),
    )

    assert invoice.invoice_number == "inv-001"
    assert invoice.issue_date == date(2024, 5, 1)
    assert invoice.due_date == date(2024, 5, 16)
    assert invoice.notes == "thank you"

    invoice = engine.apply(invoice, SetDueDate(due_date=date(2024, 6, 1))).invoice
    assert invoice.due_date == date(2024, 6, 1)


def test_reset_starts_a_fresh_invoice(engine):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        AddItem(description="a", unit_price=Decimal("10")),
        SetCustomer(customer_name="acme"),
        SetTaxRate(tax_rate=Decimal("0.2")),
    )

    result = engine.apply(invoice, ResetInvoice())

    assert result.status is ApplyStatus.APPLIED
    assert result.invoice == Invoice.empty(TODAY)


def test_apply_never_mutates_its_input(engine):
    invoice = engine.new_invoice()
    snapshot = invoice.model_dump()

    engine.apply(invoice, AddItem(description="a", unit_price=Decimal("10")))

    assert invoice.model_dump() == snapshot


def test_same_inputs_give_same_result(engine):
    invoice = _apply_all(engine, engine.new_invoice(), AddItem(description="a", unit_price=Decimal("1")))
    mutation = UpdateItem(target=ItemReference.last(), quantity=Decimal("7"))

    assert engine.apply(invoice, mutation) == engine.apply(invoice, mutation)


def test_resolve_reference_positions_are_one_based(engine):
    invoice = _apply_all(
        engine,
        engine.new_invoice(),
        AddItem(description="a"),
        AddItem(description="b"),
    )

    assert resolve_reference(invoice.items, ItemReference.at_position(1)) == 0
    assert resolve_reference(invoice.items, ItemReference.at_position(2)) == 1
    assert resolve_reference(invoice.items, ItemReference.last()) == 1
    assert resolve_reference((), ItemReference.at_position(1)) is None
