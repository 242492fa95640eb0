from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from voice_invoice.schemas.commands import CommandKind, Locale, StructuredCommand
from voice_invoice.schemas.mutations import (
    AddItem,
    ItemReference,
    RemoveItem,
    SetCustomer,
    SetDueDate,
    SetInvoiceNumber,
    SetIssueDate,
    SetNotes,
    SetTaxRate,
    UpdateItem,
)
from voice_invoice.services.translator import translate


def _command(kind: CommandKind, locale: Locale = Locale.EN, **payload) -> StructuredCommand:
    return StructuredCommand(
        kind=kind, payload=payload, raw_text="", confidence=0.9, locale=locale
    )


def test_add_item_defaults():
    mutation = translate(_command(CommandKind.ADD_ITEM, description="consulting"))

    assert mutation == AddItem(
        description="consulting", quantity=Decimal("1"), unit_price=Decimal("0")
    )


def test_add_item_reads_string_amounts():
    mutation = translate(
        _command(CommandKind.ADD_ITEM, description="flour", quantity="2,5", unitPrice="$3.20")
    )

    assert mutation.quantity == Decimal("2.5")
    assert mutation.unit_price == Decimal("3.20")


def test_unparseable_amount_falls_back_to_default():
    mutation = translate(
        _command(CommandKind.ADD_ITEM, description="x", quantity="lots", unitPrice="free")
    )

    assert mutation.quantity == Decimal("1")
    assert mutation.unit_price == Decimal("0")


def test_same_meaning_in_both_locales_gives_same_mutation(matcher):
    english = translate(matcher.match("add 3 chairs at 40"))
    spanish = translate(matcher.match("añadir 3 chairs a 40"))

    assert english == spanish == AddItem(
        description="chairs", quantity=Decimal("3"), unit_price=Decimal("40")
    )


def test_tax_percent_becomes_fraction():
    mutation = translate(_command(CommandKind.SET_TAX, taxRate=Decimal("10")))

    assert mutation == SetTaxRate(tax_rate=Decimal("0.1"))


def test_negative_tax_is_passed_through_for_the_engine():
    mutation = translate(_command(CommandKind.SET_TAX, taxRate=Decimal("-5")))

    assert mutation.tax_rate == Decimal("-0.05")


@pytest.mark.parametrize(
    "token, reference",
    [
        ("last", ItemReference.last()),
        ("2", ItemReference.at_position(2)),
        ("abc123", ItemReference.by_id("abc123")),
    ],
)
def test_item_references(token, reference):
    assert translate(_command(CommandKind.REMOVE_ITEM, itemId=token)) == RemoveItem(
        target=reference
    )


def test_update_item_only_carries_mentioned_fields():
    mutation = translate(_command(CommandKind.UPDATE_ITEM, itemId="1", quantity=Decimal("4")))

    assert mutation == UpdateItem(target=ItemReference.at_position(1), quantity=Decimal("4"))
    assert mutation.description is None
    assert mutation.unit_price is None


def test_customer_fields_left_out_stay_unset():
    mutation = translate(_command(CommandKind.UPDATE_CUSTOMER, customerAddress="1 main st"))

    assert mutation == SetCustomer(customer_address="1 main st")
    assert mutation.customer_name is None


def test_text_fields():
    assert translate(
        _command(CommandKind.SET_INVOICE_NUMBER, invoiceNumber="inv-001")
    ) == SetInvoiceNumber(invoice_number="inv-001")
    assert translate(_command(CommandKind.SET_NOTES, notes="thanks")) == SetNotes(notes="thanks")


def test_slash_dates_follow_locale_order():
    english = translate(_command(CommandKind.SET_DATE, Locale.EN, date="01/05/2024"))
    spanish = translate(_command(CommandKind.SET_DATE, Locale.ES, date="01/05/2024"))

    assert english == SetIssueDate(issue_date=date(2024, 1, 5))
    assert spanish == SetIssueDate(issue_date=date(2024, 5, 1))


def test_due_date_forms():
    assert translate(
        _command(CommandKind.SET_DUE_DATE, dueDate="2024-06-01")
    ) == SetDueDate(due_date=date(2024, 6, 1))
    assert translate(
        _command(CommandKind.SET_DUE_DATE, dueInDays=Decimal("15"))
    ) == SetDueDate(days_after_issue=15)


@pytest.mark.parametrize(
    "kind, key",
    [(CommandKind.SET_DATE, "date"), (CommandKind.SET_DUE_DATE, "dueDate")],
)
def test_impossible_dates_translate_to_nothing(kind, key):
    assert translate(_command(kind, **{key: "2024-02-30"})) is None


@pytest.mark.parametrize(
    "kind", [CommandKind.SHOW_PREVIEW, CommandKind.GENERATE_PDF, CommandKind.UNKNOWN]
)
def test_commands_without_mutation(kind):
    assert translate(_command(kind)) is None
