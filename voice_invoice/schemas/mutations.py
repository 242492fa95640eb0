"""Strongly typed mutation requests accepted by the invoice state engine."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ItemReferenceKind(str, Enum):
    ID = "id"
    POSITION = "position"
    LAST = "last"


class ItemReference(BaseModel):
    """Points at a line item by id, by 1-based position or as "the last one"."""

    model_config = ConfigDict(frozen=True)

    kind: ItemReferenceKind
    item_id: Optional[str] = None
    position: Optional[int] = None

    @classmethod
    def by_id(cls, item_id: str) -> "ItemReference":
        return cls(kind=ItemReferenceKind.ID, item_id=item_id)

    @classmethod
    def at_position(cls, position: int) -> "ItemReference":
        return cls(kind=ItemReferenceKind.POSITION, position=position)

    @classmethod
    def last(cls) -> "ItemReference":
        return cls(kind=ItemReferenceKind.LAST)

    def describe(self) -> str:
        if self.kind is ItemReferenceKind.LAST:
            return "last item"
        if self.kind is ItemReferenceKind.POSITION:
            return f"item {self.position}"
        return f"item {self.item_id}"


class _Mutation(BaseModel):
    model_config = ConfigDict(frozen=True)


class AddItem(_Mutation):
    kind: Literal["add_item"] = "add_item"
    description: str
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = Decimal("0")


class RemoveItem(_Mutation):
    kind: Literal["remove_item"] = "remove_item"
    target: ItemReference


class UpdateItem(_Mutation):
    """Replace the given fields of one item; ``None`` keeps the current value."""

    kind: Literal["update_item"] = "update_item"
    target: ItemReference
    description: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None


class SetCustomer(_Mutation):
    kind: Literal["set_customer"] = "set_customer"
    customer_name: Optional[str] = None
    customer_address: Optional[str] = None


class SetTaxRate(_Mutation):
    kind: Literal["set_tax_rate"] = "set_tax_rate"
    tax_rate: Decimal


class SetInvoiceNumber(_Mutation):
    kind: Literal["set_invoice_number"] = "set_invoice_number"
    invoice_number: str


class SetIssueDate(_Mutation):
    kind: Literal["set_issue_date"] = "set_issue_date"
    issue_date: date


class SetDueDate(_Mutation):
    """Either an absolute due date or an offset in days from the issue date."""

    kind: Literal["set_due_date"] = "set_due_date"
    due_date: Optional[date] = None
    days_after_issue: Optional[int] = None

    @model_validator(mode="after")
    def check_exactly_one(self) -> "SetDueDate":
        if (self.due_date is None) == (self.days_after_issue is None):
            raise ValueError("Provide exactly one of due_date or days_after_issue")
        return self


class SetNotes(_Mutation):
    kind: Literal["set_notes"] = "set_notes"
    notes: str


class ResetInvoice(_Mutation):
    kind: Literal["reset_invoice"] = "reset_invoice"


Mutation = Annotated[
    Union[
        AddItem,
        RemoveItem,
        UpdateItem,
        SetCustomer,
        SetTaxRate,
        SetInvoiceNumber,
        SetIssueDate,
        SetDueDate,
        SetNotes,
        ResetInvoice,
    ],
    Field(discriminator="kind"),
]
