"""Pydantic schemas describing the dictated invoice aggregate."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from voice_invoice.utils.calculations import (
    ZERO,
    calculate_invoice_totals,
    calculate_item_total,
)


class LineItem(BaseModel):
    """Single line item in the invoice."""

    model_config = ConfigDict(frozen=True)

    id: str
    description: str
    quantity: Decimal = Field(ge=0)
    unit_price: Decimal = Field(ge=0)
    total: Decimal = Field(ge=0)

    @classmethod
    def create(
        cls, item_id: str, description: str, quantity: Decimal, unit_price: Decimal
    ) -> "LineItem":
        return cls(
            id=item_id,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            total=calculate_item_total(quantity, unit_price),
        )

    @model_validator(mode="after")
    def check_total(self) -> "LineItem":
        if self.total != calculate_item_total(self.quantity, self.unit_price):
            raise ValueError(
                f"Item {self.id} total {self.total} does not match "
                f"{self.quantity} x {self.unit_price}"
            )
        return self


class Invoice(BaseModel):
    """The invoice being dictated.

    ``subtotal``, ``tax`` and ``total`` are derived from ``items`` and
    ``tax_rate``; the validator refuses any combination where they disagree.
    """

    model_config = ConfigDict(frozen=True)

    invoice_number: str = ""
    issue_date: date
    due_date: date
    customer_name: str = ""
    customer_address: str = ""
    items: Tuple[LineItem, ...] = ()
    tax_rate: Decimal = Field(default=ZERO, ge=0)
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO
    notes: str = ""

    @classmethod
    def empty(cls, today: date, due_in_days: int = 30) -> "Invoice":
        """Blank invoice issued ``today`` and due ``due_in_days`` later."""

        return cls(issue_date=today, due_date=today + timedelta(days=due_in_days))

    @model_validator(mode="after")
    def check_totals(self) -> "Invoice":
        expected = calculate_invoice_totals(self.items, self.tax_rate)
        for field_name, value in expected.items():
            actual = getattr(self, field_name)
            if actual != value:
                raise ValueError(
                    f"Invoice {field_name} is {actual}, expected {value}"
                )
        return self
