"""Helpers for turning dictated numbers and dates into typed values."""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

NEGATIVE_WORDS = ("minus", "menos")
CURRENCY_MARKS = re.compile(r"[$€]")

ISO_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")
DAY_FIRST_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y")
MONTH_FIRST_FORMATS = ("%m/%d/%Y", "%m-%d-%Y", "%m.%d.%Y")


def parse_decimal(value: str) -> Decimal:
    """Parse a spoken amount such as ``"12,50"``, ``"$20"`` or ``"minus 5"``.

    A comma is read as the decimal separator, matching how both supported
    locales dictate fractional amounts.
    """

    text = CURRENCY_MARKS.sub("", value).strip().lower()
    negative = False
    for word in NEGATIVE_WORDS:
        if text.startswith(word):
            negative = True
            text = text[len(word):].strip()
            break
    if text.startswith("-"):
        negative = not negative
        text = text[1:].strip()

    number = Decimal(text.replace(",", "."))
    return -number if negative else number


def coerce_decimal(value: object, default: Decimal) -> Decimal:
    """Best-effort conversion of a loosely typed payload value."""

    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    try:
        return parse_decimal(str(value))
    except InvalidOperation:
        return default


def parse_date(value: str, day_first: bool = False) -> Optional[date]:
    """Parse an ISO or slash/dash separated date.

    Ambiguous ``a/b/yyyy`` dates are read day-first when ``day_first`` is
    set and month-first otherwise. Returns ``None`` for impossible dates.
    """

    text = value.strip()
    formats = ISO_FORMATS + (DAY_FIRST_FORMATS if day_first else MONTH_FIRST_FORMATS)
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
