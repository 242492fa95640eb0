"""Schemas for transcript segments and the commands matched from them."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

LAST_ITEM_TOKEN = "last"


class Locale(str, Enum):
    EN = "en"
    ES = "es"


class CommandKind(str, Enum):
    """Every kind of command a rule can emit."""

    ADD_ITEM = "add_item"
    REMOVE_ITEM = "remove_item"
    UPDATE_ITEM = "update_item"
    UPDATE_CUSTOMER = "update_customer"
    SET_TAX = "set_tax"
    SET_INVOICE_NUMBER = "set_invoice_number"
    SET_DATE = "set_date"
    SET_DUE_DATE = "set_due_date"
    SET_NOTES = "set_notes"
    SHOW_PREVIEW = "show_preview"
    GENERATE_PDF = "generate_pdf"
    UNKNOWN = "unknown"


NAVIGATION_KINDS = frozenset({CommandKind.SHOW_PREVIEW, CommandKind.GENERATE_PDF})

PayloadValue = Union[Decimal, str]


class TranscriptSegment(BaseModel):
    """One segment delivered by the speech transcription front end."""

    text: str
    is_final: bool = True
    confidence: float = Field(default=1.0, ge=0, le=1)


class StructuredCommand(BaseModel):
    """Result of matching one utterance against the rule table.

    ``payload`` is deliberately loose: its keys follow the per-kind contract
    of the rule table and are narrowed by the translator.
    """

    model_config = ConfigDict(frozen=True)

    kind: CommandKind
    payload: Dict[str, PayloadValue] = Field(default_factory=dict)
    raw_text: str
    confidence: float = Field(ge=0, le=1)
    locale: Optional[Locale] = None
    rule: Optional[str] = None

    @classmethod
    def unrecognized(cls, raw_text: str) -> "StructuredCommand":
        return cls(kind=CommandKind.UNKNOWN, raw_text=raw_text, confidence=0.0)

    @property
    def is_navigation(self) -> bool:
        return self.kind in NAVIGATION_KINDS
