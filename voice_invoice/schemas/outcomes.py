"""Result of feeding one finalized utterance through the dictation pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from voice_invoice.schemas.commands import StructuredCommand
from voice_invoice.schemas.invoice import Invoice
from voice_invoice.schemas.mutations import Mutation


class OutcomeStatus(str, Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    NOOP = "noop"
    UNRECOGNIZED = "unrecognized"
    NAVIGATION = "navigation"
    EMPTY = "empty"


class PipelineOutcome(BaseModel):
    """Transient feedback for the user plus the invoice after the step."""

    model_config = ConfigDict(frozen=True)

    status: OutcomeStatus
    message: str
    invoice: Invoice
    command: Optional[StructuredCommand] = None
    mutation: Optional[Mutation] = None
    segment_confidence: Optional[float] = None

    @property
    def changed(self) -> bool:
        return self.status is OutcomeStatus.APPLIED
