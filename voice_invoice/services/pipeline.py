"""High-level pipeline that turns finalized utterances into invoice changes."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, List

from voice_invoice.core.config import Settings, get_settings
from voice_invoice.schemas.commands import CommandKind, StructuredCommand, TranscriptSegment
from voice_invoice.schemas.invoice import Invoice
from voice_invoice.schemas.mutations import (
    AddItem,
    Mutation,
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
from voice_invoice.schemas.outcomes import OutcomeStatus, PipelineOutcome
from voice_invoice.services.engine import ApplyStatus, InvoiceStateEngine
from voice_invoice.services.matcher import CommandMatcher
from voice_invoice.services.normalizer import normalize_transcript
from voice_invoice.services.translator import translate

logger = logging.getLogger(__name__)

NAVIGATION_MESSAGES = {
    CommandKind.SHOW_PREVIEW: "Showing preview",
    CommandKind.GENERATE_PDF: "Generating PDF",
}


class NonFinalSegmentError(ValueError):
    """Raised when an interim transcript segment is handed to the pipeline."""


def describe_mutation(mutation: Mutation) -> str:
    """Short user-facing summary of an applied mutation."""

    if isinstance(mutation, AddItem):
        return f"Added item: {mutation.description}"
    if isinstance(mutation, RemoveItem):
        return f"Removed {mutation.target.describe()}"
    if isinstance(mutation, UpdateItem):
        return f"Updated {mutation.target.describe()}"
    if isinstance(mutation, SetCustomer):
        return "Updated customer"
    if isinstance(mutation, SetTaxRate):
        return f"Set tax rate to {(mutation.tax_rate * 100).normalize():f}%"
    if isinstance(mutation, SetInvoiceNumber):
        return f"Set invoice number to {mutation.invoice_number}"
    if isinstance(mutation, SetIssueDate):
        return "Updated invoice date"
    if isinstance(mutation, SetDueDate):
        return "Updated due date"
    if isinstance(mutation, SetNotes):
        return "Updated notes"
    if isinstance(mutation, ResetInvoice):
        return "Started a new invoice"
    return "Updated invoice"


class DictationPipeline:
    """Glue layer between the rule matcher and the invoice state engine.

    One pipeline owns one invoice. Utterances are handled one at a time and
    to completion, in the order they arrive.
    """

    def __init__(
        self,
        invoice: Invoice | None = None,
        matcher: CommandMatcher | None = None,
        engine: InvoiceStateEngine | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.matcher = matcher or CommandMatcher(settings=self.settings)
        self.engine = engine or InvoiceStateEngine(settings=self.settings)
        self._invoice = invoice if invoice is not None else self.engine.new_invoice()
        self._lock = threading.Lock()

    @property
    def invoice(self) -> Invoice:
        return self._invoice

    def process_transcript(
        self, text: str, confidence: float | None = None
    ) -> PipelineOutcome:
        """Normalize, match, translate and apply one finalized utterance."""

        with self._lock:
            if not normalize_transcript(text):
                return self._outcome(OutcomeStatus.EMPTY, "Nothing to interpret", confidence)

            command = self.matcher.match(text)
            if command.kind is CommandKind.UNKNOWN:
                logger.info("Command not understood: %r", text)
                return self._outcome(
                    OutcomeStatus.UNRECOGNIZED, "Command not understood", confidence, command
                )
            if command.is_navigation:
                return self._outcome(
                    OutcomeStatus.NAVIGATION,
                    NAVIGATION_MESSAGES[command.kind],
                    confidence,
                    command,
                )

            mutation = translate(command)
            if mutation is None:
                return self._outcome(
                    OutcomeStatus.REJECTED,
                    "Could not understand the date",
                    confidence,
                    command,
                )
            return self._apply(mutation, confidence, command)

    def process_segment(self, segment: TranscriptSegment) -> PipelineOutcome:
        if not segment.is_final:
            raise NonFinalSegmentError("Only finalized transcript segments can be processed")
        return self.process_transcript(segment.text, segment.confidence)

    def feed(self, segments: Iterable[TranscriptSegment]) -> List[PipelineOutcome]:
        """Process the finalized segments of ``segments`` in delivery order.

        Interim segments are display-only and are skipped.
        """

        return [
            self.process_segment(segment) for segment in segments if segment.is_final
        ]

    def reset(self) -> PipelineOutcome:
        with self._lock:
            return self._apply(ResetInvoice(), None, None)

    def _apply(
        self,
        mutation: Mutation,
        confidence: float | None,
        command: StructuredCommand | None,
    ) -> PipelineOutcome:
        result = self.engine.apply(self._invoice, mutation)
        self._invoice = result.invoice

        if result.status is ApplyStatus.REJECTED:
            logger.info("Rejected %s: %s", mutation.kind, result.reason)
            status, message = OutcomeStatus.REJECTED, result.reason or "Rejected"
        elif result.status is ApplyStatus.NOOP:
            status, message = OutcomeStatus.NOOP, result.reason or "Nothing changed"
        else:
            status, message = OutcomeStatus.APPLIED, describe_mutation(mutation)

        return self._outcome(status, message, confidence, command, mutation)

    def _outcome(
        self,
        status: OutcomeStatus,
        message: str,
        confidence: float | None,
        command: StructuredCommand | None = None,
        mutation: Mutation | None = None,
    ) -> PipelineOutcome:
        return PipelineOutcome(
            status=status,
            message=message,
            invoice=self._invoice,
            command=command,
            mutation=mutation,
            segment_confidence=confidence,
        )
