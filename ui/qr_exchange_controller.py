"""
QR Exchange Controller Module.

Drives the QR export/import flow independently of any widget toolkit:

Export:
    selection → QrExportService.generateQr → rendered code

Import:
    image → ImageDecoderService → parse → classify → confirmation prompt
          → user answer → ImportReconcilerService

Every import runs under a ticket. Starting a new import or cancelling
invalidates older tickets, so a decode result that arrives late is
discarded instead of being applied.

Follows:
- SRP: Only handles exchange flow and selection state
- DIP: Services are injected
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from core.codec import Outcome, classify, describeOutcome, parse
from core.errors import EmptySelection, NoCodeFound, QrExchangeError
from core.interfaces.record_store_interface import IRecordStore, Record
from core.models.patient_context import PatientContext
from core.models.payload import SelectionSet
from core.models.records import RecordKind
from services.interfaces.image_decoder_service_interface import (
    IImageDecoderService,
    ImageDecodeServiceResult,
    ImageSource
)
from services.interfaces.import_reconciler_service_interface import (
    EffectAction,
    IImportReconcilerService,
    ReconcileEffect
)
from services.interfaces.qr_export_service_interface import (
    IQrExportService,
    QrExportResult
)


logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    """Import pipeline state."""
    IDLE = "idle"
    DECODING = "decoding"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


# onMessage(text, isError)
MessageCallback = Callable[[str, bool], None]
# onConfirmationRequested(prompt)
ConfirmationCallback = Callable[[str], None]
# onStateChanged(state)
StateCallback = Callable[[ControllerState], None]


class QrExchangeController:
    """
    Orchestrates QR export and import for the active patient.

    All methods are called from one thread. Only image decoding may run
    elsewhere; its result comes back through completeImport().
    """

    def __init__(
        self,
        recordStore: IRecordStore,
        exportService: IQrExportService,
        decoderService: IImageDecoderService,
        reconcilerService: IImportReconcilerService,
        resolveContext: Callable[[], PatientContext],
        onMessage: Optional[MessageCallback] = None,
        onConfirmationRequested: Optional[ConfirmationCallback] = None,
        onStateChanged: Optional[StateCallback] = None
    ):
        """
        Initialize QrExchangeController.

        Args:
            recordStore: Store used to list records for select-all.
            exportService: QR export service.
            decoderService: Image decoder service.
            reconcilerService: Import reconciler service.
            resolveContext: Returns the active patient, raises
                PatientContextError when there is none.
            onMessage: Called with user-facing messages.
            onConfirmationRequested: Called with the confirmation prompt.
            onStateChanged: Called on every state change.
        """
        self._recordStore = recordStore
        self._exportService = exportService
        self._decoderService = decoderService
        self._reconcilerService = reconcilerService
        self._resolveContext = resolveContext

        self.onMessage = onMessage
        self.onConfirmationRequested = onConfirmationRequested
        self.onStateChanged = onStateChanged

        self._selection = SelectionSet()
        self._state = ControllerState.IDLE
        self._ticket = 0
        self._pendingOutcome: Optional[Outcome] = None
        self._lastPrompt: Optional[str] = None

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # State
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def selection(self) -> SelectionSet:
        return self._selection

    @property
    def pendingOutcome(self) -> Optional[Outcome]:
        """Outcome waiting for confirmation, if any."""
        return self._pendingOutcome

    @property
    def lastPrompt(self) -> Optional[str]:
        return self._lastPrompt

    @property
    def currentTicket(self) -> int:
        return self._ticket

    def _setState(self, state: ControllerState) -> None:
        if state == self._state:
            return
        logger.debug(f"State: {self._state.value} → {state.value}")
        self._state = state
        if self.onStateChanged:
            self.onStateChanged(state)

    def _notify(self, text: str, isError: bool = False) -> None:
        if self.onMessage:
            self.onMessage(text, isError)

    def _report(self, error: QrExchangeError) -> None:
        logger.warning(f"QR exchange failed: {type(error).__name__}: {error}")
        self._notify(error.userMessage, True)

    def _fail(self, error: QrExchangeError) -> None:
        """Abandon the import pipeline and report the failure."""
        self._pendingOutcome = None
        self._lastPrompt = None
        self._setState(ControllerState.IDLE)
        self._report(error)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Selection
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def toggleMedicine(self, recordId: int) -> bool:
        """Toggle a medicine; returns True if it is now selected."""
        return self._selection.toggle(RecordKind.MEDICINE, recordId)

    def toggleAppointment(self, recordId: int) -> bool:
        """Toggle an appointment; returns True if it is now selected."""
        return self._selection.toggle(RecordKind.APPOINTMENT, recordId)

    def selectAll(self, kind: RecordKind) -> int:
        """
        Select every stored record of one kind.

        Returns:
            int: Number of selected records of that kind.
        """
        try:
            context = self._resolveContext()
        except QrExchangeError as e:
            self._report(e)
            return 0

        ids = self._selection.idsFor(RecordKind(kind))
        ids.clear()
        ids.update(
            r.id for r in self._recordStore.listRecords(context.patientId, kind)
            if r.id is not None
        )
        return len(ids)

    def deselectAll(self, kind: RecordKind) -> None:
        self._selection.idsFor(RecordKind(kind)).clear()

    def records(self, kind: RecordKind) -> Iterable[Record]:
        """Records of the active patient, empty without a patient."""
        try:
            context = self._resolveContext()
        except QrExchangeError:
            return []
        return self._recordStore.listRecords(context.patientId, kind)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Export
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def generateQr(self) -> Optional[QrExportResult]:
        """
        Export the current selection as a QR code.

        The selection is reset after a successful export and kept on
        failure.

        Returns:
            QrExportResult, or None if the export was blocked.
        """
        if self._selection.isEmpty():
            # Blocked before the codec runs; the codec checks again
            self._report(EmptySelection("nothing selected"))
            return None

        try:
            context = self._resolveContext()
            result = self._exportService.generateQr(self._selection, context)
        except QrExchangeError as e:
            self._report(e)
            return None

        self._selection.clear()
        self._notify(
            f"QR code generated with {result.medicinesCount} medicine(s) and "
            f"{result.appointmentsCount} appointment(s)."
        )
        return result

    def generateSingleQr(self, kind: RecordKind, record: Record) -> Optional[QrExportResult]:
        """Export one record as a single-record QR code."""
        try:
            return self._exportService.generateSingleQr(kind, record)
        except QrExchangeError as e:
            self._report(e)
            return None

    def saveQr(self, result: QrExportResult, filepath: Optional[str] = None) -> Optional[str]:
        """Save a generated QR code as a PNG file."""
        path = self._exportService.saveQr(result, filepath)
        if path:
            self._notify(f"QR code saved to {path}")
        else:
            self._notify("The QR code could not be saved.", True)
        return path

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Import
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def beginImport(self) -> int:
        """
        Start an import pipeline, abandoning any earlier one.

        Returns:
            int: Ticket to pass to completeImport().
        """
        self._ticket += 1
        self._pendingOutcome = None
        self._lastPrompt = None
        self._setState(ControllerState.DECODING)
        logger.debug(f"[ticket {self._ticket}] Import started")
        return self._ticket

    def isCurrent(self, ticket: int) -> bool:
        """Check that ticket belongs to the running pipeline."""
        return ticket == self._ticket and self._state == ControllerState.DECODING

    def decode(self, imageData: ImageSource, ticket: int) -> ImageDecodeServiceResult:
        """
        Run the image decoder for a ticket.

        Touches no controller state, so it may run on a worker thread.
        """
        return self._decoderService.decodeImage(imageData, frameId=f"import_{ticket}")

    def completeImport(self, ticket: int, decodeResult: ImageDecodeServiceResult) -> bool:
        """
        Continue a pipeline with its decode result.

        Results for abandoned tickets are discarded.

        Returns:
            bool: True if a confirmation prompt was raised.
        """
        if not self.isCurrent(ticket):
            logger.info(f"[ticket {ticket}] Discarding stale decode result")
            return False

        if not decodeResult.success or decodeResult.text is None:
            self._fail(decodeResult.error or NoCodeFound("decoder returned no text"))
            return False

        return self._processText(decodeResult.text)

    def importImage(self, imageData: ImageSource) -> bool:
        """Decode an image synchronously and raise the confirmation prompt."""
        ticket = self.beginImport()
        return self.completeImport(ticket, self.decode(imageData, ticket))

    def importText(self, text: Any) -> bool:
        """Import already decoded QR text."""
        self.beginImport()
        return self._processText(text)

    def _processText(self, text: Any) -> bool:
        try:
            outcome = classify(parse(text))
        except QrExchangeError as e:
            self._fail(e)
            return False

        self._pendingOutcome = outcome
        self._lastPrompt = describeOutcome(outcome)
        self._setState(ControllerState.AWAITING_CONFIRMATION)
        if self.onConfirmationRequested:
            self.onConfirmationRequested(self._lastPrompt)
        return True

    def confirmImport(self, accepted: bool) -> Optional[ReconcileEffect]:
        """
        Answer the confirmation prompt.

        Args:
            accepted: True if the user confirmed the import.

        Returns:
            ReconcileEffect, or None if nothing was pending or the
            import failed.
        """
        if self._state != ControllerState.AWAITING_CONFIRMATION or self._pendingOutcome is None:
            logger.warning("confirmImport called with no pending import")
            return None

        outcome = self._pendingOutcome
        self._pendingOutcome = None
        self._lastPrompt = None
        self._ticket += 1

        try:
            context = self._resolveContext() if accepted else None
            effect = self._reconcilerService.reconcile(outcome, accepted, context)
        except QrExchangeError as e:
            self._fail(e)
            return None

        self._setState(ControllerState.IDLE)
        if effect.action == EffectAction.REPLACE_RECORDS:
            self._notify(
                f"Data imported successfully: {effect.medicinesCount} medicine(s), "
                f"{effect.appointmentsCount} appointment(s)."
            )
        elif effect.action == EffectAction.PREFILL_FORM:
            self._notify(f"Review the imported {effect.view.value} and save it.")
        else:
            self._notify("Import cancelled.")
        return effect

    def cancel(self) -> None:
        """Abandon any running pipeline and reset the selection."""
        self._ticket += 1
        self._pendingOutcome = None
        self._lastPrompt = None
        self._selection.clear()
        self._setState(ControllerState.IDLE)
        logger.debug("Exchange cancelled")
