"""
Tests for QrExchangeController export and import flows.
"""

import pytest

from core.codec import encodeSingle
from core.errors import PatientContextError
from core.models.patient_context import PatientContext
from core.models.records import RecordKind
from core.store import JsonFileRecordStore
from services.impl.image_decoder_service import ImageDecoderService
from services.impl.import_reconciler_service import ImportReconcilerService
from services.impl.qr_export_service import QrExportService
from services.interfaces.image_decoder_service_interface import ImageDecodeServiceResult
from services.interfaces.import_reconciler_service_interface import ActiveView, EffectAction
from ui.qr_exchange_controller import ControllerState, QrExchangeController


BULK_PAYLOAD = (
    '{"type":"export","medicines":[{"name":"Amoxicilina","dose":"1 tablet",'
    '"startDate":"2024-03-01","times":["09:00"]}],"appointments":[],'
    '"exportDate":"2024-06-01T10:00:00.000Z"}'
)


class Recorder:
    """Collects controller callbacks."""

    def __init__(self):
        self.messages = []
        self.prompts = []
        self.states = []

    def onMessage(self, text, isError):
        self.messages.append((text, isError))

    def onConfirmationRequested(self, prompt):
        self.prompts.append(prompt)

    def onStateChanged(self, state):
        self.states.append(state)

    @property
    def errors(self):
        return [text for text, isError in self.messages if isError]


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def makeController(store, hooks, context, recorder, makeDetector):
    """Factory building a controller around real services and a scripted detector."""

    def build(texts=None, resolveContext=None, recordStore=None):
        recordStore = recordStore or store
        controller = QrExchangeController(
            recordStore=recordStore,
            exportService=QrExportService(recordStore, boxSize=2),
            decoderService=ImageDecoderService(qrDetector=makeDetector(texts)),
            reconcilerService=ImportReconcilerService(recordStore, hooks.fillForm, hooks.switchView),
            resolveContext=resolveContext or (lambda: context),
            onMessage=recorder.onMessage,
            onConfirmationRequested=recorder.onConfirmationRequested,
            onStateChanged=recorder.onStateChanged
        )
        return controller

    return build


class TestExport:
    """Tests for exporting the selection."""

    def test_empty_selection_is_blocked(self, makeController, recorder):
        controller = makeController()
        assert controller.generateQr() is None
        assert len(recorder.errors) == 1
        assert "select at least one" in recorder.errors[0]

    def test_generate_resets_selection(self, makeController, recorder):
        controller = makeController()
        controller.toggleMedicine(1)
        controller.toggleAppointment(2)

        result = controller.generateQr()

        assert result.medicinesCount == 1
        assert result.appointmentsCount == 1
        assert controller.selection.isEmpty()
        assert recorder.messages[-1] == (
            "QR code generated with 1 medicine(s) and 1 appointment(s).", False
        )

    def test_failed_export_keeps_selection(self, makeController):
        controller = makeController()
        controller.toggleMedicine(99)
        assert controller.generateQr() is None
        assert controller.selection.medicines == {99}

    def test_toggle_twice_deselects(self, makeController):
        controller = makeController()
        assert controller.toggleMedicine(1) is True
        assert controller.toggleMedicine(1) is False
        assert controller.selection.isEmpty()

    def test_select_all(self, makeController):
        controller = makeController()
        assert controller.selectAll(RecordKind.MEDICINE) == 1
        assert controller.selection.medicines == {1}
        controller.deselectAll(RecordKind.MEDICINE)
        assert controller.selection.isEmpty()

    def test_select_all_without_patient(self, makeController, recorder):
        def noPatient():
            raise PatientContextError("no user is logged in")

        controller = makeController(resolveContext=noPatient)
        assert controller.selectAll(RecordKind.APPOINTMENT) == 0
        assert recorder.errors
        assert list(controller.records(RecordKind.APPOINTMENT)) == []

    def test_export_error_does_not_reset_import(self, makeController):
        controller = makeController()
        controller.importText(BULK_PAYLOAD)
        controller.generateQr()
        assert controller.state == ControllerState.AWAITING_CONFIRMATION


class TestImport:
    """Tests for the import pipeline."""

    def test_bulk_import_confirmed(self, makeController, recorder, store, blankImage):
        controller = makeController([BULK_PAYLOAD])

        assert controller.importImage(blankImage) is True
        assert controller.state == ControllerState.AWAITING_CONFIRMATION
        assert "Medicines: 1" in recorder.prompts[0]

        effect = controller.confirmImport(True)

        assert effect.action == EffectAction.REPLACE_RECORDS
        assert controller.state == ControllerState.IDLE
        assert [m.name for m in store.listRecords(1, RecordKind.MEDICINE)] == ["Amoxicilina"]
        assert store.listRecords(1, RecordKind.APPOINTMENT) == []
        assert recorder.messages[-1][0].startswith("Data imported successfully")

    def test_bulk_import_declined(self, makeController, recorder, store):
        controller = makeController()
        before = store.listRecords(1, RecordKind.MEDICINE)

        controller.importText(BULK_PAYLOAD)
        effect = controller.confirmImport(False)

        assert effect.action == EffectAction.NONE
        assert store.listRecords(1, RecordKind.MEDICINE) == before
        assert recorder.messages[-1] == ("Import cancelled.", False)

    def test_single_import_prefills_form(self, makeController, hooks, store, paracetamol):
        controller = makeController()
        controller.importText(encodeSingle(RecordKind.MEDICINE, paracetamol))

        effect = controller.confirmImport(True)

        assert effect.view == ActiveView.MEDICINE_FORM
        assert hooks.filled[0][1]["name"] == "Paracetamol"
        assert len(store.listRecords(1, RecordKind.MEDICINE)) == 1

    def test_no_code_found_returns_to_idle(self, makeController, recorder, blankImage):
        controller = makeController([None, None])

        assert controller.importImage(blankImage) is False

        assert controller.state == ControllerState.IDLE
        assert recorder.prompts == []
        assert "No QR code" in recorder.errors[0]

    def test_malformed_text_returns_to_idle(self, makeController, recorder):
        controller = makeController()
        assert controller.importText("hello world") is False
        assert controller.state == ControllerState.IDLE
        assert controller.pendingOutcome is None
        assert recorder.errors

    def test_invalid_bulk_record_reports_and_keeps_store(self, makeController, recorder, store):
        controller = makeController()
        before = store.listRecords(1, RecordKind.MEDICINE)
        controller.importText(
            '{"type":"export","medicines":[{"name":"","dose":"1"}],"appointments":[]}'
        )

        assert controller.confirmImport(True) is None
        assert controller.state == ControllerState.IDLE
        assert store.listRecords(1, RecordKind.MEDICINE) == before
        assert "Nothing was imported" in recorder.errors[-1]

    def test_store_write_failure_reports_and_returns_to_idle(self, makeController, recorder, tmp_path):
        """A bulk import the store cannot save is reported and leaves nothing applied."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        recordStore = JsonFileRecordStore(str(blocker / "records.json"))
        controller = makeController(recordStore=recordStore)

        assert controller.importText(BULK_PAYLOAD)
        assert controller.confirmImport(True) is None
        assert controller.state == ControllerState.IDLE
        assert recordStore.listRecords(1, RecordKind.MEDICINE) == []
        assert "could not be saved" in recorder.errors[-1]

    def test_deeply_nested_text_is_reported(self, makeController, recorder):
        controller = makeController()
        assert controller.importText("[" * 2900) is False
        assert controller.state == ControllerState.IDLE
        assert len(recorder.errors) == 1

    def test_confirm_without_pending_import(self, makeController):
        assert makeController().confirmImport(True) is None

    def test_confirm_twice_applies_once(self, makeController):
        controller = makeController()
        controller.importText(BULK_PAYLOAD)
        assert controller.confirmImport(True) is not None
        assert controller.confirmImport(True) is None


class TestStaleResults:
    """Late decode results never reach an abandoned pipeline."""

    def _result(self, text):
        return ImageDecodeServiceResult(text=text, frameId="x", success=True)

    def test_superseded_ticket_is_discarded(self, makeController, recorder):
        controller = makeController()
        first = controller.beginImport()
        second = controller.beginImport()

        assert controller.completeImport(first, self._result(BULK_PAYLOAD)) is False
        assert controller.state == ControllerState.DECODING
        assert recorder.prompts == []

        assert controller.completeImport(second, self._result(BULK_PAYLOAD)) is True

    def test_cancel_discards_running_decode(self, makeController, recorder):
        controller = makeController()
        controller.toggleMedicine(1)
        ticket = controller.beginImport()

        controller.cancel()

        assert controller.completeImport(ticket, self._result(BULK_PAYLOAD)) is False
        assert controller.state == ControllerState.IDLE
        assert controller.selection.isEmpty()
        assert recorder.prompts == []

    def test_cancel_drops_pending_confirmation(self, makeController, store):
        controller = makeController()
        controller.importText(BULK_PAYLOAD)
        controller.cancel()

        assert controller.confirmImport(True) is None
        assert [m.name for m in store.listRecords(1, RecordKind.MEDICINE)] == ["Paracetamol"]

    def test_decode_uses_ticket_in_frame_id(self, makeController, blankImage):
        controller = makeController(["{}"])
        ticket = controller.beginImport()
        assert controller.decode(blankImage, ticket).frameId == f"import_{ticket}"

    def test_state_changes_are_reported(self, makeController, recorder):
        controller = makeController()
        controller.importText(BULK_PAYLOAD)
        controller.confirmImport(False)
        assert recorder.states == [
            ControllerState.DECODING,
            ControllerState.AWAITING_CONFIRMATION,
            ControllerState.IDLE,
        ]


class TestCaregiverContext:
    def test_import_goes_to_selected_patient(self, makeController, store):
        controller = makeController(
            resolveContext=lambda: PatientContext(patientId=4, userId=9, actingAsCaregiver=True)
        )
        controller.importText(BULK_PAYLOAD)
        controller.confirmImport(True)

        assert len(store.listRecords(4, RecordKind.MEDICINE)) == 1
        assert [m.name for m in store.listRecords(1, RecordKind.MEDICINE)] == ["Paracetamol"]
