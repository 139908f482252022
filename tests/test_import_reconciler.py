"""
Tests for ImportReconcilerService.
"""

import pytest

from core.codec import BulkOutcome, SingleOutcome, classify, parse
from core.codec.payload_codec import encode
from core.errors import PatientContextError, RecordStoreError, RecordValidationFailure
from core.models.payload import SelectionSet
from core.models.patient_context import PatientContext
from core.models.records import RecordKind
from core.store import InMemoryRecordStore
from services.impl.import_reconciler_service import ImportReconcilerService
from services.interfaces.import_reconciler_service_interface import ActiveView, EffectAction


VALID_MEDICINE = {
    "id": 11, "name": "Amoxicilina", "dose": "1 tablet",
    "startDate": "2024-03-01", "endDate": "2024-03-10",
    "times": ["21:00", "09:00"], "notes": ""
}
VALID_APPOINTMENT = {
    "id": 12, "doctor": "Dr. Gómez", "date": "2020-01-15", "time": "16:30",
    "location": "Clínica Norte", "notes": ""
}


@pytest.fixture
def reconciler(store, hooks):
    return ImportReconcilerService(store, hooks.fillForm, hooks.switchView)


class TestNotConfirmed:
    """An outcome the user did not confirm changes nothing."""

    def test_bulk_not_confirmed(self, reconciler, store, context):
        before = store.listRecords(1, RecordKind.MEDICINE)
        effect = reconciler.reconcile(BulkOutcome(medicines=[VALID_MEDICINE]), False, context)

        assert effect.action == EffectAction.NONE
        assert store.listRecords(1, RecordKind.MEDICINE) == before

    def test_single_not_confirmed(self, reconciler, hooks, context):
        outcome = SingleOutcome(kind=RecordKind.MEDICINE, record={"name": "A"})
        reconciler.reconcile(outcome, False, context)
        assert hooks.filled == []
        assert hooks.views == []

    def test_no_context_needed_when_declined(self, reconciler):
        effect = reconciler.reconcile(BulkOutcome(medicines=[VALID_MEDICINE]), False, None)
        assert effect.action == EffectAction.NONE


class TestSingleImport:
    """Single records are staged in a form, never stored."""

    def test_medicine_prefills_form(self, reconciler, store, hooks, context):
        record = {"name": "Ibuprofeno", "dose": "400mg"}
        effect = reconciler.reconcile(
            SingleOutcome(kind=RecordKind.MEDICINE, record=record), True, context
        )

        assert effect.action == EffectAction.PREFILL_FORM
        assert effect.view == ActiveView.MEDICINE_FORM
        assert hooks.filled == [(RecordKind.MEDICINE, record)]
        assert hooks.views == [ActiveView.MEDICINE_FORM]
        assert len(store.listRecords(1, RecordKind.MEDICINE)) == 1

    def test_appointment_switches_to_appointment_form(self, reconciler, hooks, context):
        reconciler.reconcile(
            SingleOutcome(kind=RecordKind.APPOINTMENT, record={"doctor": "X"}), True, context
        )
        assert hooks.views == [ActiveView.APPOINTMENT_FORM]

    def test_invalid_single_record_is_still_staged(self, reconciler, hooks, context):
        """Validation happens when the form is saved."""
        reconciler.reconcile(
            SingleOutcome(kind=RecordKind.MEDICINE, record={"times": "never"}), True, context
        )
        assert len(hooks.filled) == 1


class TestBulkImport:
    """Bulk imports replace both collections of the active patient."""

    def test_replaces_both_collections(self, reconciler, store, context):
        effect = reconciler.reconcile(
            BulkOutcome(medicines=[VALID_MEDICINE], appointments=[VALID_APPOINTMENT]),
            True,
            context
        )

        assert effect.action == EffectAction.REPLACE_RECORDS
        assert effect.medicinesCount == 1
        assert effect.appointmentsCount == 1

        medicines = store.listRecords(1, RecordKind.MEDICINE)
        appointments = store.listRecords(1, RecordKind.APPOINTMENT)
        assert [m.name for m in medicines] == ["Amoxicilina"]
        assert medicines[0].times == ["09:00", "21:00"]
        assert [a.doctor for a in appointments] == ["Dr. Gómez"]

    def test_empty_sequence_clears_collection(self, reconciler, store, context):
        """Replace, not merge: an empty side empties that collection."""
        reconciler.reconcile(BulkOutcome(medicines=[VALID_MEDICINE]), True, context)
        assert store.listRecords(1, RecordKind.APPOINTMENT) == []

    def test_records_are_owned_by_active_patient(self, reconciler, store):
        caregiverContext = PatientContext(patientId=4, userId=9, actingAsCaregiver=True)
        foreign = dict(VALID_MEDICINE, patientId=77)

        reconciler.reconcile(BulkOutcome(medicines=[foreign]), True, caregiverContext)

        assert store.listRecords(4, RecordKind.MEDICINE)[0].patientId == 4
        assert store.listRecords(77, RecordKind.MEDICINE) == []
        assert len(store.listRecords(1, RecordKind.MEDICINE)) == 1

    def test_past_appointments_are_accepted(self, reconciler, store, context):
        reconciler.reconcile(BulkOutcome(appointments=[VALID_APPOINTMENT]), True, context)
        assert store.listRecords(1, RecordKind.APPOINTMENT)[0].date == "2020-01-15"

    def test_invalid_record_rejects_whole_import(self, reconciler, store, context):
        """One bad record leaves both collections untouched."""
        bad = dict(VALID_APPOINTMENT, time="late")
        before = (
            store.listRecords(1, RecordKind.MEDICINE),
            store.listRecords(1, RecordKind.APPOINTMENT)
        )

        with pytest.raises(RecordValidationFailure) as excinfo:
            reconciler.reconcile(
                BulkOutcome(medicines=[VALID_MEDICINE], appointments=[VALID_APPOINTMENT, bad]),
                True,
                context
            )

        assert excinfo.value.kind == "appointment"
        assert excinfo.value.index == 1
        assert (
            store.listRecords(1, RecordKind.MEDICINE),
            store.listRecords(1, RecordKind.APPOINTMENT)
        ) == before

    def test_non_object_item_is_rejected(self, reconciler, context):
        with pytest.raises(RecordValidationFailure) as excinfo:
            reconciler.reconcile(BulkOutcome(medicines=["Paracetamol"]), True, context)
        assert excinfo.value.field == "record"

    def test_missing_context_raises(self, reconciler):
        with pytest.raises(PatientContextError):
            reconciler.reconcile(BulkOutcome(medicines=[VALID_MEDICINE]), True, None)

    def test_unknown_outcome_type(self, reconciler, context):
        with pytest.raises(TypeError):
            reconciler.reconcile(object(), True, context)


class AppointmentWriteFailingStore(InMemoryRecordStore):
    """Store whose appointment writes fail, as a full disk would."""

    def replaceRecords(self, patientId, kind, records):
        if kind == RecordKind.APPOINTMENT:
            raise RecordStoreError("disk full")
        return super().replaceRecords(patientId, kind, records)


class TestStoreFailure:
    """A failed write leaves the patient's records as they were."""

    def test_medicines_restored_when_appointments_fail(self, hooks, context, paracetamol):
        failingStore = AppointmentWriteFailingStore()
        failingStore.replaceRecords(1, RecordKind.MEDICINE, [paracetamol])
        reconciler = ImportReconcilerService(failingStore, hooks.fillForm, hooks.switchView)

        with pytest.raises(RecordStoreError):
            reconciler.reconcile(
                BulkOutcome(medicines=[VALID_MEDICINE], appointments=[VALID_APPOINTMENT]),
                True,
                context
            )

        medicines = failingStore.listRecords(1, RecordKind.MEDICINE)
        assert [(m.id, m.name) for m in medicines] == [(1, "Paracetamol")]


class TestExportImportRoundTrip:
    """Exported records come back unchanged on another device."""

    def test_round_trip_between_stores(self, store, emptyStore, hooks, paracetamol, perez):
        text = encode(
            SelectionSet(medicines={1}, appointments={2}),
            store.listRecords(1, RecordKind.MEDICINE),
            store.listRecords(1, RecordKind.APPOINTMENT)
        )
        outcome = classify(parse(text))

        receiver = ImportReconcilerService(emptyStore, hooks.fillForm, hooks.switchView)
        receiver.reconcile(outcome, True, PatientContext(patientId=8, userId=8))

        medicine = emptyStore.listRecords(8, RecordKind.MEDICINE)[0]
        appointment = emptyStore.listRecords(8, RecordKind.APPOINTMENT)[0]
        assert (medicine.name, medicine.dose, medicine.times) == (
            paracetamol.name, paracetamol.dose, paracetamol.times
        )
        assert (appointment.doctor, appointment.date, appointment.time) == (
            perez.doctor, perez.date, perez.time
        )
        assert medicine.patientId == 8
