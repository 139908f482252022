"""
Import Reconciler Service Implementation.

Applies a confirmed import outcome:
- Single record: staged in the matching form through the pre-fill hook,
  never written to the store directly
- Bulk export: replaces the active patient's medicine and appointment
  collections (full replace, not merge)

Bulk import is all-or-nothing: every record is validated before the
store is touched.

Follows:
- SRP: Only applies classified outcomes
- DIP: Depends on IRecordStore and injected hooks
"""

import time
from typing import Any, List, Optional, Sequence

from core.codec import BulkOutcome, Outcome, SingleOutcome
from core.errors import PatientContextError, RecordStoreError, RecordValidationFailure
from core.interfaces.record_store_interface import IRecordStore, Record
from core.models.patient_context import PatientContext
from core.models.records import RecordKind, recordFromDict
from services.interfaces.base_service_interface import BaseService
from services.interfaces.import_reconciler_service_interface import (
    ActiveView,
    EffectAction,
    FillFormHook,
    IImportReconcilerService,
    ReconcileEffect,
    SwitchViewHook
)


class ImportReconcilerService(IImportReconcilerService, BaseService):
    """
    Import Reconciler Service Implementation.
    """

    SERVICE_NAME = "import_reconciler"

    def __init__(
        self,
        recordStore: IRecordStore,
        fillForm: FillFormHook,
        switchView: SwitchViewHook,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False
    ):
        """
        Initialize ImportReconcilerService.

        Args:
            recordStore: Store bulk imports are written to.
            fillForm: Pre-fill hook, called as fillForm(kind, record).
            switchView: View switch, called as switchView(view).
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )
        self._recordStore = recordStore
        self._fillForm = fillForm
        self._switchView = switchView

    def reconcile(
        self,
        outcome: Outcome,
        confirmed: bool,
        context: Optional[PatientContext]
    ) -> ReconcileEffect:
        if not confirmed:
            self._logger.info("Import not confirmed, nothing applied")
            return ReconcileEffect(action=EffectAction.NONE)

        if context is None:
            raise PatientContextError("no active patient for import")

        if isinstance(outcome, SingleOutcome):
            return self._applySingle(outcome)
        if isinstance(outcome, BulkOutcome):
            return self._applyBulk(outcome, context)
        raise TypeError(f"Unsupported outcome: {type(outcome).__name__}")

    def _applySingle(self, outcome: SingleOutcome) -> ReconcileEffect:
        view = ActiveView.formFor(outcome.kind)
        self._fillForm(outcome.kind, dict(outcome.record))
        self._switchView(view)
        self._logger.info(f"Staged imported {outcome.kind.value} in {view.value} form")
        return ReconcileEffect(action=EffectAction.PREFILL_FORM, view=view)

    def _applyBulk(self, outcome: BulkOutcome, context: PatientContext) -> ReconcileEffect:
        startTime = time.time()

        # Validate everything first; a failure leaves the store untouched
        medicines = self._prepare(RecordKind.MEDICINE, outcome.medicines, context)
        appointments = self._prepare(RecordKind.APPOINTMENT, outcome.appointments, context)

        previousMedicines = self._recordStore.listRecords(context.patientId, RecordKind.MEDICINE)
        storedMedicines = self._recordStore.replaceRecords(
            context.patientId, RecordKind.MEDICINE, medicines
        )
        try:
            storedAppointments = self._recordStore.replaceRecords(
                context.patientId, RecordKind.APPOINTMENT, appointments
            )
        except RecordStoreError:
            self._logger.error(
                f"Saving appointments failed, restoring medicines of patient {context.patientId}"
            )
            self._recordStore.replaceRecords(
                context.patientId, RecordKind.MEDICINE, previousMedicines
            )
            raise

        frameId = f"import_{int(startTime * 1000)}"
        self._logTiming(frameId, self._measureTime(startTime), "Import")
        self._logger.info(
            f"[{frameId}] Replaced records of patient {context.patientId}: "
            f"{len(storedMedicines)} medicines, {len(storedAppointments)} appointments"
            + (" (caregiver)" if context.actingAsCaregiver else "")
        )
        self._saveDebugJson(frameId, {
            "patientId": context.patientId,
            "exportDate": outcome.exportDate,
            "medicines": [r.toDict() for r in storedMedicines],
            "appointments": [r.toDict() for r in storedAppointments]
        }, "import")

        return ReconcileEffect(
            action=EffectAction.REPLACE_RECORDS,
            medicinesCount=len(storedMedicines),
            appointmentsCount=len(storedAppointments)
        )

    def _prepare(
        self,
        kind: RecordKind,
        items: Sequence[Any],
        context: PatientContext
    ) -> List[Record]:
        """
        Validate raw records and hand them to the active patient.

        Raises:
            RecordValidationFailure: On the first invalid record.
        """
        records = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise RecordValidationFailure(kind.value, "record", "is not an object", index)
            record = recordFromDict(kind, item)
            try:
                record.validate(index=index)
            except RecordValidationFailure as e:
                self._logger.warning(f"Rejected import: {e}")
                raise
            record.patientId = context.patientId
            records.append(record)
        return records
