"""
Import Reconciler Service Interface Module.

Defines the interface for applying a confirmed import outcome to
stored state.

Follows:
- SRP: Only applies classified outcomes
- DIP: Depends on IRecordStore and injected UI hooks
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from core.codec import Outcome
from core.models.patient_context import PatientContext
from core.models.records import RecordKind


class ActiveView(str, Enum):
    """Views the import path can switch to."""
    MEDICINE_FORM = "medicine"
    APPOINTMENT_FORM = "appointment"

    @classmethod
    def formFor(cls, kind: RecordKind) -> "ActiveView":
        if kind == RecordKind.MEDICINE:
            return cls.MEDICINE_FORM
        return cls.APPOINTMENT_FORM


class EffectAction(str, Enum):
    """What a reconcile call did."""
    NONE = "none"
    PREFILL_FORM = "prefill_form"
    REPLACE_RECORDS = "replace_records"


@dataclass
class ReconcileEffect:
    """
    Effect applied by a reconcile call.

    Attributes:
        action: Kind of effect.
        view: View switched to (pre-fill only).
        medicinesCount: Medicines stored (replace only).
        appointmentsCount: Appointments stored (replace only).
    """
    action: EffectAction
    view: Optional[ActiveView] = None
    medicinesCount: int = 0
    appointmentsCount: int = 0


# fillForm(kind, record): stages a record in the form of that kind
FillFormHook = Callable[[RecordKind, Dict[str, Any]], None]
# switchView(view): shows the given view
SwitchViewHook = Callable[[ActiveView], None]


class IImportReconcilerService(ABC):
    """
    Interface for import reconciliation.

    Nothing is changed unless the user confirmed the outcome.
    """

    @abstractmethod
    def reconcile(
        self,
        outcome: Outcome,
        confirmed: bool,
        context: Optional[PatientContext]
    ) -> ReconcileEffect:
        """
        Apply a classified outcome.

        Args:
            outcome: SingleOutcome or BulkOutcome.
            confirmed: Explicit user confirmation.
            context: Active patient.

        Returns:
            ReconcileEffect describing what was done.

        Raises:
            PatientContextError: If there is no active patient.
            RecordValidationFailure: If any bulk record is invalid.
        """
        pass
