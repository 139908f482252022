"""
Payload Models Module.

Transient data classes for the QR exchange:
- PayloadKind: wire discriminant of a payload
- ExportPayload: parsed payload envelope
- SelectionSet: records chosen for the next export
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from core.models.records import RecordKind


class PayloadKind(str, Enum):
    """Payload discriminant. Values are the exact `type` strings on the wire."""
    SINGLE_MEDICINE = "medicine"
    SINGLE_APPOINTMENT = "appointment"
    BULK_EXPORT = "export"

    @property
    def isSingle(self) -> bool:
        return self is not PayloadKind.BULK_EXPORT

    @property
    def recordKind(self) -> Optional[RecordKind]:
        """Record kind carried by a single payload, None for bulk."""
        if self is PayloadKind.SINGLE_MEDICINE:
            return RecordKind.MEDICINE
        if self is PayloadKind.SINGLE_APPOINTMENT:
            return RecordKind.APPOINTMENT
        return None

    @classmethod
    def forRecordKind(cls, kind: RecordKind) -> "PayloadKind":
        if kind == RecordKind.MEDICINE:
            return cls.SINGLE_MEDICINE
        return cls.SINGLE_APPOINTMENT


@dataclass
class ExportPayload:
    """
    Parsed QR payload.

    Records are kept as raw dictionaries; field validation happens
    at the point of use.

    Attributes:
        kind: Payload discriminant.
        data: Embedded record for single payloads.
        medicines: Medicine sequence for bulk payloads.
        appointments: Appointment sequence for bulk payloads.
        exportDate: ISO-8601 export timestamp for bulk payloads.
    """
    kind: PayloadKind
    data: Optional[Dict[str, Any]] = None
    medicines: List[Dict[str, Any]] = field(default_factory=list)
    appointments: List[Dict[str, Any]] = field(default_factory=list)
    exportDate: Optional[str] = None


@dataclass
class SelectionSet:
    """Identifiers chosen by the user for the next export."""
    medicines: Set[int] = field(default_factory=set)
    appointments: Set[int] = field(default_factory=set)

    def idsFor(self, kind: RecordKind) -> Set[int]:
        return self.medicines if kind == RecordKind.MEDICINE else self.appointments

    def toggle(self, kind: RecordKind, recordId: int) -> bool:
        """
        Toggle a record in or out of the selection.

        Returns:
            bool: True if the record is selected after the call.
        """
        ids = self.idsFor(kind)
        if recordId in ids:
            ids.discard(recordId)
            return False
        ids.add(recordId)
        return True

    def isEmpty(self) -> bool:
        return not self.medicines and not self.appointments

    def clear(self) -> None:
        self.medicines.clear()
        self.appointments.clear()
