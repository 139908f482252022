"""
Record Store Interface Module.

Defines the interface for per-patient persistence of Medicine and
Appointment records. The QR import path writes through this interface
only and never bypasses it.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Union

from core.models.records import Appointment, Medicine, RecordKind


Record = Union[Medicine, Appointment]


class IRecordStore(ABC):
    """
    Interface for record persistence.

    Collections are keyed by patient and record kind and keep
    creation order.
    """

    @abstractmethod
    def listRecords(self, patientId: int, kind: RecordKind) -> List[Record]:
        """
        List a patient's records of one kind.

        Args:
            patientId: Owning patient.
            kind: Record kind.

        Returns:
            List of records in creation order (copies).
        """
        pass

    @abstractmethod
    def createRecord(self, patientId: int, kind: RecordKind, record: Record) -> Record:
        """
        Store a new record.

        A fresh identifier is always assigned and ownership is set
        to patientId.

        Returns:
            The stored record with its id.
        """
        pass

    @abstractmethod
    def deleteRecord(self, patientId: int, kind: RecordKind, recordId: int) -> None:
        """
        Delete a record by id. Unknown ids are ignored.
        """
        pass

    def replaceRecords(
        self,
        patientId: int,
        kind: RecordKind,
        records: Sequence[Record]
    ) -> List[Record]:
        """
        Replace a patient's whole collection of one kind.

        Default implementation deletes every record and creates the new
        ones, so identifiers are reassigned. Stores with an atomic set
        operation override this.

        Returns:
            The stored records.
        """
        for existing in self.listRecords(patientId, kind):
            self.deleteRecord(patientId, kind, existing.id)
        return [self.createRecord(patientId, kind, record) for record in records]
