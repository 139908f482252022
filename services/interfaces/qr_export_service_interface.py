"""
QR Export Service Interface Module.

Defines the interface for exporting selected records as a QR code.

Follows:
- SRP: Only handles selection → payload → QR image
- DIP: Depends on IRecordStore and IQrEncoder abstractions
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.interfaces.record_store_interface import Record
from core.models.patient_context import PatientContext
from core.models.payload import SelectionSet
from core.models.records import RecordKind


@dataclass
class QrExportResult:
    """
    Result of a QR export.

    Attributes:
        payloadText: Encoded payload carried by the QR code.
        image: Rendered QR code (grayscale numpy array).
        medicinesCount: Number of exported medicines.
        appointmentsCount: Number of exported appointments.
        qrVersion: QR symbol version used.
    """
    payloadText: str
    image: np.ndarray
    medicinesCount: int
    appointmentsCount: int
    qrVersion: int


class IQrExportService(ABC):
    """
    Interface for QR export operations.
    """

    @abstractmethod
    def generateQr(
        self,
        selection: SelectionSet,
        context: PatientContext
    ) -> QrExportResult:
        """
        Export the selected records of the active patient.

        Args:
            selection: Selected record ids.
            context: Active patient.

        Returns:
            QrExportResult with the rendered code.

        Raises:
            EmptySelection: If nothing (existing) is selected.
            PayloadTooLarge: If the payload does not fit in a QR code.
        """
        pass

    @abstractmethod
    def generateSingleQr(self, kind: RecordKind, record: Record) -> QrExportResult:
        """
        Export one record as a single-record QR code.

        Raises:
            PayloadTooLarge: If the payload does not fit in a QR code.
        """
        pass

    @abstractmethod
    def saveQr(self, result: QrExportResult, filepath: Optional[str] = None) -> Optional[str]:
        """
        Save a rendered QR code as an image file.

        Args:
            result: Export result to save.
            filepath: Destination path (default: configured export file).

        Returns:
            Saved file path (".png" appended if missing), or None if saving failed.
        """
        pass
