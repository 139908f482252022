"""
QR Export Service Implementation.

Reads the active patient's records, encodes the selected ones as a
payload and renders the payload as a QR code image.

Follows:
- SRP: Only handles QR export
- DIP: Depends on IRecordStore, IQrEncoder and IImageWriter abstractions
"""

import os
import time
from typing import Optional

from core.codec import encode, encodeSingle
from core.interfaces.qr_encoder_interface import IQrEncoder
from core.interfaces.record_store_interface import IRecordStore, Record
from core.interfaces.writer_interface import IImageWriter
from core.models.patient_context import PatientContext
from core.models.payload import SelectionSet
from core.models.records import RecordKind
from core.qr import QrCodeEncoder
from core.writer.local_writer import LocalImageWriter
from services.interfaces.base_service_interface import BaseService
from services.interfaces.qr_export_service_interface import (
    IQrExportService,
    QrExportResult
)


class QrExportService(IQrExportService, BaseService):
    """
    QR Export Service Implementation.

    The selection is not modified here; the controller resets it after
    a successful export.
    """

    SERVICE_NAME = "qr_export"

    def __init__(
        self,
        recordStore: IRecordStore,

        # QR rendering
        errorCorrection: str = "H",
        boxSize: int = 10,
        border: int = 4,

        # Output
        exportDirectory: str = "output/qr",
        exportFilename: str = "sgm-datos-qr.png",

        # Debug settings
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False,

        # Injected collaborators (tests)
        encoder: Optional[IQrEncoder] = None,
        writer: Optional[IImageWriter] = None
    ):
        """
        Initialize QrExportService.

        Args:
            recordStore: Store the exported records are read from.
            errorCorrection: QR error correction level ("L", "M", "Q", "H").
            boxSize: Pixels per QR module.
            border: Quiet zone width in modules.
            exportDirectory: Directory for saved QR images.
            exportFilename: Default file name for saved QR images.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
            encoder: QR encoder to use instead of QrCodeEncoder.
            writer: Image writer to use instead of LocalImageWriter.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        self._recordStore = recordStore
        self._encoder: IQrEncoder = encoder or QrCodeEncoder(
            errorCorrection=errorCorrection,
            boxSize=boxSize,
            border=border
        )
        self._writer: IImageWriter = writer or LocalImageWriter()
        self._defaultPath = os.path.join(exportDirectory, exportFilename)

        self._logger.info(
            f"QrExportService initialized "
            f"(errorCorrection={errorCorrection}, output={self._defaultPath})"
        )

    @property
    def defaultPath(self) -> str:
        return self._defaultPath

    def generateQr(
        self,
        selection: SelectionSet,
        context: PatientContext
    ) -> QrExportResult:
        startTime = time.time()
        frameId = f"export_{int(startTime * 1000)}"

        medicines = self._recordStore.listRecords(context.patientId, RecordKind.MEDICINE)
        appointments = self._recordStore.listRecords(context.patientId, RecordKind.APPOINTMENT)

        payloadText = encode(selection, medicines, appointments)
        encoded = self._encoder.encode(payloadText)

        medicinesCount = sum(1 for m in medicines if m.id in selection.medicines)
        appointmentsCount = sum(1 for a in appointments if a.id in selection.appointments)

        self._logTiming(frameId, self._measureTime(startTime), "Export")
        self._logger.info(
            f"[{frameId}] Exported {medicinesCount} medicines and "
            f"{appointmentsCount} appointments for patient {context.patientId} "
            f"(QR version {encoded.version}, {encoded.payloadBytes} bytes)"
        )
        self._saveDebugJson(frameId, {"payload": payloadText, "version": encoded.version}, "qr")

        return QrExportResult(
            payloadText=payloadText,
            image=encoded.image,
            medicinesCount=medicinesCount,
            appointmentsCount=appointmentsCount,
            qrVersion=encoded.version
        )

    def generateSingleQr(self, kind: RecordKind, record: Record) -> QrExportResult:
        kind = RecordKind(kind)
        payloadText = encodeSingle(kind, record)
        encoded = self._encoder.encode(payloadText)

        self._logger.info(
            f"Exported single {kind.value} (QR version {encoded.version}, "
            f"{encoded.payloadBytes} bytes)"
        )
        return QrExportResult(
            payloadText=payloadText,
            image=encoded.image,
            medicinesCount=1 if kind == RecordKind.MEDICINE else 0,
            appointmentsCount=1 if kind == RecordKind.APPOINTMENT else 0,
            qrVersion=encoded.version
        )

    def saveQr(self, result: QrExportResult, filepath: Optional[str] = None) -> Optional[str]:
        return self._writer.save(result.image, filepath or self._defaultPath)

    def pngBytes(self, result: QrExportResult) -> bytes:
        """Encode a rendered QR code as PNG file content."""
        return self._writer.encode(result.image)
