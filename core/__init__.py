# Core module for the QR exchange
# Contains interfaces and implementations for records, payload codec,
# QR encoding/decoding, record stores and the image writer

from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult
from core.interfaces.qr_encoder_interface import IQrEncoder, QrEncodingResult
from core.interfaces.record_store_interface import IRecordStore
from core.interfaces.writer_interface import IImageWriter
from core.writer.local_writer import LocalImageWriter

__all__ = [
    "IQrDetector",
    "QrDetectionResult",
    "IQrEncoder",
    "QrEncodingResult",
    "IRecordStore",
    "IImageWriter",
    "LocalImageWriter",
]
