"""QR encoding and detection module."""

from core.qr.qr_detector_factory import (
    createQrDetector,
    getSupportedQrBackends,
    isQrBackendAvailable
)
from core.qr.qr_image_preprocessor import QrImagePreprocessor
from core.qr.qrcode_encoder import QrCodeEncoder

__all__ = [
    'createQrDetector',
    'getSupportedQrBackends',
    'isQrBackendAvailable',
    'QrImagePreprocessor',
    'QrCodeEncoder'
]
