"""
Services Implementation Package.

Exports all service implementations for the QR exchange.
"""

from services.impl.config_service import ConfigService
from services.impl.image_decoder_service import ImageDecoderService
from services.impl.qr_export_service import QrExportService
from services.impl.import_reconciler_service import ImportReconcilerService


__all__ = [
    "ConfigService",
    "ImageDecoderService",
    "QrExportService",
    "ImportReconcilerService",
]
