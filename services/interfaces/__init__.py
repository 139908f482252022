"""
Services Interfaces Package.

Exports all service interfaces for the QR exchange.
"""

from services.interfaces.base_service_interface import (
    IBaseService,
    BaseService
)

from services.interfaces.config_service_interface import IConfigService

from services.interfaces.image_decoder_service_interface import (
    ImageDecodeServiceResult,
    IImageDecoderService
)

from services.interfaces.qr_export_service_interface import (
    QrExportResult,
    IQrExportService
)

from services.interfaces.import_reconciler_service_interface import (
    ActiveView,
    EffectAction,
    ReconcileEffect,
    IImportReconcilerService
)


__all__ = [
    # Base
    "IBaseService",
    "BaseService",
    # Config
    "IConfigService",
    # Import: image decoding
    "ImageDecodeServiceResult",
    "IImageDecoderService",
    # Export
    "QrExportResult",
    "IQrExportService",
    # Import: reconciliation
    "ActiveView",
    "EffectAction",
    "ReconcileEffect",
    "IImportReconcilerService",
]
