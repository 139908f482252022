# Services module for the QR exchange
# Contains business logic services

# Service implementations are in services/impl/
# Import them directly from there:
# from services.impl.qr_export_service import QrExportService
# from services.impl.image_decoder_service import ImageDecoderService
# etc.

__all__ = []
