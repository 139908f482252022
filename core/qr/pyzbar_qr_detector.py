"""
Pyzbar QR Detector Implementation.

Decodes QR codes with the pyzbar bindings to the zbar library.
Follows the Single Responsibility Principle (SRP) and
Dependency Inversion Principle (DIP) from SOLID.
"""

import logging
from typing import Optional, List

import cv2
import numpy as np
from pyzbar.pyzbar import decode, ZBarSymbol, Decoded

from core.interfaces.qr_detector_interface import (
    IQrDetector,
    QrDetectionResult,
    largestResult
)


class PyzbarQrDetector(IQrDetector):
    """
    QR code detector using pyzbar.

    zbar returns raw bytes; they are decoded as UTF-8, falling back
    to Latin-1 for codes written by other generators.
    """

    BACKEND_NAME = "pyzbar"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(__name__)

    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        # zbar reads single-channel images only
        if image.ndim == 3:
            code = cv2.COLOR_BGRA2GRAY if image.shape[2] == 4 else cv2.COLOR_BGR2GRAY
            image = cv2.cvtColor(image, code)

        try:
            decoded: List[Decoded] = decode(image, symbols=[ZBarSymbol.QRCODE])
        except Exception as e:
            self._logger.error(f"zbar failed on {image.shape} image: {e}")
            return None

        results = [
            QrDetectionResult(
                text=self._decodeBytes(qr.data),
                polygon=[(p.x, p.y) for p in qr.polygon],
                rect=(qr.rect.left, qr.rect.top, qr.rect.width, qr.rect.height),
                confidence=min(1.0, qr.quality / 100.0) if qr.quality else 1.0,
                backend=self.BACKEND_NAME
            )
            for qr in decoded if qr.data
        ]

        best = largestResult(results)
        if best is None:
            self._logger.debug("No QR code read")
        return best

    def _decodeBytes(self, data: bytes) -> str:
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError:
            self._logger.warning("QR content is not UTF-8, decoding as Latin-1")
            return data.decode('latin-1')
