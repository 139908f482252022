"""
ZXing QR Detector Implementation.

Decodes QR codes with the zxing-cpp library. Every valid QR code in the
image is read; the largest one is returned.
"""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from core.interfaces.qr_detector_interface import (
    IQrDetector,
    QrDetectionResult,
    largestResult
)


class ZxingQrDetector(IQrDetector):
    """
    QR code detector using zxing-cpp.

    The zxing-cpp module is imported on construction, so a missing
    library surfaces in the factory rather than on the first upload.
    """

    BACKEND_NAME = "zxing"

    def __init__(
        self,
        tryRotate: bool = True,
        tryDownscale: bool = True,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize ZxingQrDetector.

        Args:
            tryRotate: Also read codes rotated by 90/270 degrees.
            tryDownscale: Also read downscaled copies of large photos.
            logger: Logger instance for debug output.

        Raises:
            ImportError: If zxing-cpp is not installed.
        """
        import zxingcpp

        self._zxingcpp = zxingcpp
        self._tryRotate = tryRotate
        self._tryDownscale = tryDownscale
        self._logger = logger or logging.getLogger(__name__)

        self._logger.info(
            f"ZxingQrDetector initialized "
            f"(tryRotate={tryRotate}, tryDownscale={tryDownscale})"
        )

    @staticmethod
    def _toGray(image: np.ndarray) -> np.ndarray:
        if image.ndim == 2:
            return image
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    @staticmethod
    def _polygonOf(position) -> List[Tuple[int, int]]:
        corners = (
            position.top_left,
            position.top_right,
            position.bottom_right,
            position.bottom_left
        )
        return [(int(p.x), int(p.y)) for p in corners]

    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        try:
            barcodes = self._zxingcpp.read_barcodes(
                self._toGray(image),
                formats=self._zxingcpp.BarcodeFormat.QRCode,
                try_rotate=self._tryRotate,
                try_downscale=self._tryDownscale
            )
        except Exception as e:
            self._logger.error(f"zxing-cpp failed on {image.shape} image: {e}")
            return None

        results = []
        for barcode in barcodes:
            if not getattr(barcode, "valid", True) or not barcode.text:
                continue
            polygon = self._polygonOf(barcode.position)
            xs = [x for x, _ in polygon]
            ys = [y for _, y in polygon]
            results.append(QrDetectionResult(
                text=barcode.text,
                polygon=polygon,
                rect=(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys)),
                confidence=1.0,  # zxing-cpp reports no score
                backend=self.BACKEND_NAME
            ))

        best = largestResult(results)
        if best is None:
            self._logger.debug(f"No QR code read ({len(barcodes)} candidates)")
        elif len(results) > 1:
            self._logger.info(f"{len(results)} QR codes in image, using the largest")
        return best
