"""
QR Image Preprocessor Module.

Image cleanup for the second QR decoding attempt. Photos of printed or
on-screen codes are often too small, too large, noisy or low in contrast;
this preprocessor normalizes them before the detector runs again.

Supports two modes:
- "minimal": Grayscale → Scale (fast)
- "full": Grayscale → Scale → Denoise → Binarize (thorough)

Follows the Single Responsibility Principle (SRP) from SOLID.
"""

import logging
from typing import Optional

import cv2
import numpy as np


class QrImagePreprocessor:
    """
    Image preprocessor for QR code decoding.

    Scaling targets a fixed width so module edges stay sharp for the
    detector: small images are enlarged, oversized camera photos shrunk.
    """

    MODE_MINIMAL = "minimal"
    MODE_FULL = "full"
    SUPPORTED_MODES = [MODE_MINIMAL, MODE_FULL]

    DEFAULT_TARGET_WIDTH = 1000

    def __init__(
        self,
        enabled: bool = True,
        mode: str = "full",
        targetWidth: int = DEFAULT_TARGET_WIDTH,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize QrImagePreprocessor.

        Args:
            enabled: Master switch to enable/disable preprocessing.
            mode: Preprocessing mode ("minimal" or "full").
            targetWidth: Width the image is resized to, keeping aspect ratio.
            logger: Logger instance for debug output.
        """
        self._enabled = enabled
        self._mode = mode if mode in self.SUPPORTED_MODES else self.MODE_FULL
        self._targetWidth = targetWidth
        self._scaleFactor = 1.0
        self._logger = logger or logging.getLogger(__name__)

        self._logger.info(
            f"QrImagePreprocessor initialized "
            f"(enabled={enabled}, mode={self._mode}, targetWidth={targetWidth}px)"
        )

    @property
    def mode(self) -> str:
        """Get current preprocessing mode."""
        return self._mode

    @property
    def scaleFactor(self) -> float:
        """Scale factor applied by the last preprocess() call."""
        return self._scaleFactor

    def isEnabled(self) -> bool:
        """Check if preprocessing is enabled."""
        return self._enabled

    def preprocess(self, image: np.ndarray) -> np.ndarray:
        """
        Preprocess image for QR decoding.

        Args:
            image: Input image (BGR or grayscale).

        Returns:
            Preprocessed grayscale image (input unchanged if disabled).
        """
        if not self._enabled:
            self._scaleFactor = 1.0
            return image

        if image is None or image.size == 0:
            self._logger.warning("Input image is None or empty")
            self._scaleFactor = 1.0
            return image

        result = self._toGray(image)
        result = self._applyScale(result)

        if self._mode == self.MODE_FULL:
            result = self._applyDenoise(result)
            result = self._applyBinarize(result)

        return result

    def _toGray(self, image: np.ndarray) -> np.ndarray:
        if len(image.shape) == 2:
            return image
        if image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

    def _applyScale(self, image: np.ndarray) -> np.ndarray:
        """
        Scale image to target width, maintaining aspect ratio.

        Args:
            image: Input grayscale image.

        Returns:
            Scaled image.
        """
        h, w = image.shape[:2]
        self._scaleFactor = self._targetWidth / w

        if abs(self._scaleFactor - 1.0) < 0.01:
            self._scaleFactor = 1.0
            return image

        newW = self._targetWidth
        newH = max(1, int(h * self._scaleFactor))

        if self._scaleFactor > 1.0:
            interpolation = cv2.INTER_CUBIC  # Better for enlarging
        else:
            interpolation = cv2.INTER_AREA   # Better for shrinking

        scaled = cv2.resize(image, (newW, newH), interpolation=interpolation)
        self._logger.debug(f"Scale: {w}x{h} → {newW}x{newH} ({self._scaleFactor:.3f}x)")
        return scaled

    def _applyDenoise(self, image: np.ndarray) -> np.ndarray:
        result = cv2.medianBlur(image, 3)
        self._logger.debug("Denoise: median blur (kernel=3)")
        return result

    def _applyBinarize(self, image: np.ndarray) -> np.ndarray:
        _, binary = cv2.threshold(image, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
        self._logger.debug("Binarize: Otsu threshold")
        return binary
