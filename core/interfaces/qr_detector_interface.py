"""
QR Detector Interface Module.

This module defines the interface and data classes for QR code decoding.
Follows the Interface Segregation Principle (ISP) from SOLID.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, List, Tuple
import numpy as np


@dataclass
class QrDetectionResult:
    """
    Result of QR code detection.

    Attributes:
        text: Full QR code content (the payload text)
        polygon: Four corners of QR code [(x,y), ...]
        rect: Bounding rectangle (left, top, width, height)
        confidence: Detection confidence score (0-1)
        backend: Name of the backend that decoded the code
    """
    text: str
    polygon: List[Tuple[int, int]]
    rect: Tuple[int, int, int, int]
    confidence: float
    backend: str = ""

    @property
    def area(self) -> int:
        """Bounding rectangle area in pixels."""
        return max(0, self.rect[2]) * max(0, self.rect[3])


def largestResult(results: Iterable[QrDetectionResult]) -> Optional[QrDetectionResult]:
    """
    Pick the code covering the most pixels.

    A photo of a screen or printout can show unrelated codes next to the
    exported one; the exported code is the one the user framed.
    """
    return max(results, key=lambda r: r.area, default=None)


class IQrDetector(ABC):
    """
    Interface for QR code detector.

    Implementations locate a QR code in an image and return its
    decoded text. Backend failures are logged and reported as None,
    never raised.
    """

    @abstractmethod
    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        """
        Detect and decode a QR code in an image.

        Args:
            image: Input image (BGR, BGRA or grayscale numpy array)

        Returns:
            QrDetectionResult for the largest decoded code, None otherwise
        """
        pass
