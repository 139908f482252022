"""
Image Decoder Service Interface Module.

Defines the interface for turning an image into raw QR text.
Accepts uploaded file content, a file path or a camera frame.

Follows:
- SRP: Only handles image → text decoding
- DIP: Depends on IQrDetector abstraction from core layer
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import numpy as np

from core.errors import QrExchangeError


ImageSource = Union[bytes, str, Path, np.ndarray]


@dataclass
class ImageDecodeServiceResult:
    """
    Result of the image decoder service.

    Attributes:
        text: Decoded QR text, None on failure.
        frameId: Identifier used for logging and debug output.
        success: Whether a QR code was decoded.
        error: NoCodeFound or UnreadableImage on failure.
        processingTimeMs: Time taken for decoding.
    """
    text: Optional[str]
    frameId: str
    success: bool
    error: Optional[QrExchangeError] = None
    processingTimeMs: float = 0.0


class IImageDecoderService(ABC):
    """
    Interface for QR image decoding.

    Implementations report image problems in the result and never raise
    for them.
    """

    @abstractmethod
    def decodeImage(
        self,
        imageData: ImageSource,
        frameId: str = "upload"
    ) -> ImageDecodeServiceResult:
        """
        Locate and decode a QR code in an image.

        Args:
            imageData: Encoded image bytes, an image file path, or a
                decoded frame (BGR or grayscale numpy array).
            frameId: Identifier for logging and debug output.

        Returns:
            ImageDecodeServiceResult with the decoded text or the error.
        """
        pass

    @abstractmethod
    def getBackend(self) -> str:
        """Get the QR detection backend name."""
        pass
