"""
QR Encoder Interface Module.

Defines the interface for rendering payload text as a QR code image.
Follows ISP: Only contains methods related to QR rendering.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np


@dataclass
class QrEncodingResult:
    """
    Rendered QR code.

    Attributes:
        image: Grayscale QR image (uint8, black modules on white).
        version: QR symbol version (1-40).
        errorCorrection: Error correction level ("L", "M", "Q", "H").
        payloadBytes: Size of the encoded payload in bytes.
    """
    image: np.ndarray
    version: int
    errorCorrection: str
    payloadBytes: int


class IQrEncoder(ABC):
    """
    Interface for QR code rendering.

    Implementations must reject payloads that do not fit in a single
    QR symbol instead of truncating them.
    """

    @abstractmethod
    def encode(self, text: str) -> QrEncodingResult:
        """
        Render text as a QR code.

        Args:
            text: Payload text.

        Returns:
            QrEncodingResult with the rendered image.

        Raises:
            PayloadTooLarge: If the text exceeds the QR capacity.
        """
        pass
