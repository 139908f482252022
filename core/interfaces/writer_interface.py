"""
Writer Interface Module

Defines the abstract interface for writing QR images.
Follows ISP: Only contains methods related to image output.
"""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np


class IImageWriter(ABC):
    """
    Abstract interface for PNG image output.

    Used to share generated QR codes as files and to store debug images.
    """

    @abstractmethod
    def save(self, image: np.ndarray, filepath: str) -> Optional[str]:
        """
        Save an image as a PNG file.

        Args:
            image: Image as numpy array (grayscale or BGR).
            filepath: Destination path. ".png" is appended when the path
                has another suffix.

        Returns:
            Path actually written, or None if saving failed.
        """
        pass

    @abstractmethod
    def encode(self, image: np.ndarray) -> bytes:
        """
        Encode an image to PNG file bytes without touching the filesystem.

        Args:
            image: Image as numpy array.

        Returns:
            bytes: PNG file content.
        """
        pass
