"""
Local PNG Writer Implementation

Implements IImageWriter for QR images on the local filesystem.
QR codes are always written as PNG: lossy formats smear module edges
and make the code harder to read back.
"""

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from core.interfaces.writer_interface import IImageWriter


logger = logging.getLogger(__name__)


PNG_SUFFIX = ".png"


def pngPath(filepath: str) -> Path:
    """Return filepath with a .png suffix, appending one if missing."""
    path = Path(filepath)
    if path.suffix.lower() != PNG_SUFFIX:
        path = path.with_name(path.name + PNG_SUFFIX)
    return path


class LocalImageWriter(IImageWriter):
    """
    Writes grayscale or BGR images as PNG files, creating missing directories.
    """

    def __init__(self, compression: int = 3):
        """
        Args:
            compression: PNG compression level (0-9, lower is faster).
        """
        self._params = [cv2.IMWRITE_PNG_COMPRESSION, compression]

    def encode(self, image: np.ndarray) -> bytes:
        """
        Raises:
            ValueError: If OpenCV cannot encode the image.
        """
        success, buffer = cv2.imencode(PNG_SUFFIX, image, self._params)
        if not success:
            raise ValueError(f"Failed to encode image of shape {image.shape} as PNG")
        return buffer.tobytes()

    def save(self, image: np.ndarray, filepath: str) -> Optional[str]:
        path = pngPath(filepath)
        try:
            content = self.encode(image)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except (OSError, ValueError, cv2.error) as e:
            logger.error(f"Error saving image to {path}: {e}")
            return None

        logger.info(f"Image saved to {path}")
        return str(path)
