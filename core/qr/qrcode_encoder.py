"""
QRCode Encoder Implementation.

Renders payload text as a QR code image using the qrcode library.
The symbol version grows with the payload; payloads beyond version 40 at
the configured error correction level are rejected.
"""

import logging
from typing import Optional

import numpy as np
import qrcode
from qrcode.constants import ERROR_CORRECT_H, ERROR_CORRECT_L, ERROR_CORRECT_M, ERROR_CORRECT_Q
from qrcode.exceptions import DataOverflowError

from core.errors import PayloadTooLarge
from core.interfaces.qr_encoder_interface import IQrEncoder, QrEncodingResult


ERROR_CORRECTION_LEVELS = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

# Byte-mode capacity of a version 40 symbol per error correction level
MAX_PAYLOAD_BYTES = {"L": 2953, "M": 2331, "Q": 1663, "H": 1273}


class QrCodeEncoder(IQrEncoder):
    """
    QR encoder using the qrcode library.
    """

    def __init__(
        self,
        errorCorrection: str = "H",
        boxSize: int = 10,
        border: int = 4,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize QrCodeEncoder.

        Args:
            errorCorrection: Error correction level ("L", "M", "Q" or "H").
            boxSize: Pixels per QR module.
            border: Quiet zone width in modules (4 is the standard minimum).
            logger: Logger instance for debug output.

        Raises:
            ValueError: If errorCorrection is not a known level.
        """
        level = errorCorrection.upper().strip()
        if level not in ERROR_CORRECTION_LEVELS:
            raise ValueError(
                f"Invalid error correction level: '{errorCorrection}'. "
                f"Supported levels: {list(ERROR_CORRECTION_LEVELS)}"
            )
        self._errorCorrection = level
        self._boxSize = boxSize
        self._border = border
        self._logger = logger or logging.getLogger(__name__)

        self._logger.info(
            f"QrCodeEncoder initialized "
            f"(errorCorrection={level}, boxSize={boxSize}, border={border})"
        )

    @property
    def maxPayloadBytes(self) -> int:
        """Largest payload, in bytes, that fits at the configured level."""
        return MAX_PAYLOAD_BYTES[self._errorCorrection]

    def encode(self, text: str) -> QrEncodingResult:
        payloadBytes = len(text.encode('utf-8'))
        if payloadBytes > self.maxPayloadBytes:
            raise PayloadTooLarge(
                f"payload is {payloadBytes} bytes, "
                f"limit is {self.maxPayloadBytes} at level {self._errorCorrection}"
            )

        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECTION_LEVELS[self._errorCorrection],
            box_size=self._boxSize,
            border=self._border,
        )
        qr.add_data(text)
        try:
            qr.make(fit=True)
        except DataOverflowError as e:
            raise PayloadTooLarge(f"payload does not fit in a QR code: {e}") from e

        pilImage = qr.make_image(fill_color="black", back_color="white").get_image()
        image = np.array(pilImage.convert("L"), dtype=np.uint8)

        self._logger.debug(
            f"QR rendered: version={qr.version}, {payloadBytes} bytes, "
            f"{image.shape[1]}x{image.shape[0]}px"
        )
        return QrEncodingResult(
            image=image,
            version=qr.version,
            errorCorrection=self._errorCorrection,
            payloadBytes=payloadBytes
        )
