"""
Image Decoder Service Implementation.

Decodes the QR code contained in an uploaded image or camera frame.
Creates and manages the QR detector from the core layer using the
factory pattern.

Decoding runs in up to two attempts:
1. The image as loaded
2. The image after QrImagePreprocessor (scale → denoise → binarize),
   when preprocessing is enabled

Follows:
- SRP: Only handles image → text decoding
- DIP: Depends on IQrDetector abstraction (interface)
- Factory Pattern: Uses createQrDetector() for backend selection
"""

import io
import time
from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from core.errors import NoCodeFound, QrExchangeError, UnreadableImage
from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult
from core.qr import createQrDetector, QrImagePreprocessor
from services.interfaces.base_service_interface import BaseService
from services.interfaces.image_decoder_service_interface import (
    IImageDecoderService,
    ImageDecodeServiceResult,
    ImageSource
)


DEFAULT_ALLOWED_EXTENSIONS = [".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"]


class ImageDecoderService(IImageDecoderService, BaseService):
    """
    Image Decoder Service Implementation.

    Loads image data, runs the QR detector and retries on a preprocessed
    copy when the first attempt finds nothing.
    """

    SERVICE_NAME = "image_decoder"

    def __init__(
        self,
        # Backend selection
        backend: str = "zxing",

        # ZXing params (prefixed with 'zxing')
        zxingTryRotate: bool = True,
        zxingTryDownscale: bool = True,

        # Preprocessing params (prefixed with 'preprocessing')
        preprocessingEnabled: bool = True,
        preprocessingMode: str = "full",
        preprocessingTargetWidth: int = 1000,

        # Input validation
        allowedExtensions: Optional[List[str]] = None,

        # Debug settings
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False,

        # Injected detector (tests, custom backends)
        qrDetector: Optional[IQrDetector] = None
    ):
        """
        Initialize ImageDecoderService.

        Args:
            backend: QR detection backend ("zxing" or "pyzbar").
            zxingTryRotate: (ZXing) Try rotated barcodes.
            zxingTryDownscale: (ZXing) Try downscaled versions.
            preprocessingEnabled: Enable the preprocessed second attempt.
            preprocessingMode: Preprocessing mode ("minimal" or "full").
            preprocessingTargetWidth: Width images are scaled to.
            allowedExtensions: Accepted file extensions for path input.
            debugBasePath: Base path for debug output.
            debugEnabled: Whether to save debug output.
            qrDetector: Detector to use instead of creating one from backend.
        """
        BaseService.__init__(
            self,
            serviceName=self.SERVICE_NAME,
            debugBasePath=debugBasePath,
            debugEnabled=debugEnabled
        )

        if qrDetector is None:
            qrDetector = createQrDetector(
                backend=backend,
                zxingTryRotate=zxingTryRotate,
                zxingTryDownscale=zxingTryDownscale
            )
        self._qrDetector: IQrDetector = qrDetector
        self._backend = backend

        self._preprocessor: Optional[QrImagePreprocessor] = None
        if preprocessingEnabled:
            self._preprocessor = QrImagePreprocessor(
                enabled=True,
                mode=preprocessingMode,
                targetWidth=preprocessingTargetWidth
            )

        self._allowedExtensions = [
            e.lower() for e in (allowedExtensions or DEFAULT_ALLOWED_EXTENSIONS)
        ]

        self._logger.info(
            f"ImageDecoderService initialized "
            f"(backend={backend}, preprocessing={preprocessingEnabled}, "
            f"mode={preprocessingMode if preprocessingEnabled else 'none'})"
        )

    def getBackend(self) -> str:
        """Get current QR detection backend."""
        return self._backend

    def isPreprocessingEnabled(self) -> bool:
        """Check if the preprocessed second attempt is enabled."""
        return self._preprocessor is not None and self._preprocessor.isEnabled()

    def decodeImage(
        self,
        imageData: ImageSource,
        frameId: str = "upload"
    ) -> ImageDecodeServiceResult:
        """
        Locate and decode a QR code in an image.

        Timing covers loading, preprocessing and detection.
        Debug output saving is NOT included in timing.

        Args:
            imageData: Encoded image bytes, file path or numpy frame.
            frameId: Identifier for logging and debug output.

        Returns:
            ImageDecodeServiceResult with text, or with NoCodeFound /
            UnreadableImage as error.
        """
        startTime = time.time()

        try:
            image = self._loadImage(imageData, frameId)
        except UnreadableImage as e:
            self._logger.warning(f"[{frameId}] Unreadable image: {e.detail}")
            return self._failure(frameId, e, startTime)

        try:
            qrResult, attempt = self._detect(image, frameId)
        except Exception as e:
            self._logger.error(f"[{frameId}] QR decoding failed: {e}")
            return self._failure(frameId, NoCodeFound(str(e)), startTime)

        processingTimeMs = self._measureTime(startTime)

        if qrResult is None:
            self._logger.warning(
                f"[{frameId}] No QR code found "
                f"(preprocessing={self.isPreprocessingEnabled()}, "
                f"time={processingTimeMs:.2f}ms)"
            )
            return ImageDecodeServiceResult(
                text=None,
                frameId=frameId,
                success=False,
                error=NoCodeFound(f"no QR code in {image.shape[1]}x{image.shape[0]} image"),
                processingTimeMs=processingTimeMs
            )

        self._saveDebugOutput(frameId, qrResult, attempt, image)
        self._logTiming(frameId, processingTimeMs, "Decode")
        self._logger.info(
            f"[{frameId}] QR decoded ({len(qrResult.text)} chars, "
            f"attempt={attempt}, time={processingTimeMs:.2f}ms)"
        )

        return ImageDecodeServiceResult(
            text=qrResult.text,
            frameId=frameId,
            success=True,
            processingTimeMs=processingTimeMs
        )

    def _failure(
        self,
        frameId: str,
        error: QrExchangeError,
        startTime: float
    ) -> ImageDecodeServiceResult:
        return ImageDecodeServiceResult(
            text=None,
            frameId=frameId,
            success=False,
            error=error,
            processingTimeMs=self._measureTime(startTime)
        )

    def _detect(
        self,
        image: np.ndarray,
        frameId: str
    ) -> Tuple[Optional[QrDetectionResult], str]:
        """
        Run the detector on the raw image, then on the preprocessed one.

        Returns:
            (result or None, name of the attempt that produced it)
        """
        qrResult = self._qrDetector.detect(image)
        if qrResult is not None:
            return qrResult, "raw"

        if self._preprocessor is None:
            return None, "raw"

        self._logger.debug(f"[{frameId}] Retrying with {self._preprocessor.mode} preprocessing")
        processed = self._preprocessor.preprocess(image)
        self._saveDebugImage(frameId, processed, "preprocessed")
        return self._qrDetector.detect(processed), self._preprocessor.mode

    def _loadImage(self, imageData: ImageSource, frameId: str) -> np.ndarray:
        """
        Turn any supported input into a numpy image.

        Raises:
            UnreadableImage: If the input is empty, missing or not an image.
        """
        if isinstance(imageData, np.ndarray):
            if imageData.size == 0 or imageData.ndim not in (2, 3):
                raise UnreadableImage(f"invalid frame shape {imageData.shape}")
            return imageData

        if isinstance(imageData, (str, Path)):
            path = Path(imageData)
            if path.suffix.lower() not in self._allowedExtensions:
                raise UnreadableImage(f"unsupported file type: {path.suffix or path.name}")
            try:
                imageData = path.read_bytes()
            except OSError as e:
                raise UnreadableImage(f"cannot read {path}: {e}") from e
            self._logger.debug(f"[{frameId}] Loaded {len(imageData)} bytes from {path}")

        if not isinstance(imageData, (bytes, bytearray)):
            raise UnreadableImage(f"unsupported image input: {type(imageData).__name__}")
        if not imageData:
            raise UnreadableImage("image data is empty")

        buffer = np.frombuffer(bytes(imageData), dtype=np.uint8)
        image = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        if image is not None:
            return image

        # OpenCV has no GIF reader
        return self._loadWithPillow(bytes(imageData))

    def _loadWithPillow(self, data: bytes) -> np.ndarray:
        from PIL import Image, UnidentifiedImageError

        try:
            with Image.open(io.BytesIO(data)) as pilImage:
                rgb = np.array(pilImage.convert("RGB"), dtype=np.uint8)
        except (UnidentifiedImageError, OSError) as e:
            raise UnreadableImage(f"not a decodable image: {e}") from e
        return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

    def _saveDebugOutput(
        self,
        frameId: str,
        qrResult: QrDetectionResult,
        attempt: str,
        image: np.ndarray
    ) -> None:
        """Save debug output for the decoding step."""
        if not self._debugEnabled:
            return

        data = {
            "frameId": frameId,
            "text": qrResult.text,
            "polygon": qrResult.polygon,
            "rect": qrResult.rect,
            "confidence": qrResult.confidence,
            "backend": qrResult.backend or self._backend,
            "attempt": attempt,
            "imageSize": [int(image.shape[1]), int(image.shape[0])]
        }
        self._saveDebugJson(frameId, data, "qr")
