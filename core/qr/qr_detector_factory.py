"""
QR Detector Factory Module.

Creates the QR detector used to decode uploaded images.
Backends are tried in preference order: the configured one first, then
the others, so decoding keeps working on machines where a native
library (zbar, zxing-cpp wheels) is missing.

Follows:
- OCP (Open/Closed Principle): New backends register in QR_BACKENDS
- DIP (Dependency Inversion): Returns IQrDetector interface
- Factory Pattern: Encapsulates object creation logic
"""

import importlib.util
import logging
from typing import Callable, Dict, List, Tuple

from core.interfaces.qr_detector_interface import IQrDetector


logger = logging.getLogger(__name__)


BackendConstructor = Callable[[bool, bool], IQrDetector]


def _zxingDetector(tryRotate: bool, tryDownscale: bool) -> IQrDetector:
    from core.qr.zxing_qr_detector import ZxingQrDetector
    return ZxingQrDetector(tryRotate=tryRotate, tryDownscale=tryDownscale)


def _pyzbarDetector(tryRotate: bool, tryDownscale: bool) -> IQrDetector:
    # zbar tries all orientations itself
    from core.qr.pyzbar_qr_detector import PyzbarQrDetector
    return PyzbarQrDetector()


# backend name -> (module to probe, constructor, install hint)
QR_BACKENDS: Dict[str, Tuple[str, BackendConstructor, str]] = {
    "zxing": ("zxingcpp", _zxingDetector, "pip install zxing-cpp"),
    "pyzbar": ("pyzbar", _pyzbarDetector, "pip install pyzbar (and the zbar shared library)"),
}


def createQrDetector(
    backend: str = "zxing",
    # ZXing params (prefixed with 'zxing')
    zxingTryRotate: bool = True,
    zxingTryDownscale: bool = True,
    allowFallback: bool = True
) -> IQrDetector:
    """
    Create the QR detector for a backend.

    Args:
        backend: Preferred backend ("zxing" or "pyzbar").
        zxingTryRotate: (zxing) Try rotated barcodes (90/270 degrees).
        zxingTryDownscale: (zxing) Try downscaled versions of large images.
        allowFallback: Use another installed backend if the preferred
            one cannot be loaded.

    Returns:
        IQrDetector: Detector for the first backend that loads.

    Raises:
        ValueError: If backend is not a supported name.
        ImportError: If no allowed backend can be loaded.

    Examples:
        >>> detector = createQrDetector(backend="pyzbar", allowFallback=False)
    """
    backend = backend.lower().strip()
    if backend not in QR_BACKENDS:
        errorMsg = (
            f"Invalid QR backend: '{backend}'. "
            f"Supported backends: {getSupportedQrBackends()}"
        )
        logger.error(errorMsg)
        raise ValueError(errorMsg)

    candidates = [backend]
    if allowFallback:
        candidates += [name for name in QR_BACKENDS if name != backend]

    failures: List[str] = []
    for name in candidates:
        _, constructor, hint = QR_BACKENDS[name]
        try:
            detector = constructor(zxingTryRotate, zxingTryDownscale)
        except ImportError as e:
            logger.warning(f"QR backend '{name}' unavailable: {e} ({hint})")
            failures.append(f"{name}: {e}")
            continue

        if name != backend:
            logger.warning(f"Using QR backend '{name}' instead of '{backend}'")
        logger.info(f"Created QR detector: {name}")
        return detector

    raise ImportError(f"No QR backend could be loaded ({'; '.join(failures)})")


def getSupportedQrBackends() -> List[str]:
    """Backend names in fallback order."""
    return list(QR_BACKENDS)


def isQrBackendAvailable(backend: str) -> bool:
    """
    Check whether a backend's Python package is installed.

    pyzbar can be installed without the zbar shared library; that case
    is only detected when the detector is created.
    """
    entry = QR_BACKENDS.get(backend.lower().strip())
    if entry is None:
        return False
    return importlib.util.find_spec(entry[0]) is not None

