"""
Base Service Interface Module.

Defines the base interface shared by the QR exchange services and a
helper base class providing debug output and timing.

Debug output holds personal medical data (decoded payloads, rendered
codes). It is off by default and written only under the configured
debug directory, one sub-directory per service.

Follows:
- ISP (Interface Segregation Principle): Minimal base interface
- DIP (Dependency Inversion Principle): High-level modules depend on abstractions
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Any, Dict
import logging
import json
import time

from core.interfaces.writer_interface import IImageWriter
from core.writer.local_writer import LocalImageWriter


class IBaseService(ABC):
    """
    Base interface for the exchange services.

    Every service has a name (used as logger name and debug
    sub-directory) and a runtime debug switch.
    """

    @abstractmethod
    def getServiceName(self) -> str:
        """
        Get the service name.

        Returns:
            str: Service name (e.g., "image_decoder", "qr_export")
        """
        pass

    @abstractmethod
    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug output at runtime."""
        pass

    @abstractmethod
    def isDebugEnabled(self) -> bool:
        pass


class BaseService(IBaseService):
    """
    Helper base class for the exchange services.

    Not an interface: concrete services inherit it next to their own
    service interface.
    """

    def __init__(
        self,
        serviceName: str,
        debugBasePath: str = "output/debug",
        debugEnabled: bool = False,
        debugWriter: Optional[IImageWriter] = None
    ):
        """
        Initialize BaseService.

        Args:
            serviceName: Name of the service (e.g., "image_decoder").
            debugBasePath: Base path for debug output.
            debugEnabled: Whether debug output is enabled.
            debugWriter: Writer for debug images (default: LocalImageWriter).
        """
        self._serviceName = serviceName
        self._debugDirectory = Path(debugBasePath) / serviceName
        self._debugEnabled = debugEnabled
        self._debugWriter = debugWriter
        self._logger = logging.getLogger(serviceName)

        if debugEnabled:
            self._debugDirectory.mkdir(parents=True, exist_ok=True)

    def getServiceName(self) -> str:
        return self._serviceName

    def setDebugEnabled(self, enabled: bool) -> None:
        self._debugEnabled = enabled
        if enabled:
            self._debugDirectory.mkdir(parents=True, exist_ok=True)
        self._logger.info(f"Debug {'enabled' if enabled else 'disabled'}")

    def isDebugEnabled(self) -> bool:
        return self._debugEnabled

    @property
    def debugDirectory(self) -> Path:
        """Directory this service writes debug files to."""
        return self._debugDirectory

    def _debugFile(self, frameId: str, prefix: str, extension: str) -> Path:
        name = f"{prefix}_{frameId}" if prefix else frameId
        return self._debugDirectory / f"{name}{extension}"

    def _saveDebugImage(self, frameId: str, image: Any, prefix: str = "") -> Optional[str]:
        """
        Save a debug image (PNG) for a frame or export.

        Returns:
            Saved file path, or None if debug is disabled or saving failed.
        """
        if not self._debugEnabled or image is None:
            return None

        if self._debugWriter is None:
            self._debugWriter = LocalImageWriter()

        filepath = str(self._debugFile(frameId, prefix, ".png"))
        saved = self._debugWriter.save(image, filepath)
        if saved is None:
            self._logger.warning(f"Failed to save debug image: {filepath}")
        return saved

    def _saveDebugJson(self, frameId: str, data: Dict, prefix: str = "") -> Optional[str]:
        """
        Save debug JSON for a frame or export.

        Args:
            frameId: Frame or export identifier, used in the file name.
            data: JSON-serializable data; unknown types are written as str.
            prefix: Optional file name prefix (e.g., "qr", "import").

        Returns:
            Saved file path, or None if debug is disabled or saving failed.
        """
        if not self._debugEnabled:
            return None

        filepath = self._debugFile(frameId, prefix, ".json")
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
        except (OSError, TypeError, ValueError) as e:
            self._logger.warning(f"Failed to save debug JSON {filepath}: {e}")
            return None
        self._logger.debug(f"Saved debug JSON: {filepath}")
        return str(filepath)

    def _logTiming(self, frameId: str, processingTimeMs: float, stage: str = "") -> None:
        label = f"{stage} time" if stage else "Processing time"
        self._logger.info(f"[{frameId}] {label}: {processingTimeMs:.2f}ms")

    def _measureTime(self, startTime: float) -> float:
        """Milliseconds elapsed since startTime (from time.time())."""
        return (time.time() - startTime) * 1000
