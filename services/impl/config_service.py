"""
Config Service Implementation.

Centralized configuration management for the QR exchange application.
Loads configuration from application_config.json organized by service.

Follows:
- SRP: Only handles configuration management
- DIP: Provides configuration to other services via interface
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List


from services.interfaces.config_service_interface import IConfigService


logger = logging.getLogger(__name__)


class ConfigService(IConfigService):
    """
    Implementation of IConfigService.

    Loads and manages application configuration from application_config.json.
    Configuration is organized by section (app, record_store, qr_export, ...).
    """

    def __init__(self, configPath: str = "config/application_config.json"):
        """
        Initialize ConfigService.

        Args:
            configPath: Path to the configuration file.

        Raises:
            RuntimeError: If the file is missing or not valid JSON.
        """
        self._config: Dict[str, Any] = {}
        self._configPath = Path(configPath)
        self._debugEnabled = False

        if not self.loadConfig(configPath):
            raise RuntimeError(f"Failed to load configuration from: {configPath}")

    def loadConfig(self, configPath: str) -> bool:
        """Load configuration from JSON file."""
        try:
            path = Path(configPath)
            if not path.exists():
                logger.error(f"Config file not found: {configPath}")
                return False

            with open(path, 'r', encoding='utf-8') as f:
                config = json.load(f)

            if not isinstance(config, dict):
                logger.error(f"Config root must be a JSON object: {configPath}")
                return False

            self._config = config
            self._configPath = path
            self._debugEnabled = self.get("debug.enabled", False)

            logger.info(f"Configuration loaded from: {path.absolute()}")
            return True

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to load config: {e}")
            return False

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Generic Config Access
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key with dot notation support.

        Examples:
            get("qr_export.errorCorrection") -> "H"
            get("image_decoder.backend") -> "zxing"
        """
        value = self._config
        for part in key.split('.'):
            if not isinstance(value, dict):
                return default
            value = value.get(part)
            if value is None:
                return default
        return value

    def getServiceConfig(self, serviceName: str) -> Dict[str, Any]:
        """
        Get all configuration for a specific service.

        Args:
            serviceName: Section name (e.g., "qr_export", "image_decoder")

        Returns:
            Configuration dictionary for the service.
        """
        config = self._config.get(serviceName, {})
        return config if isinstance(config, dict) else {}

    def getAllConfig(self) -> Dict[str, Any]:
        """Get complete configuration dictionary."""
        return self._config.copy()

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Debug Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getDebugBasePath(self) -> str:
        """Get base path for debug output."""
        return self.get("debug.basePath", "output/debug")

    def isDebugEnabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self._debugEnabled

    def setDebugEnabled(self, enabled: bool) -> None:
        """Enable or disable debug mode at runtime."""
        self._debugEnabled = enabled
        logger.info(f"Debug mode {'enabled' if enabled else 'disabled'}")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # App Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getAppConfig(self) -> Dict[str, Any]:
        """Get app-level configuration."""
        return self.getServiceConfig("app")

    def getWindowMinWidth(self) -> int:
        """Get minimum window width."""
        return self.get("app.windowMinWidth", 900)

    def getWindowMinHeight(self) -> int:
        """Get minimum window height."""
        return self.get("app.windowMinHeight", 650)

    def getQrDisplaySize(self) -> int:
        """Get on-screen QR display size in pixels."""
        return self.get("app.qrDisplaySize", 300)

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Session Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getSessionFile(self) -> str:
        """Get path of the saved session file."""
        return self.get("session.stateFile", "data/session.json")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Record Store Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getRecordStoreBackend(self) -> str:
        """
        Get record store backend.

        Returns:
            str: "json" (persisted to file) or "memory".
        """
        return str(self.get("record_store.backend", "json")).lower()

    def getRecordStoreFile(self) -> str:
        """Get path of the JSON record file."""
        return self.get("record_store.filePath", "data/records.json")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # QR Export Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getQrExportConfig(self) -> Dict[str, Any]:
        """Get QR export configuration."""
        return self.getServiceConfig("qr_export")

    def getErrorCorrection(self) -> str:
        """Get QR error correction level (L, M, Q, H)."""
        return self.get("qr_export.errorCorrection", "H")

    def getQrBoxSize(self) -> int:
        """Get pixels per QR module."""
        return self.get("qr_export.boxSize", 10)

    def getQrBorder(self) -> int:
        """Get QR quiet zone in modules."""
        return self.get("qr_export.border", 4)

    def getExportDirectory(self) -> str:
        """Get directory where QR images are saved."""
        return self.get("qr_export.exportDirectory", "output/qr")

    def getExportFilename(self) -> str:
        """Get default QR image filename."""
        return self.get("qr_export.filename", "sgm-datos-qr.png")

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # Image Decoder Settings
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def getImageDecoderConfig(self) -> Dict[str, Any]:
        """Get image decoder configuration."""
        return self.getServiceConfig("image_decoder")

    def getQrBackend(self) -> str:
        """Get QR decoding backend ("zxing" or "pyzbar")."""
        return str(self.get("image_decoder.backend", "zxing")).lower()

    def isQrTryRotate(self) -> bool:
        """Check if rotated QR codes are tried."""
        return self.get("image_decoder.tryRotate", True)

    def isQrTryDownscale(self) -> bool:
        """Check if downscaled images are tried."""
        return self.get("image_decoder.tryDownscale", True)

    def isDecoderPreprocessingEnabled(self) -> bool:
        """Check if the preprocessed second decoding attempt is enabled."""
        return self.get("image_decoder.preprocessingEnabled", True)

    def getDecoderPreprocessingMode(self) -> str:
        """Get preprocessing mode ("minimal" or "full")."""
        return self.get("image_decoder.preprocessingMode", "full")

    def getDecoderTargetWidth(self) -> int:
        """Get preprocessing target width in pixels."""
        return self.get("image_decoder.targetWidth", 1000)

    def getAllowedImageExtensions(self) -> List[str]:
        """Get accepted image file extensions."""
        return self.get(
            "image_decoder.allowedExtensions",
            [".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp"]
        )
