"""
Tests for ConfigService.
"""

import json
from pathlib import Path

import pytest

from services.impl.config_service import ConfigService


DEFAULT_CONFIG = Path(__file__).resolve().parent.parent / "config" / "application_config.json"


@pytest.fixture
def configFile(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "qr_export": {"errorCorrection": "M", "boxSize": 6},
        "image_decoder": {"backend": "PYZBAR", "preprocessingEnabled": False},
        "record_store": {"backend": "memory"},
        "debug": {"enabled": True, "basePath": "tmp/debug"}
    }), encoding="utf-8")
    return str(path)


class TestConfigService:
    """Tests for loading and reading configuration."""

    def test_shipped_config_loads(self):
        config = ConfigService(str(DEFAULT_CONFIG))
        assert config.getErrorCorrection() == "H"
        assert config.getQrBackend() == "zxing"
        assert config.getRecordStoreBackend() == "json"

    def test_values_override_defaults(self, configFile):
        config = ConfigService(configFile)

        assert config.getErrorCorrection() == "M"
        assert config.getQrBoxSize() == 6
        assert config.getQrBackend() == "pyzbar"
        assert config.isDecoderPreprocessingEnabled() is False
        assert config.getRecordStoreBackend() == "memory"
        assert config.isDebugEnabled() is True
        assert config.getDebugBasePath() == "tmp/debug"

    def test_missing_values_use_defaults(self, configFile):
        config = ConfigService(configFile)

        assert config.getQrBorder() == 4
        assert config.getExportFilename() == "sgm-datos-qr.png"
        assert config.getSessionFile() == "data/session.json"
        assert config.getWindowMinWidth() == 900

    def test_dot_notation(self, configFile):
        config = ConfigService(configFile)
        assert config.get("qr_export.boxSize") == 6
        assert config.get("qr_export.boxSize.value", "x") == "x"
        assert config.get("nothing.here", 3) == 3

    def test_debug_toggle(self, configFile):
        config = ConfigService(configFile)
        config.setDebugEnabled(False)
        assert config.isDebugEnabled() is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(RuntimeError):
            ConfigService(str(tmp_path / "absent.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(RuntimeError):
            ConfigService(str(path))
