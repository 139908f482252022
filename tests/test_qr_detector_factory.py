"""
Tests for QR detector creation and result selection.
"""

import pytest

from core.interfaces.qr_detector_interface import QrDetectionResult, largestResult
from core.qr import qr_detector_factory
from core.qr.qr_detector_factory import (
    createQrDetector,
    getSupportedQrBackends,
    isQrBackendAvailable,
)


def _result(text, width):
    return QrDetectionResult(
        text=text, polygon=[], rect=(0, 0, width, width), confidence=1.0
    )


@pytest.fixture
def fakeBackends(monkeypatch, makeDetector):
    """zxing fails to load, pyzbar yields a scripted detector."""

    def missing(tryRotate, tryDownscale):
        raise ImportError("No module named 'zxingcpp'")

    def available(tryRotate, tryDownscale):
        return makeDetector(["payload"])

    monkeypatch.setitem(qr_detector_factory.QR_BACKENDS, "zxing", ("zxingcpp", missing, ""))
    monkeypatch.setitem(qr_detector_factory.QR_BACKENDS, "pyzbar", ("pyzbar", available, ""))


class TestCreateQrDetector:
    """Tests for createQrDetector."""

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            createQrDetector(backend="wechat")

    def test_falls_back_to_available_backend(self, fakeBackends):
        detector = createQrDetector(backend="ZXing")
        assert detector.texts == ["payload"]

    def test_no_fallback_when_disabled(self, fakeBackends):
        with pytest.raises(ImportError):
            createQrDetector(backend="zxing", allowFallback=False)

    def test_preferred_backend_first(self, fakeBackends):
        assert createQrDetector(backend="pyzbar").texts == ["payload"]

    def test_supported_backends(self):
        assert getSupportedQrBackends() == ["zxing", "pyzbar"]
        assert not isQrBackendAvailable("wechat")


class TestLargestResult:
    def test_picks_largest_code(self):
        assert largestResult([_result("small", 10), _result("big", 90)]).text == "big"

    def test_empty(self):
        assert largestResult([]) is None
