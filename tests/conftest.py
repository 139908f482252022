"""
Shared fixtures for the QR exchange tests.
"""

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pytest

from core.interfaces.qr_detector_interface import IQrDetector, QrDetectionResult
from core.models.patient_context import PatientContext
from core.models.records import Appointment, Medicine, RecordKind
from core.store import InMemoryRecordStore


PATIENT_ID = 1


class FakeQrDetector(IQrDetector):
    """Detector returning scripted texts, one per detect() call."""

    def __init__(self, texts: Optional[List[Optional[str]]] = None):
        self.texts = list(texts or [])
        self.calls: List[np.ndarray] = []

    def detect(self, image: np.ndarray) -> Optional[QrDetectionResult]:
        self.calls.append(image)
        text = self.texts.pop(0) if self.texts else None
        if text is None:
            return None
        return QrDetectionResult(
            text=text,
            polygon=[(0, 0), (10, 0), (10, 10), (0, 10)],
            rect=(0, 0, 10, 10),
            confidence=1.0,
            backend="fake"
        )


class RecordingHooks:
    """Collects pre-fill and view-switch calls."""

    def __init__(self):
        self.filled: List[Tuple[RecordKind, Dict[str, Any]]] = []
        self.views: List[Any] = []

    def fillForm(self, kind: RecordKind, record: Dict[str, Any]) -> None:
        self.filled.append((kind, record))

    def switchView(self, view) -> None:
        self.views.append(view)


@pytest.fixture
def paracetamol() -> Medicine:
    return Medicine(
        id=1,
        name="Paracetamol",
        dose="500mg",
        startDate="2024-01-01",
        times=["08:00", "20:00"]
    )


@pytest.fixture
def perez() -> Appointment:
    return Appointment(id=2, doctor="Dr. Pérez", date="2024-06-01", time="10:00")


@pytest.fixture
def context() -> PatientContext:
    return PatientContext(patientId=PATIENT_ID, userId=PATIENT_ID)


@pytest.fixture
def store(paracetamol, perez) -> InMemoryRecordStore:
    """Store holding one medicine (id 1) and one appointment (id 2)."""
    recordStore = InMemoryRecordStore()
    recordStore.replaceRecords(PATIENT_ID, RecordKind.MEDICINE, [paracetamol])
    recordStore.replaceRecords(PATIENT_ID, RecordKind.APPOINTMENT, [perez])
    return recordStore


@pytest.fixture
def emptyStore() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def hooks() -> RecordingHooks:
    return RecordingHooks()


@pytest.fixture
def makeDetector():
    """Factory: makeDetector(["text", None, ...]) -> FakeQrDetector."""
    return FakeQrDetector


@pytest.fixture
def blankImage() -> np.ndarray:
    return np.full((120, 160, 3), 255, dtype=np.uint8)
