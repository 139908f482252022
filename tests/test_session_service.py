"""
Tests for SessionService patient-context resolution.
"""

import json

import pytest

from core.errors import PatientContextError
from core.models.patient_context import CurrentUser, UserType
from services.session_service import SessionService


@pytest.fixture
def patientUser():
    return CurrentUser(id=3, name="Luis", userType=UserType.PATIENT)


@pytest.fixture
def caregiverUser():
    return CurrentUser(id=9, name="Ana", userType=UserType.CAREGIVER, patientIds=[3, 4])


class TestResolvePatientContext:
    """Tests for resolvePatientContext."""

    def test_logged_out_raises(self):
        with pytest.raises(PatientContextError):
            SessionService(stateFile=None).resolvePatientContext()

    def test_patient_acts_on_own_records(self, patientUser):
        session = SessionService(stateFile=None)
        session.setCurrentUser(patientUser)

        context = session.resolvePatientContext()
        assert context.patientId == 3
        assert context.actingAsCaregiver is False

    def test_caregiver_without_selection_raises(self, caregiverUser):
        session = SessionService(stateFile=None)
        session.setCurrentUser(caregiverUser)
        with pytest.raises(PatientContextError):
            session.resolvePatientContext()

    def test_caregiver_with_selection(self, caregiverUser):
        session = SessionService(stateFile=None)
        session.setCurrentUser(caregiverUser)
        session.selectPatient(4)

        context = session.resolvePatientContext()
        assert context.patientId == 4
        assert context.userId == 9
        assert context.actingAsCaregiver is True

    def test_cannot_select_unassociated_patient(self, caregiverUser):
        session = SessionService(stateFile=None)
        session.setCurrentUser(caregiverUser)
        with pytest.raises(PatientContextError):
            session.selectPatient(5)
        assert session.selectedPatientId is None

    def test_login_clears_selection(self, caregiverUser, patientUser):
        session = SessionService(stateFile=None)
        session.setCurrentUser(caregiverUser)
        session.selectPatient(3)
        session.setCurrentUser(patientUser)
        assert session.selectedPatientId is None


class TestSessionPersistence:
    """Tests for the saved session file."""

    def test_restores_saved_session(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({
            "currentUser": {"id": 9, "email": "ana@example.com",
                            "userType": "cuidador", "patientIds": [3]},
            "selectedPatientId": 3
        }), encoding="utf-8")

        session = SessionService(str(path))
        assert session.currentUser().name == "ana"
        assert session.associatedPatients() == [3]
        assert session.resolvePatientContext().patientId == 3

    def test_selection_is_saved(self, tmp_path, caregiverUser):
        path = tmp_path / "nested" / "session.json"
        session = SessionService(str(path))
        session.setCurrentUser(caregiverUser)
        session.selectPatient(4)

        assert SessionService(str(path)).selectedPatientId == 4

    def test_corrupt_file_starts_logged_out(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("not json", encoding="utf-8")
        assert SessionService(str(path)).currentUser() is None
