"""
Session Service

Provides the logged-in user and the active patient context.
The session is read from a saved JSON state file written by the login
flow:

    {
        "currentUser": {"id": 7, "name": "Ana", "userType": "cuidador",
                        "patientIds": [3, 4]},
        "selectedPatientId": 3
    }

Follows SRP: Only handles session state and patient-context resolution.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

from core.errors import PatientContextError
from core.models.patient_context import CurrentUser, PatientContext


logger = logging.getLogger(__name__)


class SessionService:
    """
    Service for the current session.

    A patient always acts on their own records. A caregiver acts on the
    associated patient selected with selectPatient().
    """

    def __init__(self, stateFile: Optional[str] = "data/session.json"):
        """
        Initialize SessionService.

        Args:
            stateFile: Saved session file. None keeps the session in memory.
        """
        self._stateFile = Path(stateFile) if stateFile else None
        self._currentUser: Optional[CurrentUser] = None
        self._selectedPatientId: Optional[int] = None
        self._load()

    def _load(self) -> None:
        if self._stateFile is None or not self._stateFile.exists():
            logger.info("No saved session, starting logged out")
            return

        try:
            with open(self._stateFile, 'r', encoding='utf-8') as f:
                state = json.load(f)
            userData = state.get("currentUser")
            if userData:
                self._currentUser = CurrentUser.fromDict(userData)
            selected = state.get("selectedPatientId")
            self._selectedPatientId = int(selected) if selected is not None else None
        except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
            logger.error(f"Invalid session file {self._stateFile}: {e}")
            self._currentUser = None
            self._selectedPatientId = None
            return

        if self._currentUser:
            logger.info(
                f"Session restored for user {self._currentUser.id} "
                f"({self._currentUser.userType.value})"
            )

    def _save(self) -> None:
        if self._stateFile is None:
            return
        state = {
            "currentUser": self._currentUser.toDict() if self._currentUser else None,
            "selectedPatientId": self._selectedPatientId
        }
        self._stateFile.parent.mkdir(parents=True, exist_ok=True)
        with open(self._stateFile, 'w', encoding='utf-8') as f:
            json.dump(state, f, indent=2, ensure_ascii=False)

    def currentUser(self) -> Optional[CurrentUser]:
        """Get the logged-in user, None when logged out."""
        return self._currentUser

    def setCurrentUser(self, user: Optional[CurrentUser]) -> None:
        """
        Replace the logged-in user (login / logout).

        Clears the patient selection.
        """
        self._currentUser = user
        self._selectedPatientId = None
        self._save()

    def associatedPatients(self) -> List[int]:
        """Get patient ids the current user may act for."""
        user = self._currentUser
        if user is None:
            return []
        if user.isCaregiver:
            return list(user.patientIds)
        return [user.id]

    def selectPatient(self, patientId: int) -> None:
        """
        Choose the patient a caregiver acts for.

        Raises:
            PatientContextError: If the patient is not associated with
                the current user.
        """
        if patientId not in self.associatedPatients():
            raise PatientContextError(
                f"patient {patientId} is not associated with the current user"
            )
        self._selectedPatientId = patientId
        self._save()
        logger.info(f"Selected patient {patientId}")

    @property
    def selectedPatientId(self) -> Optional[int]:
        return self._selectedPatientId

    def resolvePatientContext(self) -> PatientContext:
        """
        Resolve whose records are exchanged.

        Returns:
            PatientContext for the active patient.

        Raises:
            PatientContextError: If nobody is logged in, or a caregiver
                has no associated patient selected.
        """
        user = self._currentUser
        if user is None:
            raise PatientContextError("no user is logged in")

        if not user.isCaregiver:
            return PatientContext(patientId=user.id, userId=user.id)

        patientId = self._selectedPatientId
        if patientId is None or patientId not in user.patientIds:
            raise PatientContextError(
                f"caregiver {user.id} has no associated patient selected"
            )
        return PatientContext(patientId=patientId, userId=user.id, actingAsCaregiver=True)
