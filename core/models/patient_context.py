"""
Patient Context Module.

Identifies whose records the QR exchange reads and writes.
A patient acts on their own records; a caregiver acts on one
associated patient chosen in the session.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class UserType(str, Enum):
    """Account type. Values match the saved session data."""
    PATIENT = "usuario"
    CAREGIVER = "cuidador"


@dataclass
class CurrentUser:
    """Logged-in user as provided by the session collaborator."""
    id: int
    name: str
    userType: UserType
    email: str = ""
    patientIds: List[int] = field(default_factory=list)

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> "CurrentUser":
        return cls(
            id=int(data["id"]),
            name=data.get("name") or str(data.get("email", "")).split("@")[0],
            userType=UserType(data.get("userType", UserType.PATIENT.value)),
            email=data.get("email", ""),
            patientIds=[int(p) for p in data.get("patientIds", [])]
        )

    def toDict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "userType": self.userType.value,
            "email": self.email,
            "patientIds": list(self.patientIds)
        }

    @property
    def isCaregiver(self) -> bool:
        return self.userType == UserType.CAREGIVER


@dataclass(frozen=True)
class PatientContext:
    """Active patient whose records are being exchanged."""
    patientId: int
    userId: int
    actingAsCaregiver: bool = False
