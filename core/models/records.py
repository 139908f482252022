"""
Record Models Module.

Data classes for the two record types exchanged through QR codes:
Medicine and Appointment.

Field names match the QR payload wire format (camelCase), so a record
converts to and from a plain dictionary without renaming.
"""

import re
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from core.errors import RecordValidationFailure


TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')


class RecordKind(str, Enum):
    """Kind of record, value matches the payload discriminant."""
    MEDICINE = "medicine"
    APPOINTMENT = "appointment"


def parseIsoDate(value: Any) -> Optional[date]:
    """
    Parse a calendar date in ISO format (YYYY-MM-DD).

    Timestamps such as "2024-06-01T00:00:00.000Z" are accepted and
    truncated to their date part.

    Returns:
        date, or None if the value is not a valid date.
    """
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def isValidTime(value: Any) -> bool:
    """Check that value is an HH:MM string."""
    return isinstance(value, str) and TIME_PATTERN.match(value) is not None


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optionalText(data: Dict[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _recordId(data: Dict[str, Any], key: str = "id") -> Optional[int]:
    value = data.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


@dataclass
class Medicine:
    """
    Medicine intake record.

    Attributes:
        name: Medicine name (e.g., "Paracetamol").
        dose: Dose text (e.g., "500mg", "1 tablet").
        startDate: First intake day, ISO date.
        times: Intake times of day, HH:MM.
        endDate: Last intake day, ISO date (optional).
        notes: Free text notes.
        id: Store-assigned identifier.
        patientId: Owning patient.
    """
    name: str
    dose: str
    startDate: str
    times: List[str] = field(default_factory=list)
    endDate: Optional[str] = None
    notes: str = ""
    id: Optional[int] = None
    patientId: Optional[int] = None

    kind = RecordKind.MEDICINE

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> "Medicine":
        """
        Build a Medicine from raw payload data.

        Lenient: missing fields become empty values so that validate()
        can report them instead of failing here.
        """
        times = data.get("times")
        if isinstance(times, list):
            times = [t if isinstance(t, str) else str(t) for t in times]
        else:
            times = []
        return cls(
            name=_text(data, "name"),
            dose=_text(data, "dose"),
            startDate=_text(data, "startDate"),
            times=times,
            endDate=_optionalText(data, "endDate"),
            notes=_text(data, "notes"),
            id=_recordId(data),
            patientId=_recordId(data, "patientId")
        )

    def toDict(self, includeOwner: bool = True) -> Dict[str, Any]:
        """Convert to a plain dictionary in wire format."""
        data: Dict[str, Any] = {}
        if self.id is not None:
            data["id"] = self.id
        data["name"] = self.name
        data["dose"] = self.dose
        data["startDate"] = self.startDate
        if self.endDate:
            data["endDate"] = self.endDate
        data["times"] = list(self.times)
        data["notes"] = self.notes
        if includeOwner and self.patientId is not None:
            data["patientId"] = self.patientId
        return data

    def validate(self, index: Optional[int] = None) -> None:
        """
        Check field constraints.

        Raises:
            RecordValidationFailure: On the first violated constraint.
        """
        kind = RecordKind.MEDICINE.value
        if not self.name.strip():
            raise RecordValidationFailure(kind, "name", "must not be empty", index)
        if not self.dose.strip():
            raise RecordValidationFailure(kind, "dose", "must not be empty", index)

        start = parseIsoDate(self.startDate)
        if start is None:
            raise RecordValidationFailure(kind, "startDate", "is not a valid date", index)
        if self.endDate is not None:
            end = parseIsoDate(self.endDate)
            if end is None:
                raise RecordValidationFailure(kind, "endDate", "is not a valid date", index)
            if end < start:
                raise RecordValidationFailure(
                    kind, "endDate", "must not be before startDate", index
                )

        if not self.times:
            raise RecordValidationFailure(kind, "times", "must not be empty", index)
        for t in self.times:
            if not isValidTime(t):
                raise RecordValidationFailure(kind, "times", f"has invalid time '{t}'", index)
        if len(set(self.times)) != len(self.times):
            raise RecordValidationFailure(kind, "times", "contains duplicates", index)

    def canonical(self) -> "Medicine":
        """Return a copy with intake times sorted, as stored."""
        return replace(self, times=sorted(self.times))


@dataclass
class Appointment:
    """
    Medical appointment record.

    Attributes:
        doctor: Doctor name.
        date: Appointment day, ISO date.
        time: Appointment time, HH:MM.
        location: Place (optional).
        notes: Free text notes.
        id: Store-assigned identifier.
        patientId: Owning patient.
    """
    doctor: str
    date: str
    time: str
    location: str = ""
    notes: str = ""
    id: Optional[int] = None
    patientId: Optional[int] = None

    kind = RecordKind.APPOINTMENT

    @classmethod
    def fromDict(cls, data: Dict[str, Any]) -> "Appointment":
        """Build an Appointment from raw payload data (lenient)."""
        return cls(
            doctor=_text(data, "doctor"),
            date=_text(data, "date"),
            time=_text(data, "time"),
            location=_text(data, "location"),
            notes=_text(data, "notes"),
            id=_recordId(data),
            patientId=_recordId(data, "patientId")
        )

    def toDict(self, includeOwner: bool = True) -> Dict[str, Any]:
        """Convert to a plain dictionary in wire format."""
        data: Dict[str, Any] = {}
        if self.id is not None:
            data["id"] = self.id
        data["doctor"] = self.doctor
        data["date"] = self.date
        data["time"] = self.time
        data["location"] = self.location
        data["notes"] = self.notes
        if includeOwner and self.patientId is not None:
            data["patientId"] = self.patientId
        return data

    def validate(
        self,
        index: Optional[int] = None,
        today: Optional[date] = None
    ) -> None:
        """
        Check field constraints.

        Args:
            index: Position inside a bulk sequence, for error reporting.
            today: When given, the appointment must not be before this day.
                The form passes it at creation time; imports do not, since
                an exported snapshot may hold past appointments.

        Raises:
            RecordValidationFailure: On the first violated constraint.
        """
        kind = RecordKind.APPOINTMENT.value
        if not self.doctor.strip():
            raise RecordValidationFailure(kind, "doctor", "must not be empty", index)
        day = parseIsoDate(self.date)
        if day is None:
            raise RecordValidationFailure(kind, "date", "is not a valid date", index)
        if today is not None and day < today:
            raise RecordValidationFailure(kind, "date", "is in the past", index)
        if not isValidTime(self.time):
            raise RecordValidationFailure(kind, "time", "is not a valid HH:MM time", index)

    def canonical(self) -> "Appointment":
        return replace(self)


def recordFromDict(kind: RecordKind, data: Dict[str, Any]):
    """Build the record class matching kind from raw data."""
    if kind == RecordKind.MEDICINE:
        return Medicine.fromDict(data)
    return Appointment.fromDict(data)
