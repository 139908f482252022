"""Record, payload and session models for the QR exchange."""

from core.models.records import (
    RecordKind,
    Medicine,
    Appointment,
    recordFromDict,
    parseIsoDate,
    isValidTime
)
from core.models.payload import PayloadKind, ExportPayload, SelectionSet
from core.models.patient_context import UserType, CurrentUser, PatientContext

__all__ = [
    "RecordKind",
    "Medicine",
    "Appointment",
    "recordFromDict",
    "parseIsoDate",
    "isValidTime",
    "PayloadKind",
    "ExportPayload",
    "SelectionSet",
    "UserType",
    "CurrentUser",
    "PatientContext",
]
