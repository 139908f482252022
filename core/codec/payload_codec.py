"""
Payload Codec Module.

Converts selected records into QR payload text and parses decoded
QR text back into an ExportPayload.

Wire format (JSON object):
    {"type": "export", "medicines": [...], "appointments": [...],
     "exportDate": "2024-06-01T10:00:00.000Z"}
    {"type": "medicine", "data": {...}}
    {"type": "appointment", "data": {...}}

parse() checks the envelope shape only. Record fields are validated
where the records are used.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from core.errors import EmptySelection, MalformedPayload, UnrecognizedShape
from core.models.payload import ExportPayload, PayloadKind, SelectionSet
from core.models.records import Appointment, Medicine, RecordKind


logger = logging.getLogger(__name__)


# Fields dropped from single-record payloads; the receiver assigns them
SINGLE_RECORD_EXCLUDED_FIELDS = ("id", "patientId")


def isoTimestamp(moment: Optional[datetime] = None) -> str:
    """Format a UTC timestamp with millisecond precision and a Z suffix."""
    moment = moment or datetime.now(timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _dumps(payload: Dict[str, Any]) -> str:
    # ASCII escapes keep the QR byte segment free of charset guessing
    return json.dumps(payload, ensure_ascii=True, separators=(",", ":"))


def encode(
    selection: SelectionSet,
    medicines: Sequence[Medicine],
    appointments: Sequence[Appointment],
    exportDate: Optional[datetime] = None
) -> str:
    """
    Encode the selected records as a bulk export payload.

    Records keep their collection order, not selection order. The
    owning patientId is not exported.

    Args:
        selection: Selected record ids.
        medicines: Full medicine collection.
        appointments: Full appointment collection.
        exportDate: Timestamp to embed (default: now).

    Returns:
        str: Payload text.

    Raises:
        EmptySelection: If nothing is selected or the selection
            matches no existing record.
    """
    if selection.isEmpty():
        raise EmptySelection("selection is empty")

    selectedMedicines = [m for m in medicines if m.id in selection.medicines]
    selectedAppointments = [a for a in appointments if a.id in selection.appointments]

    if not selectedMedicines and not selectedAppointments:
        raise EmptySelection("selection matches no existing record")

    payload = {
        "type": PayloadKind.BULK_EXPORT.value,
        "medicines": [m.toDict(includeOwner=False) for m in selectedMedicines],
        "appointments": [a.toDict(includeOwner=False) for a in selectedAppointments],
        "exportDate": isoTimestamp(exportDate)
    }
    text = _dumps(payload)
    logger.debug(
        f"Encoded export payload: {len(selectedMedicines)} medicines, "
        f"{len(selectedAppointments)} appointments, {len(text)} bytes"
    )
    return text


def encodeSingle(
    kind: RecordKind,
    record: Union[Medicine, Appointment, Dict[str, Any]]
) -> str:
    """
    Encode one record as a single-record payload.

    Args:
        kind: Record kind.
        record: Record object or raw record dictionary.

    Returns:
        str: Payload text with "type" set to the record kind.
    """
    data = record if isinstance(record, dict) else record.toDict(includeOwner=False)
    data = {k: v for k, v in data.items() if k not in SINGLE_RECORD_EXCLUDED_FIELDS}
    payload = {
        "type": PayloadKind.forRecordKind(RecordKind(kind)).value,
        "data": data
    }
    return _dumps(payload)


def _listField(obj: Dict[str, Any], key: str) -> Optional[List[Any]]:
    if key not in obj:
        return None
    value = obj[key]
    if not isinstance(value, list):
        raise UnrecognizedShape(
            f"export payload field '{key}' is a {type(value).__name__}, not a list"
        )
    return value


def parse(text: Any) -> ExportPayload:
    """
    Parse decoded QR text into an ExportPayload.

    Args:
        text: Decoded QR text.

    Returns:
        ExportPayload with raw record dictionaries.

    Raises:
        MalformedPayload: If the text is not JSON.
        UnrecognizedShape: If the JSON is not a known payload shape.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedPayload(f"payload is not UTF-8 text: {e}") from e

    if not isinstance(text, str) or not text.strip():
        raise MalformedPayload("payload is empty")

    try:
        obj = json.loads(text)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError; deep nesting exhausts the recursion limit
        logger.warning(f"Payload is not valid JSON: {e} (first 200 chars: {text[:200]!r})")
        raise MalformedPayload(str(e)) from e

    if not isinstance(obj, dict):
        raise UnrecognizedShape(f"payload is a JSON {type(obj).__name__}, not an object")

    try:
        kind = PayloadKind(obj.get("type"))
    except ValueError:
        raise UnrecognizedShape(f"unknown payload type: {obj.get('type')!r}") from None

    if kind.isSingle:
        data = obj.get("data")
        if not isinstance(data, dict):
            raise UnrecognizedShape(f"'{kind.value}' payload has no 'data' object")
        return ExportPayload(kind=kind, data=data)

    medicines = _listField(obj, "medicines")
    appointments = _listField(obj, "appointments")
    if medicines is None and appointments is None:
        raise UnrecognizedShape("export payload has neither 'medicines' nor 'appointments'")

    exportDate = obj.get("exportDate")
    return ExportPayload(
        kind=kind,
        medicines=medicines or [],
        appointments=appointments or [],
        exportDate=exportDate if isinstance(exportDate, str) else None
    )
