"""
Payload Classifier Module.

Maps a parsed ExportPayload to one of two outcome shapes:
- SingleOutcome: one record to stage in a form
- BulkOutcome: whole collections to replace

Also builds the confirmation prompt shown before an outcome is applied.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from core.errors import InvalidBulkPayload, UnrecognizedShape
from core.models.payload import ExportPayload
from core.models.records import RecordKind, parseIsoDate


logger = logging.getLogger(__name__)


@dataclass
class SingleOutcome:
    """
    Single record decoded from a QR code.

    Attributes:
        kind: Record kind.
        record: Raw record without id or owner.
    """
    kind: RecordKind
    record: Dict[str, Any]


@dataclass
class BulkOutcome:
    """
    Record collections decoded from a QR export.

    Attributes:
        medicines: Medicine records, verbatim.
        appointments: Appointment records, verbatim.
        exportDate: Export timestamp (informational).
    """
    medicines: List[Any] = field(default_factory=list)
    appointments: List[Any] = field(default_factory=list)
    exportDate: Optional[str] = None


Outcome = Union[SingleOutcome, BulkOutcome]


def classify(payload: ExportPayload) -> Outcome:
    """
    Classify a parsed payload.

    Args:
        payload: Output of payload_codec.parse().

    Returns:
        SingleOutcome or BulkOutcome.

    Raises:
        InvalidBulkPayload: If a bulk payload carries no records at all.
    """
    recordKind = payload.kind.recordKind
    if recordKind is not None:
        if payload.data is None:
            raise UnrecognizedShape(f"'{payload.kind.value}' payload has no data")
        record = {k: v for k, v in payload.data.items() if k not in ("id", "patientId")}
        logger.debug(f"Classified payload as single {recordKind.value}")
        return SingleOutcome(kind=recordKind, record=record)

    if not payload.medicines and not payload.appointments:
        raise InvalidBulkPayload("export payload has no medicines and no appointments")

    logger.debug(
        f"Classified payload as bulk export "
        f"({len(payload.medicines)} medicines, {len(payload.appointments)} appointments)"
    )
    return BulkOutcome(
        medicines=list(payload.medicines),
        appointments=list(payload.appointments),
        exportDate=payload.exportDate
    )


def _formatDate(value: Any) -> str:
    day = parseIsoDate(value)
    return day.strftime("%d/%m/%Y") if day else "N/A"


def describeOutcome(outcome: Outcome) -> str:
    """
    Build the confirmation prompt for an outcome.

    Args:
        outcome: Classified outcome.

    Returns:
        str: Multi-line, human-readable prompt.
    """
    if isinstance(outcome, BulkOutcome):
        lines = [
            "Do you want to import this data?",
            "",
            f"Medicines: {len(outcome.medicines)}",
            f"Appointments: {len(outcome.appointments)}",
        ]
        if outcome.exportDate:
            lines.append(f"Exported: {_formatDate(outcome.exportDate)}")
        lines += ["", "This will replace your current data."]
        return "\n".join(lines)

    record = outcome.record
    if outcome.kind == RecordKind.MEDICINE:
        times = record.get("times")
        timesText = ", ".join(str(t) for t in times) if isinstance(times, list) and times else "N/A"
        lines = [
            "Do you want to schedule this medicine?",
            "",
            f"Name: {record.get('name') or 'N/A'}",
            f"Dose: {record.get('dose') or 'N/A'}",
            f"Start date: {_formatDate(record.get('startDate'))}",
            f"Times: {timesText}",
        ]
    else:
        lines = [
            "Do you want to schedule this appointment?",
            "",
            f"Doctor: {record.get('doctor') or 'N/A'}",
            f"Date: {_formatDate(record.get('date'))}",
            f"Time: {record.get('time') or 'N/A'}",
        ]
        if record.get("location"):
            lines.append(f"Location: {record['location']}")
    return "\n".join(lines)
