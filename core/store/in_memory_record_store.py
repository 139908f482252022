"""
In-Memory Record Store Implementation.

Implements IRecordStore with plain dictionaries. Used for tests and
for sessions that do not persist records.
"""

import logging
import time
from dataclasses import replace
from typing import Callable, Dict, List, Sequence, Tuple

from core.interfaces.record_store_interface import IRecordStore, Record
from core.models.records import RecordKind


logger = logging.getLogger(__name__)


class InMemoryRecordStore(IRecordStore):
    """
    Record store kept in process memory.

    Identifiers are millisecond timestamps, bumped when two records are
    created within the same millisecond, so ids sort by creation.
    """

    def __init__(self):
        self._collections: Dict[Tuple[int, RecordKind], List[Record]] = {}
        self._lastId = 0

    def _nextId(self) -> int:
        candidate = int(time.time() * 1000)
        self._lastId = max(candidate, self._lastId + 1)
        return self._lastId

    def _collection(self, patientId: int, kind: RecordKind) -> List[Record]:
        return self._collections.setdefault((patientId, RecordKind(kind)), [])

    def listRecords(self, patientId: int, kind: RecordKind) -> List[Record]:
        return [replace(r) for r in self._collection(patientId, kind)]

    def createRecord(self, patientId: int, kind: RecordKind, record: Record) -> Record:
        stored = replace(record.canonical(), id=self._nextId(), patientId=patientId)
        self._collection(patientId, kind).append(stored)
        logger.debug(f"Created {kind.value} {stored.id} for patient {patientId}")
        return replace(stored)

    def deleteRecord(self, patientId: int, kind: RecordKind, recordId: int) -> None:
        collection = self._collection(patientId, kind)
        collection[:] = [r for r in collection if r.id != recordId]

    def replaceRecords(
        self,
        patientId: int,
        kind: RecordKind,
        records: Sequence[Record]
    ) -> List[Record]:
        """Replace the collection in one assignment, keeping incoming ids."""
        stored = assignIdentifiers(records, patientId, self._nextId)
        if stored:
            self._lastId = max(self._lastId, max(r.id for r in stored))
        self._collections[(patientId, RecordKind(kind))] = stored
        logger.info(
            f"Replaced {kind.value} collection of patient {patientId} "
            f"({len(stored)} records)"
        )
        return [replace(r) for r in stored]


def assignIdentifiers(
    records: Sequence[Record],
    patientId: int,
    nextId: Callable[[], int]
) -> List[Record]:
    """
    Prepare records for a collection replace.

    Incoming ids are kept when present and unique within the batch;
    missing or repeated ids get a fresh one. Ownership is set to
    patientId.

    Args:
        records: Records to store.
        patientId: New owner.
        nextId: Callable returning a fresh identifier.

    Returns:
        New record objects ready to store.
    """
    kept = set()
    keepFlags = []
    for record in records:
        keepId = record.id is not None and record.id not in kept
        if keepId:
            kept.add(record.id)
        keepFlags.append(keepId)

    result = []
    for record, keepId in zip(records, keepFlags):
        recordId = record.id
        if not keepId:
            recordId = nextId()
            while recordId in kept:
                recordId = nextId()
            kept.add(recordId)
        result.append(replace(record.canonical(), id=recordId, patientId=patientId))
    return result
