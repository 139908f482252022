"""
JSON File Record Store Implementation.

Persists records to a single JSON file, one entry per collection:
    "medicines_<patientId>"    -> [ {...}, ... ]
    "appointments_<patientId>" -> [ {...}, ... ]

The whole file is rewritten after every mutation (write to a temporary
file, then rename), so a crash never leaves a half-written file.
If the write fails, the in-memory collection is restored and
RecordStoreError is raised, so memory and disk never disagree.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Sequence

from core.errors import RecordStoreError
from core.interfaces.record_store_interface import Record
from core.models.records import RecordKind, recordFromDict
from core.store.in_memory_record_store import InMemoryRecordStore


logger = logging.getLogger(__name__)


COLLECTION_PREFIX = {
    RecordKind.MEDICINE: "medicines",
    RecordKind.APPOINTMENT: "appointments",
}


class JsonFileRecordStore(InMemoryRecordStore):
    """
    Record store backed by a JSON file.

    Loads the file once on construction and keeps an in-memory copy.
    """

    def __init__(self, filePath: str = "data/records.json"):
        """
        Initialize JsonFileRecordStore.

        Args:
            filePath: Path of the JSON data file. Created on first write.
        """
        super().__init__()
        self._filePath = Path(filePath)
        self._load()

    @property
    def filePath(self) -> Path:
        return self._filePath

    def _load(self) -> None:
        if not self._filePath.exists():
            logger.info(f"Record file not found, starting empty: {self._filePath}")
            return

        try:
            with open(self._filePath, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in record file {self._filePath}: {e}")
            raise

        for key, items in raw.items():
            prefix, _, patientPart = key.rpartition("_")
            kind = next((k for k, p in COLLECTION_PREFIX.items() if p == prefix), None)
            if kind is None or not patientPart.isdigit() or not isinstance(items, list):
                logger.warning(f"Skipping unknown record file entry: {key}")
                continue
            patientId = int(patientPart)
            records = [recordFromDict(kind, item) for item in items if isinstance(item, dict)]
            self._collections[(patientId, kind)] = records
            ids = [r.id for r in records if r.id is not None]
            if ids:
                self._lastId = max(self._lastId, max(ids))

        logger.info(f"Records loaded from: {self._filePath.absolute()}")

    def _save(self) -> None:
        data: Dict[str, List[Dict[str, Any]]] = {}
        for (patientId, kind), records in self._collections.items():
            key = f"{COLLECTION_PREFIX[kind]}_{patientId}"
            data[key] = [r.toDict() for r in records]

        tmpPath = self._filePath.with_suffix(self._filePath.suffix + ".tmp")
        try:
            self._filePath.parent.mkdir(parents=True, exist_ok=True)
            with open(tmpPath, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmpPath, self._filePath)
        except OSError as e:
            logger.error(f"Failed to save records to {self._filePath}: {e}")
            raise RecordStoreError(f"cannot write {self._filePath}: {e}") from e
        logger.debug(f"Records saved to {self._filePath}")

    def _saveOrRestore(self, patientId: int, kind: RecordKind, previous: List[Record]) -> None:
        """Persist the change, or put the collection back as it was."""
        try:
            self._save()
        except RecordStoreError:
            self._collections[(patientId, RecordKind(kind))] = previous
            logger.warning(f"Restored {RecordKind(kind).value} collection of patient {patientId}")
            raise

    def createRecord(self, patientId: int, kind: RecordKind, record: Record) -> Record:
        previous = list(self._collection(patientId, kind))
        stored = super().createRecord(patientId, kind, record)
        self._saveOrRestore(patientId, kind, previous)
        return stored

    def deleteRecord(self, patientId: int, kind: RecordKind, recordId: int) -> None:
        previous = list(self._collection(patientId, kind))
        super().deleteRecord(patientId, kind, recordId)
        self._saveOrRestore(patientId, kind, previous)

    def replaceRecords(
        self,
        patientId: int,
        kind: RecordKind,
        records: Sequence[Record]
    ) -> List[Record]:
        previous = list(self._collection(patientId, kind))
        stored = super().replaceRecords(patientId, kind, records)
        self._saveOrRestore(patientId, kind, previous)
        return stored
