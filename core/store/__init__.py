"""Record store implementations."""

from core.store.in_memory_record_store import InMemoryRecordStore, assignIdentifiers
from core.store.json_file_record_store import JsonFileRecordStore

__all__ = [
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "assignIdentifiers",
]
