"""In-process implementation of RecordBaseDAO.

Records are kept serialized (the same JSON representation Redis stores) in a
dictionary. A single lock guards every operation, so each read-check-write
runs as one critical section.

Useful for local runs and tests. State lives only as long as the instance.
"""

import threading
from collections.abc import Callable

from beartype import beartype

from urlkeeper.models import MappingRecord, serialize_record, deserialize_record
from urlkeeper.dao.base import RecordBaseDAO
from urlkeeper.dao.exceptions import RecordAlreadyExistsError, RecordNotFoundError


class RecordMemoryDAO(RecordBaseDAO):
    def __init__(self):
        self._records: dict[str, str] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    @beartype
    def get(self, short_key: str, **kwargs) -> MappingRecord | None:
        with self._lock:
            blob = self._records.get(short_key)
        return None if blob is None else deserialize_record(short_key, blob)

    @beartype
    def put_if_absent(self, record: MappingRecord, **kwargs) -> 'RecordMemoryDAO':
        blob = serialize_record(record)
        with self._lock:
            if record.short_key in self._records:
                raise RecordAlreadyExistsError(f"Record with key '{record.short_key}' already exists.")
            self._records[record.short_key] = blob
        return self

    @beartype
    def compare_and_update(
        self,
        short_key: str,
        update_fn: Callable[[MappingRecord], MappingRecord],
        **kwargs,
    ) -> MappingRecord:
        with self._lock:
            blob = self._records.get(short_key)
            if blob is None:
                raise RecordNotFoundError(f"Record with key '{short_key}' not found.")

            updated = update_fn(deserialize_record(short_key, blob))
            if updated.short_key != short_key:
                raise ValueError(f"update_fn must not change the short key ('{short_key}' -> '{updated.short_key}').")

            self._records[short_key] = serialize_record(updated)
            return updated
