"""In-process implementation of MappingBaseDAO

Keeps encoded records in a dict guarded by a lock. Values are stored in
their encoded form, the same way Redis holds them, so every get() decodes
a fresh MappingRecord and exercises the record codec.

Used as a substitute store in tests and for local runs without Redis.

Example:
    >>> dao = MappingMemoryDAO()
    >>> dao.put_if_absent(record)
    True
    >>> dao.put_if_absent(record)
    False
"""

import threading
from collections.abc import Iterator

from beartype import beartype

from kvshortener.models import MappingRecord, encode_record, decode_record
from kvshortener.dao.base import MappingBaseDAO
from kvshortener.dao.exceptions import CorruptRecordError


class MappingMemoryDAO(MappingBaseDAO):
    def __init__(self, data: dict[str, str] | None = None):
        self._data = dict(data or {})
        self._lock = threading.Lock()

    @beartype
    def exists(self, key: str, **kwargs) -> bool:
        with self._lock:
            return key in self._data

    @beartype
    def get(self, key: str, **kwargs) -> MappingRecord | None:
        with self._lock:
            blob = self._data.get(key)
        if blob is None:
            return None

        try:
            record = decode_record(blob)
        except CorruptRecordError as e:
            raise CorruptRecordError(f"Record stored under '{key}' is corrupt: {e}") from e

        if record.key != key:
            raise CorruptRecordError(f"Record stored under '{key}' belongs to key '{record.key}'.")
        return record

    @beartype
    def put(self, record: MappingRecord, **kwargs) -> 'MappingMemoryDAO':
        blob = encode_record(record)
        with self._lock:
            self._data[record.key] = blob
        return self

    @beartype
    def put_if_absent(self, record: MappingRecord, **kwargs) -> bool:
        blob = encode_record(record)
        with self._lock:
            if record.key in self._data:
                return False
            self._data[record.key] = blob
            return True

    @beartype
    def list_keys(self, **kwargs) -> Iterator[str]:
        # Snapshot, so concurrent writers can't break iteration
        with self._lock:
            keys = list(self._data)
        return iter(keys)
