"""Serialization of MappingRecord to and from the data store's value format

A record is stored as a single JSON object:

    {
        "key": "abcxyz",
        "url": "https://example.com/path",
        "createdAt": "2025-10-15T12:00:00Z"
    }

Decoding validates the schema instead of trusting the parse. Every malformed
blob raises CorruptRecordError, so callers can tell a damaged record apart
from a missing one.

Functions:
    encode_record(record: MappingRecord) -> str
        Serialize a record to its JSON representation.
    decode_record(blob: str | bytes) -> MappingRecord
        Parse and validate a stored JSON representation.

Example:
    >>> from datetime import datetime, UTC
    >>> record = MappingRecord('abcxyz', 'https://example.com', datetime(2025, 1, 1, tzinfo=UTC))
    >>> blob = encode_record(record)
    >>> blob
    '{"key": "abcxyz", "url": "https://example.com", "createdAt": "2025-01-01T00:00:00Z"}'
    >>> decode_record(blob) == record
    True
"""

import json
from datetime import datetime

from kvshortener.models.mapping_record import MappingRecord
from kvshortener.dao.exceptions import CorruptRecordError
from kvshortener.utils.validators import is_valid_key


FIELDS = ('key', 'url', 'createdAt')


def _format_timestamp(value: datetime) -> str:
    return value.isoformat().replace('+00:00', 'Z')


def encode_record(record: MappingRecord) -> str:
    """Serialize a MappingRecord into a JSON string

    Args:
        record (MappingRecord):
            The record to serialize.

    Returns:
        str: JSON object with 'key', 'url' and 'createdAt' (ISO-8601) fields.
    """
    return json.dumps(
        {
            'key': record.key,
            'url': record.url,
            'createdAt': _format_timestamp(record.created_at),
        }
    )


def decode_record(blob: str | bytes) -> MappingRecord:
    """Parse and validate a stored JSON representation of a MappingRecord

    Args:
        blob (str | bytes):
            Raw value read from the data store.

    Returns:
        MappingRecord: The decoded record.

    Raises:
        CorruptRecordError:
            If the blob isn't valid JSON, isn't an object, lacks a field,
            holds a field of the wrong shape, or carries a createdAt
            without a UTC offset.
    """
    try:
        data = json.loads(blob)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise CorruptRecordError('Record is not valid JSON.') from e

    if not isinstance(data, dict):
        raise CorruptRecordError(f'Record must be a JSON object (got {type(data).__name__}).')

    missing = [field for field in FIELDS if field not in data]
    if missing:
        raise CorruptRecordError(f'Record is missing fields: {", ".join(missing)}.')

    key, url, created_at = data['key'], data['url'], data['createdAt']
    if not isinstance(key, str) or not is_valid_key(key):
        raise CorruptRecordError(f'Record has an invalid key: {key!r}.')
    if not isinstance(url, str) or not url:
        raise CorruptRecordError(f"Record '{key}' has an invalid url: {url!r}.")
    if not isinstance(created_at, str):
        raise CorruptRecordError(f"Record '{key}' has an invalid createdAt: {created_at!r}.")

    try:
        timestamp = datetime.fromisoformat(created_at)
    except ValueError as e:
        raise CorruptRecordError(f"Record '{key}' has an invalid createdAt: {created_at!r}.") from e
    if timestamp.tzinfo is None:
        raise CorruptRecordError(f"Record '{key}' has a createdAt without a UTC offset: {created_at!r}.")

    return MappingRecord(key=key, url=url, created_at=timestamp)
