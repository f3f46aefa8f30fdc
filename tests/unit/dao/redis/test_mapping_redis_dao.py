"""Unit tests for the MappingRedisDAO

Test coverage includes:

1. Existence checks
   - Ensures exists() queries the namespaced key and returns a bool.

2. Retrieval behavior
   - Ensures fetching a stored key returns a decoded MappingRecord.
   - Ensures missing keys return None.
   - Confirms corrupt values and key mismatches raise CorruptRecordError.
   - Validates invalid parameter types raise type errors.

3. Write behavior
   - Ensures put() SETs the encoded record unconditionally.
   - Ensures put_if_absent() uses SET NX and reports whether it wrote.

4. Enumeration
   - Ensures list_keys() follows the SCAN cursor to the end.
   - Ensures namespace prefixes are stripped and duplicates dropped.

5. Redis failures
   - Confirms Redis connectivity issues raise DataStoreError from every method.
   - Confirms refused commands (OOM, READONLY) raise DataStoreError, up to the service.

6. Unreadable values
   - Non-UTF-8 values and WRONGTYPE replies raise CorruptRecordError.
   - The service reports them on resolve and skips them when listing.
"""

from datetime import datetime, UTC

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from kvshortener.models import MappingRecord, encode_record, decode_record
from kvshortener.dao.exceptions import CorruptRecordError, DataStoreError
from kvshortener.dao.redis import MappingRedisDAO
from kvshortener.service import MappingService


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def dao(redis_client, app_prefix):
    """Create a MappingRedisDAO instance with a mocked Redis client."""
    return MappingRedisDAO(redis_client=redis_client, prefix=app_prefix)


@pytest.fixture
def record():
    return MappingRecord(key='abcxyz', url='https://example.com/test', created_at=datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC))


# -------------------------------
# 1. Existence checks
# -------------------------------


@pytest.mark.parametrize('reply, expected', [(0, False), (1, True)])
def test_exists(dao, redis_client, reply, expected):
    """Ensure exists() checks the namespaced key."""
    redis_client.exists.return_value = reply

    assert dao.exists('abcxyz') is expected
    redis_client.exists.assert_called_once_with('testapp:test:mappings:abcxyz')


# -------------------------------
# 2. Retrieval behavior
# -------------------------------


def test_get_mapping(dao, redis_client, record):
    """Ensure a stored key returns a complete MappingRecord."""
    redis_client.get.return_value = encode_record(record)

    assert dao.get('abcxyz') == record
    redis_client.get.assert_called_once_with('testapp:test:mappings:abcxyz')


def test_get_mapping_from_bytes_client(dao, redis_client, record):
    """Ensure clients without decode_responses are supported."""
    redis_client.get.return_value = encode_record(record).encode('utf-8')

    assert dao.get('abcxyz') == record


def test_get_mapping_which_does_not_exist(dao, redis_client):
    """Ensure missing keys return None rather than raising."""
    redis_client.get.return_value = None

    assert dao.get('abcxyz') is None


def test_get_corrupt_mapping(dao, redis_client):
    """Ensure undecodable values raise CorruptRecordError."""
    redis_client.get.return_value = '{"key": "abcxyz", "url":'

    with pytest.raises(CorruptRecordError, match="Record stored under 'abcxyz' is corrupt"):
        dao.get('abcxyz')


def test_get_mapping_for_another_key(dao, redis_client, record):
    """Ensure a record whose key doesn't match its Redis key is treated as corrupt."""
    redis_client.get.return_value = encode_record(record)

    with pytest.raises(CorruptRecordError, match="belongs to key 'abcxyz'"):
        dao.get('qwerty')


def test_get_mapping_with_invalid_type(dao):
    """Ensure invalid key types raise TypeError or Beartype error."""
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        dao.get(12345)


# -------------------------------
# 3. Write behavior
# -------------------------------


def test_put_mapping(dao, redis_client, record):
    """Ensure put() writes the encoded record without a condition."""
    assert dao.put(record) is dao

    redis_client.set.assert_called_once_with('testapp:test:mappings:abcxyz', encode_record(record))
    redis_client.exists.assert_not_called()


def test_put_mapping_with_invalid_type(dao):
    """Ensure writing something other than a MappingRecord fails."""
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        dao.put('https://example.com/notarecord')


def test_put_if_absent_writes_free_key(dao, redis_client, record):
    """Ensure put_if_absent() issues SET NX and reports a successful write."""
    redis_client.set.return_value = True

    assert dao.put_if_absent(record) is True
    redis_client.set.assert_called_once_with('testapp:test:mappings:abcxyz', encode_record(record), nx=True)


def test_put_if_absent_skips_taken_key(dao, redis_client, record):
    """Ensure put_if_absent() reports False when SET NX refuses."""
    redis_client.set.return_value = None

    assert dao.put_if_absent(record) is False


def test_written_value_decodes_to_the_record(dao, redis_client, record):
    """Ensure the value handed to Redis is a valid encoded record."""
    dao.put(record)

    _, value = redis_client.set.call_args.args
    assert decode_record(value) == record


# -------------------------------
# 4. Enumeration
# -------------------------------


def test_list_keys_follows_scan_cursor(dao, redis_client):
    """Ensure every SCAN page is consumed until the cursor returns to 0."""
    redis_client.scan.side_effect = [
        (17, ['testapp:test:mappings:a1', 'testapp:test:mappings:b2']),
        (42, []),
        (0, ['testapp:test:mappings:c3']),
    ]

    assert list(dao.list_keys()) == ['a1', 'b2', 'c3']
    assert redis_client.scan.call_count == 3
    first_call = redis_client.scan.call_args_list[0]
    assert first_call.kwargs['cursor'] == 0
    assert first_call.kwargs['match'] == 'testapp:test:mappings:*'
    assert redis_client.scan.call_args_list[1].kwargs['cursor'] == 17
    assert redis_client.scan.call_args_list[2].kwargs['cursor'] == 42


def test_list_keys_drops_duplicates(dao, redis_client):
    """Ensure keys SCAN reports twice are yielded once."""
    redis_client.scan.side_effect = [
        (5, ['testapp:test:mappings:a1']),
        (0, [b'testapp:test:mappings:a1', b'testapp:test:mappings:b2']),
    ]

    assert list(dao.list_keys()) == ['a1', 'b2']


def test_list_keys_empty_store(dao, redis_client):
    """Ensure an empty store yields nothing."""
    redis_client.scan.return_value = (0, [])

    assert list(dao.list_keys()) == []


# -------------------------------
# 5. Redis failures
# -------------------------------


@pytest.mark.parametrize(
    'redis_method, call',
    [
        ('exists', lambda dao, record: dao.exists('abcxyz')),
        ('get', lambda dao, record: dao.get('abcxyz')),
        ('set', lambda dao, record: dao.put(record)),
        ('set', lambda dao, record: dao.put_if_absent(record)),
        ('scan', lambda dao, record: list(dao.list_keys())),
    ],
)
@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('Connection error'), redis.exceptions.TimeoutError('Timeout')])
def test_redis_connectivity_errors(dao, redis_client, record, redis_method, call, error):
    """Ensure Redis connectivity errors raise DataStoreError."""
    getattr(redis_client, redis_method).side_effect = error

    with pytest.raises(DataStoreError, match="Can't connect to Redis at 203.0.113.1:18000/5."):
        call(dao, record)


def test_list_keys_fails_mid_iteration(dao, redis_client):
    """Ensure a connection lost between SCAN pages surfaces as DataStoreError."""
    redis_client.scan.side_effect = [
        (9, ['testapp:test:mappings:a1']),
        redis.exceptions.ConnectionError('Connection reset'),
    ]

    keys = dao.list_keys()
    assert next(keys) == 'a1'
    with pytest.raises(DataStoreError):
        next(keys)


@pytest.mark.parametrize('redis_method', ['set', 'get', 'exists', 'scan'])
@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory.'),
        redis.exceptions.ReadOnlyError("READONLY You can't write against a read only replica."),
    ],
)
def test_redis_error_replies(dao, redis_client, record, redis_method, error):
    """Ensure commands Redis refuses surface as DataStoreError."""
    getattr(redis_client, redis_method).side_effect = error

    calls = {
        'set': lambda: dao.put(record),
        'get': lambda: dao.get('abcxyz'),
        'exists': lambda: dao.exists('abcxyz'),
        'scan': lambda: list(dao.list_keys()),
    }
    with pytest.raises(DataStoreError, match='failed the command'):
        calls[redis_method]()


def test_service_create_when_redis_out_of_memory(dao, redis_client):
    """Ensure a refused write reaches the service caller as DataStoreError."""
    redis_client.set.side_effect = redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory.')

    with pytest.raises(DataStoreError):
        MappingService(dao).create_mapping('https://example.com', custom_key='docs')


# -------------------------------
# 6. Values Redis can't hand back as records
# -------------------------------


UNDECODABLE = UnicodeDecodeError('utf-8', b'\xff\xfe{', 0, 1, 'invalid start byte')
WRONGTYPE = redis.exceptions.ResponseError('WRONGTYPE Operation against a key holding the wrong kind of value')


@pytest.mark.parametrize('error', [UNDECODABLE, WRONGTYPE])
def test_get_unreadable_value(dao, redis_client, error):
    """Ensure non-UTF-8 values and non-string keys raise CorruptRecordError."""
    redis_client.get.side_effect = error

    with pytest.raises(CorruptRecordError, match="'abcxyz'") as exc_info:
        dao.get('abcxyz')

    assert exc_info.value.__cause__ is error


def test_get_undecodable_bytes(dao, redis_client):
    """Ensure clients without decode_responses report bad bytes as corrupt too."""
    redis_client.get.return_value = b'\xff\xfe{'

    with pytest.raises(CorruptRecordError):
        dao.get('abcxyz')


@pytest.fixture
def store_with_unreadable_value(redis_client, record):
    """SCAN reports a good and a bad key; GET of the bad one fails to decode."""
    redis_client.scan.return_value = (0, ['testapp:test:mappings:abcxyz', 'testapp:test:mappings:bad'])

    def get(redis_key):
        if redis_key.endswith(':bad'):
            raise UNDECODABLE
        return encode_record(record)

    redis_client.get.side_effect = get


@pytest.mark.usefixtures('store_with_unreadable_value')
def test_service_resolve_unreadable_value(dao):
    with pytest.raises(CorruptRecordError):
        MappingService(dao).resolve_mapping('bad')


@pytest.mark.usefixtures('store_with_unreadable_value')
def test_service_list_skips_unreadable_value(dao, record):
    assert list(MappingService(dao).list_mappings()) == [('abcxyz', record.url)]
