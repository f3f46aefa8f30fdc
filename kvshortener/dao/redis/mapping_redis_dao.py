"""Data Access Object (DAO) implementation for managing mapping records in Redis

This module provides a Redis-based implementation of MappingBaseDAO for
put/get/exists/list operations with MappingRecord instances.

Responsibilities:
    - Write and read encoded mapping records as Redis strings;
    - Offer an atomic put-if-absent via SET NX;
    - Enumerate stored keys with cursor-based SCAN;
    - Raise appropriate DAO exceptions on Redis failures and corrupt values.

Key layout:
    <prefix>:mappings:<key>  ->  '{"key": ..., "url": ..., "createdAt": ...}'

Classes:
    MappingRedisDAO:
        DAO for storing and retrieving MappingRecord in a Redis datastore.

Example:
    >>> from datetime import datetime, UTC
    >>> from kvshortener.models import MappingRecord
    >>> from kvshortener.dao.redis import MappingRedisDAO

    >>> dao = MappingRedisDAO(prefix="kvshortener:dev")

    >>> record = MappingRecord(key="abcxyz", url="https://example.com/page", created_at=datetime.now(UTC))
    >>> dao.put(record)
    <MappingRedisDAO>
    >>> dao.put_if_absent(record)
    False

    >>> dao.get("abcxyz").url
    'https://example.com/page'
    >>> list(dao.list_keys())
    ['abcxyz']
"""

from collections.abc import Iterator

import redis
from beartype import beartype

from kvshortener.models import MappingRecord, encode_record, decode_record
from kvshortener.dao.base import MappingBaseDAO
from kvshortener.dao.redis.mixins import RedisClientMixin
from kvshortener.dao.redis.helpers import handle_redis_connection_error
from kvshortener.dao.exceptions import CorruptRecordError


# Hint for how many keys Redis should examine per SCAN call
SCAN_BATCH_SIZE = 500


class MappingRedisDAO(RedisClientMixin, MappingBaseDAO):
    """Redis-based Data Access Object (DAO) for managing mapping records

    This class implements the MappingBaseDAO interface using Redis as a data store.
    Every record lives in a single string key, so each write replaces the
    whole value: concurrent writers can overwrite each other, but never
    produce a merged record.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.

    Methods:
        exists(key: str, **kwargs) -> bool:
            EXISTS on the record key.

        get(key: str, **kwargs) -> MappingRecord | None:
            GET and decode the record. None if missing.
            Raises CorruptRecordError when the value doesn't decode.

        put(record: MappingRecord, **kwargs) -> MappingRedisDAO:
            Unconditional SET of the encoded record.

        put_if_absent(record: MappingRecord, **kwargs) -> bool:
            SET NX of the encoded record.

        list_keys(**kwargs) -> Iterator[str]:
            SCAN the mapping namespace until the cursor returns to 0.

        All methods raise DataStoreError when Redis is unreachable or refuses a command.
    """

    @handle_redis_connection_error
    @beartype
    def exists(self, key: str, **kwargs) -> bool:
        return bool(self.redis.exists(self.keys.mapping_key(key)))

    @handle_redis_connection_error
    @beartype
    def get(self, key: str, **kwargs) -> MappingRecord | None:
        """Retrieve a stored mapping record by key

        Args:
            key (str):
                The short key identifying the mapping.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            MappingRecord | None:
                The decoded record, or None if nothing is stored under key.

        Raises:
            CorruptRecordError:
                If the stored value isn't UTF-8 JSON, isn't a string value,
                or decodes to a record for a different key.
            DataStoreError:
                If Redis is unreachable or refuses the command.

        Example:
            >>> dao.get('abcxyz')
            MappingRecord(key='abcxyz', url='https://example.com', created_at=...)
            >>> dao.get('missing') is None
            True
        """
        try:
            blob = self.redis.get(self.keys.mapping_key(key))
        except UnicodeDecodeError as e:
            # decode_responses clients decode the reply before we see it
            raise CorruptRecordError(f"Record stored under '{key}' is not valid UTF-8.") from e
        except redis.exceptions.ResponseError as e:
            if not str(e).startswith('WRONGTYPE'):
                raise
            raise CorruptRecordError(f"Redis key for '{key}' holds a non-string value.") from e

        if blob is None:
            return None

        try:
            record = decode_record(blob)
        except CorruptRecordError as e:
            raise CorruptRecordError(f"Record stored under '{key}' is corrupt: {e}") from e

        if record.key != key:
            raise CorruptRecordError(f"Record stored under '{key}' belongs to key '{record.key}'.")
        return record

    @handle_redis_connection_error
    @beartype
    def put(self, record: MappingRecord, **kwargs) -> 'MappingRedisDAO':
        """Write a mapping record into Redis, overwriting any previous value

        NOTE: put() doesn't check whether the key is taken. Callers pair it
              with exists(), which leaves a window between the check and the
              write:

              (request 1): exists('dup') => False
              (request 2): exists('dup') => False
              (request 1): SET <app>:mappings:dup <record 1>
              (request 2): SET <app>:mappings:dup <record 2>   => record 1 is lost

              Use put_if_absent() where the loss isn't acceptable.

        Args:
            record (MappingRecord):
                The record to write.
            **kwargs:
                Optional keyword arguments (for future use).

        Returns:
            MappingRedisDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If Redis is unreachable or refuses the write.
        """
        self.redis.set(self.keys.mapping_key(record.key), encode_record(record))
        return self

    @handle_redis_connection_error
    @beartype
    def put_if_absent(self, record: MappingRecord, **kwargs) -> bool:
        # SET NX replies None when the key already exists
        written = self.redis.set(self.keys.mapping_key(record.key), encode_record(record), nx=True)
        return bool(written)

    @beartype
    def list_keys(self, **kwargs) -> Iterator[str]:
        """Iterate over every stored short key

        Walks the mapping namespace with SCAN. Keys written or removed while
        the scan runs may or may not be reported; keys present for the whole
        scan are reported at least once (Redis SCAN guarantees).

        Args:
            **kwargs:
                Optional keyword arguments (for future use).

        Yields:
            str: short keys with the namespace prefix removed.

        Raises:
            DataStoreError:
                If Redis is unreachable or refuses a SCAN (possibly mid-iteration).

        Example:
            >>> sorted(dao.list_keys())
            ['a1', 'b2', 'c3']
        """
        seen = set()
        cursor = 0
        while True:
            cursor, redis_keys = self._scan_page(cursor)
            for redis_key in redis_keys:
                if isinstance(redis_key, bytes):
                    redis_key = redis_key.decode('utf-8')
                key = self.keys.short_key(redis_key)
                # SCAN may return a key more than once
                if key not in seen:
                    seen.add(key)
                    yield key
            if int(cursor) == 0:
                break

    @handle_redis_connection_error
    def _scan_page(self, cursor: int) -> tuple[int, list]:
        return self.redis.scan(cursor=cursor, match=self.keys.mapping_pattern(), count=SCAN_BATCH_SIZE)
