"""Mapping service: the operations request handlers call

MappingService composes a KeyAllocator and a MappingBaseDAO into the three
operations exposed to request handlers:

    create_mapping(url, custom_key=None) -> MappingRecord
    resolve_mapping(key) -> str
    list_mappings() -> Iterator[tuple[str, str]]

Failures are raised as exceptions from kvshortener.exceptions and
kvshortener.dao.exceptions. Nothing is retried here except the allocator's
bounded collision search.

Uniqueness modes:
    atomic=False (default):
        exists() then put(). Two concurrent creates for the same key can both
        pass the check; the later write wins and the earlier one is lost.
    atomic=True:
        put_if_absent(). A custom key that loses the race raises
        KeyTakenError; a generated key that loses it moves on to the next
        candidate.

Example:
    >>> from kvshortener.dao.memory import MappingMemoryDAO
    >>> service = MappingService(MappingMemoryDAO())
    >>> record = service.create_mapping('https://example.com/path')
    >>> service.resolve_mapping(record.key)
    'https://example.com/path'
"""

import logging
from collections.abc import Callable, Iterator
from datetime import datetime, UTC

from kvshortener.allocator import KeyAllocator
from kvshortener.dao.base import MappingBaseDAO
from kvshortener.dao.exceptions import CorruptRecordError
from kvshortener.exceptions import InvalidUrlError, KeyTakenError, MappingNotFoundError
from kvshortener.models import MappingRecord
from kvshortener.utils.validators import is_valid_url


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class MappingService:
    def __init__(
        self,
        dao: MappingBaseDAO,
        allocator: KeyAllocator | None = None,
        atomic: bool = False,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.dao = dao
        self.allocator = allocator if allocator is not None else KeyAllocator(dao)
        self.atomic = atomic
        self.clock = clock

    def create_mapping(self, url: str, custom_key: str | None = None) -> MappingRecord:
        """Create a new mapping for url, under custom_key or a generated key.

        Args:
            url (str):
                Absolute http(s) URL to map.
            custom_key (str | None):
                Requested key. A random key is generated when None.

        Returns:
            MappingRecord: the stored record.

        Raises:
            InvalidUrlError:
                If url isn't a valid absolute URL (no store access).
            InvalidKeyFormatError:
                If custom_key doesn't match ^[a-z0-9]+$ (no store access).
            KeyTakenError:
                If custom_key is already mapped.
            AllocationExhaustedError:
                If no free key could be generated.
            DataStoreError:
                If the store is unavailable.
        """
        if not is_valid_url(url):
            raise InvalidUrlError(f'{url!r} is not a valid absolute URL.')

        if self.atomic:
            record = self._create_atomically(url, custom_key)
        else:
            key = self.allocator.validate(custom_key) if custom_key is not None else self.allocator.allocate()
            record = MappingRecord(key=key, url=url, created_at=self.clock())
            self.dao.put(record)

        logger.info('Created mapping.', extra={'key': record.key, 'custom': custom_key is not None})
        return record

    def _create_atomically(self, url: str, custom_key: str | None) -> MappingRecord:
        if custom_key is not None:
            record = MappingRecord(key=self.allocator.check_format(custom_key), url=url, created_at=self.clock())
            if not self.dao.put_if_absent(record):
                raise KeyTakenError(f"Key '{custom_key}' is already taken.")
            return record

        for candidate in self.allocator.candidates():
            record = MappingRecord(key=candidate, url=url, created_at=self.clock())
            if self.dao.put_if_absent(record):
                return record
            logger.debug('Generated key collided with an existing mapping.', extra={'key': candidate})

        raise self.allocator.exhausted()

    def resolve_mapping(self, key: str) -> str:
        """Return the URL mapped to key.

        Raises:
            MappingNotFoundError:
                If no mapping exists under key.
            CorruptRecordError:
                If the stored record can't be decoded.
            DataStoreError:
                If the store is unavailable.
        """
        try:
            record = self.dao.get(key)
        except CorruptRecordError:
            logger.error('Stored mapping is corrupt.', extra={'key': key}, exc_info=True)
            raise

        if record is None:
            raise MappingNotFoundError(f"No mapping found for key '{key}'.")
        return record.url

    def list_mappings(self) -> Iterator[tuple[str, str]]:
        """Iterate over (key, url) pairs for every stored mapping.

        Corrupt records are logged and skipped, as are keys that vanish
        between listing and reading.

        Raises:
            DataStoreError:
                If the store is unavailable.
        """
        for key in self.dao.list_keys():
            try:
                record = self.dao.get(key)
            except CorruptRecordError:
                logger.error('Skipping corrupt mapping while listing.', extra={'key': key}, exc_info=True)
                continue

            if record is None:
                continue
            yield record.key, record.url
