"""Abstract base class for mapping data access objects (DAOs).

This class establishes a consistent contract for all mapping DAO implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-memory).

Responsibilities:
    - Provide an interface for writing, reading and enumerating MappingRecord objects.
    - Standardize error handling across multiple data store implementations.
    - Enforce a consistent API for use by the key allocator and the mapping service.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from datetime import datetime, UTC
        >>> from kvshortener.models import MappingRecord
        >>> from kvshortener.dao.redis import MappingRedisDAO

        >>> dao = MappingRedisDAO(...)

        >>> record = MappingRecord(
        ...     key='abcxyz',
        ...     url='https://example.com/blog/article-123',
        ...     created_at=datetime.now(UTC),
        ... )
        >>> dao.exists('abcxyz')
        False
        >>> dao.put(record)

        >>> dao.get('abcxyz').url
        'https://example.com/blog/article-123'

        >>> list(dao.list_keys())
        ['abcxyz']
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from kvshortener.models import MappingRecord


class MappingBaseDAO(ABC):
    """Interface for mapping data access objects (DAOs).

    Methods:
        exists(key: str, **kwargs) -> bool:
            True iff a record is persisted under key.
            Raises DataStoreError on connection or read failure.

        get(key: str, **kwargs) -> MappingRecord | None:
            Retrieve a MappingRecord by key. Returns None if not found.
            Raises CorruptRecordError if the stored value doesn't decode.
            Raises DataStoreError on connection or read failure.

        put(record: MappingRecord, **kwargs) -> MappingBaseDAO:
            Unconditionally write a record, overwriting any previous value.
            Raises DataStoreError on connection or write failure.

        put_if_absent(record: MappingRecord, **kwargs) -> bool:
            Atomically write a record only if its key is free.
            Raises DataStoreError on connection or write failure.

        list_keys(**kwargs) -> Iterator[str]:
            Iterate over every stored key, in store-defined order.
            Raises DataStoreError on connection or read failure.

    Subclassing:
        Datastore-specific implementations (e.g., MappingRedisDAO or
        MappingMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        - The DAO doesn't check key uniqueness on put(). Callers check
          exists() right before put(), which is best-effort only: two writers
          can both see a free key and the later write wins. Use put_if_absent()
          to close that window.
        - Records never expire and the DAO provides no delete operation.
    """

    @abstractmethod
    def exists(self, key: str, **kwargs) -> bool:
        """Check whether a record is stored under a key.

        Args:
            key (str):
                The short key to look up.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if a record exists, False otherwise.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def get(self, key: str, **kwargs) -> MappingRecord | None:
        """Retrieve a MappingRecord from the data store by its key.

        Args:
            key (str):
                The short key of the MappingRecord to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            MappingRecord | None: The MappingRecord if found, otherwise None.

        Raises:
            CorruptRecordError:
                If the stored value doesn't decode to a MappingRecord for this key.

            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def put(self, record: MappingRecord, **kwargs) -> 'MappingBaseDAO':
        """Write a MappingRecord under its key, overwriting any previous value.

        Args:
            record (MappingRecord):
                The MappingRecord instance to be written.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            MappingBaseDAO: self (for method chaining)

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def put_if_absent(self, record: MappingRecord, **kwargs) -> bool:
        """Write a MappingRecord only if no value exists under its key.

        The check and the write happen as one atomic operation.

        Args:
            record (MappingRecord):
                The MappingRecord instance to be written.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            bool: True if the record was written, False if the key was taken.

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def list_keys(self, **kwargs) -> Iterator[str]:
        """Iterate over every key currently stored.

        Paginated stores are walked to the end; the iterator is exhausted
        only once every key has been produced. No ordering is guaranteed.

        Args:
            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            Iterator[str]: stored keys (without any namespace prefix).

        Raises:
            DataStoreError:
                If there is an error in the data store.
        """
        pass
