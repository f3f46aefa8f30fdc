"""Exceptions related to Data Access Objects (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    DataStoreError:
        Raised when the data store is unreachable (e.g., connection issues, timeouts, OOM, etc.).

    CorruptRecordError:
        Raised when a stored value doesn't decode to a valid MappingRecord.

Example:
    >>> from kvshortener.dao.exceptions import CorruptRecordError
    >>> raise CorruptRecordError("Record under 'abc123' is not valid JSON.")
    Traceback (most recent call last):
        ...
    kvshortener.dao.exceptions.CorruptRecordError: Record under 'abc123' is not valid JSON.
"""

from kvshortener.exceptions import KVShortenerError


class DAOError(KVShortenerError):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class DataStoreError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, OOM, etc.
    """

    error_code = 'dao:data_store_error'


class CorruptRecordError(DAOError):
    """Exception raised when a stored value doesn't decode to a valid MappingRecord."""

    error_code = 'dao:corrupt_record_error'
