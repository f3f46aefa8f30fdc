"""Short key allocation

KeyAllocator produces keys that are free in the mapping store at the time of
the check, or validates caller-supplied custom keys against the same rule.
Neither operation reserves the key: a concurrent writer can still claim it
before the caller writes (see MappingService for the atomic alternative).

Collision search is bounded. The allocator tries `max_attempts` random keys
per length, starting at `key_length`. When every attempt at a length
collides, it widens the key by one character, up to `max_key_length`, and
finally gives up with AllocationExhaustedError.

Example:
    >>> from kvshortener.dao.memory import MappingMemoryDAO
    >>> allocator = KeyAllocator(MappingMemoryDAO())
    >>> allocator.allocate()
    'rkvqoa'
    >>> allocator.validate('docs2024')
    'docs2024'
    >>> allocator.validate('Docs-2024')
    Traceback (most recent call last):
        ...
    kvshortener.exceptions.InvalidKeyFormatError: ...
"""

import logging
from collections.abc import Iterator

from kvshortener.constants import KeyFormat, Allocation
from kvshortener.dao.base import MappingBaseDAO
from kvshortener.exceptions import (
    AllocationExhaustedError,
    BadConfigurationError,
    InvalidKeyFormatError,
    KeyTakenError,
)
from kvshortener.utils.shortener import generate_key
from kvshortener.utils.validators import is_valid_key


logger = logging.getLogger(__name__)


class KeyAllocator:
    """Generate or validate short keys against a mapping store.

    Attributes:
        dao (MappingBaseDAO):
            Store used for existence checks.
        key_length (int):
            Length of generated keys under normal conditions.
        max_attempts (int):
            Candidates tried per key length before widening.
        max_key_length (int):
            Widest key length tried before giving up.
    """

    def __init__(
        self,
        dao: MappingBaseDAO,
        key_length: int = KeyFormat.GENERATED_LENGTH,
        max_attempts: int = Allocation.MAX_ATTEMPTS,
        max_key_length: int = Allocation.MAX_KEY_LENGTH,
    ):
        if key_length < 1:
            raise BadConfigurationError(f'key_length must be at least 1 (given value: {key_length}).')
        if max_attempts < 1:
            raise BadConfigurationError(f'max_attempts must be at least 1 (given value: {max_attempts}).')
        if max_key_length < key_length:
            raise BadConfigurationError(f'max_key_length ({max_key_length}) must not be smaller than key_length ({key_length}).')

        self.dao = dao
        self.key_length = key_length
        self.max_attempts = max_attempts
        self.max_key_length = max_key_length

    def candidates(self) -> Iterator[str]:
        """Yield the bounded sequence of random candidate keys.

        Yields `max_attempts` keys of each length from `key_length` to
        `max_key_length`, then stops.
        """
        for length in range(self.key_length, self.max_key_length + 1):
            if length > self.key_length:
                logger.warning(
                    'Every %s-character candidate collided. Widening generated keys.',
                    length - 1,
                    extra={'keyLength': length, 'maxAttempts': self.max_attempts},
                )
            for _ in range(self.max_attempts):
                yield generate_key(length=length)

    def exhausted(self) -> AllocationExhaustedError:
        total = self.max_attempts * (self.max_key_length - self.key_length + 1)
        logger.error('Key allocation exhausted.', extra={'attempts': total, 'maxKeyLength': self.max_key_length})
        return AllocationExhaustedError(f'No free key found after {total} attempts (up to {self.max_key_length} characters).')

    def allocate(self) -> str:
        """Return a random key that doesn't exist in the store yet.

        Returns:
            str: a free key, `key_length` lowercase letters unless the
                 allocator had to widen.

        Raises:
            AllocationExhaustedError:
                If every candidate collided.
            DataStoreError:
                If the store is unavailable.
        """
        for candidate in self.candidates():
            if not self.dao.exists(candidate):
                return candidate
            logger.debug('Generated key collided with an existing mapping.', extra={'key': candidate})

        raise self.exhausted()

    def check_format(self, custom_key: str) -> str:
        if not is_valid_key(custom_key):
            raise InvalidKeyFormatError(f"Key {custom_key!r} must match {KeyFormat.CUSTOM_PATTERN}.")
        return custom_key

    def validate(self, custom_key: str) -> str:
        """Accept a caller-supplied key if it is well-formed and free.

        The format is checked before the store is touched.

        Args:
            custom_key (str):
                Requested key.

        Returns:
            str: custom_key, unchanged.

        Raises:
            InvalidKeyFormatError:
                If the key contains anything besides [a-z0-9] or is empty.
            KeyTakenError:
                If a mapping already exists under the key.
            DataStoreError:
                If the store is unavailable.
        """
        self.check_format(custom_key)
        if self.dao.exists(custom_key):
            raise KeyTakenError(f"Key '{custom_key}' is already taken.")
        return custom_key
