"""Short key generation utility

This module provides a helper function for generating random short keys
from a cryptographically strong random source.

Functions:
    generate_key(length=6, alphabet=string.ascii_lowercase):
        Generate a random key suitable for use as a URL slug.

Example:
    >>> from kvshortener.utils import generate_key
    >>> generate_key()
    'qhzmwa'
"""

import secrets

from kvshortener.constants import KeyFormat


def generate_key(length: int = KeyFormat.GENERATED_LENGTH, alphabet: str = KeyFormat.GENERATED_ALPHABET) -> str:
    """Generate a random short key.

    Each character is drawn independently and uniformly from the alphabet
    with secrets.choice(), so keys can't be predicted from earlier keys.

    Args:
        length (int, optional):
            Number of characters in the key.
            Defaults to 6.

        alphabet (str, optional):
            Characters to draw from.
            Defaults to the 26 lowercase Latin letters.

    Returns:
        str: A random key of exactly `length` characters.

    Example:
        >>> generate_key(length=6)
        'kdwpra'

    NOTE:
        - 6 characters over 26 letters give 26**6 (~3.1e8) keys. Collisions
          stay rare until the store holds around 1e4-1e5 mappings.
        - Uniqueness is not guaranteed here; see KeyAllocator.
    """
    if not isinstance(length, int) or isinstance(length, bool):
        raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
    if length <= 0:
        raise ValueError(f'Length must be a positive integer (given value: {length}).')
    if not isinstance(alphabet, str):
        raise TypeError(f'Alphabet must be of type string (given type: {type(alphabet)}).')
    if not alphabet:
        raise ValueError(f'Alphabet must be a non-empty string (given value: {alphabet!r}).')

    return ''.join(secrets.choice(alphabet) for _ in range(length))
