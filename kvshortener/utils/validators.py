"""Input validation for mapping creation

Functions:
    is_valid_url(url) -> bool
        True if url is an absolute http(s) URL with a network location.
    is_valid_key(key) -> bool
        True if key consists only of lowercase ASCII letters and digits.

Example:
    >>> is_valid_url('https://example.com/path')
    True
    >>> is_valid_url('example.com')
    False
    >>> is_valid_key('docs2024')
    True
    >>> is_valid_key('Docs-2024')
    False
"""

import re
from urllib.parse import urlparse

from kvshortener.constants import KeyFormat


KEY_RE = re.compile(KeyFormat.CUSTOM_PATTERN)
URL_SCHEMES = frozenset({'http', 'https'})


def is_valid_url(url: str) -> bool:
    if not isinstance(url, str) or not url or url != url.strip():
        return False
    try:
        components = urlparse(url)
        # Accessing .port validates the port component
        components.port
    except ValueError:
        return False
    return components.scheme in URL_SCHEMES and bool(components.hostname)


def is_valid_key(key: str) -> bool:
    # fullmatch: '$' alone would accept a trailing newline
    return isinstance(key, str) and KEY_RE.fullmatch(key) is not None
