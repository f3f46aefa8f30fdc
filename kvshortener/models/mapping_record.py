from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class MappingRecord:
    """Represent a short key to URL mapping.

    Records are immutable once created. The DAO hands out fresh copies,
    never references to its own stored state.

    Attributes:
        key (str):
            The short identifier, e.g. 'abcxyz' (generated) or 'docs2024' (custom).
        url (str):
            The absolute URL the key redirects to.
        created_at (datetime):
            Creation time (timezone-aware, UTC). Assigned once, never mutated.

    Example:
        >>> from datetime import datetime, UTC
        >>> record = MappingRecord(
        ...     key='abcxyz',
        ...     url='https://example.com/path',
        ...     created_at=datetime(2025, 10, 15, 12, 0, 0, tzinfo=UTC),
        ... )
        >>> record.url
        'https://example.com/path'
    """

    key: str
    url: str
    created_at: datetime
