import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing mapping records.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "kvshortener:prod" or "kvshortener:dev".
    """

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def mapping_key(self, key: str) -> str:
        return f'mappings:{key}'

    @prefix_key
    def mapping_pattern(self) -> str:
        return 'mappings:*'

    def short_key(self, redis_key: str) -> str:
        """Recover the short key from a full Redis key (inverse of mapping_key)."""
        namespace = self.mapping_key('')
        if not redis_key.startswith(namespace):
            raise ValueError(f"Redis key '{redis_key}' is outside the '{namespace}' namespace.")
        return redis_key[len(namespace) :]
