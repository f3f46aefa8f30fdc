"""Redis client setup shared by the Redis-backed DAOs"""

import logging

import redis

from kvshortener.dao.redis.redis_key_schema import RedisKeySchema
from kvshortener.dao.redis.helpers import redis_location
from kvshortener.dao.exceptions import DataStoreError


logger = logging.getLogger(__name__)


class RedisClientMixin:
    """Give a DAO a Redis client (`self.redis`) and a key schema (`self.keys`).

    The client is either injected through `redis_client` or built from the
    `redis_*` parameters, which match the keys of a handler's "redis" config
    section once prefixed with `redis_`. Construction PINGs Redis, so a DAO
    that exists is a DAO that could reach its store.

    Raises:
        DataStoreError: if the initial PING fails.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_decode_responses: bool = True,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_socket_timeout: float | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        if redis_client is None:
            # AppConfig documents may carry port and db as strings
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
                socket_timeout=redis_socket_timeout,
            )
        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis. Returns False on failure when raise_error is False."""
        try:
            self.redis.ping()
        except redis.exceptions.RedisError as e:
            location = redis_location(self.redis)
            if raise_error:
                raise DataStoreError(f"Can't connect to Redis at {location}. Check the provided configuration parameters.") from e
            logger.warning('Redis healthcheck failed.', extra={'redisLocation': location, 'error': str(e)})
            return False
        return True
