"""Unit tests for handle_redis_connection_error decorator.

This test suite verifies that the decorator properly handles Redis
connection failures and preserves the original method's behavior.

Test coverage includes:
    1. Normal function execution
       - Ensures the wrapped method executes and returns its result.
    2. Connection error handling
       - Ensures Redis connection and timeout errors are converted into DataStoreError.
       - Ensures Redis error replies (OOM, READONLY, ...) are converted into DataStoreError.
    3. Function metadata preservation
       - Confirms functools.wraps preserves the original function's name and docstring.
"""

import pytest
import redis
from unittest.mock import MagicMock

from kvshortener.dao.redis.helpers import handle_redis_connection_error, redis_location
from kvshortener.dao.exceptions import DataStoreError


class DummyDAO:
    def __init__(self, error: Exception | None = None):
        self.redis = MagicMock()
        self.redis.connection_pool.connection_kwargs = {
            'host': 'localhost',
            'port': 6379,
            'db': 0,
        }
        self.error = error

    @handle_redis_connection_error
    def call(self):
        if self.error is not None:
            raise self.error
        return 'OK'


# -------------------------------
# 1. Normal execution
# -------------------------------


def test_decorator_allows_normal_execution():
    """Ensure the wrapped function executes normally when no error occurs."""
    assert DummyDAO().call() == 'OK'


def test_redis_location():
    """Ensure the Redis endpoint is described as host:port/db."""
    assert redis_location(DummyDAO().redis) == 'localhost:6379/0'


# -------------------------------
# 2. Connection error handling
# -------------------------------


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ConnectionError('Cannot connect'),
        redis.exceptions.TimeoutError('Timed out'),
    ],
)
def test_decorator_transforms_redis_connectivity_errors(error):
    """Ensure Redis connectivity errors are re-raised as DataStoreError."""
    with pytest.raises(DataStoreError, match="Can't connect to Redis at localhost:6379/0.") as exc_info:
        DummyDAO(error).call()

    assert exc_info.value.__cause__ is error


@pytest.mark.parametrize(
    'error',
    [
        redis.exceptions.ResponseError('OOM command not allowed when used memory > maxmemory.'),
        redis.exceptions.ReadOnlyError("READONLY You can't write against a read only replica."),
        redis.exceptions.RedisError('Unknown failure'),
    ],
)
def test_decorator_transforms_redis_error_replies(error):
    """Ensure commands Redis refuses are re-raised as DataStoreError."""
    with pytest.raises(DataStoreError, match="Redis at localhost:6379/0 failed the command") as exc_info:
        DummyDAO(error).call()

    assert exc_info.value.__cause__ is error


# -------------------------------
# 3. Function metadata preservation
# -------------------------------


def test_decorator_preserves_function_metadata():
    """Ensure function name and docstring are preserved via functools.wraps."""

    @handle_redis_connection_error
    def sample_function():
        """This is a sample docstring."""
        return 'OK'

    assert sample_function.__name__ == 'sample_function'
    assert 'sample docstring' in sample_function.__doc__
