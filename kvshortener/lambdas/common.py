"""Wiring shared by the Lambda handlers

Functions:
    build_service(config) -> MappingService
        Construct the DAO, key allocator and mapping service for a handler's config.
    parse_json_body(event) -> dict
        Decode an API Gateway request body (plain or base64) into a dict.
"""

import base64
import json
import logging

from kvshortener.allocator import KeyAllocator
from kvshortener.constants import KeyFormat, Allocation
from kvshortener.dao.redis import MappingRedisDAO
from kvshortener.exceptions import BadConfigurationError
from kvshortener.service import MappingService
from kvshortener.types import LambdaConfiguration, LambdaEvent
from kvshortener.utils.config import app_prefix


logger = logging.getLogger(__name__)


def build_service(config: LambdaConfiguration) -> MappingService:
    """Build a MappingService from a handler config section (see load_config()).

    Raises:
        BadConfigurationError: if the active backend isn't supported or
            the allocator settings are invalid.
        DataStoreError: if the backing store fails its healthcheck.
    """
    backend = config.get('active_backend', 'redis')
    if backend != 'redis':
        raise BadConfigurationError(f"Unsupported mapping store backend '{backend}'.")

    settings = config.get('allocator', {})
    atomic = settings.get('atomic', False)
    if not isinstance(atomic, bool):
        raise BadConfigurationError(f'allocator.atomic must be a JSON boolean (given value: {atomic!r}).')

    logger.debug('Using Redis as the mapping store.', extra={'prefix': app_prefix()})
    redis_config = {f'redis_{k}': v for k, v in config.get('redis', {}).items()}
    dao = MappingRedisDAO(**redis_config, prefix=app_prefix())

    allocator = KeyAllocator(
        dao,
        key_length=int(settings.get('key_length', KeyFormat.GENERATED_LENGTH)),
        max_attempts=int(settings.get('max_attempts', Allocation.MAX_ATTEMPTS)),
        max_key_length=int(settings.get('max_key_length', Allocation.MAX_KEY_LENGTH)),
    )
    return MappingService(dao, allocator=allocator, atomic=atomic)


def parse_json_body(event: LambdaEvent) -> dict:
    """Decode the request body into a dict

    Raises:
        ValueError: if the body isn't a JSON object (json.JSONDecodeError is a ValueError).
    """
    raw = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        raw = base64.b64decode(raw).decode('utf-8')

    body = json.loads(raw)
    if not isinstance(body, dict):
        raise ValueError('Request body must be a JSON object.')
    return body
