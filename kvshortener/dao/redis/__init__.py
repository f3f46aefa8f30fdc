from kvshortener.dao.redis.redis_key_schema import RedisKeySchema
from kvshortener.dao.redis.mixins import RedisClientMixin
from kvshortener.dao.redis.mapping_redis_dao import MappingRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'MappingRedisDAO',
]
