from urlkeeper.dao.redis.redis_key_schema import RedisKeySchema
from urlkeeper.dao.redis.mixins import RedisClientMixin
from urlkeeper.dao.redis.record_redis_dao import RecordRedisDAO


__all__ = [
    'RedisKeySchema',
    'RedisClientMixin',
    'RecordRedisDAO',
]
