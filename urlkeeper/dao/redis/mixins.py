"""Shared Redis connection handling for Redis-backed DAOs.

Classes:
    RedisClientMixin:
        Builds (or adopts) a Redis client, namespaces keys and verifies the
        connection with a PING before the DAO is handed out.

Connection parameters arrive from the function configuration with a
`redis_` prefix, e.g. a `redis:` section

    redis:
      host: localhost
      port: 6379
      db: 0
      ssl: false

is passed as `RecordRedisDAO(redis_host='localhost', redis_port=6379, ...)`.
A `redis_url` (redis://, rediss://, unix://) takes precedence over the
individual host/port/db parameters.

Example:
    >>> dao = RecordRedisDAO(redis_url='redis://localhost:6379/0', prefix='urlkeeper:dev')
    >>> dao.keys.url_key('abc123')
    'urlkeeper:dev:urls:abc123'
"""

import redis

from urlkeeper.dao.redis.redis_key_schema import RedisKeySchema
from urlkeeper.dao.exceptions import StorageError


class RedisClientMixin:
    """Redis client setup and healthcheck for Redis-backed DAOs

    Attributes:
        redis (redis.Redis):
            Client used for every command. Responses are decoded to str by default.
        keys (RedisKeySchema):
            Key builder carrying the namespace prefix.

    Raises:
        StorageError:
            On construction, if Redis does not answer the healthcheck PING.
    """

    def __init__(
        self,
        redis_host: str = 'localhost',
        redis_port: int | str = 6379,
        redis_db: int | str = 0,
        redis_username: str | None = None,
        redis_password: str | None = None,
        redis_ssl: bool = False,
        redis_socket_timeout: float | None = None,
        redis_decode_responses: bool = True,
        redis_url: str | None = None,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ):
        if redis_client is None:
            redis_client = self._connect(
                url=redis_url,
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                username=redis_username,
                password=redis_password,
                ssl=redis_ssl,
                socket_timeout=redis_socket_timeout,
                decode_responses=redis_decode_responses,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    @staticmethod
    def _connect(url: str | None, **params) -> redis.Redis:
        if url is not None:
            # URL carries host, port, db, credentials and TLS
            return redis.Redis.from_url(
                url,
                socket_timeout=params['socket_timeout'],
                decode_responses=params['decode_responses'],
            )
        return redis.Redis(**params)

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis

        Returns:
            bool: True if Redis answered, False if it didn't and raise_error is False.

        Raises:
            StorageError:
                If Redis is unreachable and raise_error is True.
        """
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if not raise_error:
                return False
            info = self.redis.connection_pool.connection_kwargs
            location = f'{info.get("host")}:{info.get("port")}/{info.get("db")}'
            raise StorageError(f"Can't connect to Redis at {location}. Check the provided configuration parameters.") from e
        return True
