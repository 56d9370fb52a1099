import functools
import redis
from typing import TypeVar, Any
from collections.abc import Callable

from urlkeeper.dao.exceptions import StorageError


__all__ = ['handle_redis_errors']

F = TypeVar('F', bound=Callable[..., Any])


def _redis_location(client: redis.Redis) -> str:
    info = client.connection_pool.connection_kwargs
    return f'{info.get("host")}:{info.get("port")}/{info.get("db")}'


def handle_redis_errors[F](method: F) -> F:
    """Wrap Redis-interacting DAO methods to handle Redis failures

    Connectivity issues (connection refused, timeouts) and any other Redis
    command failure surface as StorageError. They are never retried here.

    Args:
        method (Callable[..., Any]):
            DAO method performing Redis operations which may raise redis.exceptions.RedisError.

    Returns:
        Callable[..., Any]:
            Wrapped method which raises StorageError on Redis failures.

    Example:
        >>> @handle_redis_errors
        ... def get_record(self, short_key):
        ...     return self.redis.get(short_key)
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            raise StorageError(f"Can't connect to Redis at {_redis_location(self.redis)}.") from e
        except redis.exceptions.RedisError as e:
            raise StorageError(f'Redis command failed at {_redis_location(self.redis)}: {e}') from e

    return wrapper
