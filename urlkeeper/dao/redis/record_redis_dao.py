"""Data Access Object (DAO) implementation for mapping records in Redis

This module provides a Redis-based implementation of RecordBaseDAO. Each record
is stored as a JSON string under `[<prefix>:]urls:<short key>`.

Responsibilities:
    - Read records by short key;
    - Insert records atomically without ever overwriting (SET NX);
    - Apply read-modify-write updates atomically (WATCH/MULTI/EXEC);
    - Raise appropriate DAO exceptions on conflicts and Redis failures.

Classes:
    RecordRedisDAO:
        DAO for storing and retrieving MappingRecord in a Redis datastore.

Example:
    >>> from urlkeeper.models import MappingRecord
    >>> from urlkeeper.dao.redis import RecordRedisDAO

    >>> dao = RecordRedisDAO(prefix="app:dev")

    >>> record = MappingRecord(
    ...     short_key="abc123",
    ...     original_url="https://example.com/page",
    ...     expires_at=datetime(2099, 1, 1, tzinfo=UTC),
    ... )
    >>> dao.put_if_absent(record)
    <RecordRedisDAO>

    >>> dao.compare_and_update("abc123", lambda r: r.clicked()).clicks
    1
"""

import logging
from collections.abc import Callable

import redis
from beartype import beartype

from urlkeeper.constants import Store
from urlkeeper.models import MappingRecord, serialize_record, deserialize_record
from urlkeeper.dao.base import RecordBaseDAO
from urlkeeper.dao.redis.mixins import RedisClientMixin
from urlkeeper.dao.redis.helpers import handle_redis_errors
from urlkeeper.dao.exceptions import RecordAlreadyExistsError, RecordNotFoundError, StorageError


logger = logging.getLogger(__name__)


class RecordRedisDAO(RedisClientMixin, RecordBaseDAO):
    """Redis-based Data Access Object (DAO) for managing mapping records

    This class implements the RecordBaseDAO interface using Redis as a data store.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the Redis datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
        max_transaction_retries (int):
            Optimistic transaction attempts before compare_and_update gives up.

    Methods:
        get(short_key: str, **kwargs) -> MappingRecord | None:
            Retrieve a record by short key, None if absent.

        put_if_absent(record: MappingRecord, **kwargs) -> RecordRedisDAO:
            Insert a record unless its short key is taken.
            Raises RecordAlreadyExistsError when the short key exists.

        compare_and_update(short_key: str, update_fn: Callable, **kwargs) -> MappingRecord:
            Atomically transform a record.
            Raises RecordNotFoundError when the short key doesn't exist.
            Raises StorageError when concurrent writers keep aborting the transaction.

        All methods raise StorageError on Redis failures.
    """

    def __init__(self, *args, max_transaction_retries: int = Store.MAX_TRANSACTION_RETRIES, **kwargs):
        if max_transaction_retries < 1:
            raise ValueError(f'max_transaction_retries must be at least 1 (given value: {max_transaction_retries}).')
        super().__init__(*args, **kwargs)
        self.max_transaction_retries = max_transaction_retries

    @handle_redis_errors
    @beartype
    def get(self, short_key: str, **kwargs) -> MappingRecord | None:
        """Retrieve a stored record by short key

        A single GET reads the whole record, so partially written records are never observed.

        Example:
            >>> dao.get('abc123')
            MappingRecord(short_key='abc123', original_url='https://example.com', ...)
        """
        blob = self.redis.get(self.keys.url_key(short_key))
        if blob is None:
            return None
        return deserialize_record(short_key, blob)

    @handle_redis_errors
    @beartype
    def put_if_absent(self, record: MappingRecord, **kwargs) -> 'RecordRedisDAO':
        """Insert a record into Redis unless its short key is taken

        The existence check and the write are one `SET ... NX` command, so two
        concurrent callers can never both claim the same short key.

        Raises:
            RecordAlreadyExistsError:
                If a record with the same short key already exists.
            StorageError:
                If a Redis failure occurs.
        """
        created = self.redis.set(self.keys.url_key(record.short_key), serialize_record(record), nx=True)
        if not created:
            raise RecordAlreadyExistsError(f"Record with key '{record.short_key}' already exists.")
        return self

    @handle_redis_errors
    @beartype
    def compare_and_update(
        self,
        short_key: str,
        update_fn: Callable[[MappingRecord], MappingRecord],
        **kwargs,
    ) -> MappingRecord:
        """Atomically transform a stored record

        Uses an optimistic Redis transaction:

            WATCH <key>
            GET <key>                   -> current record, passed to update_fn
            MULTI
            SET <key> <updated record>
            EXEC                        -> aborted if <key> changed since WATCH

        An aborted EXEC means another writer committed first; the whole
        read-transform-write cycle is retried against the fresh value, so
        no update is ever lost.

        Raises:
            RecordNotFoundError:
                If the short key does not exist.
            StorageError:
                If the transaction keeps aborting after `max_transaction_retries`
                attempts, or a Redis failure occurs.
        """
        key = self.keys.url_key(short_key)

        with self.redis.pipeline(transaction=True) as pipe:
            for attempt in range(1, self.max_transaction_retries + 1):
                try:
                    pipe.watch(key)
                    blob = pipe.get(key)
                    if blob is None:
                        raise RecordNotFoundError(f"Record with key '{short_key}' not found.")

                    updated = update_fn(deserialize_record(short_key, blob))
                    if updated.short_key != short_key:
                        raise ValueError(f"update_fn must not change the short key ('{short_key}' -> '{updated.short_key}').")

                    pipe.multi()
                    pipe.set(key, serialize_record(updated))
                    pipe.execute()
                    return updated
                except redis.exceptions.WatchError:
                    logger.debug(
                        'Concurrent write detected, retrying transaction.',
                        extra={'short_key': short_key, 'attempt': attempt},
                    )

        raise StorageError(f"Transaction on key '{short_key}' aborted {self.max_transaction_retries} times by concurrent writers.")
