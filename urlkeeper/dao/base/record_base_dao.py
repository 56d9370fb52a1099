"""Abstract base class for mapping record data access objects (DAOs).

This class establishes a consistent contract for all record store implementations,
regardless of the underlying storage mechanism (e.g., Redis, in-process memory).

Responsibilities:
    - Provide an interface for reading, atomically inserting and atomically
      updating MappingRecord objects.
    - Standardize error handling across multiple data store implementations.
    - Enforce a consistent API for use by the MappingService.

Example:
    Typical usage with a datastore-specific implementation:

        >>> from urlkeeper.models import MappingRecord
        >>> from urlkeeper.dao.redis import RecordRedisDAO

        >>> dao = RecordRedisDAO(...)

        >>> record = MappingRecord(
        ...     short_key="a1b2c3",
        ...     original_url="https://example.com/blog/article-123",
        ...     expires_at=datetime(2099, 1, 1, tzinfo=UTC),
        ... )
        >>> dao.put_if_absent(record)

        >>> dao.compare_and_update("a1b2c3", lambda r: r.clicked()).clicks
        1

        >>> dao.get("a1b2c3").clicks
        1
"""

from abc import ABC, abstractmethod
from collections.abc import Callable

from urlkeeper.models import MappingRecord


class RecordBaseDAO(ABC):
    """Interface for mapping record data access objects (DAOs).

    Methods:
        get(short_key: str, **kwargs) -> MappingRecord | None:
            Retrieve the latest committed record for a short key.
            Returns None if the key is absent.
            Raises StorageError on connection or read failure.

        put_if_absent(record: MappingRecord, **kwargs) -> RecordBaseDAO:
            Atomically insert a record only if its short key is absent.
            Raises RecordAlreadyExistsError if the short key is taken.
            Raises StorageError on connection or write failure.

        compare_and_update(short_key: str, update_fn: Callable, **kwargs) -> MappingRecord:
            Atomically read a record, transform it and write the result back.
            Raises RecordNotFoundError if the short key is absent.
            Raises StorageError on connection, write or transaction failure.

    Subclassing:
        Datastore-specific implementations (e.g., RecordRedisDAO or
        RecordMemoryDAO) must extend this class and implement all
        abstract methods.

    NOTE:
        - Records are never deleted by the DAO. Expiration is enforced by the
          caller at read time.
    """

    @abstractmethod
    def get(self, short_key: str, **kwargs) -> MappingRecord | None:
        """Retrieve a MappingRecord from the data store by its short key.

        Args:
            short_key (str):
                The short key of the MappingRecord to be retrieved.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            MappingRecord | None: The MappingRecord instance if found, otherwise None.

        Raises:
            StorageError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def put_if_absent(self, record: MappingRecord, **kwargs) -> 'RecordBaseDAO':
        """Insert a new MappingRecord into the data store unless its short key is taken.

        The existence check and the write are a single atomic operation. An existing
        record is never overwritten.

        Args:
            record (MappingRecord):
                The MappingRecord instance to be inserted.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            RecordBaseDAO: self (for method chaining)

        Raises:
            RecordAlreadyExistsError:
                If a MappingRecord with the same short key already exists.

            StorageError:
                If there is an error in the data store.
        """
        pass

    @abstractmethod
    def compare_and_update(
        self,
        short_key: str,
        update_fn: Callable[[MappingRecord], MappingRecord],
        **kwargs,
    ) -> MappingRecord:
        """Atomically read, transform and write back a MappingRecord.

        NOTE: `update_fn` must be a quick, pure function of the record. It may be
              called more than once under optimistic concurrency; only the result
              of the final call is committed. If it raises, nothing is written and
              the exception propagates unchanged.

        Args:
            short_key (str):
                The short key of the MappingRecord to update.

            update_fn (Callable[[MappingRecord], MappingRecord]):
                Transformation applied to the current record.

            **kwargs:
                Additional keyword arguments, used by data store.

        Returns:
            MappingRecord: the committed record.

        Raises:
            RecordNotFoundError:
                If no MappingRecord with the given short key exists.

            StorageError:
                If there is an error in the data store.
        """
        pass
