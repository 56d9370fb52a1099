"""Exceptions related to record store (DAO) operations.

Classes:
    DAOError:
        Generic base class for DAO-related exceptions.

    RecordNotFoundError:
        Raised when a MappingRecord is not found in the data store.

    RecordAlreadyExistsError:
        Raised when attempting to insert a MappingRecord under a short key that is taken.

    StorageError:
        Raised when the data store fails (e.g., connection issues, timeouts,
        aborted transactions, corrupt records).

Example:
    >>> from urlkeeper.dao.exceptions import RecordAlreadyExistsError
    >>> raise RecordAlreadyExistsError("Record with key 'abc123' already exists.")
    Traceback (most recent call last):
        ...
    urlkeeper.dao.exceptions.RecordAlreadyExistsError: Record with key 'abc123' already exists.
"""


class DAOError(Exception):
    """Generic base class for DAO-related exceptions."""

    error_code = 'dao:dao_error'


class RecordNotFoundError(DAOError):
    """Exception raised when a MappingRecord is not found in the data store."""

    error_code = 'dao:record_not_found_error'


class RecordAlreadyExistsError(DAOError):
    """Exception raised when a short key is already taken in the data store."""

    error_code = 'dao:record_already_exists_error'


class StorageError(DAOError):
    """Exception raised when there is an error in the data store.

    e.g. connection issues, timeouts, aborted transactions, corrupt records, etc.
    """

    error_code = 'dao:storage_error'
