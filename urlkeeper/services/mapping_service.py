"""Mapping service: short key allocation, expiration and click counting.

The service owns no state of its own. Every read and write goes through the
injected record store's atomic primitives, so any number of service instances
(threads, Lambda invocations) can safely share one store.

Classes:
    Redirect:
        Outcome of a successful redirect (target URL and updated click count).

    MappingService:
        shorten(), redirect() and lookup() operations over a RecordBaseDAO.

Example:
    >>> from urlkeeper.dao.memory import RecordMemoryDAO
    >>> service = MappingService(RecordMemoryDAO())
    >>> key = service.shorten('https://example.com', expiration='2099-01-01')
    >>> service.redirect(key)
    Redirect(original_url='https://example.com', clicks=1)
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, UTC

from beartype import beartype

from urlkeeper.constants import Expiration, Shortener
from urlkeeper.models import MappingRecord
from urlkeeper.dao.base import RecordBaseDAO
from urlkeeper.dao.exceptions import RecordAlreadyExistsError, RecordNotFoundError
from urlkeeper.exceptions import (
    BadConfigurationError,
    ExpiredError,
    InvalidDateError,
    KeyConflictError,
    KeyGenerationExhaustedError,
    NotFoundError,
    ValidationError,
)
from urlkeeper.types import ShortenerSettings
from urlkeeper.utils.shortener import KeyGenerator


logger = logging.getLogger(__name__)

_DATE_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2}')


@dataclass(frozen=True)
class Redirect:
    original_url: str
    clicks: int


class MappingService:
    """Orchestrate short key allocation, record creation and redirects

    Args:
        dao (RecordBaseDAO):
            Record store shared by all callers.
        key_generator (KeyGenerator | None):
            Source of candidate keys. Defaults to a new KeyGenerator().
        max_key_attempts (int):
            Generate-and-insert rounds before giving up on a generated key. Defaults to 10.
        default_expiration (timedelta):
            Lifetime of records created without an expiration date. Defaults to 7 days.
    """

    def __init__(
        self,
        dao: RecordBaseDAO,
        key_generator: KeyGenerator | None = None,
        max_key_attempts: int = Shortener.MAX_KEY_ATTEMPTS,
        default_expiration: timedelta = Expiration.DEFAULT_TTL,
    ):
        if max_key_attempts < 1:
            raise ValueError(f'max_key_attempts must be at least 1 (given value: {max_key_attempts}).')
        if default_expiration <= timedelta(0):
            raise ValueError(f'default_expiration must be positive (given value: {default_expiration}).')

        self.dao = dao
        self.key_generator = key_generator or KeyGenerator()
        self.max_key_attempts = max_key_attempts
        self.default_expiration = default_expiration

    @classmethod
    def from_settings(cls, dao: RecordBaseDAO, settings: ShortenerSettings | None = None) -> 'MappingService':
        """Build a service from the `shortener` configuration section

        Recognized keys: key_length, salt, max_key_attempts, default_expiration_days.
        Missing keys fall back to the defaults.

        Raises:
            BadConfigurationError:
                If a setting has the wrong type or an out-of-range value.
        """
        settings = settings or {}
        try:
            key_generator = KeyGenerator(
                length=settings.get('key_length', Shortener.KEY_LENGTH),
                salt=settings.get('salt', Shortener.DEFAULT_SALT),
            )
            return cls(
                dao,
                key_generator=key_generator,
                max_key_attempts=int(settings.get('max_key_attempts', Shortener.MAX_KEY_ATTEMPTS)),
                default_expiration=timedelta(days=float(settings.get('default_expiration_days', Expiration.DEFAULT_TTL.days))),
            )
        except (TypeError, ValueError) as e:
            raise BadConfigurationError(f'Invalid shortener settings: {e}') from e

    @beartype
    def shorten(self, original_url: str, custom_key: str | None = None, expiration: str | None = None) -> str:
        """Store a new mapping and return its short key

        Empty `custom_key` / `expiration` strings count as not supplied.

        Args:
            original_url (str):
                Redirect target.
            custom_key (str | None):
                Caller-chosen short key. A random key is generated when omitted.
            expiration (str | None):
                Expiration date as YYYY-MM-DD (midnight UTC). Defaults to now + default_expiration.

        Returns:
            str: the assigned short key.

        Raises:
            ValidationError:
                If original_url is empty.
            InvalidDateError:
                If expiration is not a valid YYYY-MM-DD date.
            KeyConflictError:
                If custom_key is already taken. The existing record is left untouched.
            KeyGenerationExhaustedError:
                If no free generated key was found within max_key_attempts.
            StorageError:
                If the record store fails.
        """
        if not original_url.strip():
            raise ValidationError('URL is required')

        expires_at = self._resolve_expiration(expiration)

        if custom_key:
            record = MappingRecord(short_key=custom_key, original_url=original_url, expires_at=expires_at)
            try:
                self.dao.put_if_absent(record)
            except RecordAlreadyExistsError as e:
                logger.info('Custom key already taken.', extra={'short_key': custom_key})
                raise KeyConflictError(f"Custom key '{custom_key}' already exists.") from e

            logger.info('Short URL created.', extra={'short_key': custom_key, 'custom_key': True})
            return custom_key

        return self._insert_with_generated_key(original_url, expires_at)

    @beartype
    def redirect(self, short_key: str) -> Redirect:
        """Resolve a short key and count the click

        The expiration check runs inside the store's atomic update against the
        same read that the increment is applied to. An expired record is never
        written.

        Raises:
            NotFoundError:
                If the short key is unknown.
            ExpiredError:
                If the record is at or past its expiration instant.
            StorageError:
                If the record store fails.
        """

        def click(record: MappingRecord) -> MappingRecord:
            if record.is_expired(datetime.now(UTC)):
                raise ExpiredError(f"Short URL '{short_key}' expired at {record.expires_at.isoformat()}.")
            return record.clicked()

        try:
            updated = self.dao.compare_and_update(short_key, click)
        except RecordNotFoundError as e:
            raise NotFoundError(f"Short URL '{short_key}' not found.") from e

        logger.debug('Click recorded.', extra={'short_key': short_key, 'clicks': updated.clicks})
        return Redirect(original_url=updated.original_url, clicks=updated.clicks)

    @beartype
    def lookup(self, short_key: str) -> MappingRecord:
        """Return the stored record without counting a click (expired records included)

        Raises:
            NotFoundError:
                If the short key is unknown.
        """
        record = self.dao.get(short_key)
        if record is None:
            raise NotFoundError(f"Short URL '{short_key}' not found.")
        return record

    def _resolve_expiration(self, expiration: str | None) -> datetime:
        if not expiration:
            return datetime.now(UTC) + self.default_expiration

        if not _DATE_PATTERN.fullmatch(expiration):
            raise InvalidDateError(f'Invalid date format (YYYY-MM-DD): {expiration!r}')
        try:
            parsed = datetime.strptime(expiration, Expiration.DATE_FORMAT)
        except ValueError as e:
            raise InvalidDateError(f'Invalid date format (YYYY-MM-DD): {expiration!r}') from e
        return parsed.replace(tzinfo=UTC)

    def _insert_with_generated_key(self, original_url: str, expires_at: datetime) -> str:
        for attempt in range(1, self.max_key_attempts + 1):
            short_key = self.key_generator.generate()
            record = MappingRecord(short_key=short_key, original_url=original_url, expires_at=expires_at)
            try:
                self.dao.put_if_absent(record)
            except RecordAlreadyExistsError:
                logger.warning(
                    'Generated key collided with an existing record, retrying.',
                    extra={'short_key': short_key, 'attempt': attempt},
                )
                continue

            logger.info('Short URL created.', extra={'short_key': short_key, 'attempts': attempt})
            return short_key

        raise KeyGenerationExhaustedError(f'No free short key found after {self.max_key_attempts} attempts.')
