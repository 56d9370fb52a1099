"""Mapping record model and its storage serialization.

Records are stored as compact JSON objects under their short key:

    {"original_url": "https://example.com", "expires_at": "2099-01-01T00:00:00.000000Z", "clicks": 3}

The short key itself is not part of the stored value; it is the storage key.

Functions:
    serialize_record(record: MappingRecord) -> str
        Encode a record into its stored JSON representation.
    deserialize_record(short_key: str, blob: str | bytes) -> MappingRecord
        Decode a stored JSON representation back into a record.
"""

import json
from dataclasses import dataclass, replace
from datetime import datetime, UTC

from urlkeeper.dao.exceptions import StorageError


# fmt: off
@dataclass(frozen=True)
class MappingRecord:
    short_key: str                      # Unique short identifier (storage key)
    original_url: str                   # Redirect target
    expires_at: datetime                # Redirects are refused at or after this instant
    clicks: int = 0                     # Successful redirects so far
    # fmt: on

    def __post_init__(self):
        if self.expires_at.tzinfo is None:  # naive timestamps are UTC
            object.__setattr__(self, 'expires_at', self.expires_at.replace(tzinfo=UTC))

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now if now is not None else datetime.now(UTC)
        return now >= self.expires_at

    def clicked(self) -> 'MappingRecord':
        return replace(self, clicks=self.clicks + 1)


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec='microseconds').replace('+00:00', 'Z')


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def serialize_record(record: MappingRecord) -> str:
    """Encode a record into its stored JSON representation

    Args:
        record (MappingRecord):
            The record to encode.

    Returns:
        str: compact JSON object with `original_url`, `expires_at` and `clicks`.

    Example:
        >>> serialize_record(MappingRecord('abc123', 'https://example.com', datetime(2099, 1, 1, tzinfo=UTC)))
        '{"original_url":"https://example.com","expires_at":"2099-01-01T00:00:00.000000Z","clicks":0}'
    """
    payload = {
        'original_url': record.original_url,
        'expires_at': _format_timestamp(record.expires_at),
        'clicks': record.clicks,
    }
    return json.dumps(payload, separators=(',', ':'), ensure_ascii=False)


def deserialize_record(short_key: str, blob: str | bytes) -> MappingRecord:
    """Decode a stored JSON representation back into a record

    Args:
        short_key (str):
            The storage key the blob was read from.
        blob (str | bytes):
            Stored JSON representation.

    Returns:
        MappingRecord: the decoded record.

    Raises:
        StorageError:
            If the stored value is not a well-formed record (the store content is corrupt).
    """
    try:
        payload = json.loads(blob)
        original_url = payload['original_url']
        expires_at = _parse_timestamp(payload['expires_at'])
        clicks = payload['clicks']
    except (KeyError, TypeError, ValueError) as e:
        raise StorageError(f"Corrupt record stored under key '{short_key}'.") from e

    if not isinstance(original_url, str) or isinstance(clicks, bool) or not isinstance(clicks, int) or clicks < 0:
        raise StorageError(f"Corrupt record stored under key '{short_key}'.")

    return MappingRecord(
        short_key=short_key,
        original_url=original_url,
        expires_at=expires_at,
        clicks=clicks,
    )
