"""Unit tests for the RedisKeySchema class in redis_key_schema.py.

Test coverage includes:

1. Record key generation
   - Ensures url_key() generates correct Redis keys for a given short key.

2. Prefix behavior
   - Confirms keys are not prefixed when no prefix is provided.
   - Confirms keys are correctly prefixed when a valid prefix is provided.

3. Invalid prefix types
   - Ensures improper prefix types raise TypeError.
"""

import pytest

from urlkeeper.dao.redis.redis_key_schema import RedisKeySchema


# -------------------------------
# 1. Record key generation
# -------------------------------


@pytest.mark.parametrize(
    'short_key, expected',
    [
        ('abc123', 'urls:abc123'),
        ('XyZ789', 'urls:XyZ789'),
        ('my-custom-key', 'urls:my-custom-key'),
    ],
)
def test_url_key(short_key, expected):
    """Ensure url_key() generates valid Redis keys."""
    assert RedisKeySchema().url_key(short_key) == expected


# -------------------------------
# 2. Prefix behavior
# -------------------------------


def test_no_key_prefix_by_default():
    """Ensure keys are not prefixed when no prefix is provided."""
    keys = RedisKeySchema()
    assert keys.prefix is None
    assert keys.url_key('abc123') == 'urls:abc123'


def test_custom_key_prefix():
    """Ensure keys are prefixed when a prefix is provided."""
    keys = RedisKeySchema(prefix='urlkeeper:prod')
    assert keys.url_key('abc123') == 'urlkeeper:prod:urls:abc123'


# -------------------------------
# 3. Invalid prefix types
# -------------------------------


@pytest.mark.parametrize('prefix', [123, b'app:dev', ['app']])
def test_invalid_prefix_type(prefix):
    """Ensure non-string prefixes raise TypeError."""
    with pytest.raises(TypeError, match='Prefix must be of type string'):
        RedisKeySchema(prefix=prefix)
