"""Unit tests for the shorten_url AWS Lambda handler.

Verify the handler responds with proper plain-text HTTP responses, validates
the request body and interacts correctly with the MappingService.

Test coverage includes:

1. Successful shortening
   - Ensures form, JSON and base64-encoded bodies return HTTP 200 with the short URL.
   - Ensures custom keys and expiration dates are honored.

2. Invalid requests
   - Ensures non-POST requests return HTTP 405.
   - Ensures missing URLs, invalid dates, taken custom keys and malformed bodies return HTTP 400.

3. Server errors
   - Ensures storage failures and exhausted key generation return HTTP 500.
   - Ensures configuration failures return HTTP 500.
   - Ensures unexpected errors return HTTP 500 when deployed and propagate locally.

Fixtures:
    - `event`: factory building API Gateway POST events.
    - `context`: mock AWS Lambda context object.
    - `config`: mock function configuration.
    - `dao`: in-memory record store standing in for Redis.
    - `_patch_lambda_dependencies`: autouse fixture patching app dependencies.
"""

import base64
import json
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest

from urlkeeper.lambdas.shorten_url import app
from urlkeeper.dao.base import RecordBaseDAO
from urlkeeper.dao.memory import RecordMemoryDAO
from urlkeeper.dao.exceptions import RecordAlreadyExistsError
from urlkeeper.exceptions import ConfigurationError, StorageError
from urlkeeper.models import MappingRecord


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture()
def event():
    def _event(body='', method='POST', headers=None, base64_encoded=False):
        return {
            'resource': '/shorten',
            'path': '/shorten',
            'httpMethod': method,
            'headers': headers or {'Content-Type': 'application/x-www-form-urlencoded'},
            'body': body,
            'isBase64Encoded': base64_encoded,
            'requestContext': {'domainName': 'short.example.com', 'stage': 'Prod'},
        }

    return _event


@pytest.fixture()
def context():
    class _Context:
        function_name = 'shorten_url'

    return _Context()


@pytest.fixture()
def config():
    return {
        'redis': {'host': 'redis.test', 'port': 6379, 'db': 0},
        'shortener': {'key_length': 6, 'max_key_attempts': 10, 'default_expiration_days': 7},
    }


@pytest.fixture()
def dao():
    return RecordMemoryDAO()


@pytest.fixture(autouse=True)
def _patch_lambda_dependencies(monkeypatch, config, dao):
    """Automatically patch Lambda dependencies for all tests."""
    monkeypatch.delenv('APP_ENV', raising=False)
    monkeypatch.delenv('AWS_SAM_LOCAL', raising=False)
    monkeypatch.setattr(app, 'load_config', lambda *a, **kw: config)
    monkeypatch.setattr(app, 'RecordRedisDAO', lambda *a, **kw: dao)


def short_key_from(response):
    return response['body'].removeprefix('Short URL: https://short.example.com/')


# -------------------------------
# 1. Successful shortening
# -------------------------------


def test_lambda_handler(event, context, dao):
    """Ensure a form-encoded URL is shortened (HTTP 200)."""
    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com%2Fblog%3Fid%3D1'), context)

    assert response['statusCode'] == 200
    assert response['headers']['Content-Type'] == 'text/plain; charset=utf-8'
    assert response['body'].startswith('Short URL: https://short.example.com/')

    short_key = short_key_from(response)
    assert len(short_key) == 6
    assert dao.get(short_key).original_url == 'https://example.com/blog?id=1'


def test_lambda_handler_with_custom_key_and_expiration(event, context, dao):
    """Ensure custom keys and expiration dates are honored."""
    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com&custom_key=my-link&expiration=2099-12-31'), context)

    assert response['statusCode'] == 200
    assert response['body'] == 'Short URL: https://short.example.com/my-link'
    assert dao.get('my-link').expires_at == datetime(2099, 12, 31, tzinfo=UTC)


def test_lambda_handler_with_blank_optional_fields(event, context, dao):
    """Ensure blank custom_key / expiration fields are ignored."""
    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com&custom_key=&expiration='), context)

    assert response['statusCode'] == 200
    assert len(short_key_from(response)) == 6


def test_lambda_handler_with_json_body(event, context, dao):
    """Ensure JSON bodies are accepted when declared by Content-Type."""
    body = json.dumps({'url': 'https://example.com', 'custom_key': 'json-key'})
    response = app.lambda_handler(event(body, headers={'content-type': 'application/json; charset=utf-8'}), context)

    assert response['statusCode'] == 200
    assert response['body'] == 'Short URL: https://short.example.com/json-key'


def test_lambda_handler_with_base64_body(event, context, dao):
    """Ensure base64-encoded bodies are decoded first."""
    body = base64.b64encode(b'url=https%3A%2F%2Fexample.com&custom_key=b64-key').decode('ascii')
    response = app.lambda_handler(event(body, base64_encoded=True), context)

    assert response['statusCode'] == 200
    assert response['body'] == 'Short URL: https://short.example.com/b64-key'


# -------------------------------
# 2. Invalid requests
# -------------------------------


@pytest.mark.parametrize('method', ['GET', 'PUT', 'DELETE'])
def test_lambda_handler_with_invalid_method(event, context, dao, method):
    """Ensure non-POST requests return HTTP 405."""
    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com', method=method), context)

    assert response['statusCode'] == 405
    assert response['body'] == 'Invalid request method'
    assert response['headers']['Allow'] == 'POST'
    assert len(dao) == 0


def test_lambda_handler_with_http_api_method(event, context):
    """Ensure the method is also read from HTTP API (payload v2) events."""
    request = event('url=https%3A%2F%2Fexample.com')
    del request['httpMethod']
    request['requestContext']['http'] = {'method': 'get'}

    assert app.lambda_handler(request, context)['statusCode'] == 405


@pytest.mark.parametrize('body', ['', 'custom_key=abc', 'url=', 'url=%20%20'])
def test_lambda_handler_without_url(event, context, dao, body):
    """Ensure missing URLs return HTTP 400."""
    response = app.lambda_handler(event(body), context)

    assert response['statusCode'] == 400
    assert response['body'] == 'URL is required'
    assert len(dao) == 0


@pytest.mark.parametrize('expiration', ['2025-13-01', '2025-02-30', '31-12-2025', 'tomorrow'])
def test_lambda_handler_with_invalid_date(event, context, dao, expiration):
    """Ensure invalid expiration dates return HTTP 400."""
    response = app.lambda_handler(event(f'url=https%3A%2F%2Fexample.com&expiration={expiration}'), context)

    assert response['statusCode'] == 400
    assert response['body'] == 'Invalid date format (YYYY-MM-DD)'
    assert len(dao) == 0


def test_lambda_handler_with_taken_custom_key(event, context, dao):
    """Ensure taken custom keys return HTTP 400 and keep the original mapping."""
    dao.put_if_absent(MappingRecord('my-link', 'https://original.example', datetime(2099, 1, 1, tzinfo=UTC)))

    response = app.lambda_handler(event('url=https%3A%2F%2Fother.example&custom_key=my-link'), context)

    assert response['statusCode'] == 400
    assert response['body'] == 'Custom key already exists'
    assert dao.get('my-link').original_url == 'https://original.example'


@pytest.mark.parametrize(
    'body, headers, base64_encoded, message',
    [
        ('{"url": ', {'Content-Type': 'application/json'}, False, 'Bad Request (invalid JSON body)'),
        ('["https://example.com"]', {'Content-Type': 'application/json'}, False, 'Bad Request (JSON body must be an object)'),
        ('url=%FF', None, False, 'Bad Request (invalid form body)'),
        ('not base64!', None, True, 'Bad Request (invalid base64 body)'),
    ],
)
def test_lambda_handler_with_malformed_body(event, context, body, headers, base64_encoded, message):
    """Ensure undecodable bodies return HTTP 400."""
    response = app.lambda_handler(event(body, headers=headers, base64_encoded=base64_encoded), context)

    assert response['statusCode'] == 400
    assert response['body'] == message


# -------------------------------
# 3. Server errors
# -------------------------------


def test_lambda_handler_with_storage_error(monkeypatch, event, context):
    """Ensure record store failures return HTTP 500."""
    failing_dao = MagicMock(spec=RecordBaseDAO)
    failing_dao.put_if_absent.side_effect = StorageError("Can't connect to Redis at redis.test:6379/0.")
    monkeypatch.setattr(app, 'RecordRedisDAO', lambda *a, **kw: failing_dao)

    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)

    assert response['statusCode'] == 500
    assert response['body'] == 'Failed to store URL'


def test_lambda_handler_with_unreachable_redis(monkeypatch, event, context):
    """Ensure a failing Redis healthcheck returns HTTP 500."""

    def _unreachable(*args, **kwargs):
        raise StorageError("Can't connect to Redis at redis.test:6379/0. Check the provided configuration parameters.")

    monkeypatch.setattr(app, 'RecordRedisDAO', _unreachable)

    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)

    assert response['statusCode'] == 500
    assert response['body'] == 'Failed to store URL'


def test_lambda_handler_with_exhausted_key_generation(monkeypatch, event, context, config):
    """Ensure endless generated key collisions return HTTP 500."""
    crowded_dao = MagicMock(spec=RecordBaseDAO)
    crowded_dao.put_if_absent.side_effect = RecordAlreadyExistsError('taken')
    monkeypatch.setattr(app, 'RecordRedisDAO', lambda *a, **kw: crowded_dao)
    config['shortener']['max_key_attempts'] = 2

    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)

    assert response['statusCode'] == 500
    assert response['body'] == 'Failed to store URL'
    assert crowded_dao.put_if_absent.call_count == 2


def test_lambda_handler_with_configuration_error(monkeypatch, event, context):
    """Ensure configuration failures return HTTP 500."""

    def _broken_config(*args, **kwargs):
        raise ConfigurationError('AppConfig unavailable')

    monkeypatch.setattr(app, 'load_config', _broken_config)

    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)

    assert response['statusCode'] == 500
    assert response['body'] == 'Internal Server Error'


def test_lambda_handler_with_bad_shortener_settings(event, context, config):
    """Ensure invalid shortener settings return HTTP 500."""
    config['shortener']['key_length'] = 'six'

    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)

    assert response['statusCode'] == 500
    assert response['body'] == 'Internal Server Error'


def test_lambda_handler_with_unexpected_error(monkeypatch, event, context):
    """Ensure unexpected errors return HTTP 500 when deployed."""
    broken_dao = MagicMock(spec=RecordBaseDAO)
    broken_dao.put_if_absent.side_effect = RuntimeError('boom')
    monkeypatch.setattr(app, 'RecordRedisDAO', lambda *a, **kw: broken_dao)

    response = app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)

    assert response['statusCode'] == 500
    assert response['body'] == 'Internal Server Error'


def test_lambda_handler_reraises_unexpected_error_locally(monkeypatch, event, context):
    """Ensure unexpected errors propagate when running locally."""
    monkeypatch.setenv('APP_ENV', 'local')
    broken_dao = MagicMock(spec=RecordBaseDAO)
    broken_dao.put_if_absent.side_effect = RuntimeError('boom')
    monkeypatch.setattr(app, 'RecordRedisDAO', lambda *a, **kw: broken_dao)

    with pytest.raises(RuntimeError, match='boom'):
        app.lambda_handler(event('url=https%3A%2F%2Fexample.com'), context)
