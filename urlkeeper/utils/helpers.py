"""Helper utilities for AWS lambda functions.

Functions:
    base_url() -> str
        Extract correct public base URL from API Gateway event
    get_short_url() -> str
        Get string representation of short URL for a given short key
    header() -> str | None
        Case-insensitive lookup of a request header
    parse_form_body() -> FormFields
        Decode a form-encoded (or JSON) request body into a flat dictionary
    text_response() -> dict
        Build a plain-text API Gateway proxy response
    require_environment(*names: str) -> Callable
        Decorator: Ensure required environment variables are present
    guarantee_500_response(handler) -> Callable
        Decorator: Turn unhandled handler errors into a 500 response

Example:
    Typical usage inside a Lambda handler:

        >>> from urlkeeper.utils.helpers import base_url
        >>> event = {
        ...     "requestContext": {
        ...         "domainName": "abc123.execute-api.us-east-1.amazonaws.com",
        ...         "stage": "Prod"
        ...     }
        ... }
        >>> base_url(event)
        'https://abc123.execute-api.us-east-1.amazonaws.com/Prod'

        >>> base_url({})
        'http://localhost:3000'
"""

import base64
import binascii
import functools
import json
import logging
import os
from collections.abc import Callable
from urllib.parse import parse_qs

from urlkeeper.constants import UNKNOWN_INTERNAL_SERVER_ERROR
from urlkeeper.exceptions import MalformedRequestError, MissingEnvironmentVariableError
from urlkeeper.types import FormFields, LambdaEvent, LambdaContext, LambdaResponse
from urlkeeper.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def base_url(event: LambdaEvent) -> str:
    """Extract public base URL from API Gateway event

    If a custom domain is configured, the stage name is omitted.
    If using the default AWS execute-api domain, the stage name is included.
    Local domains (localhost, 127.0.0.1) are served over plain HTTP.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: Base URL, e.g.:
             - "https://short.example.com"
             - "https://abc123.execute-api.us-east-1.amazonaws.com/Prod"
             - "http://localhost:3000"
    """
    request_context = event.get('requestContext', {})
    domain = request_context.get('domainName', '')
    stage = request_context.get('stage', '')

    if domain.startswith(('localhost', '127.0.0.1')):
        return f'http://{domain}'
    elif domain and 'execute-api' not in domain:
        # If the domain is a custom domain (no execute-api), skip stage
        return f'https://{domain}'
    elif domain:
        # Otherwise include the stage (for AWS default domains)
        return f'https://{domain}/{stage}'
    else:
        # Fallback: local invocation (SAM CLI, tests, etc.)
        return 'http://localhost:3000'


def get_short_url(short_key: str, event: LambdaEvent) -> str:
    """Get string representation of shortened URL

    Args:
        short_key (str): short key
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        str: short url string representation
    """
    return f'{base_url(event).rstrip("/")}/{short_key}'


def header(event: LambdaEvent, name: str) -> str | None:
    headers = event.get('headers') or {}
    name = name.lower()
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def parse_form_body(event: LambdaEvent) -> FormFields:
    """Decode the request body of an API Gateway event into a flat dictionary

    Form-encoded bodies (`application/x-www-form-urlencoded`, the default) keep
    the first value of each field. JSON object bodies are accepted when the
    Content-Type says so. Base64-encoded bodies (`isBase64Encoded`) are decoded first.

    Args:
        event (dict): API Gateway event object passed to Lambda handler

    Returns:
        FormFields: field name -> value

    Raises:
        MalformedRequestError:
            If the body cannot be decoded.

    Example:
        >>> parse_form_body({'body': 'url=https%3A%2F%2Fexample.com&custom_key='})
        {'url': 'https://example.com', 'custom_key': ''}
    """
    body = event.get('body') or ''
    if event.get('isBase64Encoded'):
        try:
            body = base64.b64decode(body, validate=True).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise MalformedRequestError('Bad Request (invalid base64 body)') from e

    content_type = (header(event, 'Content-Type') or '').split(';')[0].strip().lower()
    if content_type == 'application/json':
        try:
            payload = json.loads(body or '{}')
        except json.JSONDecodeError as e:
            raise MalformedRequestError('Bad Request (invalid JSON body)') from e
        if not isinstance(payload, dict):
            raise MalformedRequestError('Bad Request (JSON body must be an object)')
        return {str(k): '' if v is None else str(v) for k, v in payload.items()}

    try:
        fields = parse_qs(body, keep_blank_values=True, errors='strict')
    except (UnicodeDecodeError, ValueError) as e:
        raise MalformedRequestError('Bad Request (invalid form body)') from e
    return {name: values[0] for name, values in fields.items()}


def text_response(status_code: int, body: str = '', headers: dict[str, str] | None = None) -> LambdaResponse:
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'text/plain; charset=utf-8',
            **(headers or {}),
        },
        'body': body,
    }


def require_environment(*names: str) -> Callable:
    """Decorator ensuring required environment variables are present.

    Args:
        *names (str):
            Names of required environment variables.

    Raises:
        MissingEnvironmentVariableError:
            If any required environment variable is missing or empty.

    Example:
        >>> @require_environment('APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID')
        ... def my_function():
        ...     pass
        >>> my_function()
        MissingEnvironmentVariableError: Missing required environment variables: 'APPCONFIG_APP_ID', 'APPCONFIG_ENV_ID'
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            missing = [name for name in names if not os.environ.get(name)]
            if missing:
                missing_list = ', '.join(f"'{name}'" for name in missing)
                raise MissingEnvironmentVariableError(f'Missing required environment variables: {missing_list}')
            return func(*args, **kwargs)

        return wrapper

    return decorator


def guarantee_500_response(handler: Callable[[LambdaEvent, LambdaContext], LambdaResponse]) -> Callable:
    """Decorator: respond with 500 instead of crashing on unhandled handler errors

    When running locally the error is re-raised so it shows up in the console.
    """

    @functools.wraps(handler)
    def wrapper(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
        try:
            return handler(event, context)
        except Exception:
            if running_locally():
                raise
            logger.exception(
                'Unhandled error in Lambda handler. Responding with 500.',
                extra={'event': UNKNOWN_INTERNAL_SERVER_ERROR},
            )
            return text_response(500, 'Internal Server Error')

    return wrapper
