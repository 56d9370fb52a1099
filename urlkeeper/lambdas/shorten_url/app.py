import logging

from urlkeeper.dao.redis import RecordRedisDAO
from urlkeeper.exceptions import (
    ConfigurationError,
    InvalidDateError,
    KeyConflictError,
    KeyGenerationExhaustedError,
    MalformedRequestError,
    StorageError,
    ValidationError,
)
from urlkeeper.services import MappingService
from urlkeeper.types import LambdaContext, LambdaEvent, LambdaResponse
from urlkeeper.utils import load_config, get_short_url, app_prefix, parse_form_body, text_response
from urlkeeper.utils.helpers import guarantee_500_response
from urlkeeper.lambdas.shorten_url.constants import (
    METHOD_NOT_ALLOWED,
    MALFORMED_BODY,
    MISSING_URL,
    INVALID_EXPIRATION_DATE,
    CUSTOM_KEY_CONFLICT,
    KEY_SPACE_EXHAUSTED,
    STORAGE_FAILURE,
    CONFIGURATION_FAILURE,
    SHORTEN_SUCCESS,
)


logger = logging.getLogger(__name__)


def request_method(event: LambdaEvent) -> str | None:
    # REST APIs (payload v1) carry httpMethod, HTTP APIs (payload v2) carry requestContext.http.method
    method = event.get('httpMethod') or (event.get('requestContext') or {}).get('http', {}).get('method')
    return method.upper() if method else None


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to shorten URLs

    This Lambda handler follows this procedure to shorten URLs:
    - Step 1: Reject anything but POST
    - Step 2: Extract form fields (url, custom_key, expiration) from request body
    - Step 3: Store the mapping via the MappingService (custom or generated key)
    - Step 4: Respond to user with the short URL

    HTTP responses (text/plain):
        200: Successful URL shortening
            "Short URL: <short url>"
        400: Bad client request
            missing url, invalid expiration date, taken custom key or malformed body
        405: Method not allowed
        500: Internal server error
            storage failure, exhausted key generation or configuration failure

    Args:
        event (dict):
            API Gateway event payload in Lambda Proxy format.
        context (LambdaContext):
            AWS Lambda context object containing runtime information.

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'httpMethod': 'POST', 'body': 'url=https%3A%2F%2Fexample.com'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> response['body']
        'Short URL: http://localhost:3000/aZ3kP9'
    """
    # 1- Reject anything but POST
    method = request_method(event)
    if method is not None and method != 'POST':
        logger.info('Invalid request method. Responding with 405.', extra={'method': method, 'event': METHOD_NOT_ALLOWED})
        return text_response(405, 'Invalid request method', headers={'Allow': 'POST'})

    # 0- Get application's config
    try:
        app_config = load_config('shorten_url')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    except (ConfigurationError, KeyError):
        logger.exception('Failed to load configuration for shorten URL function. Responding with 500.', extra={'event': CONFIGURATION_FAILURE})
        return text_response(500, 'Internal Server Error')

    # 2- Extract form fields from request body
    try:
        form = parse_form_body(event)
    except MalformedRequestError as error:
        logger.info('Malformed request body. Responding with 400.', extra={'event': MALFORMED_BODY})
        return text_response(400, str(error))

    original_url = form.get('url', '')
    custom_key = form.get('custom_key') or None
    expiration = form.get('expiration') or None

    # 3- Store the mapping (via MappingService)
    try:
        dao = RecordRedisDAO(**redis_config, prefix=app_prefix())
        service = MappingService.from_settings(dao, app_config.get('shortener'))
        short_key = service.shorten(original_url, custom_key=custom_key, expiration=expiration)
    except InvalidDateError:
        logger.info('Invalid expiration date. Responding with 400.', extra={'expiration': expiration, 'event': INVALID_EXPIRATION_DATE})
        return text_response(400, 'Invalid date format (YYYY-MM-DD)')
    except ValidationError:
        logger.info('Missing "url" in request body. Responding with 400.', extra={'event': MISSING_URL})
        return text_response(400, 'URL is required')
    except KeyConflictError:
        logger.info('Custom key already exists. Responding with 400.', extra={'short_key': custom_key, 'event': CUSTOM_KEY_CONFLICT})
        return text_response(400, 'Custom key already exists')
    except KeyGenerationExhaustedError:
        logger.error('Could not allocate a free short key. Responding with 500.', extra={'event': KEY_SPACE_EXHAUSTED})
        return text_response(500, 'Failed to store URL')
    except StorageError:
        logger.exception('Failed to store short URL. Responding with 500.', extra={'event': STORAGE_FAILURE})
        return text_response(500, 'Failed to store URL')
    except ConfigurationError:
        logger.exception('Invalid shortener settings. Responding with 500.', extra={'event': CONFIGURATION_FAILURE})
        return text_response(500, 'Internal Server Error')

    # 4- Respond with the short URL
    short_url = get_short_url(short_key, event)
    logger.info('Short URL created. Responding with 200.', extra={'short_key': short_key, 'event': SHORTEN_SUCCESS})
    return text_response(200, f'Short URL: {short_url}')
