import logging

from urlkeeper.dao.redis import RecordRedisDAO
from urlkeeper.exceptions import ConfigurationError, ExpiredError, NotFoundError, StorageError
from urlkeeper.services import MappingService
from urlkeeper.types import LambdaContext, LambdaEvent, LambdaResponse
from urlkeeper.utils import load_config, get_short_url, app_prefix, text_response
from urlkeeper.utils.helpers import guarantee_500_response
from urlkeeper.lambdas.redirect_url.constants import (
    MISSING_SHORT_KEY,
    SHORT_URL_NOT_FOUND,
    SHORT_URL_EXPIRED,
    STORAGE_FAILURE,
    CONFIGURATION_FAILURE,
    REDIRECT_SUCCESS,
)


logger = logging.getLogger(__name__)


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {
            'Location': location,
            'Cache-Control': 'no-store',  # every visit must reach the click counter
        },
        'body': '',
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract short key from request path
    - Step 2: Resolve the short key and count the click (via MappingService)
    - Step 3: Redirect client to original URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: original URL
        400: Bad client request
            missing short key in path parameters
        404: Unknown short key
        410: Expired short key
        500: Internal server error
            storage failure or configuration failure

    Args:
        event (dict):
            API Gateway event payload containing the shortKey path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        dict:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortKey': 'aZ3kP9'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 0- Get application's config
    try:
        app_config = load_config('redirect_url')
        redis_config = {f'redis_{k}': v for k, v in app_config['redis'].items()}
    except (ConfigurationError, KeyError):
        logger.exception('Failed to load configuration for redirect URL function. Responding with 500.', extra={'event': CONFIGURATION_FAILURE})
        return text_response(500, 'Internal Server Error')

    # 1- Extract short key from request's path
    short_key = (event.get('pathParameters') or {}).get('shortKey')
    if not short_key:
        logger.info('Missing "shortKey" in path. Responding with 400.', extra={'event': MISSING_SHORT_KEY})
        return text_response(400, "Bad Request (missing 'shortKey' in path)")
    logger.debug('Client requested short URL %s.', get_short_url(short_key, event))

    # 2- Resolve the short key and count the click
    try:
        dao = RecordRedisDAO(**redis_config, prefix=app_prefix())
        result = MappingService(dao).redirect(short_key)
    except NotFoundError:
        logger.info('Short URL record not found in database. Responding with 404.', extra={'short_key': short_key, 'event': SHORT_URL_NOT_FOUND})
        return text_response(404, 'URL not found')
    except ExpiredError:
        logger.info('Short URL record expired. Responding with 410.', extra={'short_key': short_key, 'event': SHORT_URL_EXPIRED})
        return text_response(410, 'URL has expired')
    except StorageError:
        logger.exception('Failed to update click count. Responding with 500.', extra={'short_key': short_key, 'event': STORAGE_FAILURE})
        return text_response(500, 'Failed to update analytics')

    # 3- Redirect client to original URL
    logger.info(
        'Redirecting client to original URL. Responding with 302.',
        extra={'short_key': short_key, 'clicks': result.clicks, 'event': REDIRECT_SUCCESS},
    )
    return response_302(location=result.original_url)
