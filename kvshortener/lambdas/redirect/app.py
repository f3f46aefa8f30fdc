import logging
from typing import Any

from kvshortener.constants import ErrorCode
from kvshortener.dao.exceptions import CorruptRecordError, DataStoreError
from kvshortener.exceptions import ConfigurationError, MappingNotFoundError
from kvshortener.lambdas.common import build_service
from kvshortener.lambdas.responses import response_302, response_400, response_404, response_500, response_503
from kvshortener.utils import load_config, get_short_url
from kvshortener.utils.helpers import guarantee_500_response


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to redirect short keys

    This Lambda handler follows this procedure to redirect:
    - Step 1: Extract key from request path
    - Step 2: Resolve the key in the mapping store
    - Step 3: Redirect client to target URL

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        400: Bad client request (MISSING_KEY)
        404: No mapping for the key (MAPPING_NOT_FOUND)
        500: Internal server error (CORRUPT_RECORD or unknown)
        503: Mapping store unavailable (STORE_UNAVAILABLE)

    Example:
        >>> event = {'pathParameters': {'key': 'abcxyz'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/path'
    """
    # 0- Get application's config
    try:
        app_config = load_config('redirect')
    except ConfigurationError:
        logger.exception('Failed to load AppConfig for redirect function. Responding with 500.')
        return response_500()

    # 1- Extract key from request's path
    key = (event.get('pathParameters') or {}).get('key')
    if not key:
        logger.info('Missing "key" in path. Responding with 400.', extra={'event': ErrorCode.MISSING_KEY})
        return response_400(message="missing 'key' in path", error_code=ErrorCode.MISSING_KEY)
    logger.debug('Client requested short URL %s.', get_short_url(key, event))

    # 2- Resolve the key in the mapping store
    try:
        service = build_service(app_config)
        target_url = service.resolve_mapping(key)
    except MappingNotFoundError:
        logger.info('Mapping not found. Responding with 404.', extra={'key': key, 'event': ErrorCode.MAPPING_NOT_FOUND})
        return response_404(message=f"short url {get_short_url(key, event)} doesn't exist", error_code=ErrorCode.MAPPING_NOT_FOUND)
    except CorruptRecordError:
        # Already logged with traceback by the service
        return response_500(message='stored mapping is unreadable', error_code=ErrorCode.CORRUPT_RECORD)
    except DataStoreError:
        logger.exception('Mapping store unavailable. Responding with 503.', extra={'event': ErrorCode.STORE_UNAVAILABLE})
        return response_503(message='mapping store unavailable', error_code=ErrorCode.STORE_UNAVAILABLE)

    # 3- Redirect client to target URL
    logger.info('Redirecting client to target URL. Responding with 302.', extra={'key': key})
    return response_302(location=target_url)
