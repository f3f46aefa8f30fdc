import logging
from typing import Any

from kvshortener.constants import ErrorCode
from kvshortener.dao.exceptions import DataStoreError
from kvshortener.exceptions import (
    AllocationExhaustedError,
    ConfigurationError,
    KeyTakenError,
)
from kvshortener.lambdas.common import build_service, parse_json_body
from kvshortener.lambdas.responses import response_200, response_400, response_409, response_500, response_503
from kvshortener.utils import load_config, get_short_url, is_valid_url, is_valid_key
from kvshortener.utils.helpers import guarantee_500_response


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle incoming API Gateway requests to create mappings

    This Lambda handler follows this procedure to create a mapping:
    - Step 1: Extract and validate target URL and optional custom key
    - Step 2: Connect to the mapping store
    - Step 3: Allocate a key (or check the custom key is free) and store the mapping
    - Step 4: Respond to user with 200 success

    HTTP responses:
        200: Mapping created
            key: the short key
            url: original url (provided in request)
            shortUrl: public short url
            createdAt: ISO-8601 creation time
        400: Bad client request
            errorCode: INVALID_JSON, MISSING_URL, INVALID_URL or INVALID_KEY_FORMAT
        409: Conflict
            errorCode: KEY_TAKEN (custom key already mapped)
        500: Internal server error
        503: Service unavailable
            errorCode: STORE_UNAVAILABLE or ALLOCATION_EXHAUSTED

    Args:
        event (Dict[str, Any]):
            API Gateway event payload in Lambda Proxy format.
        context (Any):
            AWS Lambda context object containing runtime information.

    Returns:
        Dict[str, Any]:
            JSON-serializable response following API Gateway Lambda Proxy
            output format.

    Example:
        >>> event = {'body': '{"url": "https://example.com/path"}'}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        200
        >>> json.loads(response['body'])['key']
        'abcxyz'
    """
    # 0- Get application's config
    try:
        app_config = load_config('create_mapping')
    except ConfigurationError:
        logger.exception('Failed to load AppConfig for create mapping function. Responding with 500.')
        return response_500()

    # 1- Extract and validate target URL and optional custom key (no store access yet)
    try:
        request_body = parse_json_body(event)
    except ValueError:
        logger.info('Invalid JSON body. Responding with 400.', extra={'event': ErrorCode.INVALID_JSON})
        return response_400(message='invalid JSON body', error_code=ErrorCode.INVALID_JSON)

    url = request_body.get('url')
    if not isinstance(url, str) or not url:
        logger.info("Missing 'url' in body. Responding with 400.", extra={'event': ErrorCode.MISSING_URL})
        return response_400(message="missing 'url' in JSON body", error_code=ErrorCode.MISSING_URL)

    if not is_valid_url(url):
        logger.info('Invalid target URL. Responding with 400.', extra={'event': ErrorCode.INVALID_URL})
        return response_400(message=f'invalid url {url!r}', error_code=ErrorCode.INVALID_URL)

    # An empty key field means "generate one", like an untouched form input
    custom_key = request_body.get('key') or None
    if custom_key is not None and not is_valid_key(custom_key):
        logger.info('Invalid custom key. Responding with 400.', extra={'event': ErrorCode.INVALID_KEY_FORMAT})
        return response_400(message='key must contain only lowercase letters and digits', error_code=ErrorCode.INVALID_KEY_FORMAT)

    # 2- Connect to the mapping store
    try:
        service = build_service(app_config)
    except DataStoreError:
        logger.exception('Mapping store unavailable. Responding with 503.', extra={'event': ErrorCode.STORE_UNAVAILABLE})
        return response_503(message='mapping store unavailable', error_code=ErrorCode.STORE_UNAVAILABLE)

    # 3- Allocate a key (or check the custom key is free) and store the mapping
    try:
        record = service.create_mapping(url, custom_key=custom_key)
    except KeyTakenError:
        logger.info('Custom key taken. Responding with 409.', extra={'key': custom_key, 'event': ErrorCode.KEY_TAKEN})
        return response_409(message=f"key '{custom_key}' is already taken", error_code=ErrorCode.KEY_TAKEN)
    except AllocationExhaustedError:
        logger.exception('Key allocation exhausted. Responding with 503.', extra={'event': ErrorCode.ALLOCATION_EXHAUSTED})
        return response_503(message='no free key available, try again', error_code=ErrorCode.ALLOCATION_EXHAUSTED)
    except DataStoreError:
        logger.exception('Mapping store unavailable. Responding with 503.', extra={'event': ErrorCode.STORE_UNAVAILABLE})
        return response_503(message='mapping store unavailable', error_code=ErrorCode.STORE_UNAVAILABLE)

    # 4- Return successful response to user
    short_url = get_short_url(record.key, event)
    return response_200(
        {
            'message': f'Successfully shortened {record.url} to {short_url}',
            'key': record.key,
            'url': record.url,
            'shortUrl': short_url,
            'createdAt': record.created_at.isoformat().replace('+00:00', 'Z'),
        }
    )
