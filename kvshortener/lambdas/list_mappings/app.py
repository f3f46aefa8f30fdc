import logging
from typing import Any

from kvshortener.constants import ErrorCode
from kvshortener.dao.exceptions import DataStoreError
from kvshortener.exceptions import ConfigurationError
from kvshortener.lambdas.common import build_service
from kvshortener.lambdas.responses import response_200, response_500, response_503
from kvshortener.utils import load_config, get_short_url
from kvshortener.utils.helpers import guarantee_500_response


logger = logging.getLogger(__name__)


@guarantee_500_response
def lambda_handler(event: dict, context: Any) -> dict:
    """Handle incoming API Gateway requests to list every mapping

    HTTP responses:
        200: {"mappings": [{"key": ..., "url": ..., "shortUrl": ...}, ...]}
        500: Internal server error
        503: Mapping store unavailable (STORE_UNAVAILABLE)

    Order of the listed mappings is unspecified.
    """
    # 0- Get application's config
    try:
        app_config = load_config('list_mappings')
    except ConfigurationError:
        logger.exception('Failed to load AppConfig for list mappings function. Responding with 500.')
        return response_500()

    # 1- Walk the mapping store
    try:
        service = build_service(app_config)
        mappings = [{'key': key, 'url': url, 'shortUrl': get_short_url(key, event)} for key, url in service.list_mappings()]
    except DataStoreError:
        logger.exception('Mapping store unavailable. Responding with 503.', extra={'event': ErrorCode.STORE_UNAVAILABLE})
        return response_503(message='mapping store unavailable', error_code=ErrorCode.STORE_UNAVAILABLE)

    logger.info('Listed mappings. Responding with 200.', extra={'count': len(mappings)})
    return response_200({'mappings': mappings})
