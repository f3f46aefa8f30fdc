from kvshortener.utils.config import app_env, app_name, project_root, app_prefix, load_config
from kvshortener.utils.helpers import base_url, get_short_url, require_environment, guarantee_500_response
from kvshortener.utils.shortener import generate_key
from kvshortener.utils.validators import is_valid_url, is_valid_key
from kvshortener.utils.logging import initialize_logging


__all__ = [
    'generate_key',
    'is_valid_url',
    'is_valid_key',
    'app_env',
    'app_name',
    'app_prefix',
    'project_root',
    'load_config',
    'base_url',
    'get_short_url',
    'require_environment',
    'guarantee_500_response',
    'initialize_logging',
]
