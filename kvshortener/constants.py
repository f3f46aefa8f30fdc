import string
from enum import StrEnum


class KeyFormat:
    """Short key shape."""

    # Generated keys: fixed length drawn uniformly from lowercase Latin letters
    GENERATED_LENGTH = 6
    GENERATED_ALPHABET = string.ascii_lowercase
    # Custom keys: lowercase letters and digits, no upper length bound here
    CUSTOM_PATTERN = r'^[a-z0-9]+$'


class Allocation:
    """Collision search bounds for the key allocator."""

    MAX_ATTEMPTS = 10  # candidates tried per key length
    MAX_KEY_LENGTH = 8  # widest key the allocator falls back to


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'
        AGENT_URL = 'APPCONFIG_AGENT_URL'
        PROFILE_NAME = 'APPCONFIG_PROFILE_NAME'


class ErrorCode(StrEnum):
    """Error codes returned in handler response bodies."""

    INVALID_JSON = 'INVALID_JSON'
    MISSING_URL = 'MISSING_URL'
    INVALID_URL = 'INVALID_URL'
    INVALID_KEY_FORMAT = 'INVALID_KEY_FORMAT'
    KEY_TAKEN = 'KEY_TAKEN'
    ALLOCATION_EXHAUSTED = 'ALLOCATION_EXHAUSTED'
    MISSING_KEY = 'MISSING_KEY'
    MAPPING_NOT_FOUND = 'MAPPING_NOT_FOUND'
    CORRUPT_RECORD = 'CORRUPT_RECORD'
    STORE_UNAVAILABLE = 'STORE_UNAVAILABLE'
    UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
