class KVShortenerError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:kvshortener_error'


class MappingError(KVShortenerError):
    """Base exception for rejected create/resolve requests."""

    error_code = 'mapping:mapping_error'


class InvalidUrlError(MappingError):
    """Raised when a target URL is not a valid absolute URL."""

    error_code = 'mapping:invalid_url'


class InvalidKeyFormatError(MappingError):
    """Raised when a custom key contains anything besides [a-z0-9]."""

    error_code = 'mapping:invalid_key_format'


class KeyTakenError(MappingError):
    """Raised when a custom key is already mapped to a URL."""

    error_code = 'mapping:key_taken'


class MappingNotFoundError(MappingError):
    """Raised when no mapping exists for a key."""

    error_code = 'mapping:not_found'


class AllocationExhaustedError(MappingError):
    """Raised when the key allocator runs out of collision-free candidates."""

    error_code = 'mapping:allocation_exhausted'


class ConfigurationError(KVShortenerError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
