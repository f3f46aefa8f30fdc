"""Utility functions for application configuration management.

This module provides a standardized interface for Lambda functions to
access configuration data stored in **AWS AppConfig**. Each environment
(`APP_ENV`) has a dedicated AppConfig *Environment* within the shared
AppConfig *Application* identified by `APP_NAME`. Configuration data is
stored as a JSON document under a configuration profile (typically
`backend-config`) and deployed to the corresponding environment.

The configuration JSON follows this structure:

    {
        "build": 7,
        "active_backend": "redis",
        "configs": {
            "create_mapping": {
                "redis": { "host": ..., "port": ..., "db": ... },
                "allocator": { "key_length": 6, "max_attempts": 10, "max_key_length": 8, "atomic": false }
            },
            "redirect": {
                "redis": { ... }
            },
            "list_mappings": {
                "redis": { ... }
            }
        }
    }

Each Lambda loads its own section (e.g., `"create_mapping"`) from this
AppConfig document, determined by the current application environment.

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`) value,
        defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    project_root() -> Path
        Return the absolute path to the project root directory, using
        `PROJECT_ROOT` when available.

    load_config(handler_name: str) -> dict
        Load configuration for a given Lambda from AWS AppConfig and
        return it as a Python dictionary. In SAM, load configuration
        from a local AppConfig agent.

Example:
    Typical usage inside a Lambda handler:

        >>> from kvshortener.utils.config import load_config
        >>> config = load_config('create_mapping')
        >>> config['active_backend']
        'redis'
        >>> config['redis']['host']
        'redis-15501.host.docker.internal'
"""

import os
import json
import functools
import urllib.parse
import urllib.request
import logging
from pathlib import Path
from collections.abc import Callable

import boto3

from kvshortener.constants import ENV
from kvshortener.exceptions import BadConfigurationError
from kvshortener.utils.helpers import require_environment
from kvshortener.utils.runtime import running_locally


logger = logging.getLogger(__name__)

LOCAL_AGENT_HOSTS = frozenset({'localhost', '127.0.0.1', 'host.docker.internal'})
LOCAL_AGENT_PORTS = frozenset({2772, None})


def app_env() -> str:
    """Return the current application environment by reading 'APP_ENV'

    Returns:
        str:
            Value of `APP_ENV` environment variable, `'local'` by default.
    """
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    """Return the current application name by reading 'APP_NAME'

    Returns:
        str:
            Value of `APP_NAME` environment variable.
            None if variable is not set.
    """
    return os.environ.get(ENV.App.APP_NAME)


def project_root() -> Path:
    """Return the absolute path to the project root directory

    Finds the project root via the environment variable PROJECT_ROOT.
    Falls back to the directory of the current file.
    """
    return Path(os.environ.get(ENV.App.PROJECT_ROOT, os.path.dirname(__file__)))


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'kvshortener'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'kvshortener:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def validate_agent_url(url: str | None) -> str:
    """Return url if it points at a local AppConfig agent, '' if unset.

    Raises:
        BadConfigurationError: for any scheme, host or port outside the local agent's.
    """
    if not url:
        return ''
    components = urllib.parse.urlparse(url)
    if components.scheme not in {'http', 'https'}:
        raise BadConfigurationError(f'Bad scheme {url}')
    if components.hostname not in LOCAL_AGENT_HOSTS:
        raise BadConfigurationError(f'Bad host {url}')
    if components.port not in LOCAL_AGENT_PORTS:
        raise BadConfigurationError(f'Bad port {url}')
    return url


def handler_section(document: dict, handler_name: str) -> dict:
    """Extract one handler's configuration from a full AppConfig document

    Returns:
        dict: {
            'active_backend': <backend>,
            <backend>: { ... backend-specific config ... },
            'allocator': { ... allocator settings, possibly empty ... },
        }

    Raises:
        BadConfigurationError: if the document lacks the backend or the handler section.
    """
    try:
        backend = document['active_backend']
        section = document['configs'][handler_name]
    except (KeyError, TypeError) as e:
        raise BadConfigurationError(f"AppConfig document has no configuration for '{handler_name}'.") from e

    return {
        'active_backend': backend,
        backend: section.get(backend, {}),
        'allocator': section.get('allocator', {}),
    }


def _sam_load_local_appconfig(func: Callable[[str], dict]) -> Callable[[str], dict]:
    """Decorator: load AppConfig from a local AppConfig Agent when running under SAM

    Behavior:
        - If the application is running locally and `APPCONFIG_AGENT_URL` is set
          to a local URL, fetch the app configuration JSON from the local AppConfig agent.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Environment variables used:
        APPCONFIG_AGENT_URL     - Base URL of the local AppConfig Agent (e.g., http://host.docker.internal:2772).
        APPCONFIG_PROFILE_NAME  - Optional profile name (default: "backend-config").
    """

    @functools.wraps(func)
    def wrapper(handler_name: str, *args, **kwargs) -> dict:
        agent_url = validate_agent_url(os.getenv(ENV.AppConfig.AGENT_URL))
        if not running_locally() or not agent_url:
            return func(handler_name, *args, **kwargs)

        profile_name = os.getenv(ENV.AppConfig.PROFILE_NAME, 'backend-config')
        url = f'{agent_url}/applications/{app_name()}/environments/{app_env()}/configurations/{profile_name}'

        logger.debug('Trying to load AppConfig from local agent.', extra={'agentUrl': url, 'handlerName': handler_name})
        with urllib.request.urlopen(url, timeout=5) as r:  # noqa: S310
            document = json.load(r)

        logger.debug('Loaded AppConfig from local agent.', extra={'handlerName': handler_name, 'build': document.get('build')})
        return handler_section(document, handler_name)

    return wrapper


@_sam_load_local_appconfig
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(handler_name: str) -> dict:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'create_mapping', 'redirect').

    Environment variables required:
        APPCONFIG_APP_ID       - AppConfig Application ID
        APPCONFIG_ENV_ID       - AppConfig Environment ID
        APPCONFIG_PROFILE_ID   - AppConfig Configuration Profile ID

    Args:
        handler_name (str):
            Name of the Lambda (e.g., "create_mapping" or "redirect").

    Returns:
        dict: The lambda's config section (see handler_section()).

    Raises:
        MissingEnvironmentVariableError: if a required variable is unset.
        BadConfigurationError: if the document has no section for the handler.
        botocore.exceptions.ClientError: if AppConfig rejects the request.
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'handlerName': handler_name})

    appconfig = boto3.client('appconfigdata')

    # Start an AppConfig data session
    session_token = appconfig.start_configuration_session(
        ApplicationIdentifier=os.environ[ENV.AppConfig.APP_ID],
        EnvironmentIdentifier=os.environ[ENV.AppConfig.ENV_ID],
        ConfigurationProfileIdentifier=os.environ[ENV.AppConfig.PROFILE_ID],
    )['InitialConfigurationToken']

    # Fetch the configuration
    response = appconfig.get_latest_configuration(ConfigurationToken=session_token)
    content = response['Configuration'].read()
    document = json.loads(content.decode('utf-8'))

    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'handlerName': handler_name, 'build': document.get('build')})
    return handler_section(document, handler_name)
