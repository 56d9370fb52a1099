"""Utility functions for application configuration management.

Deployed Lambda functions read their configuration from **AWS AppConfig**. Each
environment (`APP_ENV`) has a dedicated AppConfig *Environment* within the
shared AppConfig *Application* identified by `APP_NAME`. The configuration
document follows this structure:

    {
        "build": 42,
        "active_backend": "redis",
        "configs": {
            "shorten_url": {
                "redis": { "host": ..., "port": ..., "db": ... },
                "shortener": { "key_length": 6, "max_key_attempts": 10, "default_expiration_days": 7 }
            },
            "redirect_url": {
                "redis": { ... }
            }
        }
    }

When running locally, the same per-function section is read from a YAML file
instead:

    config/
    ├── shorten_url/
    │   ├── local.yml
    │   └── dev.yml
    └── redirect_url/
        ├── local.yml
        └── dev.yml

Each local file holds `active_backend` plus the function's section, e.g.:

    active_backend: redis
    redis:
      host: localhost
      port: 6379
      db: 0

Functions:
    app_env() -> str
        Return the current application environment (`APP_ENV`), defaulting to `'local'`.

    app_name() -> str | None
        Return the application name (`APP_NAME`), or None if not set.

    app_prefix() -> str | None
        Return application prefix for DAOs, or None if `APP_NAME` is not set.

    project_root() -> Path
        Return the absolute path to the project root directory.

    config_dir() -> Path
        Return the directory holding local YAML configuration files.

    load_config(function_name: str) -> dict
        Load the configuration section of one Lambda function.

Example:
    >>> from urlkeeper.utils.config import load_config
    >>> config = load_config('shorten_url')
    >>> config['redis']['host']
    'localhost'
"""

import os
import json
import functools
import logging
from pathlib import Path
from collections.abc import Callable
from typing import Any

import boto3
import yaml
from botocore.exceptions import BotoCoreError, ClientError

from urlkeeper.constants import ENV
from urlkeeper.exceptions import BadConfigurationError, ConfigurationError
from urlkeeper.types import AppConfig, LambdaConfiguration
from urlkeeper.utils.helpers import require_environment
from urlkeeper.utils.runtime import running_locally


logger = logging.getLogger(__name__)


def app_env() -> str:
    return os.environ.get(ENV.App.APP_ENV, 'local').lower()


def app_name() -> str | None:
    return os.environ.get(ENV.App.APP_NAME)


def app_prefix() -> str | None:
    """Return application prefix for DAOs

    Returns:
        str: app prefix as <app name>:<app env>.
             None if APP_NAME is not set.

    Example:
        >>> os.environ['APP_NAME'] = 'urlkeeper'
        >>> os.environ['APP_ENV'] = 'local'
        >>> app_prefix()
        'urlkeeper:local'
    """
    return None if app_name() is None else f'{app_name()}:{app_env()}'


def project_root() -> Path:
    return Path(os.environ.get(ENV.App.PROJECT_ROOT, Path(__file__).resolve().parents[2]))


def config_dir() -> Path:
    return Path(os.environ.get(ENV.App.CONFIG_DIR, project_root() / 'config'))


def _select_backend(section: Any, backend: Any, function_name: str) -> LambdaConfiguration:
    """Reduce a function's config section to its active backend plus service settings

    Returns:
        dict: {<backend>: {...}, 'shortener': {...}}

    Raises:
        BadConfigurationError:
            If the section is not a mapping or lacks the active backend.
    """
    if not isinstance(section, dict) or not isinstance(backend, str):
        raise BadConfigurationError(f"Malformed configuration for '{function_name}'.")
    if not isinstance(section.get(backend), dict):
        raise BadConfigurationError(f"Configuration for '{function_name}' has no '{backend}' backend section.")

    shortener = section.get('shortener') or {}
    if not isinstance(shortener, dict):
        raise BadConfigurationError(f"Configuration for '{function_name}' has a malformed 'shortener' section.")

    return {backend: section[backend], 'shortener': shortener}


def _load_local_config(func: Callable[[str], LambdaConfiguration]) -> Callable[[str], LambdaConfiguration]:
    """Decorator: load configuration from a local YAML file when running locally

    Behavior:
        - If the application is running locally, read `<config dir>/<function>/<APP_ENV>.yml`.
        - Else, call the wrapped function (which pulls from AWS AppConfig via boto3).

    Raises:
        ConfigurationError:
            If the local configuration file doesn't exist.
        BadConfigurationError:
            If the local configuration file is not valid YAML or is malformed.
    """

    @functools.wraps(func)
    def wrapper(function_name: str) -> LambdaConfiguration:
        if not running_locally():
            return func(function_name)

        path = config_dir() / function_name / f'{app_env()}.yml'
        logger.debug('Trying to load configuration from local file.', extra={'path': str(path), 'functionName': function_name})

        try:
            with path.open('r', encoding='utf-8') as f:
                document = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f'Local configuration file {path} not found.') from e
        except yaml.YAMLError as e:
            raise BadConfigurationError(f'Local configuration file {path} is not valid YAML.') from e

        if not isinstance(document, dict):
            raise BadConfigurationError(f'Local configuration file {path} must contain a mapping.')

        data = _select_backend(document, document.get('active_backend'), function_name)
        logger.debug('Loaded configuration from local file.', extra={'path': str(path), 'functionName': function_name})
        return data

    return wrapper


@_load_local_config
@require_environment(ENV.AppConfig.APP_ID, ENV.AppConfig.ENV_ID, ENV.AppConfig.PROFILE_ID)
def load_config(function_name: str) -> LambdaConfiguration:
    """Load configuration for a given Lambda from AWS AppConfig

    Fetches the AppConfig JSON once and returns the section relevant
    to the requested Lambda function (e.g., 'shorten_url', 'redirect_url').

    Environment variables required:
        APPCONFIG_APP_ID       – AppConfig Application ID
        APPCONFIG_ENV_ID       – AppConfig Environment ID
        APPCONFIG_PROFILE_ID   – AppConfig Configuration Profile ID

    Args:
        function_name (str):
            Name of the Lambda (e.g., "shorten_url" or "redirect_url").

    Returns:
        dict: The function's config section, {<backend>: {...}, 'shortener': {...}}.

    Raises:
        MissingEnvironmentVariableError:
            If a required environment variable is missing.
        ConfigurationError:
            If AppConfig cannot be reached.
        BadConfigurationError:
            If the AppConfig document is malformed.

    Example:
        >>> app_config = load_config('shorten_url')
        >>> app_config['redis']['host']
        'redis-15501.host.docker.internal'
    """
    logger.debug('Trying to load AppConfig from AWS AppConfig.', extra={'functionName': function_name})

    try:
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
    except (BotoCoreError, ClientError) as e:
        raise ConfigurationError(f"Failed to fetch AppConfig for '{function_name}'.") from e

    try:
        config: AppConfig = json.loads(content.decode('utf-8'))
        backend = config['active_backend']
        section = config['configs'][function_name]
    except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError) as e:
        raise BadConfigurationError(f"Malformed AppConfig document for '{function_name}'.") from e

    data = _select_backend(section, backend, function_name)
    logger.debug('Loaded AppConfig from AWS AppConfig.', extra={'functionName': function_name, 'build': config.get('build')})
    return data
