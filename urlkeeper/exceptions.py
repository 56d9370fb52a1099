from urlkeeper.dao.exceptions import StorageError


__all__ = [
    'URLKeeperError',
    'ValidationError',
    'InvalidDateError',
    'MalformedRequestError',
    'KeyConflictError',
    'KeyGenerationExhaustedError',
    'NotFoundError',
    'ExpiredError',
    'ConfigurationError',
    'MissingEnvironmentVariableError',
    'BadConfigurationError',
    'StorageError',
]


class URLKeeperError(Exception):
    """Base exception for all application-specific errors."""

    error_code = 'app:urlkeeper_error'


class ValidationError(URLKeeperError):
    """Raised when required input is missing or invalid."""

    error_code = 'request:validation_error'


class InvalidDateError(ValidationError):
    """Raised when an expiration date does not match YYYY-MM-DD."""

    error_code = 'request:invalid_date_error'


class MalformedRequestError(ValidationError):
    """Raised when a request body cannot be decoded."""

    error_code = 'request:malformed_request_error'


class KeyConflictError(URLKeeperError):
    """Raised when a caller-supplied short key is already taken."""

    error_code = 'shortener:key_conflict_error'


class KeyGenerationExhaustedError(URLKeeperError):
    """Raised when no free short key was found within the retry bound."""

    error_code = 'shortener:key_generation_exhausted_error'


class NotFoundError(URLKeeperError):
    """Raised when a short key is unknown."""

    error_code = 'redirect:not_found_error'


class ExpiredError(URLKeeperError):
    """Raised when a short key is past its expiration date."""

    error_code = 'redirect:expired_error'


class ConfigurationError(URLKeeperError):
    """Base exception for all configuration errors."""

    error_code = 'config:configuration_error'


class MissingEnvironmentVariableError(ConfigurationError):
    """Raised when a required environment variable is missing."""

    error_code = 'config:missing_environment_variable_error'


class BadConfigurationError(ConfigurationError):
    """Raised when the application is configured with invalid parameters."""

    error_code = 'config:bad_configuration_error'
