import string
from datetime import timedelta
from enum import StrEnum


class Shortener:
    """Short key generation defaults."""

    # 26 lowercase + 26 uppercase + 10 digits
    ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits
    KEY_LENGTH = 6
    MAX_KEY_ATTEMPTS = 10  # generate-check-retry rounds before giving up
    DEFAULT_SALT = 'urlkeeper'


class Expiration:
    """Short URL expiration defaults."""

    DEFAULT_TTL = timedelta(days=7)
    DATE_FORMAT = '%Y-%m-%d'  # accepted format for caller-supplied expiration dates


class Store:
    """Record store defaults."""

    COLLECTION = 'urls'
    MAX_TRANSACTION_RETRIES = 16  # optimistic (WATCH) transaction attempts


class ENV:
    """Environment variable names."""

    class App(StrEnum):
        APP_ENV = 'APP_ENV'
        APP_NAME = 'APP_NAME'
        PROJECT_ROOT = 'PROJECT_ROOT'
        AWS_SAM_LOCAL = 'AWS_SAM_LOCAL'
        LOG_LEVEL = 'LOG_LEVEL'
        CONFIG_DIR = 'URLKEEPER_CONFIG_DIR'

    class AppConfig(StrEnum):
        APP_ID = 'APPCONFIG_APP_ID'
        ENV_ID = 'APPCONFIG_ENV_ID'
        PROFILE_ID = 'APPCONFIG_PROFILE_ID'


# Error codes
UNKNOWN_INTERNAL_SERVER_ERROR = 'UNKNOWN_INTERNAL_SERVER_ERROR'
