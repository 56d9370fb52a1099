"""Structured (one JSON object per line) logging for the Lambda functions

IMPORTANT: `initialize_logging()` runs in each lambda package's `__init__.py`,
so handler modules can log right away through `logging.getLogger(__name__)`.

Every line carries `timestamp`, `level`, `logger` and `message`, plus whatever
was passed through `extra=`, e.g.:

    logger.info('Short URL created.', extra={'short_key': 'aZ3kP9', 'event': 'SHORTEN_SUCCESS'})

    {"timestamp": "2025-12-26T12:00:00.000Z", "level": "INFO", "logger": "urlkeeper.services.mapping_service",
     "message": "Short URL created.", "short_key": "aZ3kP9", "event": "SHORTEN_SUCCESS"}

Tracebacks go into an `exception` field instead of extra lines, so CloudWatch
keeps each record in one event.
"""

import os
import json
import logging
import logging.config
from datetime import datetime, UTC

from urlkeeper.constants import ENV


# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', logging.NOTSET, '', 0, '', None, None))) | {'message', 'asctime'}

# Third-party loggers that are chatty at DEBUG/INFO
_QUIET_LOGGERS = ('botocore', 'boto3', 'urllib3')


def _utc_timestamp(created: float) -> str:
    return datetime.fromtimestamp(created, tz=UTC).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class JsonFormatter(logging.Formatter):
    """Render a LogRecord, its `extra` fields and exception info as one JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            'timestamp': _utc_timestamp(record.created),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        log.update((key, value) for key, value in vars(record).items() if key not in _RESERVED_ATTRS)

        if record.exc_info:
            log['exception'] = self.formatException(record.exc_info)
        if record.stack_info:
            log['stack'] = self.formatStack(record.stack_info)

        # extras like Path or datetime are logged by their str()
        return json.dumps(log, default=str, ensure_ascii=False)


def initialize_logging(level: str | None = None) -> None:
    """Route the root logger to stdout through JsonFormatter

    Args:
        level (str | None):
            Root log level. Defaults to the LOG_LEVEL environment variable, else INFO.
    """
    level = (level or os.getenv(ENV.App.LOG_LEVEL) or 'INFO').upper()
    logging.config.dictConfig(
        {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {'json': {'()': JsonFormatter}},
            'handlers': {
                'stdout': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'json',
                    'stream': 'ext://sys.stdout',
                }
            },
            'loggers': {name: {'level': 'WARNING'} for name in _QUIET_LOGGERS},
            'root': {'level': level, 'handlers': ['stdout']},
        }
    )
