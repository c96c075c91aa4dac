"""Structured logging configuration"""
import logging
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

# Attributes callers may attach with ``extra=`` that are copied into the JSON line
EXTRA_FIELDS = ('error_id', 'component')

# Third-party loggers that are only interesting when something goes wrong
QUIET_LOGGERS = ('sqlalchemy', 'alembic', 'uvicorn.access')


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs.

    Each record becomes one JSON object per line with a UTC timestamp,
    level, logger name and message, plus exception details and any of
    the error log extras (``error_id``, ``component``) set on the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            log_data['exception'] = {
                'type': exc_type.__name__,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", structured: bool = True, stream: Optional[TextIO] = None) -> None:
    """
    Set up application logging.

    Replaces any handlers on the root logger with a single console handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        structured: Use structured JSON logging if True
        stream: Where to write log lines (default: stdout)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)

    if structured:
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
