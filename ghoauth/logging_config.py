"""
Logging configuration.

Structured JSON logs to stdout, one object per line, so they can be shipped
as-is to a log collector.
"""

import json
import logging
import os
from datetime import UTC, datetime

# httpx logs every request URL at INFO; GitHub credentials travel in the query.
QUIET_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """
    Custom JSON log formatter.

    Fields passed as `extra={"extra_fields": {...}}` are merged into the
    log object.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as a JSON string.

        Args:
            record: The log record to format.

        Returns:
            A JSON string representing the log record.
        """
        log_object = {
            "timestamp": datetime.now(UTC).isoformat(),
            "severity": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        # Add extra fields if they exist
        if hasattr(record, "extra_fields") and isinstance(record.extra_fields, dict):
            log_object.update(record.extra_fields)

        if record.exc_info:
            log_object["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_object, default=str)


def setup_global_logging() -> None:
    """
    Configure global logging.

    Installs a single stdout handler with the JSON formatter on the root
    logger. The level comes from LOG_LEVEL (default INFO). HTTP client
    loggers are held at WARNING so request URLs never reach the output.
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Remove default handlers to avoid duplicate logs
    for h in list(root_logger.handlers):
        if h is not handler:
            root_logger.removeHandler(h)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
