# logging_config.py
import json
import logging
import os
import re
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+(\.[\w-]+)+")


class SensitiveDataFilter(logging.Filter):
    """Filter to mask e-mail addresses in log records."""

    def __init__(self, pattern: Optional[re.Pattern] = None):
        super().__init__()
        self.pattern = pattern or EMAIL_PATTERN

    def filter(self, record):
        message = record.getMessage()
        masked = self.pattern.sub("****REDACTED****", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


# Attributes every LogRecord carries; anything else came in through ``extra=``
RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON line.

    Keys passed via ``logger.info(..., extra={"job_id": ...})`` are merged
    into the top level of the document.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        entry.update(
            (key, value) for key, value in record.__dict__.items() if key not in RESERVED_ATTRS
        )
        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry["error"] = {
                "type": exc_type.__name__,
                "detail": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(entry, default=str)


def setup_logging(
    name: str, level: Optional[str] = None, log_dir: Optional[str] = None
) -> logging.Logger:
    """Set up logging configuration.

    Args:
        name: Logger name; child loggers (``name.*``) propagate to it
        level: Log level, falls back to ``LOG_LEVEL`` env or INFO
        log_dir: Directory for the rotating log file; console only when None

    Returns:
        logging.Logger: The configured logger
    """
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter()
    redact = SensitiveDataFilter()

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_file = os.path.join(log_dir, f"{name}.log")
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10485760,  # 10MB
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(redact)
        logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(redact)
    logger.addHandler(console_handler)

    if log_level == "DEBUG":
        logger.debug("Debug logging enabled")

    return logger
