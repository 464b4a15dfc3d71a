import logging
import sys
import os
import json
from datetime import datetime

# Attributes services and the access-log middleware pass through `extra=`
CONTEXT_FIELDS = ("retailer_id", "order_id", "product_id", "method", "path", "status_code", "duration_ms")

# Libraries whose INFO output duplicates our own access and business logs
QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "multipart")


def record_context(record: logging.LogRecord) -> dict:
    """Context attributes present on a record, in CONTEXT_FIELDS order"""
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with tenant/request context as top-level keys"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcfromtimestamp(record.created).isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class ContextFormatter(logging.Formatter):
    """Plain text line followed by any context as key=value pairs"""

    def __init__(self):
        super().__init__(fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        # Keep any traceback after the context
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def setup_logging(level: str = None, json_format: bool = None, log_file: str = None):
    """
    Configure the root logger for the storefront service.

    Args:
        level: LOG_LEVEL when omitted (default INFO)
        json_format: LOG_JSON=true when omitted
        log_file: LOG_FILE when omitted; always written as JSON
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")
    if json_format is None:
        json_format = os.getenv("LOG_JSON", "false").lower() == "true"
    log_file = log_file or os.getenv("LOG_FILE")

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter() if json_format else ContextFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root_logger
