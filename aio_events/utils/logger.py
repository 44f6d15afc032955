"""
logger.py

Structured logging utility for the AIO events client.

The library itself only creates module loggers; applications (and the CLI)
call setup_logging() to choose JSON or text output.
"""

import json
import logging
import logging.handlers
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


# Attributes every LogRecord carries; anything else came in via extra={...}
_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'created', 'msecs', 'levelname', 'levelno',
    'pathname', 'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'process', 'processName', 'thread', 'threadName',
    'getMessage', 'message', 'asctime', 'relativeCreated', 'taskName'
])


# =============================================================================
# JSON Formatter
# =============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formatter that renders each record as one JSON object.

    Fields: timestamp, level, logger, message, module, function, line,
    any ``extra`` context, and exception details when present.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_entry, ensure_ascii=False)


# =============================================================================
# Logging Setup
# =============================================================================

def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    backup_count: int = 5
) -> None:
    """
    Configure root logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" or "text"
        log_file: Optional path of a rotating log file
        rotation_size: Log file rotation size (e.g., "10MB")
        backup_count: Number of rotated files to keep
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = []

    if log_format.lower() == "json":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    # stderr keeps stdout free for command output
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=_parse_size(rotation_size),
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    root_logger.debug(
        "Logging initialized",
        extra={"log_level": log_level, "log_format": log_format, "log_file": log_file}
    )


def _parse_size(size_str: str) -> int:
    """
    Parse size string to bytes.

    Example:
        _parse_size("10MB") -> 10485760
    """
    match = re.match(r'(\d+)\s*(KB|MB|GB)?', size_str.upper().strip())
    if not match:
        return 10 * 1024 * 1024

    number = int(match.group(1))
    unit = match.group(2)
    if unit == 'KB':
        return number * 1024
    elif unit == 'MB':
        return number * 1024 * 1024
    elif unit == 'GB':
        return number * 1024 * 1024 * 1024
    return number


# =============================================================================
# Performance Logging
# =============================================================================

class PerformanceLogger:
    """
    Context manager that logs the duration of an operation.

    Failures are logged at WARNING and re-raised unchanged.

    Example:
        with PerformanceLogger("find_registration", logger, registration_id="abc"):
            ...
    """

    def __init__(
        self,
        operation: str,
        logger: logging.Logger,
        log_level: int = logging.DEBUG,
        **context: Any
    ):
        self.operation = operation
        self.logger = logger
        self.log_level = log_level
        self.context = context
        self.start_time = None

    def __enter__(self):
        self.start_time = datetime.now(timezone.utc)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = (datetime.now(timezone.utc) - self.start_time).total_seconds() * 1000

        log_data = {"operation": self.operation, "duration_ms": round(duration_ms, 2)}
        log_data.update(self.context)

        if exc_type is not None:
            log_data["success"] = False
            log_data["error_type"] = exc_type.__name__
            self.logger.warning(
                f"Operation '{self.operation}' failed after {duration_ms:.2f}ms: {exc_val}",
                extra=log_data
            )
        else:
            log_data["success"] = True
            self.logger.log(
                self.log_level,
                f"Operation '{self.operation}' completed in {duration_ms:.2f}ms",
                extra=log_data
            )

        return False  # Don't suppress exceptions
