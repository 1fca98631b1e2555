"""Logging configuration for koh."""

import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path

from config import _config_dir


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, 'extra_data'):
            log_entry['extra'] = record.extra_data

        return json.dumps(log_entry, ensure_ascii=False)


def setup_logging(
    level: str = "WARNING",
    log_to_file: bool = True,
    log_to_console: bool = False,
    json_format: bool = False,
    log_dir: Path | None = None,
    max_file_size: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3
) -> logging.Logger:
    """
    Setup logging for a koh invocation.

    User-facing status lines are printed by the reporter, so console logging
    is off unless requested and writes to stderr when on.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Whether to log to file
        log_to_console: Whether to log to stderr
        json_format: Whether to use JSON formatting
        log_dir: Directory for log files, defaults to <config dir>/logs
        max_file_size: Maximum log file size in bytes
        backup_count: Number of backup files to keep

    Returns:
        Configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Clear existing handlers
    root_logger.handlers.clear()

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    if log_to_file:
        log_dir = log_dir or _config_dir() / "logs"
        file_handlers = []
        try:
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "koh.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            file_handlers.append(file_handler)

            # Separate error log file
            error_handler = logging.handlers.RotatingFileHandler(
                log_dir / "errors.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(formatter)
            file_handlers.append(error_handler)
        except OSError as e:
            # An unwritable log location must not stop a cleanup
            for handler in file_handlers:
                handler.close()
            root_logger.addHandler(logging.NullHandler())
            root_logger.debug(f"File logging disabled: {e}")
            return root_logger

        for handler in file_handlers:
            root_logger.addHandler(handler)

    if not root_logger.handlers:
        root_logger.addHandler(logging.NullHandler())

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific module."""
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, message: str, exc_info: bool = True, **kwargs):
    """Log an exception with additional context."""
    logger.error(message, exc_info=exc_info, extra={'extra_data': kwargs})


def log_performance(logger: logging.Logger, operation: str, duration: float, **kwargs):
    """Log how long an operation took."""
    extra_data = {
        'operation': operation,
        'duration_ms': round(duration * 1000, 2),
        **kwargs
    }
    logger.debug(f"Performance: {operation} took {duration:.3f}s", extra={'extra_data': extra_data})
