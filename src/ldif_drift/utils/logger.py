"""
Structured logging utility for ldif-drift.

Provides JSON-formatted logging with context injection and operation timing,
so analysis runs can be traced line by line from CI logs.
"""

import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from functools import wraps

LOG_LEVEL_ENV = "LDIF_DRIFT_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def resolve_log_level(level: Optional[str] = None) -> int:
    """
    Resolve a textual log level to its logging constant.

    Args:
        level: Level name such as "DEBUG" or "warning". Falls back to the
            LDIF_DRIFT_LOG_LEVEL environment variable, then INFO.

    Returns:
        Numeric logging level

    Example:
        >>> resolve_log_level("debug")
        10
        >>> resolve_log_level("nonsense")
        20
    """
    name = (level or os.getenv(LOG_LEVEL_ENV) or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    if isinstance(value, int):
        return value
    return logging.INFO


class StructuredLogger:
    """
    JSON-formatted logger with context injection and operation timing.

    All log output is JSON so that CI systems can parse analysis runs.
    """

    def __init__(self, name: str, level: Optional[str] = None):
        """
        Initialize structured logger.

        Args:
            name: Logger name (typically __name__ from calling module)
            level: Optional level name; defaults to LDIF_DRIFT_LOG_LEVEL
        """
        self.logger = logging.getLogger(name)
        # keep a level already set by configure_logging()
        if level is not None or self.logger.level == logging.NOTSET:
            self.logger.setLevel(resolve_log_level(level))

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(logging.DEBUG)

            formatter = logging.Formatter("%(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_level(self, level: str) -> None:
        """Change the level of the underlying logger."""
        self.logger.setLevel(resolve_log_level(level))

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None,
    ) -> str:
        """
        Format log entry as JSON.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            message: Human-readable message
            operation: Operation name (e.g., "analyze_file", "compare_stats")
            context: Context dict with paths, counts, etc.
            duration_ms: Operation duration in milliseconds
            error: Error message if applicable

        Returns:
            JSON-formatted log string
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "message": message,
        }

        if operation:
            log_entry["operation"] = operation

        if context:
            log_entry["context"] = context

        if duration_ms is not None:
            log_entry["duration_ms"] = round(duration_ms, 2)

        if error:
            log_entry["error"] = error

        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def debug(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Log debug message."""
        log_json = self._format_log("DEBUG", message, operation, context)
        self.logger.debug(log_json)

    def info(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
    ):
        """Log info message."""
        log_json = self._format_log("INFO", message, operation, context, duration_ms)
        self.logger.info(log_json)

    def warning(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        """Log warning message."""
        log_json = self._format_log("WARNING", message, operation, context, error=error)
        self.logger.warning(log_json)

    def error(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        duration_ms: Optional[float] = None,
    ):
        """Log error message."""
        log_json = self._format_log(
            "ERROR", message, operation, context, duration_ms, error
        )
        self.logger.error(log_json)


def log_operation(operation_name: str):
    """
    Decorator to automatically log operation start, duration, and completion.

    Usage:
        @log_operation("analyze_file")
        def analyze_file(path):
            ...
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = StructuredLogger(func.__module__)

            context: Dict[str, Any] = {
                "function": func.__name__,
            }

            if len(args) > 0:
                context["arg_count"] = len(args)
            paths = [str(a) for a in args if isinstance(a, (str, os.PathLike)) and len(str(a)) < 512]
            if paths:
                context["paths"] = paths

            logger.debug(
                f"Starting {operation_name}", operation=operation_name, context=context
            )

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.time() - start_time) * 1000
                logger.info(
                    f"Completed {operation_name}",
                    operation=operation_name,
                    context=context,
                    duration_ms=duration_ms,
                )
                return result
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(
                    f"Failed {operation_name}",
                    operation=operation_name,
                    context=context,
                    error=str(e),
                    duration_ms=duration_ms,
                )
                raise

        return wrapper

    return decorator


def configure_logging(level: str, package: str = "ldif_drift") -> int:
    """
    Apply a log level to every logger of the package created so far.

    Args:
        level: Level name such as "DEBUG"
        package: Logger name prefix

    Returns:
        Numeric level applied
    """
    value = resolve_log_level(level)
    logging.getLogger(package).setLevel(value)
    for name in list(logging.Logger.manager.loggerDict):
        if name == package or name.startswith(package + "."):
            logging.getLogger(name).setLevel(value)
    return value


def get_logger(name: str) -> StructuredLogger:
    """
    Factory function to get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)
