"""
Structured logging utilities for the MoodMash engine.
"""
import json
import logging
import sys
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Generator

_HANDLER_MARKER = "_moodmash_handler"
_SECRET_KEYS = {'password', 'secret', 'key', 'token', 'api_key', 'auth'}


@dataclass
class LogContext:
    """Context information for structured logging."""
    component: str
    operation: str
    metadata: Optional[Dict[str, Any]] = None


class JSONFormatter(logging.Formatter):
    """Renders one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage()
        }
        context = getattr(record, 'context', None)
        if context:
            log_entry["context"] = asdict(context)
        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            log_entry.update(extra_fields)
        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }
        return json.dumps(log_entry, default=str)


class TextFormatter(logging.Formatter):
    """Plain single-line formatter with extra fields appended as key=value."""

    def __init__(self):
        super().__init__(
            "[%(asctime)s] %(levelname)-8s %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra_fields = getattr(record, 'extra_fields', None)
        if extra_fields:
            line += " " + " ".join(f"{k}={v}" for k, v in extra_fields.items())
        return line


class StructuredLogger:
    """Structured logger that writes JSON (or text) records to stderr with context information."""

    def __init__(self, name: str, level: str = "INFO", fmt: str = "json"):
        """Initialize the structured logger.

        Args:
            name: Logger name (typically module name)
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            fmt: Output format, 'json' or 'text'
        """
        self.name = name
        self.level = level.upper()
        self.fmt = fmt
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.level))
        self._configure_handler()
        self._context: Optional[LogContext] = None

    def _configure_handler(self) -> None:
        """Attach a single stderr handler, replacing one installed by an earlier instance."""
        for handler in self.logger.handlers[:]:
            if getattr(handler, _HANDLER_MARKER, False):
                self.logger.removeHandler(handler)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter() if self.fmt == "json" else TextFormatter())
        setattr(handler, _HANDLER_MARKER, True)
        self.logger.addHandler(handler)
        self.logger.propagate = False

    def _log(self, level: str, message: str, exc_info: bool = False, **kwargs) -> None:
        extra = {
            'context': self._context,
            'extra_fields': kwargs
        }
        getattr(self.logger, level.lower())(message, extra=extra, exc_info=exc_info)

    def info(self, message: str, **kwargs) -> None:
        """Log an info message."""
        self._log("INFO", message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """Log an error message, optionally with the active exception."""
        self._log("ERROR", message, exc_info=exc_info, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """Log a warning message."""
        self._log("WARNING", message, **kwargs)

    def debug(self, message: str, **kwargs) -> None:
        """Log a debug message."""
        self._log("DEBUG", message, **kwargs)

    def metric(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        """Log a metric value.

        Args:
            name: Metric name
            value: Metric value
            tags: Optional tags for the metric
        """
        metric_data: Dict[str, Any] = {
            "metric_name": name,
            "metric_value": value
        }
        if tags:
            metric_data["tags"] = tags
        self._log("INFO", f"Metric: {name}", **metric_data)

    def with_context(self, context: LogContext) -> 'StructuredLogger':
        """Return a logger sharing this one's handler but tagging records with ``context``."""
        new_logger = object.__new__(StructuredLogger)
        new_logger.name = self.name
        new_logger.level = self.level
        new_logger.fmt = self.fmt
        new_logger.logger = self.logger
        new_logger._context = context
        return new_logger

    @contextmanager
    def operation_context(self, component: str, operation: str, **metadata) -> Generator['StructuredLogger', None, None]:
        """Context manager for operation logging with automatic start/end logging.

        Args:
            component: Component name performing the operation
            operation: Operation name
            **metadata: Additional metadata for the operation

        Yields:
            StructuredLogger instance with operation context
        """
        context = LogContext(component=component, operation=operation, metadata=metadata)
        contextual_logger = self.with_context(context)
        contextual_logger.debug(f"Starting operation: {operation}", operation_status="started")
        start = time.perf_counter()
        try:
            yield contextual_logger
        except Exception as e:
            contextual_logger.error(
                f"Failed operation: {operation}",
                exc_info=True,
                operation_status="failed",
                duration_seconds=time.perf_counter() - start,
                error_type=type(e).__name__,
                error_message=str(e)
            )
            raise
        contextual_logger.info(
            f"Completed operation: {operation}",
            operation_status="completed",
            duration_seconds=time.perf_counter() - start
        )

    def log_config(self, config: Dict[str, Any], exclude_secrets: bool = True) -> None:
        """Log configuration with optional secret filtering."""
        if exclude_secrets:
            config = _filter_secrets(config)
        self.info("Configuration loaded", config=config)


def _filter_secrets(data: Dict[str, Any]) -> Dict[str, Any]:
    filtered = {}
    for key, value in data.items():
        if any(secret in str(key).lower() for secret in _SECRET_KEYS):
            filtered[key] = "***REDACTED***"
        elif isinstance(value, dict):
            filtered[key] = _filter_secrets(value)
        else:
            filtered[key] = value
    return filtered


def get_logger(name: str, level: str = "INFO", fmt: str = "json") -> StructuredLogger:
    """Factory function to create a StructuredLogger instance."""
    return StructuredLogger(name, level, fmt)
