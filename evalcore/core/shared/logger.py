"""
Evaluation logging

Loggers carry an evaluation context (evaluator and version, suite id,
subject index, ...) that travels with every record. Formatters render that
context either as a JSON object or as a trailing `key=value` list, so batch
and evaluator messages stay short and filterable.
"""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from evalcore.config.settings import EvaluationSettings

ROOT_LOGGER = "evalcore"
CONTEXT_ATTR = "evaluation_context"
LINE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, CONTEXT_ATTR, None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; the bound context goes under `context`."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextFormatter(logging.Formatter):
    """Plain line format with the context appended as `[key=value ...]`."""

    def __init__(self) -> None:
        super().__init__(LINE_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


class ColoredFormatter(ContextFormatter):
    """ContextFormatter with the level name colored for terminals."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = f"{self.COLORS.get(original, self.RESET)}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = original


FORMATTERS: dict[str, type[logging.Formatter]] = {
    "json": JSONFormatter,
    "colored": ColoredFormatter,
    "plain": ContextFormatter,
}


class ContextLogger:
    """
    Wrapper around a stdlib logger that attaches an evaluation context.

    `bind()` returns a child carrying extra context; keyword arguments on a
    single call are merged into the context for that record only.
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self._logger = logging.getLogger(name)
        self._context = dict(context or {})

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def bind(self, **context: Any) -> "ContextLogger":
        return ContextLogger(self._logger.name, {**self._context, **context})

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        # stacklevel points the record at the caller of debug()/info()/...
        self._logger.log(level, message, extra={CONTEXT_ATTR: {**self._context, **fields}}, stacklevel=3)

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._log(logging.ERROR, message, fields)


def configure_logging(level: str = "INFO", format_type: str = "colored") -> logging.Logger:
    """
    Install a single stdout handler on the `evalcore` logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'colored', 'json', or 'plain'

    Returns:
        The configured package logger
    """
    formatter_type = FORMATTERS.get(format_type)
    if formatter_type is None:
        raise ValueError(f"Unknown log format '{format_type}'. Available: {', '.join(FORMATTERS)}")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter_type())

    package_logger = logging.getLogger(ROOT_LOGGER)
    package_logger.setLevel(level.upper())
    package_logger.handlers[:] = [handler]
    package_logger.propagate = False
    return package_logger


def configure_logging_from_settings(settings: "EvaluationSettings | None" = None) -> logging.Logger:
    """Configure logging from LOG_LEVEL and LOG_FORMAT."""
    from evalcore.config.settings import get_settings

    settings = settings or get_settings()
    return configure_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)


def get_logger(name: str, **context: Any) -> ContextLogger:
    return ContextLogger(name, context)


def get_evaluator_logger(evaluator_name: str, version: str) -> ContextLogger:
    """Logger bound to one evaluator name and version."""
    return get_logger(f"{ROOT_LOGGER}.evaluator.{evaluator_name}", evaluator=evaluator_name, version=version)


def get_service_logger(service_name: str) -> ContextLogger:
    return get_logger(f"{ROOT_LOGGER}.service.{service_name}", service=service_name)
