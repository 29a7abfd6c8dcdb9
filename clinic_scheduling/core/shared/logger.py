"""
Shared Logger

Logging for the scheduling engine. Use cases and repositories log through
a ContextLogger that carries ids (doctor, patient, appointment, actor) on
every record; formatters render that context as JSON fields or as
``key=value`` pairs on the console line.
"""

import copy
import json
import logging
import sys
from collections.abc import MutableMapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from clinic_scheduling.config.settings import Settings

CONTEXT_ATTR = "extra_data"
CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Keyword arguments the logging module understands itself
_LOGGING_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

# Chatty libraries kept at WARNING unless SQL echo is on
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncpg")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    return getattr(record, CONTEXT_ATTR, None) or {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the scheduling context under "context"."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        context = record_context(record)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human readable line with the context appended.

        2025-03-10 09:00:00 | INFO | use_case.create_appointment | Booked | doctor_id=7 patient_id=123
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, colored: bool = False, fmt: str = CONSOLE_FORMAT, datefmt: str = DATE_FORMAT):
        super().__init__(fmt, datefmt=datefmt)
        self.colored = colored

    def format(self, record: logging.LogRecord) -> str:
        if self.colored:
            # Other handlers share the record
            record = copy.copy(record)
            color = self.LEVEL_COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        line = super().format(record)
        context = record_context(record)
        if context:
            line += " | " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that binds scheduling context.

    Extra keyword arguments on a call are merged into the bound context:

        ```python
        log = get_use_case_logger("create_appointment").with_context(doctor_id=7)
        log.info("Appointment booked", appointment_id=42)
        ```
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        super().__init__(logging.getLogger(name), dict(context or {}))

    def with_context(self, **kwargs) -> "ContextLogger":
        return ContextLogger(self.logger.name, {**self.extra, **kwargs})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        options = {key: value for key, value in kwargs.items() if key in _LOGGING_KWARGS}
        fields = {key: value for key, value in kwargs.items() if key not in _LOGGING_KWARGS}
        extra = dict(options.pop("extra", None) or {})
        extra[CONTEXT_ATTR] = {**self.extra, **fields}
        options["extra"] = extra
        return msg, options


def _handler(stream_or_path: Any, formatter: logging.Formatter, level: int) -> logging.Handler:
    if isinstance(stream_or_path, str):
        handler: logging.Handler = logging.FileHandler(stream_or_path)
    else:
        handler = logging.StreamHandler(stream_or_path)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_logging(
    level: str = "INFO",
    format_type: str = "colored",
    log_file: str | None = None,
) -> None:
    """
    Replace the root handlers with the engine's console (and file) handlers.

    Args:
        level: Log level name
        format_type: 'colored', 'json' or 'plain'
        log_file: Optional path; file records are always JSON
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    if format_type not in ("colored", "json", "plain"):
        raise ValueError(f"Unknown log format: {format_type}")

    console: logging.Formatter = (
        JSONFormatter() if format_type == "json" else ConsoleFormatter(colored=format_type == "colored")
    )

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()
    root.addHandler(_handler(sys.stdout, console, numeric_level))
    if log_file:
        root.addHandler(_handler(log_file, JSONFormatter(), numeric_level))


def configure_logging_from_settings(settings: "Settings") -> None:
    """Apply LOG_* settings and quiet the database drivers unless DB_ECHO is set."""
    configure_logging(
        level=settings.LOG_LEVEL,
        format_type=settings.LOG_FORMAT,
        log_file=settings.LOG_FILE,
    )
    driver_level = logging.INFO if settings.DB_ECHO else logging.WARNING
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)


def get_logger(name: str, context: dict[str, Any] | None = None) -> ContextLogger:
    return ContextLogger(name, context)


def get_use_case_logger(use_case_name: str) -> ContextLogger:
    """Logger for application use cases."""
    return get_logger(f"use_case.{use_case_name}", {"component": "use_case", "use_case": use_case_name})


def get_repository_logger(repo_name: str) -> ContextLogger:
    """Logger for repository adapters."""
    return get_logger(f"repository.{repo_name}", {"component": "repository", "repository": repo_name})
