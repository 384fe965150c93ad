"""Structured logging built on Loguru.

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON object per line (containers and log shippers)

Standard library logging, including uvicorn's loggers, is intercepted and
forwarded to Loguru so that every record shares one format. Request-scoped
fields such as ``correlation_id`` are attached with ``logger.contextualize``
by the bundled middlewares and show up in both formats.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
from typing import Any, Final, Protocol, cast

from loguru import logger

from tusk.core.constants import REDACTED
from tusk.core.types import LogContext


class _LoggingState:
    """Tracks whether logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str: ...

    @property
    def log_formatter_type(self) -> str | None: ...

    @property
    def sensitive_fields(self) -> list[str]: ...


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool: ...

    @property
    def log_config(self) -> LogConfigProtocol: ...


CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)


def _escape(value: object) -> str:
    # Loguru treats the returned format as a template
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_context_fields(
    extra: LogContext, sensitive_fields: frozenset[str]
) -> list[str]:
    """Format the extra fields of a record, priority fields first.

    Args:
        extra: Extra fields from the log record.
        sensitive_fields: Lower-cased field names to redact.

    Returns:
        list[str]: Formatted ``key=value`` parts.
    """
    parts = []
    for field in PRIORITY_FIELDS:
        value = extra.get(field)
        if value is None:
            continue
        if field == "correlation_id":
            value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
        elif field == "duration_ms":
            value = f"{value}ms"
        parts.append(f"<yellow>{_escape(value)}</yellow>")

    for key, value in extra.items():
        if key in PRIORITY_FIELDS or key.startswith("_") or value is None:
            continue
        text = REDACTED if key.lower() in sensitive_fields else str(value)
        if len(text) > MAX_FIELD_VALUE_LENGTH:
            text = text[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
        parts.append(f"<dim>{_escape(key)}={_escape(text)}</dim>")
    return parts


def make_console_formatter(sensitive_fields: list[str]) -> Any:  # noqa: ANN401 - loguru format callable
    """Build a console formatter that shows every context field inline."""
    sensitive = frozenset(field.lower() for field in sensitive_fields)

    def format_console_with_context(record: dict[str, Any]) -> str:
        parts = [
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
            "<level>{level: <8}</level>",
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
        ]
        context_parts = _format_context_fields(record.get("extra", {}), sensitive)
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))
        parts.append("{message}")
        line = " | ".join(parts) + "\n"
        if record.get("exception"):
            line += "{exception}\n"
        return line

    return format_console_with_context


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format a log record as a single JSON line.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if extra := record.get("extra", {}):
        log_entry.update({k: v for k, v in extra.items() if not k.startswith("_")})

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller outside of the logging module
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


# Passed to uvicorn so its own loggers go through InterceptHandler
UVICORN_LOG_CONFIG: Final[dict[str, Any]] = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "intercept": {"()": "tusk.core.logging.InterceptHandler"},
    },
    "loggers": {
        name: {"handlers": ["intercept"], "level": "INFO", "propagate": False}
        for name in ("uvicorn", "uvicorn.error", "uvicorn.access")
    },
}


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru once for the process.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or "console"
    level = settings.log_config.log_level

    if formatter_type == "json":

        def structured_sink(message: object) -> None:
            sys.stdout.write(serialize_for_json(cast("Any", message).record))
            sys.stdout.flush()

        logger.add(
            structured_sink,
            level=level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )
    else:
        logger.add(
            sys.stdout,
            format=make_console_formatter(settings.log_config.sensitive_fields),
            level=level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=level,
    )
    _state.configured = True
