"""Sensitive data sanitization for error and request logging.

Bound request values end up in log records when binding or validation fails.
This module redacts values whose field names look sensitive before they are
handed to the logger. Client payloads are never built from this context.
"""

from __future__ import annotations

import re
from functools import lru_cache
from re import Pattern
from typing import Any, Final

from tusk.core.config import get_settings
from tusk.core.constants import REDACTED

SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "x-api-key",
    "x-auth-token",
    "x-csrf-token",
    "set-cookie",
    "proxy-authorization",
}

DEFAULT_SENSITIVE_PATTERN: Final[Pattern[str]] = re.compile(
    r"(password|passwd|pwd|secret|token|api[_-]?key|apikey|authorization|"
    r"credential|private[_-]?key|access[_-]?key|session|cvv|card[_-]?number)",
    re.IGNORECASE,
)

MAX_DEPTH: Final[int] = 10

# Attributes that duplicate the message or hold non-loggable objects
_SKIPPED_ATTRIBUTES = frozenset({"cause", "stack"})


@lru_cache(maxsize=1)
def _get_sensitive_fields() -> tuple[str, ...]:
    return tuple(field.lower() for field in get_settings().log_config.sensitive_fields)


def is_sensitive_field(field_name: str) -> bool:
    """Check if a field name indicates sensitive data.

    Args:
        field_name: The field name to check.

    Returns:
        bool: True if the field appears to contain sensitive data.
    """
    if DEFAULT_SENSITIVE_PATTERN.search(field_name):
        return True
    field_lower = field_name.lower()
    return any(field in field_lower for field in _get_sensitive_fields())


def sanitize_value(value: Any, field_name: str = "", depth: int = 0) -> Any:  # noqa: ANN401 - any loggable value
    """Sanitize a value if it appears to be sensitive.

    Nested dicts, lists and tuples are sanitized recursively up to MAX_DEPTH.

    Args:
        value: The value to potentially sanitize.
        field_name: The field name for context.
        depth: Current recursion depth.

    Returns:
        Any: Sanitized value or original if not sensitive.
    """
    if depth > MAX_DEPTH:
        return REDACTED
    if field_name and is_sensitive_field(field_name):
        return REDACTED
    if isinstance(value, dict):
        return {k: sanitize_value(v, str(k), depth + 1) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_value(item, "", depth + 1) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(item, "", depth + 1) for item in value)
    return value


def sanitize_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``data`` with sensitive fields redacted."""
    return {key: sanitize_value(value, key) for key, value in data.items()}


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Redact sensitive HTTP headers."""
    return {
        k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()
    }


def sanitize_error_context(
    error: Exception, context: dict[str, Any] | None = None
) -> dict[str, Any]:
    """Create sanitized error context for logging.

    Args:
        error: The exception to create context for.
        context: Additional context to include (will be sanitized).

    Returns:
        dict[str, Any]: Sanitized error context safe for logging.
    """
    error_context: dict[str, Any] = {
        "error_type": type(error).__name__,
        "error_message": str(getattr(error, "message", error)),
    }

    if context:
        error_context.update(sanitize_dict(context))

    error_attrs = {
        k: v
        for k, v in vars(error).items()
        if not k.startswith("_") and k not in _SKIPPED_ATTRIBUTES
    }
    if error_attrs:
        error_context["error_attributes"] = sanitize_dict(error_attrs)

    return error_context
