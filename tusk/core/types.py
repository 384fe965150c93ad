"""Type aliases for dynamic data structures throughout the package.

All types defined here should be JSON-serializable to support logging and
API responses.
"""

from typing import Any

# JSON-compatible type that represents any valid JSON value
type JsonValue = (
    dict[str, "JsonValue"] | list["JsonValue"] | str | int | float | bool | None
)

# Context dictionary for logging additional information
type LogContext = dict[str, Any]

# Context dictionary for error details attached to log records
type ErrorContext = dict[str, Any]
