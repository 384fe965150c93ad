"""Structured exception hierarchy for request binding and error dispatch.

Every failure surfaced by the request pipeline is one of a closed set of
kinds, all rooted at :class:`HTTPError`:

- **HTTPError**: status error with a caller-chosen status and a cause
- **ValidationError**: bad client input, always 400, messages grouped by the
  originating field group (``Query``, ``URLParams`` or ``Body``)
- **PanicError**: unexpected exception recovered from handler code, always 500
- **ConfigurationError**: developer mistakes in handler declarations, always 500

Any other exception reaching the dispatcher is the unclassified kind and is
wrapped into a 500 ``HTTPError``.

Each error carries an :class:`ErrorCode` for programmatic handling and a
:class:`Severity` used to pick log levels. How an error is rendered for the
client lives in ``tusk.api.dispatch``.
"""

from collections.abc import Sequence
from enum import Enum
from http import HTTPStatus

from starlette import status as http_status


class ErrorCode(Enum):
    """Standardized error codes.

    These error codes provide consistent identification of error types
    across the application, enabling proper error handling and monitoring.
    """

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    BAD_REQUEST = "BAD_REQUEST"
    """The request could not be understood, e.g. an unusable content type."""

    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    NOT_ACCEPTABLE = "NOT_ACCEPTABLE"
    GONE = "GONE"
    UNSUPPORTED_MEDIA_TYPE = "UNSUPPORTED_MEDIA_TYPE"
    TOO_MANY_REQUESTS = "TOO_MANY_REQUESTS"

    PANIC = "PANIC"
    """Handler code raised an exception that was recovered."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """A handler is declared incorrectly. Never caused by client input."""


class Severity(Enum):
    """Severity levels for errors.

    These severity levels help categorize the impact and urgency of errors,
    enabling appropriate handling, monitoring, and alerting strategies.
    """

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that may affect some features but not critical ops."""

    HIGH = "HIGH"
    """High severity errors such as auth failures or server faults."""

    CRITICAL = "CRITICAL"
    """Critical errors requiring immediate attention."""


_STATUS_CODES: dict[int, ErrorCode] = {
    http_status.HTTP_400_BAD_REQUEST: ErrorCode.BAD_REQUEST,
    http_status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    http_status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    http_status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    http_status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
    http_status.HTTP_406_NOT_ACCEPTABLE: ErrorCode.NOT_ACCEPTABLE,
    http_status.HTTP_410_GONE: ErrorCode.GONE,
    http_status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: ErrorCode.UNSUPPORTED_MEDIA_TYPE,
    http_status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.TOO_MANY_REQUESTS,
}


def status_text(status: int) -> str:
    """Return the standard reason phrase for a status code.

    Args:
        status: HTTP status code

    Returns:
        str: The reason phrase, or "Unknown Status" for unregistered codes
    """
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"


def _severity_for(status: int) -> Severity:
    if status in (http_status.HTTP_401_UNAUTHORIZED, http_status.HTTP_403_FORBIDDEN):
        return Severity.HIGH
    if status >= http_status.HTTP_500_INTERNAL_SERVER_ERROR:
        return Severity.HIGH
    return Severity.LOW


class HTTPError(Exception):
    """An error communicated to the client with an HTTP status.

    Args:
        status: HTTP status code used for the response
        cause: The underlying error. Strings are wrapped into an ``Exception``;
            ``None`` uses the standard reason phrase of ``status``
        error_code: Overrides the code derived from ``status``
        severity: Overrides the severity derived from ``status``
    """

    def __init__(
        self,
        status: int,
        cause: Exception | str | None = None,
        *,
        error_code: ErrorCode | None = None,
        severity: Severity | None = None,
    ) -> None:
        if cause is None:
            cause = status_text(status)
        if isinstance(cause, str):
            cause = Exception(cause)
        self.status = status
        self.cause = cause
        self.error_code = error_code or _STATUS_CODES.get(
            status, ErrorCode.INTERNAL_ERROR
        )
        self.severity = severity or _severity_for(status)

        super().__init__(str(cause))
        self.__cause__ = cause

    @property
    def message(self) -> str:
        """Client-safe text of the cause."""
        return str(self.cause)

    @property
    def is_expected(self) -> bool:
        """Determine if this is an expected error based on severity.

        Expected errors occur during normal operation due to client input
        and should be logged at a lower level without triggering alerts.

        Returns:
            bool: True if the error is expected (LOW or MEDIUM severity)
        """
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Determine if this error should trigger alerts.

        Returns:
            bool: True if the error should trigger alerts (HIGH or CRITICAL severity)
        """
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        return f"HTTPError: (status: {self.status}, error: {self.message})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(status={self.status}, "
            f"error_code='{self.error_code.value}', message='{self.message}')"
        )


class _StatusError(HTTPError):
    """An HTTPError with a fixed status, for concise sentinel errors."""

    default_status = http_status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, cause: Exception | str | None = None) -> None:
        super().__init__(self.default_status, cause)


class UnauthorizedError(_StatusError):
    default_status = http_status.HTTP_401_UNAUTHORIZED


class ForbiddenError(_StatusError):
    default_status = http_status.HTTP_403_FORBIDDEN


class NotFoundError(_StatusError):
    default_status = http_status.HTTP_404_NOT_FOUND


class NotAcceptableError(_StatusError):
    default_status = http_status.HTTP_406_NOT_ACCEPTABLE


class GoneError(_StatusError):
    default_status = http_status.HTTP_410_GONE


class UnsupportedMediaTypeError(_StatusError):
    default_status = http_status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class TooManyRequestsError(_StatusError):
    default_status = http_status.HTTP_429_TOO_MANY_REQUESTS


class EntityNotFoundError(NotFoundError):
    """A 404 for when the URL is correct but no record exists.

    Sending a bare 404 leaves the client guessing whether the path was wrong
    or the item is missing. This error makes the distinction explicit.
    """

    def __init__(self, cause: Exception | str | None = "entity not found") -> None:
        super().__init__(cause)


class ValidationError(HTTPError):
    """Bad client input for one field group.

    Validation errors come from type mismatches while binding and from
    constraint checks after binding. They are always 400 errors.

    Args:
        group: The field group that failed (``Query``, ``URLParams``, ``Body``)
        errors: One message (or exception) per violated rule
    """

    def __init__(self, group: str, errors: Sequence[Exception | str]) -> None:
        self.group = group
        self.errors = [str(error) for error in errors]
        super().__init__(
            http_status.HTTP_400_BAD_REQUEST,
            "; ".join(self.errors),
            error_code=ErrorCode.VALIDATION_ERROR,
            severity=Severity.LOW,
        )

    def __str__(self) -> str:
        return self.message


class PanicError(HTTPError):
    """An unexpected exception recovered from handler code.

    The stack trace is kept for server-side logging only; clients see the
    cause text.

    Args:
        recovered: The recovered value. Exceptions are used as the cause,
            anything else is formatted as text
        stack: The formatted stack trace captured at recovery time
    """

    def __init__(self, recovered: object, stack: str) -> None:
        cause = recovered if isinstance(recovered, Exception) else Exception(str(recovered))
        self.stack = stack
        super().__init__(
            http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            cause,
            error_code=ErrorCode.PANIC,
            severity=Severity.CRITICAL,
        )

    def __str__(self) -> str:
        return f"{self.cause}\n{self.stack}"


class ConfigurationError(HTTPError):
    """A developer mistake in a handler declaration, never bad client input."""

    def __init__(self, message: str) -> None:
        super().__init__(
            http_status.HTTP_500_INTERNAL_SERVER_ERROR,
            message,
            error_code=ErrorCode.CONFIGURATION_ERROR,
            severity=Severity.CRITICAL,
        )


class BadFieldError(ConfigurationError):
    """A reserved handler field has an unusable shape.

    Args:
        field: The reserved field name
        handler_name: Name of the handler class declaring it
        reason: What is wrong with the field
    """

    def __init__(self, field: str, handler_name: str, reason: str) -> None:
        self.field = field
        self.handler_name = handler_name
        self.reason = reason
        super().__init__(f"'{field}' field of '{handler_name}' {reason}")


class NilHandlerError(ConfigurationError):
    """A handler provider returned ``None`` without raising."""

    def __init__(self, method: str, path: str) -> None:
        super().__init__(f"nil handler provided for {method!r} {path!r}")


class TypeMismatchError(Exception):
    """A raw request value could not be converted to a member's type.

    Always reported to clients wrapped in a :class:`ValidationError` for the
    group being bound.
    """

    def __init__(self, member: str, key: str, value: object, target: str) -> None:
        self.member = member
        self.key = key
        self.value = value
        self.target = target
        super().__init__(
            f"{member}: cannot use {value!r} from '{key}' as {target}"
        )


class ResponseAlreadyWrittenError(RuntimeError):
    """Handler code attempted to write a second response."""
