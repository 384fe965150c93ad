"""The error dispatcher: the single sink that turns errors into responses.

Every layer of the middleware chain hands the errors it sees to the router's
error handler. The handler writes a response only while nothing has been
written for the request, so however many layers observe an error the client
receives exactly one response.
"""

from collections.abc import Callable

from loguru import logger
from starlette import status

from tusk.api.context import Context
from tusk.api.schemas.errors import ErrorBody, ValidationErrorBody
from tusk.api.utils.responses import ORJSONResponse
from tusk.core.context import RequestContext
from tusk.core.error_context import sanitize_error_context
from tusk.core.exceptions import (
    ConfigurationError,
    HTTPError,
    PanicError,
    ValidationError,
)

type ErrorHandler = Callable[[Context, Exception | None], None]


def render_error(error: Exception) -> tuple[HTTPError, ErrorBody | ValidationErrorBody]:
    """Classify an error and build its client payload.

    Args:
        error: Any exception raised while serving a request

    Returns:
        tuple: The error as an ``HTTPError`` (unclassified errors are wrapped
            into a 500) and the payload to send
    """
    match error:
        case ValidationError(group=group, errors=errors):
            return error, ValidationErrorBody(errors={group.lower(): errors})
        case PanicError() | ConfigurationError() | HTTPError():
            return error, ErrorBody(error=error.message)
        case _:
            wrapped = HTTPError(status.HTTP_500_INTERNAL_SERVER_ERROR, error)
            return wrapped, ErrorBody(error=wrapped.message)


def error_response(error: Exception) -> ORJSONResponse:
    """Render ``error`` as a standalone JSON response."""
    http_error, body = render_error(error)
    return ORJSONResponse(body, status_code=http_error.status)


def _log_error(ctx: Context, error: HTTPError) -> None:
    request = ctx.request
    error_context = sanitize_error_context(
        error,
        {
            "request_method": request.method,
            "request_path": request.url.path,
            "error_code": error.error_code.value,
        },
    )
    correlation_id = RequestContext.get_correlation_id()

    if isinstance(error, PanicError):
        logger.opt(exception=error.cause).error(
            "Recovered panic: {message}",
            message=error.message,
            correlation_id=correlation_id,
            stack_trace=error.stack,
            **error_context,
        )
    elif isinstance(error, ConfigurationError):
        logger.critical(
            "Handler misconfigured: {message}",
            message=error.message,
            correlation_id=correlation_id,
            **error_context,
        )
    elif error.is_expected:
        logger.warning(
            "Handling expected error: {message}",
            message=error.message,
            correlation_id=correlation_id,
            status_code=error.status,
            **error_context,
        )
    else:
        logger.error(
            "Handling {exception_type}: {message}",
            exception_type=type(error.cause).__name__,
            message=error.message,
            correlation_id=correlation_id,
            status_code=error.status,
            alert=error.should_alert,
            **error_context,
        )


def default_error_handler(ctx: Context, error: Exception | None) -> None:
    """Write ``error`` as the JSON response of the request, at most once.

    Errors exposing a status keep it; anything else becomes a 500. When a
    response was already written the error is only logged at debug level.

    Args:
        ctx: The request context
        error: The error to dispatch; None is a no-op
    """
    if error is None:
        return

    http_error, body = render_error(error)
    if ctx.response.written:
        logger.debug(
            "Response already written, suppressing {exception_type}",
            exception_type=type(error).__name__,
            written_status=ctx.response.status_code,
        )
        return

    _log_error(ctx, http_error)
    ctx.write_json(http_error.status, body)
