"""HTTP request logging with timing.

Logs the start and outcome of every request with its duration, warns about
slow requests and tags responses with an ``X-Request-ID``. Failed requests
are logged after the error has been dispatched, with the status that was
actually written, and the error keeps propagating.
"""

import time

from loguru import logger
from starlette import status
from starlette.requests import Request

from tusk.api.constants import MAX_USER_AGENT_LENGTH, REQUEST_ID_HEADER
from tusk.api.context import Context
from tusk.api.middleware.chain import HandlerFunc, Middleware
from tusk.core.config import LogConfig, get_settings
from tusk.core.constants import MILLISECONDS_PER_SECOND
from tusk.core.context import generate_request_id
from tusk.core.error_context import sanitize_dict


def _get_client_ip(request: Request) -> str:
    if request.client:
        return request.client.host
    return "unknown"


def _get_user_agent(request: Request) -> str:
    ua = request.headers.get("user-agent", "")
    return ua[:MAX_USER_AGENT_LENGTH] if ua else "unknown"


def request_logging_middleware(log_config: LogConfig | None = None) -> Middleware:
    """Build a middleware that logs every request.

    Args:
        log_config: Logging configuration; defaults to the cached settings

    Returns:
        Middleware: The request logging middleware
    """
    config = log_config or get_settings().log_config
    excluded_paths = frozenset(config.excluded_paths)
    slow_threshold_ms = config.slow_request_threshold_ms

    def middleware(next_: HandlerFunc) -> HandlerFunc:
        async def handle(ctx: Context) -> None:
            request = ctx.request
            if request.url.path in excluded_paths:
                await next_(ctx)
                return

            request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
            ctx.response.headers[REQUEST_ID_HEADER] = request_id

            with logger.contextualize(
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                client_host=_get_client_ip(request),
                user_agent=_get_user_agent(request),
            ):
                logger.info(
                    "Request started",
                    query_params=(
                        sanitize_dict(dict(request.query_params))
                        if request.query_params
                        else None
                    ),
                )
                start_time = time.perf_counter()

                try:
                    await next_(ctx)
                except Exception as exc:
                    duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
                    status_code = ctx.response.status_code
                    expected = status_code and status_code < status.HTTP_500_INTERNAL_SERVER_ERROR
                    log = logger.warning if expected else logger.error
                    log(
                        "Request failed",
                        status_code=status_code,
                        duration_ms=round(duration_ms, 2),
                        error_type=type(exc).__name__,
                    )
                    raise

                duration_ms = (time.perf_counter() - start_time) * MILLISECONDS_PER_SECOND
                logger.info(
                    "Request completed",
                    status_code=ctx.response.status_code or 200,
                    duration_ms=round(duration_ms, 2),
                )
                if duration_ms > slow_threshold_ms:
                    logger.warning(
                        "Slow request detected",
                        duration_ms=round(duration_ms, 2),
                        threshold_ms=slow_threshold_ms,
                    )

        return handle

    return middleware
