"""Correlation IDs for request tracing.

The correlation ID is taken from the ``X-Correlation-ID`` request header or
generated, stored in a context variable, bound to every log record of the
request and echoed in the response, error responses included.
"""

from loguru import logger

from tusk.api.constants import CORRELATION_ID_HEADER
from tusk.api.context import Context
from tusk.api.middleware.chain import HandlerFunc
from tusk.core.context import RequestContext, generate_correlation_id


def request_context_middleware(next_: HandlerFunc) -> HandlerFunc:
    """Attach a correlation ID to the request, its logs and its response."""

    async def handle(ctx: Context) -> None:
        correlation_id = (
            ctx.request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)
        ctx.response.headers[CORRELATION_ID_HEADER] = correlation_id

        # contextualize scopes the binding to this request
        with logger.contextualize(correlation_id=correlation_id):
            await next_(ctx)

    return handle
