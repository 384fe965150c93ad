"""Recovering from unexpected exceptions raised by handler code."""

import traceback

from tusk.api.context import Context
from tusk.api.middleware.chain import HandlerFunc
from tusk.core.exceptions import HTTPError, PanicError


def panic_middleware(next_: HandlerFunc) -> HandlerFunc:
    """Convert unexpected exceptions into ``PanicError``.

    ``HTTPError`` subclasses pass through unchanged. Any other exception is
    raised again as a ``PanicError`` carrying the formatted traceback, so it
    reaches the dispatcher like every other error. Cancellation and other
    ``BaseException`` subclasses are not touched.
    """

    async def handle(ctx: Context) -> None:
        try:
            await next_(ctx)
        except HTTPError:
            raise
        except Exception as exc:
            raise PanicError(exc, traceback.format_exc()) from exc

    return handle
