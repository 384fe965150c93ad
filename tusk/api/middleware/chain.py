"""Composing middlewares around a handler function.

A middleware takes the next handler function and returns a new one::

    def timing(next_: HandlerFunc) -> HandlerFunc:
        async def handle(ctx: Context) -> None:
            start = time.perf_counter()
            await next_(ctx)
            ctx.response.headers["X-Elapsed"] = f"{time.perf_counter() - start:.3f}"

        return handle

The first registered middleware is the outermost: it runs first on the way
in and sees errors last on the way out.
"""

from collections.abc import Awaitable, Callable, Sequence

from tusk.api.context import Context
from tusk.api.dispatch import ErrorHandler

type HandlerFunc = Callable[[Context], Awaitable[None]]
type Middleware = Callable[[HandlerFunc], HandlerFunc]


def with_error_handler(next_: HandlerFunc, error_handler: ErrorHandler) -> HandlerFunc:
    """Dispatch any error raised by ``next_``, then re-raise it.

    Re-raising lets outer layers observe the error; the dispatcher's
    write-once check keeps those later dispatches from writing again.
    """

    async def handle(ctx: Context) -> None:
        try:
            await next_(ctx)
        except Exception as exc:
            error_handler(ctx, exc)
            raise

    return handle


def compose(
    middlewares: Sequence[Middleware],
    handler: HandlerFunc,
    error_handler: ErrorHandler,
) -> HandlerFunc:
    """Wrap ``handler`` in ``middlewares``, first registered outermost.

    The handler and every middleware layer are individually wrapped by the
    error handler, so a layer that swallows an error still leaves a written
    response behind.

    Args:
        middlewares: Middlewares in registration order
        handler: The innermost handler function
        error_handler: The dispatcher every layer reports to

    Returns:
        HandlerFunc: The composed handler function
    """
    fn = with_error_handler(handler, error_handler)
    for middleware in reversed(middlewares):
        fn = with_error_handler(middleware(fn), error_handler)
    return fn
