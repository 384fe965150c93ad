"""Routing requests to per-request handlers.

For every matched request the router:

1. asks the route's provider for a fresh handler instance,
2. binds and validates ``Query``, ``URLParams`` and ``Body``,
3. calls ``handler.handle(ctx)`` through the middleware chain,
4. dispatches the first error to the error handler,
5. flushes the single response.

Path matching is delegated to a Starlette router. Middlewares, the error
handler and routes must all be registered before serving starts; nothing is
locked while serving.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Protocol

import uvicorn
from loguru import logger
from starlette import status
from starlette.requests import Request
from starlette.routing import Route
from starlette.routing import Router as StarletteRouter
from starlette.types import Receive, Scope, Send

from tusk.api.context import Context
from tusk.api.dispatch import ErrorHandler, default_error_handler, error_response
from tusk.api.middleware.chain import HandlerFunc, Middleware, compose
from tusk.api.middleware.recovery import panic_middleware
from tusk.binding import FieldBinder
from tusk.core.config import Settings, get_settings
from tusk.core.exceptions import ConfigurationError, HTTPError, NilHandlerError
from tusk.core.logging import UVICORN_LOG_CONFIG


class Handler(Protocol):
    """A per-request handler.

    Handlers may declare the reserved fields ``Query``, ``URLParams`` and
    ``Body`` as pydantic models; they are populated before ``handle`` runs.
    """

    async def handle(self, ctx: Context) -> None: ...


type HandlerProvider = Callable[[Context], Handler | None | Awaitable[Handler | None]]


class _FuncHandler:
    """Adapts a plain handler function to the ``Handler`` protocol."""

    def __init__(self, func: HandlerFunc) -> None:
        self._func = func

    async def handle(self, ctx: Context) -> None:
        await self._func(ctx)


class _Route(Route):
    """A Starlette route answering wrong methods with a JSON 405."""

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self.methods and scope["method"] not in self.methods:
            response = error_response(HTTPError(status.HTTP_405_METHOD_NOT_ALLOWED))
            response.headers["Allow"] = ", ".join(sorted(self.methods))
            await response(scope, receive, send)
            return
        await self.app(scope, receive, send)


async def _not_found(scope: Scope, receive: Receive, send: Send) -> None:
    if scope["type"] != "http":
        return
    response = error_response(HTTPError(status.HTTP_404_NOT_FOUND))
    await response(scope, receive, send)


class _Endpoint:
    """ASGI endpoint of one route."""

    def __init__(self, router: "Router", provider: HandlerProvider) -> None:
        self.router = router
        self.provider = provider

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive, send)
        ctx = Context(request)
        fault: Exception | None = None
        try:
            handle = self.router.build_chain(self.provider)
            await handle(ctx)
        except Exception as exc:
            # Every layer has already dispatched and logged it
            fault = exc

        try:
            response = ctx.response.to_response()
            await response(scope, receive, send)
        finally:
            await request.close()

        if isinstance(fault, ConfigurationError) and self.router.settings.strict_configuration:
            raise fault


class Router:
    """An HTTP router binding requests into per-request handlers.

    Args:
        settings: Settings to read binding and recovery options from;
            defaults to the cached settings
        base: The Starlette router used for path matching
    """

    def __init__(
        self,
        settings: Settings | None = None,
        base: StarletteRouter | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.base = base or StarletteRouter(default=_not_found)
        self.middlewares: list[Middleware] = []
        # Writes error responses; replace before serving to customize
        self.error_handler: ErrorHandler = default_error_handler
        self.binder = FieldBinder(multipart_max_memory=self.settings.multipart_max_memory)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.base(scope, receive, send)

    def use(self, *middlewares: Middleware) -> None:
        """Add middlewares, executed in the order in which they are added.

        Raises:
            ValueError: If one of the middlewares is None
        """
        for position, middleware in enumerate(middlewares):
            if middleware is None:
                msg = f"cannot use nil middleware at position {position}"
                raise ValueError(msg)
        self.middlewares.extend(middlewares)

    def _request_handler(self, provider: HandlerProvider) -> HandlerFunc:
        """The innermost handler function: create, bind, validate, invoke."""

        async def handle(ctx: Context) -> None:
            handler = provider(ctx)
            if inspect.isawaitable(handler):
                handler = await handler
            if handler is None:
                raise NilHandlerError(ctx.request.method, ctx.request.url.path)

            await self.binder.bind(handler, ctx.request, ctx.url_params)
            await handler.handle(ctx)

        if self.settings.recover_panics:
            return panic_middleware(handle)
        return handle

    def build_chain(self, provider: HandlerProvider) -> HandlerFunc:
        """Compose the middleware chain around a provider's handlers."""
        return compose(self.middlewares, self._request_handler(provider), self.error_handler)

    def method(self, method: str, path: str, provider: HandlerProvider) -> None:
        """Route ``method`` requests for ``path`` to handlers made by ``provider``.

        The provider is called once per request and must return a fresh
        handler instance. It may be a coroutine function. Raising from the
        provider skips binding and dispatches the error; returning None is a
        configuration error.

        Args:
            method: HTTP method, e.g. "GET"
            path: Starlette path pattern, e.g. "/items/{item_id:int}"
            provider: Handler factory
        """
        self.base.routes.append(
            _Route(path, _Endpoint(self, provider), methods=[method.upper()])
        )
        logger.debug("Registered route {} {}", method.upper(), path)

    def method_func(self, method: str, path: str, func: HandlerFunc) -> None:
        """Route requests to a plain handler function without bound fields."""
        self.method(method, path, lambda _ctx: _FuncHandler(func))

    def get(self, path: str, provider: HandlerProvider) -> None:
        """Route GET requests (HEAD is answered too)."""
        self.method("GET", path, provider)

    def head(self, path: str, provider: HandlerProvider) -> None:
        self.method("HEAD", path, provider)

    def post(self, path: str, provider: HandlerProvider) -> None:
        self.method("POST", path, provider)

    def put(self, path: str, provider: HandlerProvider) -> None:
        self.method("PUT", path, provider)

    def patch(self, path: str, provider: HandlerProvider) -> None:
        self.method("PATCH", path, provider)

    def delete(self, path: str, provider: HandlerProvider) -> None:
        self.method("DELETE", path, provider)

    def options(self, path: str, provider: HandlerProvider) -> None:
        self.method("OPTIONS", path, provider)

    def trace(self, path: str, provider: HandlerProvider) -> None:
        self.method("TRACE", path, provider)

    def listen_and_serve(self, host: str | None = None, port: int | None = None) -> None:
        """Serve this router with uvicorn until interrupted."""
        uvicorn.run(
            self,
            host=host or self.settings.api_host,
            port=port or self.settings.api_port,
            log_config=UVICORN_LOG_CONFIG,
        )
