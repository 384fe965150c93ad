"""Tusk - declarative request binding and error dispatch for Starlette.

A handler is a plain class with an async ``handle(ctx)`` method. Before it
runs, the router populates its reserved fields from the request:

- **Query**: the query string
- **URLParams**: path variables matched by the route
- **Body**: a JSON, urlencoded or multipart body, chosen by content type

Each field is a pydantic model. Bound values are validated against the
model's constraints, and any failure, at any stage, becomes a JSON error
response written exactly once.

Example::

    class SearchQuery(BaseModel):
        q: str = ""
        page: int = Field(default=1, ge=1)

    class SearchHandler:
        Query: SearchQuery

        async def handle(self, ctx: Context) -> None:
            ctx.write_json(200, {"q": self.Query.q, "page": self.Query.page})

    router = Router()
    router.get("/search", lambda _ctx: SearchHandler())
"""

from tusk.api.context import Context, ResponseState
from tusk.api.dispatch import default_error_handler
from tusk.api.middleware import HandlerFunc, Middleware
from tusk.api.router import Handler, HandlerProvider, Router
from tusk.core.exceptions import (
    BadFieldError,
    ConfigurationError,
    EntityNotFoundError,
    ForbiddenError,
    GoneError,
    HTTPError,
    NilHandlerError,
    NotAcceptableError,
    NotFoundError,
    PanicError,
    TooManyRequestsError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    ValidationError,
)

__all__ = [
    "BadFieldError",
    "ConfigurationError",
    "Context",
    "EntityNotFoundError",
    "ForbiddenError",
    "GoneError",
    "HTTPError",
    "Handler",
    "HandlerFunc",
    "HandlerProvider",
    "Middleware",
    "NilHandlerError",
    "NotAcceptableError",
    "NotFoundError",
    "PanicError",
    "ResponseState",
    "Router",
    "TooManyRequestsError",
    "UnauthorizedError",
    "UnsupportedMediaTypeError",
    "ValidationError",
    "default_error_handler",
]
