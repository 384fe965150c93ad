"""Middleware chain and the bundled middlewares.

- **chain**: ``Middleware`` type and composition with per-layer dispatch
- **recovery**: ``panic_middleware``, installed around the innermost call
- **request_context**: Correlation IDs
- **request_logging**: Structured request logs with timing
- **security_headers**: HSTS, X-Frame-Options and friends

A typical registration order::

    router.use(
        security_headers_middleware(),
        request_context_middleware,
        request_logging_middleware(settings.log_config),
    )
"""

from tusk.api.middleware.chain import HandlerFunc, Middleware, compose
from tusk.api.middleware.recovery import panic_middleware
from tusk.api.middleware.request_context import request_context_middleware
from tusk.api.middleware.request_logging import request_logging_middleware
from tusk.api.middleware.security_headers import security_headers_middleware

__all__ = [
    "HandlerFunc",
    "Middleware",
    "compose",
    "panic_middleware",
    "request_context_middleware",
    "request_logging_middleware",
    "security_headers_middleware",
]
