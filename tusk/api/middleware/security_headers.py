"""Common security headers for every response."""

from tusk.api.constants import DEFAULT_HSTS_MAX_AGE
from tusk.api.context import Context
from tusk.api.middleware.chain import HandlerFunc, Middleware


def _build_hsts_header(max_age: int, *, include_subdomains: bool, preload: bool) -> str:
    parts = [f"max-age={max_age}"]
    if include_subdomains:
        parts.append("includeSubDomains")
    if preload:
        parts.append("preload")
    return "; ".join(parts)


def security_headers_middleware(
    *,
    hsts_enabled: bool = True,
    hsts_max_age: int = DEFAULT_HSTS_MAX_AGE,
    hsts_include_subdomains: bool = True,
    hsts_preload: bool = False,
) -> Middleware:
    """Build a middleware adding security headers to all responses.

    Adds ``X-Content-Type-Options: nosniff``, ``X-Frame-Options: DENY``,
    ``X-XSS-Protection: 1; mode=block`` and, when enabled,
    ``Strict-Transport-Security``. Headers are set before the handler runs
    so error responses carry them too.

    Args:
        hsts_enabled: Whether to include the HSTS header
        hsts_max_age: Max age for HSTS in seconds
        hsts_include_subdomains: Whether to include subdomains in HSTS
        hsts_preload: Whether to include the preload directive

    Returns:
        Middleware: The security headers middleware
    """
    headers = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "X-XSS-Protection": "1; mode=block",
    }
    if hsts_enabled:
        headers["Strict-Transport-Security"] = _build_hsts_header(
            hsts_max_age,
            include_subdomains=hsts_include_subdomains,
            preload=hsts_preload,
        )

    def middleware(next_: HandlerFunc) -> HandlerFunc:
        async def handle(ctx: Context) -> None:
            ctx.response.headers.update(headers)
            await next_(ctx)

        return handle

    return middleware
