"""Shared fixtures for integration tests.

Requests go through the full ASGI stack: Starlette path matching, the
per-request lifecycle, the middleware chain and the error dispatcher.
"""

from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport, AsyncClient

from tusk.api.router import Router
from tusk.core.config import Settings


@pytest.fixture
def router(settings: Settings) -> Router:
    """Provide an empty router built from the test settings."""
    return Router(settings)


@pytest.fixture
def client_for() -> Callable[..., AsyncClient]:
    """Build clients for arbitrary routers.

    Returns:
        Callable[..., AsyncClient]: Factory taking the router and whether app
            exceptions should propagate to the test.
    """

    def _client(app: Router, *, raise_app_exceptions: bool = True) -> AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        return AsyncClient(transport=transport, base_url="http://test")

    return _client


@pytest.fixture
async def client(
    router: Router, client_for: Callable[..., AsyncClient]
) -> AsyncGenerator[AsyncClient]:
    """Provide a client for the ``router`` fixture.

    Routes registered on ``router`` during the test are served.
    """
    async with client_for(router) as test_client:
        yield test_client
