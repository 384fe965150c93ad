"""Root conftest.py for the Tusk test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from loguru import logger
from starlette.requests import Request
from starlette.types import Message

from tusk.binding.fields import binding_spec
from tusk.core.config import Settings, get_settings
from tusk.core.context import RequestContext
from tusk.core.error_context import _get_sensitive_fields
from tusk.core.logging import _state


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove app-specific environment variables that would leak into Settings.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "MULTIPART_",
        "RECOVER_",
        "STRICT_",
        "LOG_CONFIG__",
        "K_SERVICE",
        "AWS_EXECUTION_ENV",
        "PORT",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture(autouse=True)
def clean_caches() -> Generator[None]:
    """Clear cached settings before and after each test to ensure isolation."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    binding_spec.cache_clear()


@pytest.fixture(autouse=True)
def clean_context() -> Generator[None]:
    """Clear the correlation ID before and after each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture(autouse=True)
def quiet_logging_setup() -> Generator[None]:
    """Keep setup_logging from replacing the test process sinks.

    Tests of the logging module reset ``_state.configured`` themselves.
    """
    previous = _state.configured
    _state.configured = True
    yield
    _state.configured = previous


@pytest.fixture
def settings() -> Settings:
    """Provide settings with test defaults.

    Returns:
        Settings: Settings for a development environment without debug.
    """
    return Settings(environment="development", debug=False)


@pytest.fixture
def log_records() -> Generator[list[dict[str, Any]]]:
    """Capture Loguru records emitted during the test.

    Yields:
        list[dict[str, Any]]: The captured records, in emission order.
    """
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build Starlette requests without a server.

    Returns:
        Callable[..., Request]: Factory accepting method, path, query string,
            headers, body and path params.
    """

    def _make(
        method: str = "GET",
        path: str = "/",
        *,
        query_string: bytes = b"",
        headers: dict[str, str] | None = None,
        body: bytes = b"",
        path_params: dict[str, Any] | None = None,
    ) -> Request:
        chunks = [body]

        async def receive() -> Message:
            return {
                "type": "http.request",
                "body": chunks.pop(0) if chunks else b"",
                "more_body": False,
            }

        scope = {
            "type": "http",
            "http_version": "1.1",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 50000),
            "root_path": "",
            "path": path,
            "query_string": query_string,
            "headers": [
                (key.lower().encode("latin-1"), value.encode("latin-1"))
                for key, value in (headers or {}).items()
            ],
            "path_params": path_params or {},
        }
        return Request(scope, receive)

    return _make
