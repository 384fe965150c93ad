"""Unit tests for tusk/core/error_context.py."""

from typing import Any

import pytest
from pytest_mock import MockerFixture

from tusk.core.config import LogConfig, Settings
from tusk.core.constants import REDACTED
from tusk.core.error_context import (
    _get_sensitive_fields,
    is_sensitive_field,
    sanitize_dict,
    sanitize_error_context,
    sanitize_headers,
    sanitize_value,
)
from tusk.core.exceptions import BadFieldError, PanicError, ValidationError


@pytest.mark.unit
class TestSensitiveFields:
    """Test sensitive field detection."""

    @pytest.mark.parametrize(
        "field",
        ["password", "user_password", "API_KEY", "api-key", "auth_token", "session_id"],
    )
    def test_default_pattern(self, field: str) -> None:
        """Well-known secret names are detected case-insensitively."""
        assert is_sensitive_field(field) is True

    @pytest.mark.parametrize("field", ["name", "page", "tags", "email"])
    def test_plain_fields(self, field: str) -> None:
        """Ordinary names are left alone."""
        assert is_sensitive_field(field) is False

    def test_configured_fields(self, mocker: MockerFixture) -> None:
        """Names configured in the log settings are detected too."""
        settings = Settings(log_config=LogConfig(sensitive_fields=["pin"]))
        mocker.patch("tusk.core.error_context.get_settings", return_value=settings)
        _get_sensitive_fields.cache_clear()

        assert is_sensitive_field("account_pin") is True


@pytest.mark.unit
class TestSanitize:
    """Test value and mapping sanitization."""

    def test_sanitize_dict_nested(self) -> None:
        """Sensitive keys are redacted at every depth."""
        data: dict[str, Any] = {
            "username": "jane",
            "password": "hunter2",
            "profile": {"api_key": "sk-1", "theme": "dark"},
            "items": [{"token": "t"}, {"id": 1}],
        }

        result = sanitize_dict(data)

        assert result["username"] == "jane"
        assert result["password"] == REDACTED
        assert result["profile"] == {"api_key": REDACTED, "theme": "dark"}
        assert result["items"] == [{"token": REDACTED}, {"id": 1}]
        assert data["password"] == "hunter2"

    def test_depth_limit(self) -> None:
        """Values nested beyond the depth limit are redacted."""
        assert sanitize_value("deep", depth=11) == REDACTED

    def test_sanitize_headers(self) -> None:
        """Credential headers are redacted, others kept."""
        headers = {"Authorization": "Bearer x", "Cookie": "a=b", "Accept": "*/*"}

        assert sanitize_headers(headers) == {
            "Authorization": REDACTED,
            "Cookie": REDACTED,
            "Accept": "*/*",
        }


@pytest.mark.unit
class TestSanitizeErrorContext:
    """Test log context built from errors."""

    def test_includes_type_message_and_context(self) -> None:
        """Type, message and sanitized extra context are included."""
        error = ValidationError("Query", ["page: too small"])

        context = sanitize_error_context(
            error, {"request_path": "/items", "password": "x"}
        )

        assert context["error_type"] == "ValidationError"
        assert context["error_message"] == "page: too small"
        assert context["request_path"] == "/items"
        assert context["password"] == REDACTED
        assert context["error_attributes"]["group"] == "Query"

    def test_error_attributes(self) -> None:
        """Public attributes of the error are included."""
        error = BadFieldError("Body", "CreateHandler", "is not settable")

        attributes = sanitize_error_context(error)["error_attributes"]

        assert attributes["field"] == "Body"
        assert attributes["handler_name"] == "CreateHandler"
        assert attributes["status"] == 500
        assert "cause" not in attributes

    def test_panic_stack_is_not_duplicated(self) -> None:
        """The stack is logged separately and skipped here."""
        error = PanicError(RuntimeError("boom"), "Traceback ...")

        attributes = sanitize_error_context(error)["error_attributes"]

        assert "stack" not in attributes
        assert "cause" not in attributes
