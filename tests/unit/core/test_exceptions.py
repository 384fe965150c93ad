"""Unit tests for the error taxonomy in tusk/core/exceptions.py."""

import pytest

from tusk.core.exceptions import (
    BadFieldError,
    ConfigurationError,
    EntityNotFoundError,
    ErrorCode,
    ForbiddenError,
    GoneError,
    HTTPError,
    NilHandlerError,
    NotAcceptableError,
    NotFoundError,
    PanicError,
    Severity,
    TooManyRequestsError,
    TypeMismatchError,
    UnauthorizedError,
    UnsupportedMediaTypeError,
    ValidationError,
    status_text,
)


@pytest.mark.unit
class TestStatusText:
    """Test reason phrases."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (400, "Bad Request"),
            (404, "Not Found"),
            (500, "Internal Server Error"),
            (599, "Unknown Status"),
        ],
    )
    def test_status_text(self, status: int, expected: str) -> None:
        """Registered codes map to their phrase, others to a fallback."""
        assert status_text(status) == expected


@pytest.mark.unit
class TestHTTPError:
    """Test the base status error."""

    def test_default_cause_is_reason_phrase(self) -> None:
        """Without a cause the standard reason phrase is used."""
        error = HTTPError(404)

        assert error.status == 404
        assert error.message == "Not Found"
        assert error.error_code == ErrorCode.NOT_FOUND
        assert str(error) == "HTTPError: (status: 404, error: Not Found)"

    def test_string_cause_is_wrapped(self) -> None:
        """String causes become exceptions so every error has a cause."""
        error = HTTPError(400, "bad input")

        assert isinstance(error.cause, Exception)
        assert error.message == "bad input"
        assert error.error_code == ErrorCode.BAD_REQUEST

    def test_exception_cause_is_chained(self) -> None:
        """Exception causes are kept and chained."""
        cause = KeyError("missing")
        error = HTTPError(500, cause)

        assert error.cause is cause
        assert error.__cause__ is cause

    def test_unregistered_status_uses_internal_error_code(self) -> None:
        """Statuses without a dedicated code fall back to INTERNAL_ERROR."""
        assert HTTPError(418).error_code == ErrorCode.INTERNAL_ERROR

    @pytest.mark.parametrize(
        ("status", "expected_severity", "expected", "alert"),
        [
            (400, Severity.LOW, True, False),
            (401, Severity.HIGH, False, True),
            (403, Severity.HIGH, False, True),
            (404, Severity.LOW, True, False),
            (500, Severity.HIGH, False, True),
            (503, Severity.HIGH, False, True),
        ],
    )
    def test_severity_from_status(
        self,
        status: int,
        expected_severity: Severity,
        expected: bool,
        alert: bool,
    ) -> None:
        """Severity, is_expected and should_alert derive from the status."""
        error = HTTPError(status)

        assert error.severity == expected_severity
        assert error.is_expected is expected
        assert error.should_alert is alert

    def test_overrides(self) -> None:
        """Error code and severity can be chosen by the caller."""
        error = HTTPError(
            400, "quota", error_code=ErrorCode.TOO_MANY_REQUESTS, severity=Severity.MEDIUM
        )

        assert error.error_code == ErrorCode.TOO_MANY_REQUESTS
        assert error.severity == Severity.MEDIUM
        assert error.is_expected is True


@pytest.mark.unit
class TestSentinelErrors:
    """Test the fixed-status subclasses."""

    @pytest.mark.parametrize(
        ("error_cls", "status", "phrase"),
        [
            (UnauthorizedError, 401, "Unauthorized"),
            (ForbiddenError, 403, "Forbidden"),
            (NotFoundError, 404, "Not Found"),
            (NotAcceptableError, 406, "Not Acceptable"),
            (GoneError, 410, "Gone"),
            (UnsupportedMediaTypeError, 415, "Unsupported Media Type"),
            (TooManyRequestsError, 429, "Too Many Requests"),
        ],
    )
    def test_fixed_status_and_phrase(
        self, error_cls: type[HTTPError], status: int, phrase: str
    ) -> None:
        """Each sentinel carries its status and reason phrase."""
        error = error_cls()

        assert isinstance(error, HTTPError)
        assert error.status == status
        assert error.message == phrase

    def test_entity_not_found(self) -> None:
        """EntityNotFoundError is a 404 with an explicit message."""
        error = EntityNotFoundError()

        assert isinstance(error, NotFoundError)
        assert error.status == 404
        assert error.message == "entity not found"

    def test_fresh_instances_do_not_share_state(self) -> None:
        """Each raise creates a new error object."""
        first, second = NotFoundError(), NotFoundError()

        assert first is not second
        assert first.cause is not second.cause


@pytest.mark.unit
class TestValidationError:
    """Test grouped validation errors."""

    def test_always_400(self) -> None:
        """Validation errors are client errors."""
        error = ValidationError("Query", ["page: too small"])

        assert error.status == 400
        assert error.error_code == ErrorCode.VALIDATION_ERROR
        assert error.severity == Severity.LOW
        assert error.group == "Query"

    def test_messages_are_joined(self) -> None:
        """Every message is kept and joined for the text form."""
        error = ValidationError("Body", ["a: bad", "b: worse"])

        assert error.errors == ["a: bad", "b: worse"]
        assert str(error) == "a: bad; b: worse"
        assert error.message == "a: bad; b: worse"

    def test_accepts_exceptions(self) -> None:
        """Type mismatches are converted to their text."""
        mismatch = TypeMismatchError("page", "p", "abc", "int")
        error = ValidationError("Query", [mismatch])

        assert error.errors == ["page: cannot use 'abc' from 'p' as int"]


@pytest.mark.unit
class TestPanicError:
    """Test recovered panics."""

    def test_exception_is_the_cause(self) -> None:
        """The recovered exception's text is the client message."""
        recovered = RuntimeError("boom")
        error = PanicError(recovered, "Traceback ...")

        assert error.status == 500
        assert error.error_code == ErrorCode.PANIC
        assert error.severity == Severity.CRITICAL
        assert error.cause is recovered
        assert error.message == "boom"
        assert error.stack == "Traceback ..."

    def test_non_exception_is_formatted(self) -> None:
        """Arbitrary recovered values are formatted as text."""
        error = PanicError(42, "")

        assert error.message == "42"

    def test_text_form_includes_stack(self) -> None:
        """The server-side text form carries the stack."""
        error = PanicError(RuntimeError("boom"), "stack here")

        assert str(error) == "boom\nstack here"


@pytest.mark.unit
class TestConfigurationErrors:
    """Test developer-facing configuration faults."""

    def test_bad_field_message(self) -> None:
        """The message names the field, the handler and the reason."""
        error = BadFieldError("Query", "SearchHandler", "must be a pydantic model")

        assert isinstance(error, ConfigurationError)
        assert error.status == 500
        assert error.error_code == ErrorCode.CONFIGURATION_ERROR
        assert error.severity == Severity.CRITICAL
        assert error.message == "'Query' field of 'SearchHandler' must be a pydantic model"
        assert (error.field, error.handler_name) == ("Query", "SearchHandler")

    def test_nil_handler_message(self) -> None:
        """The message names the method and path."""
        error = NilHandlerError("GET", "/items")

        assert isinstance(error, ConfigurationError)
        assert error.message == "nil handler provided for 'GET' '/items'"


@pytest.mark.unit
class TestTypeMismatchError:
    """Test conversion failures."""

    def test_attributes_and_message(self) -> None:
        """Member, key, value and target are all kept."""
        error = TypeMismatchError("tags", "tag", ["x"], "list[int]")

        assert not isinstance(error, HTTPError)
        assert (error.member, error.key, error.value, error.target) == (
            "tags",
            "tag",
            ["x"],
            "list[int]",
        )
        assert str(error) == "tags: cannot use ['x'] from 'tag' as list[int]"
