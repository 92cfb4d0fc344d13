import httpx
from sqlalchemy.exc import IntegrityError, OperationalError

from services.errors import (
    AuthenticationError,
    ErrorSeverity,
    ErrorType,
    NotFoundError,
    RateLimitError,
    ValidationError,
    classify_error,
    log_error,
)


class TestAppErrors:
    def test_status_codes_follow_error_type(self):
        """Each service error maps to the HTTP status the API returns."""
        assert ValidationError("bad").status_code == 400
        assert AuthenticationError("who?").status_code == 401
        assert NotFoundError("gone").status_code == 404
        assert RateLimitError("slow down").status_code == 429

    def test_only_transient_errors_are_retryable(self):
        """Rate limits are worth retrying, validation failures are not."""
        assert RateLimitError("slow down").retryable
        assert not ValidationError("bad").retryable


class TestClassifyError:
    def test_app_error_keeps_its_message(self):
        """Our own messages are already user facing."""
        info = classify_error(ValidationError("Passwords do not match", code="pw"))
        assert info.type == ErrorType.VALIDATION
        assert info.user_message == "Passwords do not match"
        assert info.code == "pw"
        assert info.actions == ["Review your input"]

    def test_http_status_error_uses_status_code(self):
        """httpx status errors are classified by their response status."""
        request = httpx.Request("GET", "http://example.test")
        response = httpx.Response(429, request=request)
        error = httpx.HTTPStatusError("rate limited", request=request, response=response)

        info = classify_error(error)

        assert info.type == ErrorType.RATE_LIMIT
        assert info.code == "429"
        assert info.retryable

    def test_transport_errors_are_network_errors(self):
        """Connection failures become retryable network errors."""
        info = classify_error(httpx.ConnectError("refused"))
        assert info.type == ErrorType.NETWORK
        assert info.retryable

    def test_database_errors(self):
        """Constraint violations come from bad input; other DB failures don't."""
        integrity = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        operational = OperationalError("SELECT", {}, Exception("no such table"))

        assert classify_error(integrity).type == ErrorType.VALIDATION
        info = classify_error(operational)
        assert info.type == ErrorType.DATABASE
        assert info.severity == ErrorSeverity.HIGH

    def test_unknown_errors_fall_back_to_message_keywords(self):
        """Plain exceptions are classified by what their message says."""
        assert classify_error(RuntimeError("Request timed out")).type == ErrorType.NETWORK
        assert classify_error(RuntimeError("Too many requests")).type == ErrorType.RATE_LIMIT
        assert classify_error(RuntimeError("field is required")).type == ErrorType.VALIDATION
        assert classify_error(RuntimeError("boom")).type == ErrorType.UNKNOWN

    def test_generic_user_message_for_library_errors(self):
        """Raw library messages are never shown to users."""
        info = classify_error(RuntimeError("boom"))
        assert info.message == "boom"
        assert info.user_message == "An unexpected error occurred. Please try again."


class TestLogError:
    def test_logs_with_context(self, caplog):
        """log_error returns the classification and logs the context."""
        with caplog.at_level("WARNING", logger="services.errors"):
            info = log_error(NotFoundError("Recipe not found"), "Loading recipe")

        assert info.type == ErrorType.NOT_FOUND
        assert "Loading recipe: [NOT_FOUND] Recipe not found" in caplog.text
