"""Tests for structured logging."""

import pytest
import structlog

from courier.config.models.observability import LoggingConfig
from courier.observability.logging import (
    PIIRedactor,
    configure_from,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        get_logger("test").info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        get_logger("test").debug("test_message")

    def test_configure_from_config(self) -> None:
        configure_from(LoggingConfig(level="WARNING", format="json", redact_pii=True))
        get_logger("test").warning("test_message", authorization="Bearer abc")

    def test_json_output_is_redacted(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(level="INFO", format="json", redact_pii=True)
        try:
            get_logger("test").info("request_sent", headers={"Authorization": "Bearer abc.def"})
            err = capsys.readouterr().err
        finally:
            structlog.reset_defaults()

        assert "abc.def" not in err
        assert "[REDACTED]" in err


class TestPIIRedactor:
    """Tests for credential and PII redaction."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    def test_redacts_authorization_header(self, redactor: PIIRedactor) -> None:
        event_dict = {"headers": {"Authorization": "Bearer abc", "Accept": "*/*"}}
        result = redactor(None, None, event_dict)  # type: ignore[arg-type]
        assert result["headers"]["Authorization"] == "[REDACTED]"
        assert result["headers"]["Accept"] == "*/*"

    def test_redacts_token_key(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"token": "abc", "other": "value"})  # type: ignore[arg-type]
        assert result == {"token": "[REDACTED]", "other": "value"}

    def test_redacts_bearer_in_string(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"error": "rejected Bearer abc.def-123"})  # type: ignore[arg-type]
        assert "abc.def-123" not in result["error"]
        assert "Bearer [REDACTED]" in result["error"]

    def test_redacts_email_pattern(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"message": "Contact user@example.com"})  # type: ignore[arg-type]
        assert "[EMAIL]" in result["message"]

    def test_handles_lists(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"items": [{"password": "x"}, "a@b.io", 3]})  # type: ignore[arg-type]
        assert result["items"] == [{"password": "[REDACTED]"}, "[EMAIL]", 3]

    def test_leaves_other_values(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"status": 500, "ok": False})  # type: ignore[arg-type]
        assert result == {"status": 500, "ok": False}
