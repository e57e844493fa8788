"""Tests for structured logging."""

import json
from io import StringIO

import pytest
import structlog

from webhook_relay.observability.logging import (
    PIIRedactor,
    get_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        logger = get_logger("test")
        # Should not raise
        logger.info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        logger = get_logger("test")
        logger.debug("test_message")

    def test_setup_with_redaction(self) -> None:
        """Should configure redaction when enabled."""
        setup_logging(level="INFO", format="json", redact_pii=True)
        logger = get_logger("test")
        logger.info("test_message", api_token="admin:pw")


class TestPIIRedactor:
    """Tests for secret and PII redaction."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        """Create a PIIRedactor instance."""
        return PIIRedactor()

    def test_redacts_secret_keys(self, redactor: PIIRedactor) -> None:
        """Should redact values for credential-like keys."""
        event_dict = {
            "api_token": "admin:pw",
            "channel_access_token": "line-token",
            "cookie": "api_token=admin:pw",
            "endpoint": "github",
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["api_token"] == "[REDACTED]"
        assert result["channel_access_token"] == "[REDACTED]"
        assert result["cookie"] == "[REDACTED]"
        assert result["endpoint"] == "github"

    def test_key_match_is_case_insensitive(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"Authorization": "Bearer x"})  # type: ignore
        assert result["Authorization"] == "[REDACTED]"

    def test_redacts_email_pattern(self, redactor: PIIRedactor) -> None:
        """Should redact email patterns found in string values."""
        result = redactor(None, None, {"message": "Contact user@example.com for help"})  # type: ignore
        assert "user@example.com" not in result["message"]
        assert "[EMAIL]" in result["message"]

    def test_redacts_bearer_in_text(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"detail": "sent Bearer abc.def to upstream"})  # type: ignore
        assert "abc.def" not in result["detail"]
        assert "Bearer [REDACTED]" in result["detail"]

    def test_redacts_signed_url_token(self, redactor: PIIRedactor) -> None:
        """Webhook tokens embedded in paths are masked, the endpoint is kept."""
        url = "https://relay.example/w/github/AbCdEfGhIjKlMnOpQrStUvWxYz0123456789_-AbCdE"
        result = redactor(None, None, {"url": url})  # type: ignore
        assert result["url"] == "https://relay.example/w/github/[TOKEN]"

    def test_handles_nested_dicts_and_lists(self, redactor: PIIRedactor) -> None:
        event_dict = {
            "rule": {"token": "x", "endpoint": "line"},
            "notes": ["mail a@b.io", {"password": "pw"}],
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["rule"] == {"token": "[REDACTED]", "endpoint": "line"}
        assert result["notes"][0] == "mail [EMAIL]"
        assert result["notes"][1] == {"password": "[REDACTED]"}

    def test_preserves_non_sensitive_data(self, redactor: PIIRedactor) -> None:
        """Should preserve ordinary event fields."""
        event_dict = {
            "event": "webhook_received",
            "endpoint": "github",
            "hit_id": 42,
            "persisted": True,
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result == event_dict


class TestJSONLogging:
    """Tests for JSON log output format."""

    def test_json_output_includes_context(self) -> None:
        """Bound contextvars and level appear in the rendered line."""
        output = StringIO()
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                PIIRedactor(),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(0),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(output),
            cache_logger_on_first_use=False,
        )

        structlog.contextvars.bind_contextvars(request_id="req-1")
        try:
            structlog.get_logger("test").info("forward_delivered", status=200, token="t")
        finally:
            structlog.contextvars.clear_contextvars()

        parsed = json.loads(output.getvalue().strip())
        assert parsed["event"] == "forward_delivered"
        assert parsed["request_id"] == "req-1"
        assert parsed["status"] == 200
        assert parsed["token"] == "[REDACTED]"
        assert parsed["level"] == "info"
        assert "timestamp" in parsed
