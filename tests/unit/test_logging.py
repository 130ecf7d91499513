"""Unit tests for logging service."""

import json

import structlog

from tubeauth.services.logging_service import configure_logging, get_logger, redact_sensitive


class TestRedactSensitive:
    """Tests for redact_sensitive processor."""

    def test_redacts_password(self):
        event_dict = {"password": "Secret123!", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["password"] == "REDACTED"

    def test_redacts_token_fields(self):
        """Refresh and access token values never reach the log."""
        event_dict = {
            "refresh_token": "eyJhbGciOi.refresh",
            "access_token": "eyJhbGciOi.access",
            "event": "test",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["refresh_token"] == "REDACTED"
        assert result["access_token"] == "REDACTED"

    def test_redacts_secret_in_key_name(self):
        event_dict = {"access_token_secret": "abc123", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["access_token_secret"] == "REDACTED"

    def test_redacts_cookie_and_authorization(self):
        event_dict = {
            "cookie": "accessToken=abc",
            "authorization": "Bearer abc",
            "event": "test",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["cookie"] == "REDACTED"
        assert result["authorization"] == "REDACTED"

    def test_redacts_api_key(self):
        event_dict = {"media_api_key": "k-123", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["media_api_key"] == "REDACTED"

    def test_event_name_is_never_redacted(self):
        event_dict = {"event": "refresh_token_reuse_detected"}
        result = redact_sensitive(None, None, event_dict)
        assert result["event"] == "refresh_token_reuse_detected"

    def test_preserves_non_sensitive_fields(self):
        event_dict = {
            "correlation_id": "abc-123",
            "user_id": "42",
            "username": "janedoe",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result == {
            "correlation_id": "abc-123",
            "user_id": "42",
            "username": "janedoe",
        }

    def test_case_insensitive_redaction(self):
        event_dict = {"Password": "s1", "REFRESH_TOKEN": "s2"}
        result = redact_sensitive(None, None, event_dict)
        assert result["Password"] == "REDACTED"
        assert result["REFRESH_TOKEN"] == "REDACTED"


class TestConfigureLogging:
    """Tests for configure_logging and get_logger."""

    def test_get_logger_returns_bound_logger(self):
        configure_logging("DEBUG")
        logger = get_logger("test_module")
        assert logger is not None
        logger.info("test_event", data="value")

    def test_get_logger_without_name(self):
        configure_logging("INFO")
        assert get_logger() is not None

    def test_output_is_json_and_redacted(self, capsys):
        structlog.reset_defaults()
        configure_logging("INFO")

        structlog.get_logger().info("login_succeeded", user_id="42", password="Secret123!")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "login_succeeded"
        assert record["user_id"] == "42"
        assert record["password"] == "REDACTED"
        assert record["level"] == "info"
        structlog.reset_defaults()


class TestCorrelationIdBinding:
    """Tests for correlation ID context binding."""

    def test_correlation_id_binds_to_context(self):
        configure_logging("INFO")
        structlog.contextvars.clear_contextvars()

        structlog.contextvars.bind_contextvars(correlation_id="test-correlation-123")

        context = structlog.contextvars.get_contextvars()
        assert context.get("correlation_id") == "test-correlation-123"
        structlog.contextvars.clear_contextvars()
