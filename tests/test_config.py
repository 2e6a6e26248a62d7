"""
Tests for settings and logging configuration.
"""

import structlog

from order_management.config import Settings
from order_management.logging_config import bind_request_id, clear_request_context


class TestSettings:
    """Test configuration defaults and parsing."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.SERVICE_NAME == "order-management-service"
        assert settings.DATAVERSE_API_VERSION == "v9.2"
        assert settings.DATAVERSE_TIMEOUT_SECONDS == 30.0

    def test_cors_origins_list(self):
        settings = Settings(_env_file=None, CORS_ORIGINS="http://a.com, http://b.com")

        assert settings.cors_origins_list == ["http://a.com", "http://b.com"]

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DATAVERSE_URL", "https://org.crm.dynamics.com")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.DATAVERSE_URL == "https://org.crm.dynamics.com"
        assert settings.LOG_LEVEL == "DEBUG"


class TestRequestContext:
    """Test request ID binding."""

    def test_bind_given_request_id(self):
        assert bind_request_id("req-1") == "req-1"
        assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"
        clear_request_context()
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_bind_generates_request_id(self):
        request_id = bind_request_id()

        assert len(request_id) == 36
        clear_request_context()
