"""Unit tests for OffsetPanel configuration management.

Tests AppConfig loading from environment variables, validation, and defaults.
"""

from __future__ import annotations

import pytest

from offsetpanel.config import AppConfig, get_config, reset_config


class TestAppConfig:
    """Test AppConfig creation and validation."""

    def test_from_env_defaults(self, monkeypatch):
        """Test defaults when only the test environment is set."""
        monkeypatch.delenv("API_URL", raising=False)
        monkeypatch.delenv("API_TIMEOUT_SECONDS", raising=False)

        config = AppConfig.from_env()

        assert config.api.base_url == "http://127.0.0.1:8000/api/v1"
        assert config.api.timeout_seconds == 30.0
        assert config.api.cooperator_category is None
        assert config.locale.default_locale == "fa"
        assert config.auth.session_expiry_hours == 720
        assert config.auth.otp_resend_seconds == 120
        assert config.auth.auth_disabled is False

    def test_from_env_with_custom_api(self, monkeypatch):
        """Test custom API URL and timeout."""
        monkeypatch.setenv("API_URL", "https://api.example.com/v2")
        monkeypatch.setenv("API_TIMEOUT_SECONDS", "12.5")
        monkeypatch.setenv("COOPERATOR_CATEGORY", "papers")

        config = AppConfig.from_env()

        assert config.api.base_url == "https://api.example.com/v2"
        assert config.api.timeout_seconds == 12.5
        assert config.api.cooperator_category == "papers"

    def test_json_logs_switch_log_format(self, monkeypatch):
        monkeypatch.setenv("JSON_LOGS", "true")

        assert AppConfig.from_env().log_format == "json"

    def test_auth_disabled_flag(self, monkeypatch):
        monkeypatch.setenv("OFFSETPANEL_AUTH_DISABLED", "TRUE")

        assert AppConfig.from_env().auth.auth_disabled is True

    def test_production_requires_secret_key(self, monkeypatch):
        """Test SECRET_KEY is required in production."""
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.delenv("SECRET_KEY", raising=False)

        with pytest.raises(KeyError) as exc_info:
            AppConfig.from_env()

        assert "SECRET_KEY" in str(exc_info.value)

    def test_production_with_secret_key(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("SECRET_KEY", "s3cret")

        assert AppConfig.from_env().environment == "production"

    def test_unsupported_default_locale(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_LOCALE", "de")

        with pytest.raises(ValueError, match="DEFAULT_LOCALE"):
            AppConfig.from_env()

    @pytest.mark.parametrize("locale", ["fa", "en", "fr", "ar"])
    def test_supported_locales(self, monkeypatch, locale):
        monkeypatch.setenv("DEFAULT_LOCALE", locale)

        assert AppConfig.from_env().locale.default_locale == locale


class TestGetConfig:
    """Test the lazy singleton."""

    def test_get_config_is_singleton(self):
        assert get_config() is get_config()

    def test_reset_config_reloads_environment(self, monkeypatch):
        first = get_config()
        monkeypatch.setenv("API_URL", "http://other.test/api")
        reset_config()

        second = get_config()

        assert second is not first
        assert second.api.base_url == "http://other.test/api"
