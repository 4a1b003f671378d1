"""OffsetPanel configuration management.

Loads configuration from environment variables with sensible defaults.
Persian-first locale defaults (fa, right-to-left).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


@dataclass
class ApiConfig:
    """Upstream pricing REST API connection."""

    base_url: str = "http://127.0.0.1:8000/api/v1"
    timeout_seconds: float = 30.0
    cooperator_category: str | None = None  # None: use the price category


@dataclass
class AuthConfig:
    """Session and OTP settings."""

    redis_url: str = "redis://redis:6379/0"
    session_expiry_hours: int = 720  # 30 days
    auth_disabled: bool = False
    redirect_on_auth_error: bool = False
    mobile_length: int = 10
    otp_length: int = 6
    otp_resend_seconds: int = 120


@dataclass
class LocaleConfig:
    """Localization defaults."""

    default_locale: str = "fa"
    locales: tuple[str, ...] = ("fa", "en", "fr", "ar")


@dataclass
class AppConfig:
    """Root application configuration.

    Loads from environment variables; fails fast only on production secrets.
    """

    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "text"  # json or text

    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    locale: LocaleConfig = field(default_factory=LocaleConfig)

    @classmethod
    def from_env(cls) -> AppConfig:
        """Load configuration from environment variables.

        Optional (with defaults):
        - API_URL: Base URL of the pricing API (default: http://127.0.0.1:8000/api/v1)
        - API_TIMEOUT_SECONDS: Client-side request timeout (default: 30)
        - REDIS_URL: Session and token storage
        - DEFAULT_LOCALE: Dashboard language (default: "fa")

        Raises:
            KeyError: If SECRET_KEY is missing in production
            ValueError: If DEFAULT_LOCALE is not a supported locale
        """
        environment = os.getenv("ENVIRONMENT", "development")
        if environment == "production":
            secret_key = os.getenv("SECRET_KEY")
            if not secret_key:
                raise KeyError("SECRET_KEY environment variable is required in production.")

        locale = LocaleConfig(default_locale=os.getenv("DEFAULT_LOCALE", "fa"))
        if locale.default_locale not in locale.locales:
            raise ValueError(
                f"DEFAULT_LOCALE must be one of {', '.join(locale.locales)}, "
                f"got {locale.default_locale!r}"
            )

        return cls(
            environment=environment,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format="json" if os.getenv("JSON_LOGS", "false").lower() == "true" else "text",
            api=ApiConfig(
                base_url=os.getenv("API_URL", "http://127.0.0.1:8000/api/v1"),
                timeout_seconds=float(os.getenv("API_TIMEOUT_SECONDS", "30")),
                cooperator_category=os.getenv("COOPERATOR_CATEGORY") or None,
            ),
            auth=AuthConfig(
                redis_url=os.getenv("REDIS_URL", "redis://redis:6379/0"),
                session_expiry_hours=int(os.getenv("SESSION_EXPIRY_HOURS", "720")),
                auth_disabled=os.getenv("OFFSETPANEL_AUTH_DISABLED", "false").lower()
                == "true",
                redirect_on_auth_error=os.getenv("REDIRECT_ON_AUTH_ERROR", "false").lower()
                == "true",
            ),
            locale=locale,
        )


# Singleton instance (lazy-loaded)
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create singleton AppConfig instance from environment."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (tests change the environment)."""
    global _config
    _config = None
