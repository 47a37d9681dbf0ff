"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    expose_otp_in_response: bool = Field(
        False,
        description="Echo issued codes back to the caller (ignored in production)",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class OtpSettings(BaseSettings):
    """One-time-password issuance and verification limits."""

    code_length: int = Field(
        6,
        description="Number of digits in an issued code",
        ge=4,
        le=10,
    )
    ttl_seconds: int = Field(
        300,
        description="Lifetime of an issued code in seconds",
        ge=1,
    )
    max_attempts: int = Field(
        3,
        description="Failed verifications allowed before the code is discarded",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="OTP_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Per client and route fixed-window rate limiting."""

    enabled: bool = Field(
        True,
        description="Enable the rate limit middleware",
    )
    requests: int = Field(
        100,
        description="Maximum number of requests allowed per window (per client and path)",
        ge=1,
    )
    window_seconds: int = Field(
        60,
        description="Rate limit window size in seconds",
        ge=1,
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    exempt_paths: list[str] = Field(
        default_factory=lambda: ["/health"],
        description="Paths never counted against the limit",
    )
    trust_forwarded_for: bool = Field(
        True,
        description="Use the first X-Forwarded-For hop as the client identifier",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class SweepSettings(BaseSettings):
    """Background purge of expired OTP records and stale rate windows."""

    interval_seconds: float = Field(
        300.0,
        description="Seconds between sweeps; 0 disables the sweeper",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="SWEEP_",
        case_sensitive=False,
    )


class SmsSettings(BaseSettings):
    """SMS provider configuration.

    Twilio is used when all three Twilio values are set, otherwise Africa's
    Talking when an API key is set, otherwise codes are only logged.
    """

    twilio_account_sid: str | None = Field(None, description="Twilio account SID")
    twilio_auth_token: str | None = Field(None, description="Twilio auth token")
    twilio_phone_number: str | None = Field(None, description="Twilio sender number")
    africastalking_api_key: str | None = Field(
        None,
        description="Africa's Talking API key",
    )
    africastalking_username: str = Field(
        "sandbox",
        description="Africa's Talking username ('sandbox' selects the sandbox host)",
    )
    africastalking_sender_id: str | None = Field(
        "AlphaEnergy",
        description="Approved sender id (live mode only)",
    )
    brand_name: str = Field(
        "Alpha Energy",
        description="Brand shown in verification messages",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Provider request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="SMS_",
        case_sensitive=False,
    )


class MpesaSettings(BaseSettings):
    """M-Pesa STK push gateway configuration."""

    base_url: str = Field(
        "https://online-link.onrender.com",
        description="Base URL of the STK push backend",
    )
    timeout_seconds: float = Field(
        30.0,
        description="Gateway request timeout in seconds",
    )
    default_description: str = Field(
        "Fuel Purchase",
        description="Transaction description when the caller sends none",
    )

    model_config = SettingsConfigDict(
        env_prefix="MPESA_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header carrying the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    otp: OtpSettings = Field(default_factory=OtpSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    sweep: SweepSettings = Field(default_factory=SweepSettings)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    mpesa: MpesaSettings = Field(default_factory=MpesaSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


# Global settings instance - composed from domain-specific settings
settings = Settings()
