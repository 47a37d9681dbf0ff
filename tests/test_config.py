"""Tests for environment-driven settings."""

from gateway.core.config import (
    OtpSettings,
    RateLimitSettings,
    Settings,
    SmsSettings,
    SweepSettings,
)


def test_defaults_match_service_contract(monkeypatch):
    for var in ("OTP_TTL_SECONDS", "OTP_MAX_ATTEMPTS", "RATE_LIMIT_REQUESTS", "RATE_LIMIT_WINDOW_SECONDS"):
        monkeypatch.delenv(var, raising=False)

    otp = OtpSettings()
    rate_limit = RateLimitSettings()

    assert otp.code_length == 6
    assert otp.ttl_seconds == 300
    assert otp.max_attempts == 3
    assert rate_limit.requests == 100
    assert rate_limit.window_seconds == 60
    assert "/health" in rate_limit.exempt_paths


def test_groups_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_REQUESTS", "5")
    monkeypatch.setenv("SWEEP_INTERVAL_SECONDS", "30")
    monkeypatch.setenv("SMS_BRAND_NAME", "Test Fuel")

    assert RateLimitSettings().requests == 5
    assert SweepSettings().interval_seconds == 30
    assert SmsSettings().brand_name == "Test Fuel"


def test_is_production(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert Settings().is_production

    monkeypatch.setenv("APP_ENV", "development")
    assert not Settings().is_production
