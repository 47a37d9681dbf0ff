"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any gateway import so the global
settings object is built from them.
"""

import os

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")
for _provider_var in (
    "SMS_TWILIO_ACCOUNT_SID",
    "SMS_TWILIO_AUTH_TOKEN",
    "SMS_TWILIO_PHONE_NUMBER",
    "SMS_AFRICASTALKING_API_KEY",
):
    os.environ.pop(_provider_var, None)

from typing import Callable
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from gateway.adapters.payments.mpesa_client import MpesaClient
from gateway.adapters.sms.base import AbstractSmsSender, SmsResult
from gateway.core.app_factory import create_app
from gateway.core.config import Settings


class FakeClock:
    """Deterministic clock used to test expiry and window logic."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


class RecordingSmsSender(AbstractSmsSender):
    """SMS sender that remembers what it was asked to send."""

    name = "recording"

    def __init__(self, *, succeed: bool = True, error: str | None = None) -> None:
        self.succeed = succeed
        self.error = error
        self.sent: list[tuple[str, str]] = []

    async def send_text(self, phone: str, body: str) -> SmsResult:
        self.sent.append((phone, body))
        if self.succeed:
            return SmsResult(success=True, provider=self.name)
        return SmsResult(success=False, provider=self.name, error=self.error)

    def last_code(self) -> str:
        body = self.sent[-1][1]
        return body.split("code is: ")[1].split(".")[0]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sms_sender() -> RecordingSmsSender:
    return RecordingSmsSender()


@pytest.fixture
def mpesa_handler() -> Callable[[httpx.Request], httpx.Response]:
    """Default gateway stub; tests override by reassigning ``.handler``."""

    class _Handler:
        def __init__(self) -> None:
            self.requests: list[httpx.Request] = []
            self.handler: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
                200, json={"success": True, "checkout_request_id": "ws_CO_1"}
            )

        def __call__(self, request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.handler(request)

    return _Handler()


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    def _build(**overrides) -> Settings:
        config = Settings()
        for group, values in overrides.items():
            setattr(config, group, getattr(config, group).model_copy(update=values))
        return config

    return _build


@pytest.fixture
def app(clock, sms_sender, mpesa_handler, settings_factory):
    config = settings_factory(sweep={"interval_seconds": 0})
    mpesa_client = MpesaClient(
        base_url="https://mpesa.test",
        transport=httpx.MockTransport(mpesa_handler),
    )
    return create_app(
        config=config,
        sms_sender=sms_sender,
        mpesa_client=mpesa_client,
        clock=clock,
    )


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def failing_sms_sender() -> AbstractSmsSender:
    sender = AsyncMock(spec=AbstractSmsSender)
    sender.send_text.return_value = SmsResult(
        success=False, provider="twilio", error="Queue overflow"
    )
    return sender
