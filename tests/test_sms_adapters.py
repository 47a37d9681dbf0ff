"""Tests for SMS provider adapters using httpx.MockTransport."""

import logging
from urllib.parse import parse_qs

import httpx
import pytest

from gateway.adapters.sms import (
    AfricasTalkingSmsSender,
    ConsoleSmsSender,
    TwilioSmsSender,
    create_sms_sender,
)
from gateway.core.config import SmsSettings

PHONE = "+254712345678"
BODY = "Your Alpha Energy verification code is: 123456."


def _form(request: httpx.Request) -> dict[str, str]:
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


class TestTwilioSmsSender:
    @pytest.mark.asyncio
    async def test_success_posts_form_with_basic_auth(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201, json={"sid": "SM123", "status": "queued"})

        sender = TwilioSmsSender(
            account_sid="AC1",
            auth_token="secret",
            from_number="+15005550006",
            transport=httpx.MockTransport(handler),
        )
        result = await sender.send_text(PHONE, BODY)
        await sender.aclose()

        assert result.success is True
        assert result.provider == "twilio"
        request = captured[0]
        assert request.url.path == "/2010-04-01/Accounts/AC1/Messages.json"
        assert request.headers["authorization"].startswith("Basic ")
        assert _form(request) == {"To": PHONE, "From": "+15005550006", "Body": BODY}

    @pytest.mark.asyncio
    async def test_api_error_surfaces_provider_message(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": 21211, "message": "Invalid 'To' Phone Number"})

        sender = TwilioSmsSender("AC1", "secret", "+1500", transport=httpx.MockTransport(handler))
        result = await sender.send_text(PHONE, BODY)

        assert result.success is False
        assert result.error == "Invalid 'To' Phone Number"

    @pytest.mark.asyncio
    async def test_connection_error_is_reported_not_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("boom", request=request)

        sender = TwilioSmsSender("AC1", "secret", "+1500", transport=httpx.MockTransport(handler))
        result = await sender.send_text(PHONE, BODY)

        assert result.success is False
        assert result.error == "Failed to connect to Twilio SMS service"


class TestAfricasTalkingSmsSender:
    @pytest.mark.asyncio
    async def test_sandbox_uses_sandbox_host_without_sender_id(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(
                201,
                json={"SMSMessageData": {"Message": "Sent to 1/1", "Recipients": [{"statusCode": 101, "status": "Success"}]}},
            )

        sender = AfricasTalkingSmsSender(
            api_key="at-key",
            username="sandbox",
            sender_id="AlphaEnergy",
            transport=httpx.MockTransport(handler),
        )
        result = await sender.send_text(PHONE, BODY)

        assert result.success is True
        request = captured[0]
        assert request.url.host == "api.sandbox.africastalking.com"
        assert request.headers["apikey"] == "at-key"
        assert _form(request) == {"username": "sandbox", "to": PHONE, "message": BODY}

    @pytest.mark.asyncio
    async def test_live_mode_sends_sender_id(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(201, json={"SMSMessageData": {"Recipients": [{"statusCode": 101}]}})

        sender = AfricasTalkingSmsSender(
            api_key="at-key",
            username="alphaenergy",
            sender_id="AlphaEnergy",
            transport=httpx.MockTransport(handler),
        )
        result = await sender.send_text(PHONE, BODY)

        assert result.success is True
        assert captured[0].url.host == "api.africastalking.com"
        assert _form(captured[0])["from"] == "AlphaEnergy"

    @pytest.mark.asyncio
    async def test_rejected_recipient_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                201,
                json={"SMSMessageData": {"Message": "", "Recipients": [{"statusCode": 403, "status": "InvalidPhoneNumber"}]}},
            )

        sender = AfricasTalkingSmsSender(api_key="k", transport=httpx.MockTransport(handler))
        result = await sender.send_text(PHONE, BODY)

        assert result.success is False
        assert result.error == "InvalidPhoneNumber"

    @pytest.mark.asyncio
    async def test_non_json_body_is_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, text="The supplied authentication is invalid")

        sender = AfricasTalkingSmsSender(api_key="k", transport=httpx.MockTransport(handler))
        result = await sender.send_text(PHONE, BODY)

        assert result.success is False
        assert result.error == "Failed to connect to SMS service"


@pytest.mark.asyncio
async def test_console_sender_always_succeeds() -> None:
    result = await ConsoleSmsSender().send_text(PHONE, BODY)

    assert result.success is True
    assert result.provider == "dev-mode"


@pytest.mark.asyncio
async def test_console_sender_logs_the_code_for_local_use(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="gateway.adapters.sms.console"):
        await ConsoleSmsSender().send_text(PHONE, BODY)

    record = next(r for r in caplog.records if r.getMessage() == "sms.console_delivery")
    assert record.levelno == logging.WARNING
    assert record.sms_body == BODY
    assert record.to == PHONE


class TestCreateSmsSender:
    def test_twilio_has_priority(self) -> None:
        sender = create_sms_sender(
            SmsSettings(
                twilio_account_sid="AC1",
                twilio_auth_token="t",
                twilio_phone_number="+1500",
                africastalking_api_key="k",
            )
        )
        assert isinstance(sender, TwilioSmsSender)

    def test_incomplete_twilio_falls_back_to_africastalking(self) -> None:
        sender = create_sms_sender(
            SmsSettings(twilio_account_sid="AC1", africastalking_api_key="k")
        )
        assert isinstance(sender, AfricasTalkingSmsSender)

    def test_no_provider_uses_console(self) -> None:
        sender = create_sms_sender(
            SmsSettings(
                twilio_account_sid=None,
                twilio_auth_token=None,
                twilio_phone_number=None,
                africastalking_api_key=None,
            )
        )
        assert isinstance(sender, ConsoleSmsSender)
