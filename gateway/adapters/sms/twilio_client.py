"""Twilio Programmable Messaging adapter."""

from __future__ import annotations

import logging

import httpx

from gateway.adapters.sms.base import AbstractSmsSender, SmsResult
from gateway.utils.phone import mask_phone

logger = logging.getLogger(__name__)

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class TwilioSmsSender(AbstractSmsSender):
    """Sends messages through the Twilio REST API with basic auth."""

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Twilio client.

        Args:
            account_sid: Twilio account SID.
            auth_token: Twilio auth token.
            from_number: Twilio sender phone number.
            timeout_seconds: Request timeout in seconds.
            transport: Optional httpx transport (tests inject a MockTransport).
        """
        self.account_sid = account_sid
        self.from_number = from_number
        self.client = httpx.AsyncClient(
            base_url=TWILIO_API_BASE,
            auth=(account_sid, auth_token),
            timeout=timeout_seconds,
            transport=transport,
        )

    async def send_text(self, phone: str, body: str) -> SmsResult:
        masked = mask_phone(phone)
        try:
            response = await self.client.post(
                f"/Accounts/{self.account_sid}/Messages.json",
                data={"To": phone, "From": self.from_number, "Body": body},
            )
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "sms.dispatch_failed",
                extra={"provider": self.name, "to_masked": masked, "error_type": type(exc).__name__},
            )
            return SmsResult(
                success=False,
                provider=self.name,
                error="Failed to connect to Twilio SMS service",
            )

        if not isinstance(payload, dict):
            payload = {}

        if response.is_success and payload.get("sid"):
            logger.info(
                "sms.dispatched",
                extra={"provider": self.name, "to_masked": masked, "message_sid": payload["sid"]},
            )
            return SmsResult(success=True, provider=self.name)

        error = payload.get("message") or "Failed to send SMS via Twilio"
        logger.error(
            "sms.dispatch_failed",
            extra={
                "provider": self.name,
                "to_masked": masked,
                "status_code": response.status_code,
                "provider_error": error,
            },
        )
        return SmsResult(success=False, provider=self.name, error=error)

    async def aclose(self) -> None:
        await self.client.aclose()
