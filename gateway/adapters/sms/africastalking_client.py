"""Africa's Talking bulk SMS adapter."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from gateway.adapters.sms.base import AbstractSmsSender, SmsResult
from gateway.utils.phone import mask_phone

logger = logging.getLogger(__name__)

SANDBOX_URL = "https://api.sandbox.africastalking.com/version1/messaging"
LIVE_URL = "https://api.africastalking.com/version1/messaging"

# Africa's Talking per-recipient status code for "Sent"
_STATUS_SENT = 101


class AfricasTalkingSmsSender(AbstractSmsSender):
    """Sends messages through Africa's Talking.

    The username ``sandbox`` selects the sandbox host, where a sender id is
    not accepted.
    """

    name = "africastalking"

    def __init__(
        self,
        api_key: str,
        username: str = "sandbox",
        sender_id: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.username = username
        self.sender_id = sender_id
        self.is_sandbox = username.lower() == "sandbox"
        self.url = SANDBOX_URL if self.is_sandbox else LIVE_URL
        self.client = httpx.AsyncClient(
            headers={"Accept": "application/json", "apiKey": api_key},
            timeout=timeout_seconds,
            transport=transport,
        )

    def _build_form(self, phone: str, body: str) -> dict[str, str]:
        form = {"username": self.username, "to": phone, "message": body}
        if not self.is_sandbox and self.sender_id:
            form["from"] = self.sender_id
        return form

    @staticmethod
    def _first_recipient(payload: dict[str, Any]) -> dict[str, Any]:
        recipients = (payload.get("SMSMessageData") or {}).get("Recipients") or []
        return recipients[0] if recipients else {}

    async def send_text(self, phone: str, body: str) -> SmsResult:
        masked = mask_phone(phone)
        try:
            response = await self.client.post(self.url, data=self._build_form(phone, body))
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(
                "sms.dispatch_failed",
                extra={"provider": self.name, "to_masked": masked, "error_type": type(exc).__name__},
            )
            return SmsResult(
                success=False,
                provider=self.name,
                error="Failed to connect to SMS service",
            )

        if not isinstance(payload, dict):
            payload = {}

        recipient = self._first_recipient(payload)
        if recipient.get("status") == "Success" or recipient.get("statusCode") == _STATUS_SENT:
            logger.info(
                "sms.dispatched",
                extra={"provider": self.name, "to_masked": masked, "sandbox": self.is_sandbox},
            )
            return SmsResult(success=True, provider=self.name)

        error = (
            (payload.get("SMSMessageData") or {}).get("Message")
            or recipient.get("status")
            or "Failed to send SMS"
        )
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
