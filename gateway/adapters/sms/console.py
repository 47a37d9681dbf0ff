"""Development sender that only logs messages."""

from __future__ import annotations

import logging

from gateway.adapters.sms.base import AbstractSmsSender, SmsResult

logger = logging.getLogger(__name__)


class ConsoleSmsSender(AbstractSmsSender):
    """Logs the message instead of sending it. Used when no provider is configured."""

    name = "dev-mode"

    async def send_text(self, phone: str, body: str) -> SmsResult:
        # Dev-only fallback: the full body, code included, is logged unredacted.
        logger.warning(
            "sms.console_delivery",
            extra={
                "to": phone,
                "sms_body": body,
                "hint": "Configure SMS_TWILIO_* or SMS_AFRICASTALKING_* to send real messages",
            },
        )
        return SmsResult(success=True, provider=self.name)
