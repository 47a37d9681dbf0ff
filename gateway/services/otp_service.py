"""OTP send/verify orchestration.

Combines the OtpRegistry with the SMS sender. The code is stored before
dispatch is attempted; a failed dispatch is reported as DispatchAppError and
the stored code stays valid.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from gateway.adapters.sms.base import AbstractSmsSender
from gateway.core.errors import DispatchAppError, ValidationAppError
from gateway.services.otp_registry import OtpRegistry
from gateway.utils.phone import mask_phone, normalize_otp_phone

logger = logging.getLogger(__name__)

SEND_ACTION = "send"
VERIFY_ACTION = "verify"


@dataclass(frozen=True)
class OtpSendOutcome:
    phone_key: str
    code: str
    provider: str

    @property
    def masked_phone(self) -> str:
        return mask_phone(self.phone_key)


def build_message(code: str, *, brand_name: str, ttl_seconds: float) -> str:
    """Render the verification SMS body."""
    minutes = max(1, math.ceil(ttl_seconds / 60))
    return (
        f"Your {brand_name} verification code is: {code}. "
        f"Valid for {minutes} minutes. Do not share this code."
    )


class OtpService:
    """Issues codes, delivers them by SMS and verifies them."""

    def __init__(
        self,
        *,
        registry: OtpRegistry,
        sms_sender: AbstractSmsSender,
        brand_name: str = "Alpha Energy",
    ) -> None:
        self.registry = registry
        self.sms_sender = sms_sender
        self.brand_name = brand_name

    async def send(self, phone: str | None) -> OtpSendOutcome:
        """Issue a fresh code for phone and text it.

        Raises:
            ValidationAppError: If phone is missing or invalid.
            DispatchAppError: If the provider rejected the message. The code
                remains stored and verifiable.
        """
        phone_key = normalize_otp_phone(phone)
        code = self.registry.issue(phone_key)
        body = build_message(code, brand_name=self.brand_name, ttl_seconds=self.registry.ttl_seconds)

        result = await self.sms_sender.send_text(phone_key, body)
        if not result.success:
            logger.error(
                "otp.dispatch_failed",
                extra={
                    "phone_masked": mask_phone(phone_key),
                    "provider": result.provider,
                    "provider_error": result.error,
                },
            )
            raise DispatchAppError(
                code="sms_dispatch_failed",
                message=result.error or "Failed to send SMS",
                details={"provider": result.provider},
            )

        return OtpSendOutcome(phone_key=phone_key, code=code, provider=result.provider)

    def verify(self, phone: str | None, candidate_code: str | None) -> str:
        """Verify candidate_code for phone.

        Returns:
            The verified phone key.

        Raises:
            ValidationAppError: If phone or the code is missing.
            OtpAppError: Any OTP verification failure (see OtpRegistry.verify).
        """
        return self.registry.verify(phone or "", candidate_code or "")


def validate_action(action: str | None) -> str:
    """Return action when it is 'send' or 'verify'.

    Raises:
        ValidationAppError: For any other value.
    """
    if action not in (SEND_ACTION, VERIFY_ACTION):
        raise ValidationAppError(
            code="invalid_action",
            message="Invalid action. Use: send or verify",
            details={"field": "action"},
        )
    return action
