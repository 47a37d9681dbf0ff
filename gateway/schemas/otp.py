"""Pydantic schemas for the OTP endpoint."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class OtpActionRequest(BaseModel):
    """Body of ``POST /api/send-otp``.

    Fields are optional at the schema level so missing values produce the
    endpoint's own error codes instead of a generic 422.
    """

    phone: str | None = Field(
        default=None,
        description="Phone number: 07XXXXXXXX, 254XXXXXXXXX or +254XXXXXXXXX.",
    )
    action: str | None = Field(
        default=None,
        description="'send' to issue a code, 'verify' to check one.",
    )
    otp: str | None = Field(
        default=None,
        description="Code to verify (required when action='verify').",
    )


class OtpActionResponse(BaseModel):
    """Successful outcome of a send or verify action."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    message: str = Field(..., description="Human-readable outcome.")
    provider: str | None = Field(
        default=None,
        description="SMS provider used for 'send' (twilio, africastalking, dev-mode).",
    )
    otp: str | None = Field(
        default=None,
        description="Issued code; only returned outside production when enabled.",
    )


class OtpErrorResponse(BaseModel):
    """Failed outcome of a send or verify action."""

    model_config = ConfigDict(populate_by_name=True)

    success: Literal[False] = False
    error: str = Field(..., description="Human-readable failure message.")
    code: str = Field(..., description="Machine-readable failure code.")
    attempts_remaining: int | None = Field(
        default=None,
        alias="attemptsRemaining",
        description="Verification attempts left after a mismatch.",
    )
    request_id: str | None = Field(default=None, description="Correlation id.")
