"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    field: str
    http_status: int
    attempts_remaining: int
    provider: str
    retry_after: float
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when caller input is malformed or missing."""


class OtpAppError(AppError):
    """Base for terminal and recoverable OTP verification outcomes."""


class OtpNotFoundError(OtpAppError):
    """No pending code exists for the phone number."""

    def __init__(self) -> None:
        super().__init__(
            code="otp_not_found",
            message="No OTP found. Please request a new one.",
        )


class OtpExpiredError(OtpAppError):
    """The pending code outlived its TTL and has been purged."""

    def __init__(self) -> None:
        super().__init__(
            code="otp_expired",
            message="OTP has expired. Please request a new one.",
        )


class OtpAttemptsExceededError(OtpAppError):
    """The attempt budget was already spent; the record has been purged."""

    def __init__(self) -> None:
        super().__init__(
            code="otp_too_many_attempts",
            message="Too many failed attempts. Please request a new OTP.",
        )


class OtpMismatchError(OtpAppError):
    """The candidate code did not match. Retriable while attempts remain."""

    def __init__(self, attempts_remaining: int) -> None:
        super().__init__(
            code="otp_mismatch",
            message="Invalid OTP",
            details={"attempts_remaining": attempts_remaining},
        )
        self.attempts_remaining = attempts_remaining


class DispatchAppError(AppError):
    """Raised when the SMS provider fails to accept a message.

    The issued code stays stored; callers decide whether to re-send.
    """


class PaymentDeclinedError(AppError):
    """Raised when the payment gateway answers but refuses the request."""


class PaymentGatewayAppError(AppError):
    """Raised when the payment gateway cannot be reached or answers garbage."""
