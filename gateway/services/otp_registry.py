"""In-memory registry of pending phone verifications.

One PendingVerification exists per normalized phone number. Issuing a new
code replaces the previous one outright. Records are removed on successful
verification, on expiry detection, and when the attempt budget runs out.

The store is volatile: a restart silently invalidates every pending code.
"""

from __future__ import annotations

import hmac
import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable

from gateway.core.errors import (
    OtpAttemptsExceededError,
    OtpExpiredError,
    OtpMismatchError,
    OtpNotFoundError,
    ValidationAppError,
)
from gateway.utils.phone import mask_phone, normalize_otp_phone

logger = logging.getLogger(__name__)

DEFAULT_CODE_LENGTH = 6
DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ATTEMPTS = 3


@dataclass
class PendingVerification:
    """Code awaiting verification for a single phone number."""

    phone_key: str
    code: str
    expires_at: float
    attempts_used: int = 0


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return a uniformly random numeric code with no leading zero.

    For length 6 the value lies in [100000, 999999].
    """
    low = 10 ** (length - 1)
    high = 10**length - 1
    return str(low + secrets.randbelow(high - low + 1))


class OtpRegistry:
    """Issues and verifies one-time codes keyed by normalized phone number.

    Thread-safe: every read-modify-write of a record happens under one lock.
    """

    def __init__(
        self,
        *,
        code_length: int = DEFAULT_CODE_LENGTH,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], float] = time.time,
        code_factory: Callable[[int], str] = generate_code,
    ) -> None:
        if code_length < 1:
            raise ValueError("code_length must be >= 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        self._code_length = code_length
        self._ttl_seconds = ttl_seconds
        self._max_attempts = max_attempts
        self._clock = clock
        self._code_factory = code_factory
        self._lock = threading.RLock()
        self._pending: dict[str, PendingVerification] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def issue(self, phone: str) -> str:
        """Generate and store a fresh code for phone.

        Any pending code for the same number is replaced and stops verifying
        immediately.

        Args:
            phone: Phone number in any locally recognized format.

        Returns:
            The generated code.

        Raises:
            ValidationAppError: If phone is empty or cannot be normalized.
        """
        phone_key = normalize_otp_phone(phone)
        code = self._code_factory(self._code_length)
        record = PendingVerification(
            phone_key=phone_key,
            code=code,
            expires_at=self._clock() + self._ttl_seconds,
        )

        with self._lock:
            replaced = phone_key in self._pending
            self._pending[phone_key] = record

        logger.info(
            "otp.issued",
            extra={
                "phone_masked": mask_phone(phone_key),
                "ttl_s": self._ttl_seconds,
                "replaced": replaced,
            },
        )
        return code

    def verify(self, phone: str, candidate_code: str) -> str:
        """Check candidate_code against the pending code for phone.

        Args:
            phone: Phone number in any locally recognized format.
            candidate_code: Code entered by the user; compared as an exact string.

        Returns:
            The normalized phone key that was verified.

        Raises:
            ValidationAppError: If phone or candidate_code is missing/invalid.
            OtpNotFoundError: No pending code for this number.
            OtpExpiredError: The code expired; the record is purged.
            OtpAttemptsExceededError: Attempt budget already spent; record purged.
            OtpMismatchError: Wrong code. The record is purged when this attempt
                used up the budget.
        """
        phone_key = normalize_otp_phone(phone)
        if not candidate_code:
            raise ValidationAppError(
                code="otp_required",
                message="OTP is required",
                details={"field": "otp"},
            )

        masked = mask_phone(phone_key)
        now = self._clock()

        with self._lock:
            record = self._pending.get(phone_key)
            if record is None:
                logger.info("otp.verify_failed", extra={"phone_masked": masked, "reason": "not_found"})
                raise OtpNotFoundError()

            if now > record.expires_at:
                del self._pending[phone_key]
                logger.info("otp.verify_failed", extra={"phone_masked": masked, "reason": "expired"})
                raise OtpExpiredError()

            if record.attempts_used >= self._max_attempts:
                del self._pending[phone_key]
                logger.warning(
                    "otp.verify_failed",
                    extra={"phone_masked": masked, "reason": "too_many_attempts"},
                )
                raise OtpAttemptsExceededError()

            if not hmac.compare_digest(candidate_code.encode(), record.code.encode()):
                record.attempts_used += 1
                remaining = self._max_attempts - record.attempts_used
                if remaining <= 0:
                    del self._pending[phone_key]
                logger.warning(
                    "otp.verify_failed",
                    extra={
                        "phone_masked": masked,
                        "reason": "mismatch",
                        "attempts_remaining": remaining,
                    },
                )
                raise OtpMismatchError(attempts_remaining=remaining)

            del self._pending[phone_key]

        logger.info("otp.verified", extra={"phone_masked": masked})
        return phone_key

    def invalidate(self, phone: str) -> bool:
        """Drop the pending code for phone, if any.

        Returns:
            True if a record was removed.
        """
        phone_key = normalize_otp_phone(phone)
        with self._lock:
            return self._pending.pop(phone_key, None) is not None

    def purge_expired(self) -> int:
        """Remove every record whose TTL has passed.

        Returns:
            Number of records removed.
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, r in self._pending.items() if now > r.expires_at]
            for key in expired:
                del self._pending[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._pending.clear()
