"""Kenyan phone number normalization.

Two call sites need different canonical forms and they must not be mixed:

- OTP keys use E.164 with a leading plus: ``+254712345678``.
- M-Pesa STK push uses digits only: ``254712345678``.
"""

from __future__ import annotations

import re

from gateway.core.errors import ValidationAppError

KENYA_COUNTRY_CODE = "254"

_OTP_PHONE_RE = re.compile(r"^\+254[0-9]{9}$")
_STK_PHONE_RE = re.compile(r"^(07[0-9]{8}|254[0-9]{9})$")


def _digits_only(value: str) -> str:
    # ASCII 0-9 only
    return "".join(ch for ch in value if "0" <= ch <= "9")


def clean_phone(phone: str) -> str:
    """Strip everything except digits and a single leading ``+``.

    Examples:
        >>> clean_phone(" +254 712-345 678 ")
        '+254712345678'
        >>> clean_phone("0712 345 678")
        '0712345678'
    """
    stripped = "".join(phone.split())
    prefix = "+" if stripped.startswith("+") else ""
    return prefix + _digits_only(stripped)


def to_e164(phone: str) -> str:
    """Rewrite a cleaned local or international number to ``+254...``.

    No validation happens here; see normalize_otp_phone().
    """
    cleaned = clean_phone(phone)
    if cleaned.startswith("0"):
        return f"+{KENYA_COUNTRY_CODE}{cleaned[1:]}"
    if cleaned.startswith(KENYA_COUNTRY_CODE):
        return f"+{cleaned}"
    if not cleaned.startswith(f"+{KENYA_COUNTRY_CODE}"):
        return f"+{KENYA_COUNTRY_CODE}{cleaned}"
    return cleaned


def normalize_otp_phone(phone: str | None) -> str:
    """Normalize a phone number into the OTP lookup key.

    Args:
        phone: Phone number in any locally recognized format.

    Returns:
        Canonical ``+254XXXXXXXXX`` string.

    Raises:
        ValidationAppError: If the input is empty or does not normalize to a
            valid Kenyan mobile number.
    """
    if not phone or not phone.strip():
        raise ValidationAppError(
            code="phone_required",
            message="Phone number is required",
            details={"field": "phone"},
        )

    normalized = to_e164(phone)
    if not _OTP_PHONE_RE.match(normalized):
        raise ValidationAppError(
            code="invalid_phone",
            message="Invalid phone number. Use 07XXXXXXXX, 254XXXXXXXXX or +254XXXXXXXXX",
            details={"field": "phone"},
        )
    return normalized


def is_valid_stk_phone(phone: str) -> bool:
    """Check the STK push acceptance rule (``07XXXXXXXX`` or ``254XXXXXXXXX``)."""
    return bool(_STK_PHONE_RE.match(_digits_only(phone)))


def normalize_stk_phone(phone: str | None) -> str:
    """Normalize a phone number for the M-Pesa STK push gateway.

    Unlike normalize_otp_phone(), the result carries no leading plus.

    Raises:
        ValidationAppError: If the number fails the STK push acceptance rule.
    """
    if not phone or not is_valid_stk_phone(phone):
        raise ValidationAppError(
            code="invalid_phone",
            message="Invalid phone number. Use 07XXXXXXXX or 254XXXXXXXXX",
            details={"field": "phone"},
        )

    digits = _digits_only(phone)
    if digits.startswith("0"):
        return f"{KENYA_COUNTRY_CODE}{digits[1:]}"
    return digits


def mask_phone(phone: str) -> str:
    """Hide the middle of a phone number for logs and user messages.

    >>> mask_phone("+254712345678")
    '+254712****78'
    """
    if len(phone) <= 9:
        return "****"
    return f"{phone[:7]}****{phone[-2:]}"
