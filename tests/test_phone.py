"""Unit tests for Kenyan phone normalization."""

import pytest

from gateway.core.errors import ValidationAppError
from gateway.utils.phone import (
    clean_phone,
    is_valid_stk_phone,
    mask_phone,
    normalize_otp_phone,
    normalize_stk_phone,
    to_e164,
)


class TestCleanPhone:
    def test_strips_spaces_and_dashes(self) -> None:
        assert clean_phone(" 0712-345 678 ") == "0712345678"

    def test_keeps_only_leading_plus(self) -> None:
        assert clean_phone("+254 (712) 345+678") == "+254712345678"

    def test_drops_letters(self) -> None:
        assert clean_phone("tel:0712345678") == "0712345678"


class TestNormalizeOtpPhone:
    @pytest.mark.parametrize(
        "raw",
        [
            "0712345678",
            "254712345678",
            "+254712345678",
            "712345678",
            "0712 345 678",
            "0712-345-678",
            "+254 712 345 678",
            "254-712-345-678",
        ],
    )
    def test_equivalent_inputs_share_one_key(self, raw: str) -> None:
        assert normalize_otp_phone(raw) == "+254712345678"

    def test_already_normalized_is_unchanged(self) -> None:
        assert normalize_otp_phone("+254712345678") == "+254712345678"

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_phone_is_rejected(self, raw) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            normalize_otp_phone(raw)
        assert exc_info.value.code == "phone_required"

    @pytest.mark.parametrize(
        "raw",
        ["07123", "07123456789", "+15551234567", "abc", "+0712345678"],
    )
    def test_invalid_numbers_are_rejected(self, raw: str) -> None:
        with pytest.raises(ValidationAppError) as exc_info:
            normalize_otp_phone(raw)
        assert exc_info.value.code == "invalid_phone"

    def test_non_ascii_digits_are_dropped(self) -> None:
        assert clean_phone("07\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668") == "07"
        with pytest.raises(ValidationAppError) as exc_info:
            normalize_otp_phone("07\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668")
        assert exc_info.value.code == "invalid_phone"

    def test_fullwidth_digits_are_rejected(self) -> None:
        with pytest.raises(ValidationAppError):
            normalize_otp_phone("\uff10\uff17\uff11\uff12\uff13\uff14\uff15\uff16\uff17\uff18")

    def test_to_e164_does_not_validate(self) -> None:
        assert to_e164("+1555") == "+254+1555"


class TestStkPhone:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("0712345678", "254712345678"),
            ("254712345678", "254712345678"),
            ("+254712345678", "254712345678"),
            ("0712 345 678", "254712345678"),
        ],
    )
    def test_normalizes_without_plus(self, raw: str, expected: str) -> None:
        assert normalize_stk_phone(raw) == expected

    @pytest.mark.parametrize("raw", ["712345678", "0812345", "25471234567", ""])
    def test_rejects_numbers_outside_stk_rule(self, raw: str) -> None:
        assert is_valid_stk_phone(raw) is False
        with pytest.raises(ValidationAppError):
            normalize_stk_phone(raw)

    def test_non_ascii_digits_are_not_forwarded(self) -> None:
        raw = "07\u0661\u0662\u0663\u0664\u0665\u0666\u0667\u0668"

        assert is_valid_stk_phone(raw) is False
        with pytest.raises(ValidationAppError):
            normalize_stk_phone(raw)

    def test_otp_and_stk_forms_differ(self) -> None:
        otp_key = normalize_otp_phone("0712345678")
        stk_phone = normalize_stk_phone("0712345678")

        assert otp_key == "+" + stk_phone
        assert otp_key != stk_phone


def test_mask_phone_hides_the_middle() -> None:
    assert mask_phone("+254712345678") == "+254712****78"
    assert mask_phone("short") == "****"
