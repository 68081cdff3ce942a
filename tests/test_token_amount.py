from __future__ import annotations

from decimal import Decimal

import pytest

from app.domain.exceptions import InvalidAmountError
from app.domain.services.token_amount import (
    format_token_amount,
    parse_base_units,
    scale_token_amount,
    to_base_units,
)


def test_scale_places_decimal_point_exactly():
    assert scale_token_amount("1500000", 6) == Decimal("1.5")
    assert scale_token_amount(1, 9) == Decimal("0.000000001")
    assert scale_token_amount("42", 0) == Decimal("42")


def test_scale_keeps_digits_beyond_float_and_context_precision():
    raw = "123456789012345678901234567890123"
    amount = scale_token_amount(raw, 9)

    assert format_token_amount(amount) == "123456789012345678901234.567890123"


@pytest.mark.parametrize(
    "raw",
    [0, 1, 2**53 + 1, 2**64 - 1, 10**30, 10**30 + 7, 987654321987654321987654321987654321],
)
@pytest.mark.parametrize("decimals", [0, 1, 6, 9, 18])
def test_scale_then_unscale_recovers_raw_amount(raw: int, decimals: int):
    assert to_base_units(scale_token_amount(raw, decimals), decimals) == raw


@pytest.mark.parametrize("raw", ["", "  ", "12a", "1.5", "-5", "1e6", "0x10", "١٢٣", None, 1.5, True])
def test_scale_rejects_malformed_amounts(raw):
    with pytest.raises(InvalidAmountError):
        scale_token_amount(raw, 6)


def test_scale_rejects_negative_int():
    with pytest.raises(InvalidAmountError):
        scale_token_amount(-1, 6)


@pytest.mark.parametrize("decimals", [-1, 1.5, "6", True])
def test_scale_rejects_invalid_decimals(decimals):
    with pytest.raises(InvalidAmountError):
        scale_token_amount("100", decimals)


def test_parse_base_units_truncates_fraction_only_when_allowed():
    assert parse_base_units("1234.999", allow_fraction=True) == 1234
    assert parse_base_units("1234.", allow_fraction=True) == 1234
    assert parse_base_units(" 77 ") == 77
    with pytest.raises(InvalidAmountError):
        parse_base_units("1234.999")
    with pytest.raises(InvalidAmountError):
        parse_base_units(".5", allow_fraction=True)
    with pytest.raises(InvalidAmountError):
        parse_base_units("1.2.3", allow_fraction=True)


def test_to_base_units_truncates_extra_precision():
    assert to_base_units(Decimal("1.23456789"), 6) == 1234567


def test_format_token_amount_strips_trailing_zeros():
    assert format_token_amount(scale_token_amount("1500000", 6)) == "1.5"
    assert format_token_amount(scale_token_amount("0", 6)) == "0"
    assert format_token_amount(scale_token_amount("2000000", 6)) == "2"
    assert format_token_amount(scale_token_amount("100", 0)) == "100"
