from __future__ import annotations

from decimal import Decimal

from app.domain.exceptions import InvalidAmountError


def parse_base_units(value: object, *, field_name: str = "amount", allow_fraction: bool = False) -> int:
    """Parse a raw base-unit amount into a non-negative int.

    Accepts ints and digit strings. With ``allow_fraction`` a ``"123.45"``
    string is accepted and truncated to ``123``.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"{field_name} must be an integer, got bool.")
    if isinstance(value, int):
        if value < 0:
            raise InvalidAmountError(f"{field_name} must be non-negative, got {value}.")
        return value
    if not isinstance(value, str):
        raise InvalidAmountError(
            f"{field_name} must be an integer or digit string, got {type(value).__name__}."
        )

    text = value.strip()
    if allow_fraction and text.count(".") == 1:
        whole, fraction = text.split(".")
        if fraction and not (fraction.isascii() and fraction.isdigit()):
            raise InvalidAmountError(f"{field_name} is not a valid amount: {value!r}.")
        text = whole
    if not text or not (text.isascii() and text.isdigit()):
        raise InvalidAmountError(f"{field_name} is not a valid integer amount: {value!r}.")
    return int(text)


def _check_decimals(decimals: object) -> int:
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise InvalidAmountError(f"decimals must be a non-negative integer, got {decimals!r}.")
    return decimals


def scale_token_amount(raw: object, decimals: int, *, field_name: str = "amount") -> Decimal:
    base_units = parse_base_units(raw, field_name=field_name)
    places = _check_decimals(decimals)
    # String construction is exact; arithmetic would round to the context precision.
    return Decimal(f"{base_units}E-{places}")


def to_base_units(amount: Decimal, decimals: int) -> int:
    places = _check_decimals(decimals)
    sign, digits, exponent = amount.as_tuple()
    if not isinstance(exponent, int):
        raise InvalidAmountError(f"amount must be finite, got {amount!r}.")
    coefficient = int("".join(str(digit) for digit in digits) or "0")
    shift = exponent + places
    if shift >= 0:
        value = coefficient * 10**shift
    else:
        value = coefficient // 10**(-shift)
    return -value if sign else value


def format_token_amount(amount: Decimal) -> str:
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
