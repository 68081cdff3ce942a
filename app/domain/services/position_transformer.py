from __future__ import annotations

from datetime import datetime, timezone

from app.domain.entities.wallet_positions import NormalizedPosition, RawPosition
from app.domain.exceptions import InvalidAmountError
from app.domain.services.token_amount import parse_base_units, scale_token_amount


def _timestamp_to_datetime(value: int | str) -> datetime:
    seconds = parse_base_units(value, field_name="last_updated_at")
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidAmountError(f"last_updated_at is out of range: {value!r}.") from exc


def normalize_position(
    raw: RawPosition,
    *,
    token_x_decimals: int,
    token_y_decimals: int,
) -> NormalizedPosition:
    # Total amounts come from liquidity-share math and may carry a fractional base unit.
    total_x = parse_base_units(raw.total_x_amount, field_name="total_x_amount", allow_fraction=True)
    total_y = parse_base_units(raw.total_y_amount, field_name="total_y_amount", allow_fraction=True)
    claimed_x = parse_base_units(
        raw.total_claimed_fee_x_amount,
        field_name="total_claimed_fee_x_amount",
    )
    claimed_y = parse_base_units(
        raw.total_claimed_fee_y_amount,
        field_name="total_claimed_fee_y_amount",
    )

    return NormalizedPosition(
        public_key=raw.public_key,
        last_updated_at=_timestamp_to_datetime(raw.last_updated_at),
        total_x_amount=scale_token_amount(total_x, token_x_decimals, field_name="total_x_amount"),
        total_y_amount=scale_token_amount(total_y, token_y_decimals, field_name="total_y_amount"),
        fee_x=scale_token_amount(raw.fee_x, token_x_decimals, field_name="fee_x"),
        fee_y=scale_token_amount(raw.fee_y, token_y_decimals, field_name="fee_y"),
        lower_bin_id=raw.lower_bin_id,
        upper_bin_id=raw.upper_bin_id,
        claimed_fee_x_amount=str(claimed_x),
        claimed_fee_y_amount=str(claimed_y),
        claimed_fee_x=scale_token_amount(claimed_x, token_x_decimals, field_name="claimed_fee_x"),
        claimed_fee_y=scale_token_amount(claimed_y, token_y_decimals, field_name="claimed_fee_y"),
    )
