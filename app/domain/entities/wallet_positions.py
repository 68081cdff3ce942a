from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class RawPosition:
    public_key: str
    lower_bin_id: int
    upper_bin_id: int
    last_updated_at: int | str
    total_x_amount: int | str
    total_y_amount: int | str
    fee_x: int | str
    fee_y: int | str
    total_claimed_fee_x_amount: int | str
    total_claimed_fee_y_amount: int | str


@dataclass(frozen=True)
class PoolContext:
    token_x_mint: str
    token_y_mint: str
    token_x_decimals: int
    token_y_decimals: int
    active_bin_id: int


@dataclass(frozen=True)
class PositionGroup:
    pool: PoolContext
    positions: tuple[RawPosition, ...]


@dataclass(frozen=True)
class TokenPairQuote:
    name_x: str
    name_y: str
    price: Decimal | None


@dataclass(frozen=True)
class NormalizedPosition:
    public_key: str
    last_updated_at: datetime
    total_x_amount: Decimal
    total_y_amount: Decimal
    fee_x: Decimal
    fee_y: Decimal
    lower_bin_id: int
    upper_bin_id: int
    claimed_fee_x_amount: str
    claimed_fee_y_amount: str
    claimed_fee_x: Decimal
    claimed_fee_y: Decimal


@dataclass(frozen=True)
class PoolRecord:
    positions: tuple[NormalizedPosition, ...]
    name_x: str
    name_y: str
    price: Decimal | None
    active_bin_id: int
    token_x_decimals: int
    token_y_decimals: int


@dataclass(frozen=True)
class PoolFailure:
    pool_key: str
    error: str
