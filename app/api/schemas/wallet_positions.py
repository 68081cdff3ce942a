from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PositionResponse(BaseModel):
    public_key: str
    last_updated_at: str = Field(..., description="ISO-8601 UTC timestamp of the last position update.")
    total_x_amount: str
    total_y_amount: str
    fee_x: str
    fee_y: str
    lower_bin_id: int
    upper_bin_id: int
    claimed_fee_x_amount: str = Field(..., description="Lifetime claimed token X fees in base units.")
    claimed_fee_y_amount: str = Field(..., description="Lifetime claimed token Y fees in base units.")
    claimed_fee_x: str
    claimed_fee_y: str


class PoolResponse(BaseModel):
    positions: list[PositionResponse]
    name_x: str
    name_y: str
    price: str | None = Field(None, description="Token X price quoted in token Y.")
    active_bin_id: int
    token_x_decimals: int
    token_y_decimals: int


class PoolFailureResponse(BaseModel):
    pool: str
    error: str


class WalletPositionsResponse(BaseModel):
    wallet_address: str
    status: Literal["ok", "partial"]
    pools: dict[str, PoolResponse]
    failures: list[PoolFailureResponse] = Field(default_factory=list)
