from __future__ import annotations

from dataclasses import dataclass, field

from app.domain.entities.wallet_positions import PoolFailure, PoolRecord


@dataclass(frozen=True)
class GetWalletPositionsInput:
    wallet_address: str


@dataclass(frozen=True)
class GetWalletPositionsOutput:
    wallet_address: str
    pools: dict[str, PoolRecord]
    failures: list[PoolFailure] = field(default_factory=list)
