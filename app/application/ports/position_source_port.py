from __future__ import annotations

from typing import Protocol

from app.domain.entities.wallet_positions import PositionGroup


class PositionSourcePort(Protocol):
    async def list_positions(self, *, owner: str) -> dict[str, PositionGroup]:
        ...
