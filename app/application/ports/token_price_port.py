from __future__ import annotations

from typing import Protocol

from app.domain.entities.wallet_positions import TokenPairQuote


class TokenPricePort(Protocol):
    async def get_pair_quote(
        self,
        *,
        token_x_mint: str,
        token_y_mint: str,
    ) -> TokenPairQuote:
        ...
