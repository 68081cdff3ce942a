from __future__ import annotations

from functools import lru_cache

from app.application.use_cases.get_wallet_positions import GetWalletPositionsUseCase
from app.application.use_cases.latest_wallet_positions import WalletPositionsSessions
from app.infrastructure.clients.dlmm_positions_client import (
    DlmmPositionsRpcClient,
    DlmmPositionsRpcClientSettings,
)
from app.infrastructure.clients.jupiter_price_client import (
    JupiterPriceClient,
    JupiterPriceClientSettings,
)
from app.infrastructure.clients.solana_address import SolanaAddressParser
from app.shared.config import get_settings


@lru_cache(maxsize=1)
def _get_positions_client() -> DlmmPositionsRpcClient:
    settings = get_settings()
    return DlmmPositionsRpcClient(
        DlmmPositionsRpcClientSettings(
            rpc_endpoint=settings.rpc_endpoint,
            method=settings.rpc_positions_method,
            timeout_seconds=settings.rpc_timeout_seconds,
        )
    )


@lru_cache(maxsize=1)
def _get_price_client() -> JupiterPriceClient:
    settings = get_settings()
    return JupiterPriceClient(
        JupiterPriceClientSettings(
            price_api_base=settings.jupiter_price_api_base,
            token_api_base=settings.jupiter_token_api_base,
            timeout_seconds=settings.jupiter_timeout_seconds,
            token_cache_ttl_seconds=settings.token_info_cache_ttl_seconds,
            token_cache_max_entries=settings.token_info_cache_max_entries,
        )
    )


def get_wallet_positions_use_case() -> GetWalletPositionsUseCase:
    settings = get_settings()
    return GetWalletPositionsUseCase(
        address_port=SolanaAddressParser(),
        position_port=_get_positions_client(),
        price_port=_get_price_client(),
        retry_policy=settings.retry_policy(),
        max_batch_size=settings.max_batch_size,
    )


@lru_cache(maxsize=1)
def get_wallet_positions_sessions() -> WalletPositionsSessions:
    return WalletPositionsSessions()
