from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from app.shared.retry import RetryPolicy


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    rpc_endpoint: str
    rpc_positions_method: str
    rpc_timeout_seconds: float
    max_batch_size: int
    max_retries: int
    initial_retry_delay_ms: int
    max_retry_delay_ms: int
    jupiter_price_api_base: str
    jupiter_token_api_base: str
    jupiter_timeout_seconds: float
    token_info_cache_ttl_seconds: float
    token_info_cache_max_entries: int

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_delay_seconds=self.initial_retry_delay_ms / 1000.0,
            max_delay_seconds=self.max_retry_delay_ms / 1000.0,
        )


def get_settings() -> Settings:
    return Settings(
        rpc_endpoint=_env("RPC_ENDPOINT", "https://api.mainnet-beta.solana.com"),
        rpc_positions_method=_env("RPC_POSITIONS_METHOD", "getAllLbPairPositionsByUser"),
        rpc_timeout_seconds=float(_env("RPC_TIMEOUT_SECONDS", "30")),
        max_batch_size=int(_env("MAX_BATCH_SIZE", "10")),
        max_retries=int(_env("MAX_RETRIES", "15")),
        initial_retry_delay_ms=int(_env("INITIAL_RETRY_DELAY", "1000")),
        max_retry_delay_ms=int(_env("MAX_RETRY_DELAY", "30000")),
        jupiter_price_api_base=_env("JUPITER_PRICE_API_BASE", "https://api.jup.ag/price/v2"),
        jupiter_token_api_base=_env("JUPITER_TOKEN_API_BASE", "https://tokens.jup.ag/token"),
        jupiter_timeout_seconds=float(_env("JUPITER_TIMEOUT_SECONDS", "10")),
        token_info_cache_ttl_seconds=float(_env("TOKEN_INFO_CACHE_TTL_SECONDS", "3600")),
        token_info_cache_max_entries=int(_env("TOKEN_INFO_CACHE_MAX_ENTRIES", "4096")),
    )
