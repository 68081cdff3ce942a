from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import logging
import time

import httpx

from app.application.ports.token_price_port import TokenPricePort
from app.domain.entities.wallet_positions import TokenPairQuote
from app.domain.exceptions import InvalidQuoteError


logger = logging.getLogger(__name__)


class PriceLookupError(RuntimeError):
    pass


@dataclass(frozen=True)
class JupiterPriceClientSettings:
    price_api_base: str
    token_api_base: str
    timeout_seconds: float
    token_cache_ttl_seconds: float = 3600
    token_cache_max_entries: int = 4096


def _short_mint(mint: str) -> str:
    return f"{mint[:4]}...{mint[-4:]}" if len(mint) > 8 else mint


class JupiterPriceClient(TokenPricePort):
    """Pair price (X quoted in Y) and token symbols from the Jupiter APIs.

    Transport, 5xx and undecodable responses raise ``PriceLookupError``.
    A pair with no listed price yields ``price=None``; a malformed quote
    raises ``InvalidQuoteError``.
    """

    def __init__(
        self,
        settings: JupiterPriceClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport
        self._names: dict[str, tuple[float, str]] = {}

    async def get_pair_quote(
        self,
        *,
        token_x_mint: str,
        token_y_mint: str,
    ) -> TokenPairQuote:
        async with httpx.AsyncClient(
            timeout=self._settings.timeout_seconds,
            transport=self._transport,
        ) as client:
            name_x = await self._get_token_name(client, token_x_mint)
            name_y = await self._get_token_name(client, token_y_mint)
            price = await self._get_price(client, token_x_mint, token_y_mint)
        return TokenPairQuote(name_x=name_x, name_y=name_y, price=price)

    async def _get_price(
        self,
        client: httpx.AsyncClient,
        token_x_mint: str,
        token_y_mint: str,
    ) -> Decimal | None:
        url = self._settings.price_api_base.rstrip("/")
        params = {"ids": token_x_mint, "vsToken": token_y_mint}
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PriceLookupError(f"Price request failed for {token_x_mint}: {exc}") from exc

        if not isinstance(payload, dict):
            raise InvalidQuoteError(f"Price response for {token_x_mint} is not an object.")
        data = payload.get("data") or {}
        if not isinstance(data, dict):
            raise InvalidQuoteError(f"Price response data for {token_x_mint} is not an object.")

        entry = data.get(token_x_mint)
        if entry is not None and not isinstance(entry, dict):
            raise InvalidQuoteError(f"Price entry for {token_x_mint} is not an object: {entry!r}")
        value = entry.get("price") if entry else None
        if value is None:
            logger.info(
                "jupiter_price_client: price_not_listed mint=%s vs=%s",
                token_x_mint,
                token_y_mint,
            )
            return None

        try:
            price = Decimal(str(value))
        except InvalidOperation as exc:
            raise InvalidQuoteError(f"Invalid price for token {token_x_mint}: {value!r}") from exc
        if not price.is_finite():
            raise InvalidQuoteError(f"Invalid price for token {token_x_mint}: {value!r}")
        return price

    async def _get_token_name(self, client: httpx.AsyncClient, mint: str) -> str:
        cached = self._cache_get(mint)
        if cached is not None:
            return cached

        url = f"{self._settings.token_api_base.rstrip('/')}/{mint}"
        try:
            response = await client.get(url)
            if response.status_code == 404:
                logger.info("jupiter_price_client: token_not_listed mint=%s", mint)
                name = _short_mint(mint)
                self._cache_set(mint, name)
                return name
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PriceLookupError(f"Token info request failed for {mint}: {exc}") from exc

        name = ""
        if isinstance(payload, dict):
            name = str(payload.get("symbol") or payload.get("name") or "").strip()
        name = name or _short_mint(mint)
        self._cache_set(mint, name)
        return name

    def _cache_get(self, mint: str) -> str | None:
        if self._settings.token_cache_ttl_seconds <= 0:
            return None
        cached = self._names.get(mint)
        if cached is None:
            return None
        expires_at, value = cached
        if expires_at <= time.monotonic():
            self._names.pop(mint, None)
            return None
        return value

    def _cache_set(self, mint: str, value: str) -> None:
        if self._settings.token_cache_ttl_seconds <= 0 or self._settings.token_cache_max_entries <= 0:
            return
        now = time.monotonic()
        self._names.pop(mint, None)
        if len(self._names) >= self._settings.token_cache_max_entries:
            expired = [key for key, (expires_at, _) in self._names.items() if expires_at <= now]
            for key in expired:
                self._names.pop(key, None)
        while len(self._names) >= self._settings.token_cache_max_entries:
            # dicts keep insertion order, so the first key is the oldest entry
            self._names.pop(next(iter(self._names)))
        self._names[mint] = (now + self._settings.token_cache_ttl_seconds, value)
