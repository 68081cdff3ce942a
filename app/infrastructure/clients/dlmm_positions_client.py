from __future__ import annotations

from dataclasses import dataclass
import itertools
import logging

import httpx

from app.application.ports.position_source_port import PositionSourcePort
from app.domain.entities.wallet_positions import PositionGroup
from app.infrastructure.mappers.dlmm_positions_mapper import PositionPayloadError, map_position_groups


logger = logging.getLogger(__name__)


class PositionSourceError(RuntimeError):
    pass


@dataclass(frozen=True)
class DlmmPositionsRpcClientSettings:
    rpc_endpoint: str
    method: str
    timeout_seconds: float


class DlmmPositionsRpcClient(PositionSourcePort):
    """Lists a wallet's DLMM positions through a JSON-RPC endpoint.

    The endpoint answers ``method(owner)`` with the DLMM SDK's
    ``{lbPairKey: PositionInfo}`` map serialized as JSON.
    """

    def __init__(
        self,
        settings: DlmmPositionsRpcClientSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings
        self._transport = transport
        self._ids = itertools.count(1)

    async def list_positions(self, *, owner: str) -> dict[str, PositionGroup]:
        result = await self._post_rpc(method=self._settings.method, params=[owner])
        if result is None:
            return {}
        try:
            groups = map_position_groups(result)
        except PositionPayloadError as exc:
            raise PositionSourceError(f"Malformed positions payload: {exc}") from exc

        logger.info(
            "dlmm_positions_client: fetched_positions owner=%s pools=%s positions=%s",
            owner,
            len(groups),
            sum(len(group.positions) for group in groups.values()),
        )
        return groups

    async def _post_rpc(self, *, method: str, params: list) -> object:
        request_id = next(self._ids)
        payload = {"jsonrpc": "2.0", "id": request_id, "method": method, "params": params}
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(self._settings.rpc_endpoint, json=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PositionSourceError(f"RPC request {method} failed: {exc}") from exc

        if not isinstance(body, dict):
            raise PositionSourceError(f"RPC response for {method} is not an object.")
        error = body.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise PositionSourceError(f"RPC error for {method}: {message}")
        return body.get("result")
