from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from app.domain.entities.wallet_positions import PoolContext, PositionGroup, RawPosition


class PositionPayloadError(ValueError):
    pass


def _require(row: Mapping[str, Any], key: str, *, path: str) -> Any:
    if not isinstance(row, Mapping):
        raise PositionPayloadError(f"{path} must be an object.")
    value = row.get(key)
    if value is None:
        raise PositionPayloadError(f"Missing field {path}.{key}.")
    return value


def _as_int(value: Any, *, path: str) -> int:
    if isinstance(value, bool):
        raise PositionPayloadError(f"{path} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise PositionPayloadError(f"{path} must be an integer, got {value!r}.") from exc


def _amount(value: Any) -> int | str:
    # Amounts stay raw; validation happens when they are scaled.
    return value if isinstance(value, (int, str)) and not isinstance(value, bool) else str(value)


def map_pool_context(row: Mapping[str, Any], *, path: str) -> PoolContext:
    lb_pair = _require(row, "lbPair", path=path)
    token_x = _require(row, "tokenX", path=path)
    token_y = _require(row, "tokenY", path=path)
    return PoolContext(
        token_x_mint=str(_require(token_x, "publicKey", path=f"{path}.tokenX")),
        token_y_mint=str(_require(token_y, "publicKey", path=f"{path}.tokenY")),
        token_x_decimals=_as_int(
            _require(token_x, "decimal", path=f"{path}.tokenX"),
            path=f"{path}.tokenX.decimal",
        ),
        token_y_decimals=_as_int(
            _require(token_y, "decimal", path=f"{path}.tokenY"),
            path=f"{path}.tokenY.decimal",
        ),
        active_bin_id=_as_int(
            _require(lb_pair, "activeId", path=f"{path}.lbPair"),
            path=f"{path}.lbPair.activeId",
        ),
    )


def map_raw_position(row: Mapping[str, Any], *, path: str) -> RawPosition:
    data = _require(row, "positionData", path=path)
    data_path = f"{path}.positionData"
    return RawPosition(
        public_key=str(_require(row, "publicKey", path=path)),
        lower_bin_id=_as_int(_require(data, "lowerBinId", path=data_path), path=f"{data_path}.lowerBinId"),
        upper_bin_id=_as_int(_require(data, "upperBinId", path=data_path), path=f"{data_path}.upperBinId"),
        last_updated_at=_amount(_require(data, "lastUpdatedAt", path=data_path)),
        total_x_amount=_amount(_require(data, "totalXAmount", path=data_path)),
        total_y_amount=_amount(_require(data, "totalYAmount", path=data_path)),
        fee_x=_amount(_require(data, "feeX", path=data_path)),
        fee_y=_amount(_require(data, "feeY", path=data_path)),
        total_claimed_fee_x_amount=_amount(_require(data, "totalClaimedFeeXAmount", path=data_path)),
        total_claimed_fee_y_amount=_amount(_require(data, "totalClaimedFeeYAmount", path=data_path)),
    )


def map_position_groups(payload: Any) -> dict[str, PositionGroup]:
    """Map ``{lbPairKey: PositionInfo}`` as serialized by the DLMM SDK.

    A list of ``[key, PositionInfo]`` pairs (a serialized JS ``Map``) is accepted too.
    """
    if isinstance(payload, list):
        try:
            items = [(key, value) for key, value in payload]
        except (TypeError, ValueError) as exc:
            raise PositionPayloadError("Positions list must contain [key, value] pairs.") from exc
    elif isinstance(payload, Mapping):
        items = list(payload.items())
    else:
        raise PositionPayloadError("Positions payload must be an object.")

    groups: dict[str, PositionGroup] = {}
    for key, row in items:
        pool_key = str(key)
        path = f"positions[{pool_key}]"
        rows = _require(row, "lbPairPositionsData", path=path)
        if not isinstance(rows, list):
            raise PositionPayloadError(f"{path}.lbPairPositionsData must be a list.")
        groups[pool_key] = PositionGroup(
            pool=map_pool_context(row, path=path),
            positions=tuple(
                map_raw_position(position, path=f"{path}.lbPairPositionsData[{idx}]")
                for idx, position in enumerate(rows)
            ),
        )
    return groups
