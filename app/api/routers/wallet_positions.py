from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException

from app.api.deps import get_wallet_positions_sessions, get_wallet_positions_use_case
from app.api.schemas.wallet_positions import (
    PoolFailureResponse,
    PoolResponse,
    PositionResponse,
    WalletPositionsResponse,
)
from app.application.dto.wallet_positions import GetWalletPositionsInput, GetWalletPositionsOutput
from app.application.use_cases.get_wallet_positions import GetWalletPositionsUseCase
from app.application.use_cases.latest_wallet_positions import WalletPositionsSessions
from app.domain.entities.wallet_positions import PoolRecord
from app.domain.exceptions import (
    InvalidAddressError,
    InvalidAmountError,
    InvocationSupersededError,
    PartialAggregationFailure,
)
from app.domain.services.token_amount import format_token_amount
from app.shared.retry import RetryExhaustedError

router = APIRouter()

logger = logging.getLogger(__name__)


def _pool_to_response(record: PoolRecord) -> PoolResponse:
    return PoolResponse(
        positions=[
            PositionResponse(
                public_key=pos.public_key,
                last_updated_at=pos.last_updated_at.isoformat(),
                total_x_amount=format_token_amount(pos.total_x_amount),
                total_y_amount=format_token_amount(pos.total_y_amount),
                fee_x=format_token_amount(pos.fee_x),
                fee_y=format_token_amount(pos.fee_y),
                lower_bin_id=pos.lower_bin_id,
                upper_bin_id=pos.upper_bin_id,
                claimed_fee_x_amount=pos.claimed_fee_x_amount,
                claimed_fee_y_amount=pos.claimed_fee_y_amount,
                claimed_fee_x=format_token_amount(pos.claimed_fee_x),
                claimed_fee_y=format_token_amount(pos.claimed_fee_y),
            )
            for pos in record.positions
        ],
        name_x=record.name_x,
        name_y=record.name_y,
        price=str(record.price) if record.price is not None else None,
        active_bin_id=record.active_bin_id,
        token_x_decimals=record.token_x_decimals,
        token_y_decimals=record.token_y_decimals,
    )


def _to_response(result: GetWalletPositionsOutput) -> WalletPositionsResponse:
    return WalletPositionsResponse(
        wallet_address=result.wallet_address,
        status="partial" if result.failures else "ok",
        pools={key: _pool_to_response(record) for key, record in result.pools.items()},
        failures=[
            PoolFailureResponse(pool=failure.pool_key, error=failure.error)
            for failure in result.failures
        ],
    )


@router.get("/v1/wallets/{wallet_address}/positions", response_model=WalletPositionsResponse)
async def get_wallet_positions(
    wallet_address: str,
    x_session_id: str | None = Header(None, description="Requests sharing a session id supersede each other."),
    use_case: GetWalletPositionsUseCase = Depends(get_wallet_positions_use_case),
    sessions: WalletPositionsSessions = Depends(get_wallet_positions_sessions),
):
    try:
        if x_session_id:
            result = await sessions.submit(
                session_id=x_session_id,
                wallet_address=wallet_address,
                use_case=use_case,
            )
        else:
            result = await use_case.execute(GetWalletPositionsInput(wallet_address=wallet_address))
    except PartialAggregationFailure as exc:
        return _to_response(exc.output)
    except InvocationSupersededError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except InvalidAddressError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except InvalidAmountError as exc:
        logger.warning(
            "wallet_positions_router: invalid_amount wallet=%s error=%s",
            wallet_address,
            exc,
        )
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except RetryExhaustedError as exc:
        raise HTTPException(status_code=502, detail="Failed to fetch wallet positions.") from exc

    return _to_response(result)
