from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from fastapi.testclient import TestClient

from app.api.deps import get_wallet_positions_sessions, get_wallet_positions_use_case
from app.application.dto.wallet_positions import GetWalletPositionsOutput
from app.application.use_cases.latest_wallet_positions import WalletPositionsSessions
from app.domain.entities.wallet_positions import NormalizedPosition, PoolFailure, PoolRecord
from app.domain.exceptions import (
    InvalidAddressError,
    InvocationSupersededError,
    PartialAggregationFailure,
)
from app.main import app
from app.shared.retry import RetryExhaustedError


WALLET = "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


def _pool_record() -> PoolRecord:
    return PoolRecord(
        positions=(
            NormalizedPosition(
                public_key="pos-1",
                last_updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
                total_x_amount=Decimal("1.500000"),
                total_y_amount=Decimal("0E-9"),
                fee_x=Decimal("0.000100"),
                fee_y=Decimal("2.000000000"),
                lower_bin_id=-5,
                upper_bin_id=5,
                claimed_fee_x_amount="1500000",
                claimed_fee_y_amount="0",
                claimed_fee_x=Decimal("1.500000"),
                claimed_fee_y=Decimal("0E-9"),
            ),
        ),
        name_x="SOL",
        name_y="USDC",
        price=Decimal("171.25"),
        active_bin_id=0,
        token_x_decimals=6,
        token_y_decimals=9,
    )


class FakeUseCase:
    def __init__(self, *, result=None, error: Exception | None = None):
        self._result = result
        self._error = error

    async def execute(self, command):
        _ = command
        if self._error is not None:
            raise self._error
        return self._result


def _get(
    use_case: FakeUseCase,
    wallet: str = WALLET,
    *,
    session_id: str | None = None,
    sessions: WalletPositionsSessions | None = None,
):
    sessions = sessions if sessions is not None else WalletPositionsSessions()
    app.dependency_overrides[get_wallet_positions_use_case] = lambda: use_case
    app.dependency_overrides[get_wallet_positions_sessions] = lambda: sessions
    headers = {"X-Session-Id": session_id} if session_id else {}
    try:
        client = TestClient(app)
        return client.get(f"/v1/wallets/{wallet}/positions", headers=headers)
    finally:
        app.dependency_overrides.clear()


def test_returns_pools_with_decimal_strings():
    output = GetWalletPositionsOutput(wallet_address=WALLET, pools={"poolA": _pool_record()})

    response = _get(FakeUseCase(result=output))

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["failures"] == []
    pool = payload["pools"]["poolA"]
    assert pool["name_x"] == "SOL"
    assert pool["price"] == "171.25"
    position = pool["positions"][0]
    assert position["total_x_amount"] == "1.5"
    assert position["total_y_amount"] == "0"
    assert position["fee_x"] == "0.0001"
    assert position["fee_y"] == "2"
    assert position["claimed_fee_x_amount"] == "1500000"
    assert position["last_updated_at"] == "2024-01-01T00:00:00+00:00"


def test_empty_wallet_returns_empty_pools():
    response = _get(FakeUseCase(result=GetWalletPositionsOutput(wallet_address=WALLET, pools={})))

    assert response.status_code == 200
    assert response.json()["pools"] == {}


def test_partial_failure_is_reported_with_successful_pools():
    failures = [PoolFailure(pool_key="poolB", error="price source down")]
    output = GetWalletPositionsOutput(
        wallet_address=WALLET,
        pools={"poolA": _pool_record()},
        failures=failures,
    )

    response = _get(FakeUseCase(error=PartialAggregationFailure(output, failures)))

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "partial"
    assert list(payload["pools"]) == ["poolA"]
    assert payload["failures"] == [{"pool": "poolB", "error": "price source down"}]


def test_invalid_address_returns_400():
    response = _get(FakeUseCase(error=InvalidAddressError("Invalid Solana address.")), wallet="bad")

    assert response.status_code == 400


def test_exhausted_retries_return_502():
    error = RetryExhaustedError("list_positions", 16, ConnectionError("rpc down"))

    response = _get(FakeUseCase(error=error))

    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to fetch wallet positions."


def test_session_header_routes_through_sessions():
    output = GetWalletPositionsOutput(wallet_address=WALLET, pools={"poolA": _pool_record()})
    sessions = WalletPositionsSessions()

    response = _get(FakeUseCase(result=output), session_id="tab-1", sessions=sessions)

    assert response.status_code == 200
    assert list(response.json()["pools"]) == ["poolA"]
    assert len(sessions) == 0


def test_superseded_request_returns_409():
    error = InvocationSupersededError(f"Request for wallet {WALLET} was superseded.")

    response = _get(FakeUseCase(error=error), session_id="tab-1")

    assert response.status_code == 409
