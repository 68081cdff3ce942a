from __future__ import annotations

import asyncio
import logging

from app.application.dto.wallet_positions import GetWalletPositionsInput, GetWalletPositionsOutput
from app.application.use_cases.get_wallet_positions import GetWalletPositionsUseCase
from app.domain.exceptions import InvocationSupersededError


logger = logging.getLogger(__name__)


class LatestWalletPositionsRunner:
    """Runs one aggregation at a time; a newer request cancels the older one.

    The superseded caller gets ``InvocationSupersededError`` instead of a stale result.
    """

    def __init__(self, *, use_case: GetWalletPositionsUseCase):
        self._use_case = use_case
        self._current: asyncio.Task[GetWalletPositionsOutput] | None = None

    @property
    def idle(self) -> bool:
        return self._current is None

    async def submit(self, wallet_address: str) -> GetWalletPositionsOutput:
        previous = self._current
        if previous is not None and not previous.done():
            logger.info("latest_wallet_positions: superseded wallet=%s", wallet_address)
            previous.cancel()

        task = asyncio.create_task(
            self._use_case.execute(GetWalletPositionsInput(wallet_address=wallet_address))
        )
        self._current = task
        try:
            return await task
        except asyncio.CancelledError:
            if self._current is not task:
                raise InvocationSupersededError(
                    f"Request for wallet {wallet_address} was superseded."
                ) from None
            raise
        finally:
            if self._current is task:
                self._current = None


class WalletPositionsSessions:
    """One ``LatestWalletPositionsRunner`` per caller session.

    Runners are dropped as soon as they go idle.
    """

    def __init__(self):
        self._runners: dict[str, LatestWalletPositionsRunner] = {}

    def __len__(self) -> int:
        return len(self._runners)

    async def submit(
        self,
        *,
        session_id: str,
        wallet_address: str,
        use_case: GetWalletPositionsUseCase,
    ) -> GetWalletPositionsOutput:
        runner = self._runners.get(session_id)
        if runner is None:
            runner = LatestWalletPositionsRunner(use_case=use_case)
            self._runners[session_id] = runner
        try:
            return await runner.submit(wallet_address)
        finally:
            if runner.idle and self._runners.get(session_id) is runner:
                del self._runners[session_id]
