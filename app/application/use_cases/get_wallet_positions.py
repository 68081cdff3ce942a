from __future__ import annotations

import asyncio
import logging

from app.application.dto.wallet_positions import GetWalletPositionsInput, GetWalletPositionsOutput
from app.application.ports.address_port import AddressPort
from app.application.ports.position_source_port import PositionSourcePort
from app.application.ports.token_price_port import TokenPricePort
from app.domain.entities.wallet_positions import PoolFailure, PoolRecord, PositionGroup
from app.domain.exceptions import DomainError, InvalidQuoteError, PartialAggregationFailure
from app.domain.services.position_transformer import normalize_position
from app.shared.retry import RetryExhaustedError, RetryPolicy, call_with_retry


logger = logging.getLogger(__name__)


class GetWalletPositionsUseCase:
    def __init__(
        self,
        *,
        address_port: AddressPort,
        position_port: PositionSourcePort,
        price_port: TokenPricePort,
        retry_policy: RetryPolicy,
        max_batch_size: int,
    ):
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be >= 1.")
        self._address_port = address_port
        self._position_port = position_port
        self._price_port = price_port
        self._retry_policy = retry_policy
        self._max_batch_size = max_batch_size

    async def execute(self, command: GetWalletPositionsInput) -> GetWalletPositionsOutput:
        owner = self._address_port.parse(command.wallet_address)

        groups = await call_with_retry(
            lambda: self._position_port.list_positions(owner=owner),
            policy=self._retry_policy,
            operation_name=f"list_positions owner={owner}",
            give_up_on=(DomainError,),
        )
        logger.info(
            "get_wallet_positions: discovered owner=%s pools=%s",
            owner,
            len(groups),
        )

        semaphore = asyncio.Semaphore(self._max_batch_size)
        tasks = [
            asyncio.create_task(self._resolve_pool(pool_key, group, semaphore))
            for pool_key, group in groups.items()
        ]
        try:
            outcomes = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        pools: dict[str, PoolRecord] = {}
        failures: list[PoolFailure] = []
        for pool_key, outcome in zip(groups, outcomes):
            if isinstance(outcome, PoolFailure):
                failures.append(outcome)
            else:
                pools[pool_key] = outcome

        output = GetWalletPositionsOutput(
            wallet_address=owner,
            pools=pools,
            failures=failures,
        )
        logger.info(
            "get_wallet_positions: aggregated owner=%s pools=%s failed=%s",
            owner,
            len(pools),
            len(failures),
        )
        if failures:
            raise PartialAggregationFailure(output, failures)
        return output

    async def _resolve_pool(
        self,
        pool_key: str,
        group: PositionGroup,
        semaphore: asyncio.Semaphore,
    ) -> PoolRecord | PoolFailure:
        pool = group.pool
        async with semaphore:
            try:
                quote = await call_with_retry(
                    lambda: self._price_port.get_pair_quote(
                        token_x_mint=pool.token_x_mint,
                        token_y_mint=pool.token_y_mint,
                    ),
                    policy=self._retry_policy,
                    operation_name=f"get_pair_quote pool={pool_key}",
                    give_up_on=(DomainError,),
                )
            except RetryExhaustedError as exc:
                logger.warning(
                    "get_wallet_positions: pool_failed pool=%s error=%s",
                    pool_key,
                    exc.last_error,
                )
                return PoolFailure(pool_key=pool_key, error=str(exc.last_error))
            except InvalidQuoteError as exc:
                logger.warning(
                    "get_wallet_positions: pool_failed pool=%s error=%s",
                    pool_key,
                    exc,
                )
                return PoolFailure(pool_key=pool_key, error=str(exc))

        positions = tuple(
            normalize_position(
                raw,
                token_x_decimals=pool.token_x_decimals,
                token_y_decimals=pool.token_y_decimals,
            )
            for raw in group.positions
        )
        return PoolRecord(
            positions=positions,
            name_x=quote.name_x,
            name_y=quote.name_y,
            price=quote.price,
            active_bin_id=pool.active_bin_id,
            token_x_decimals=pool.token_x_decimals,
            token_y_decimals=pool.token_y_decimals,
        )
