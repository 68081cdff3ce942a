from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Awaitable, Callable, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExhaustedError(RuntimeError):
    """Operation kept failing after every allowed attempt."""

    def __init__(self, operation_name: str, attempts: int, last_error: BaseException):
        super().__init__(
            f"{operation_name} failed after {attempts} attempts: {last_error}"
        )
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int
    initial_delay_seconds: float
    max_delay_seconds: float
    multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0.")
        if self.initial_delay_seconds < 0:
            raise ValueError("initial_delay_seconds must be >= 0.")
        if self.max_delay_seconds < self.initial_delay_seconds:
            raise ValueError("max_delay_seconds must be >= initial_delay_seconds.")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1.")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry_number: int) -> float:
        """Delay before the given retry (1-based), capped at max_delay_seconds."""
        if retry_number < 1:
            raise ValueError("retry_number must be >= 1.")
        delay = self.initial_delay_seconds * (self.multiplier ** (retry_number - 1))
        return min(delay, self.max_delay_seconds)


async def call_with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    operation_name: str = "operation",
    give_up_on: tuple[type[BaseException], ...] = (),
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    attempts = policy.max_attempts
    last_exc: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except give_up_on:
            raise
        except Exception as exc:
            last_exc = exc
            if attempt == attempts:
                break
            delay = policy.delay_for(attempt)
            logger.warning(
                "retry: %s attempt=%s/%s delay_s=%s error=%s",
                operation_name,
                attempt,
                attempts,
                delay,
                exc,
            )
            await sleep(delay)

    logger.error(
        "retry: %s exhausted attempts=%s error=%s",
        operation_name,
        attempts,
        last_exc,
    )
    raise RetryExhaustedError(operation_name, attempts, last_exc) from last_exc
