from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.application.dto.wallet_positions import GetWalletPositionsOutput
    from app.domain.entities.wallet_positions import PoolFailure


class DomainError(Exception):
    """Base for domain errors."""


class InvalidAddressError(DomainError):
    """Wallet address is not a valid Solana public key."""


class InvalidAmountError(DomainError):
    """Raw token amount from a collaborator is not a non-negative integer."""


class PartialAggregationFailure(DomainError):
    """Some pools resolved, others failed permanently."""

    def __init__(self, output: "GetWalletPositionsOutput", failures: "list[PoolFailure]"):
        failed = ", ".join(failure.pool_key for failure in failures)
        super().__init__(f"{len(failures)} pool(s) failed: {failed}")
        self.output = output
        self.failures = failures


class InvalidQuoteError(DomainError):
    """Price collaborator answered with a malformed quote."""


class InvocationSupersededError(DomainError):
    """A newer request for the same session replaced this one."""
