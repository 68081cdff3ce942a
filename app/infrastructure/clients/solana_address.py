from __future__ import annotations

from solders.pubkey import Pubkey

from app.application.ports.address_port import AddressPort
from app.domain.exceptions import InvalidAddressError


class SolanaAddressParser(AddressPort):
    def parse(self, value: str) -> str:
        text = (value or "").strip()
        if not text:
            raise InvalidAddressError("Wallet address is required.")
        try:
            return str(Pubkey.from_string(text))
        except ValueError as exc:
            raise InvalidAddressError(f"Invalid Solana address: {text!r}.") from exc
