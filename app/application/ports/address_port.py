from __future__ import annotations

from typing import Protocol


class AddressPort(Protocol):
    def parse(self, value: str) -> str:
        ...
