# src/pm_token/domain/protocol.py
"""Fungible token Protocol: the value-carrier boundary consumed by the core.

Amounts are WAD-scaled ints. Implementations raise ExternalTransferError when
they reject an operation (insufficient balance or allowance) and must leave
their balances untouched in that case.
"""

from typing import Protocol


class FungibleToken(Protocol):
    symbol: str

    def balance_of(self, account: str) -> int: ...

    def mint(self, to: str, amount: int) -> None: ...

    def burn(self, from_account: str, amount: int) -> None: ...

    def transfer(self, sender: str, to: str, amount: int) -> None: ...

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None: ...

    def approve(self, owner: str, spender: str, amount: int) -> None: ...

    def allowance(self, owner: str, spender: str) -> int: ...
