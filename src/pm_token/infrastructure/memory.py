"""InMemoryToken: process-local FungibleToken backend.

Default value carrier when no external token service is wired in. Every
operation validates first and mutates second, so a rejected call changes
nothing.
"""

import logging

from src.pm_common.errors import ExternalTransferError

logger = logging.getLogger(__name__)


class InMemoryToken:
    def __init__(self, symbol: str) -> None:
        self.symbol = symbol
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self.total_supply = 0

    def balance_of(self, account: str) -> int:
        return self._balances.get(account, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def mint(self, to: str, amount: int) -> None:
        self._check_amount("mint", amount)
        self._balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def burn(self, from_account: str, amount: int) -> None:
        self._check_amount("burn", amount)
        self._check_balance("burn", from_account, amount)
        self._balances[from_account] -= amount
        self.total_supply -= amount

    def transfer(self, sender: str, to: str, amount: int) -> None:
        self._check_amount("transfer", amount)
        self._check_balance("transfer", sender, amount)
        self._move(sender, to, amount)

    def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> None:
        self._check_amount("transferFrom", amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise ExternalTransferError(
                self.symbol,
                "transferFrom",
                f"allowance {allowed} of {spender} over {owner} < {amount}",
            )
        self._check_balance("transferFrom", owner, amount)
        self._allowances[(owner, spender)] = allowed - amount
        self._move(owner, to, amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._check_amount("approve", amount)
        self._allowances[(owner, spender)] = amount

    def restore_balance(self, account: str, amount: int) -> None:
        """Set a balance rebuilt from storage; total_supply follows the difference."""
        self._check_amount("restore", amount)
        self.total_supply += amount - self.balance_of(account)
        self._balances[account] = amount

    # ------------------------------------------------------------------

    def _move(self, sender: str, to: str, amount: int) -> None:
        self._balances[sender] -= amount
        self._balances[to] = self.balance_of(to) + amount

    def _check_amount(self, operation: str, amount: int) -> None:
        if amount < 0:
            raise ExternalTransferError(self.symbol, operation, f"negative amount {amount}")

    def _check_balance(self, operation: str, account: str, amount: int) -> None:
        held = self.balance_of(account)
        if held < amount:
            logger.debug("%s %s rejected: %s holds %d < %d",
                         self.symbol, operation, account, held, amount)
            raise ExternalTransferError(
                self.symbol, operation, f"balance {held} of {account} < {amount}"
            )
