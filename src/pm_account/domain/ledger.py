"""PositionLedger: per-market outcome balances, supplies and holder sets.

Core invariant: for each outcome, the sum of every holder's amount equals the
aggregate supply of that outcome. credit/debit are the only mutators and
always move a position and its supply together.
"""

from collections.abc import Iterator

from src.pm_account.domain.models import Position
from src.pm_common.enums import Outcome
from src.pm_common.errors import InsufficientPositionError, InvalidAmountError


class PositionLedger:
    def __init__(self) -> None:
        self._positions: dict[str, Position] = {}
        self._supply: dict[Outcome, int] = {Outcome.YES: 0, Outcome.NO: 0}
        self._holders: dict[Outcome, set[str]] = {Outcome.YES: set(), Outcome.NO: set()}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def supply(self, outcome: Outcome) -> int:
        return self._supply[outcome]

    @property
    def yes_balance(self) -> int:
        return self._supply[Outcome.YES]

    @property
    def no_balance(self) -> int:
        return self._supply[Outcome.NO]

    def balance_of(self, holder: str, outcome: Outcome) -> int:
        pos = self._positions.get(holder)
        return pos.amount(outcome) if pos is not None else 0

    def position(self, holder: str) -> Position:
        """Copy of holder's position (zeroed if the holder never traded)."""
        pos = self._positions.get(holder)
        if pos is None:
            return Position(holder=holder)
        return Position(holder=holder, yes_amount=pos.yes_amount, no_amount=pos.no_amount)

    def holders(self, outcome: Outcome) -> list[str]:
        """Every address ever credited with this outcome, each exactly once."""
        return sorted(self._holders[outcome])

    def is_holder(self, holder: str, outcome: Outcome) -> bool:
        return holder in self._holders[outcome]

    def positions(self) -> Iterator[Position]:
        return iter(self._positions.values())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def credit(self, holder: str, outcome: Outcome, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError("credit amount", amount)
        if amount == 0:
            return
        pos = self._positions.setdefault(holder, Position(holder=holder))
        pos.set_amount(outcome, pos.amount(outcome) + amount)
        self._supply[outcome] += amount
        self._holders[outcome].add(holder)

    def debit(self, holder: str, outcome: Outcome, amount: int) -> None:
        if amount < 0:
            raise InvalidAmountError("debit amount", amount)
        held = self.balance_of(holder, outcome)
        if held < amount:
            raise InsufficientPositionError(
                f"{holder} holds {held} {outcome.value}, needs {amount}"
            )
        if amount == 0:
            return
        pos = self._positions[holder]
        pos.set_amount(outcome, held - amount)
        self._supply[outcome] -= amount

    # ------------------------------------------------------------------
    # Rehydration (persistence layer only)
    # ------------------------------------------------------------------

    def restore(
        self, positions: list[Position], holders: dict[Outcome, set[str]]
    ) -> None:
        """Rebuild from stored rows; supplies are recomputed from positions."""
        self._positions = {p.holder: p for p in positions}
        self._supply = {
            outcome: sum(p.amount(outcome) for p in positions) for outcome in Outcome
        }
        self._holders = {outcome: set(holders.get(outcome, ())) for outcome in Outcome}
        for p in positions:
            for outcome in Outcome:
                if p.amount(outcome) > 0:
                    self._holders[outcome].add(p.holder)
