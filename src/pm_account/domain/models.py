"""Domain models for pm_account: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass

from src.pm_common.enums import Outcome


@dataclass
class Position:
    holder: str
    yes_amount: int = 0   # WAD
    no_amount: int = 0    # WAD

    def amount(self, outcome: Outcome) -> int:
        return self.yes_amount if outcome is Outcome.YES else self.no_amount

    def set_amount(self, outcome: Outcome, value: int) -> None:
        if outcome is Outcome.YES:
            self.yes_amount = value
        else:
            self.no_amount = value

    @property
    def is_empty(self) -> bool:
        return self.yes_amount == 0 and self.no_amount == 0
