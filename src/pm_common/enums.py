"""Global enums: values are persisted as-is, keep in sync with DB CHECK constraints."""

from enum import Enum


class Outcome(str, Enum):
    YES = "YES"
    NO = "NO"

    @property
    def opposite(self) -> "Outcome":
        return Outcome.NO if self is Outcome.YES else Outcome.YES


class MarketPhase(str, Enum):
    """Lifecycle phase, derived from schedule + clock + resolution flag."""
    UNCONFIGURED = "UNCONFIGURED"
    PENDING = "PENDING"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    RESOLVED = "RESOLVED"


class SwapPolicy(str, Enum):
    """When outcome-to-outcome conversion is allowed."""
    DISABLED = "DISABLED"
    OPEN_WINDOW = "OPEN_WINDOW"
    UNTIL_RESOLVED = "UNTIL_RESOLVED"


class SwapDirection(str, Enum):
    YES_TO_NO = "YES_TO_NO"
    NO_TO_YES = "NO_TO_YES"

    @property
    def from_outcome(self) -> Outcome:
        return Outcome.YES if self is SwapDirection.YES_TO_NO else Outcome.NO


class MarketEventType(str, Enum):
    INITIALIZE = "INITIALIZE"
    FUND = "FUND"
    BUY = "BUY"
    CONVERT = "CONVERT"
    RESOLVE = "RESOLVE"
    CLAIM = "CLAIM"
