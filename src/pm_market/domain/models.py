"""Domain models for pm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime

from src.pm_account.domain.ledger import PositionLedger
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketEventType, Outcome


@dataclass
class MarketEvent:
    """Journal row for one successful market operation."""

    market_id: str
    event_type: MarketEventType
    holder: str | None = None
    outcome: Outcome | None = None
    amount_in: int = 0
    amount_out: int = 0
    rate: int = 0
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Market:
    id: str
    start_time: int | None = None     # unix seconds
    duration: int | None = None       # seconds
    resolved: bool = False
    outcome: Outcome | None = None    # meaningful only when resolved
    total_supply: int = 0             # settlement counter, set at resolution
    ledger: PositionLedger = field(default_factory=PositionLedger)
    created_at: datetime = field(default_factory=utc_now)
    resolved_at: datetime | None = None
    pending_events: list[MarketEvent] = field(default_factory=list)
    stored_pool: int | None = None    # custody pool as of the last write; set on reload

    @property
    def yes_balance(self) -> int:
        return self.ledger.yes_balance

    @property
    def no_balance(self) -> int:
        return self.ledger.no_balance

    @property
    def end_time(self) -> int | None:
        if self.start_time is None or self.duration is None:
            return None
        return self.start_time + self.duration

    def record(self, event: MarketEvent) -> None:
        self.pending_events.append(event)

    def drain_events(self) -> list[MarketEvent]:
        events, self.pending_events = self.pending_events, []
        return events
