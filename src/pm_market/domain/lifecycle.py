"""Market lifecycle: UNCONFIGURED -> PENDING -> OPEN -> CLOSED -> RESOLVED.

The phase is never stored; it is derived from the schedule, the clock reading
taken at call time and the resolution flag. The OPEN window is inclusive on
both ends: start_time <= now <= start_time + duration.
"""

from src.pm_common.enums import MarketPhase
from src.pm_market.domain.models import Market


def market_phase(market: Market, now: int) -> MarketPhase:
    if market.resolved:
        return MarketPhase.RESOLVED
    end = market.end_time
    if market.start_time is None or end is None:
        return MarketPhase.UNCONFIGURED
    if now < market.start_time:
        return MarketPhase.PENDING
    if now <= end:
        return MarketPhase.OPEN
    return MarketPhase.CLOSED


def is_open(market: Market, now: int) -> bool:
    return market_phase(market, now) is MarketPhase.OPEN
