from src.pm_common.enums import MarketPhase, SwapPolicy
from src.pm_common.errors import StateError, SwapDisabledError
from src.pm_market.domain.lifecycle import market_phase
from src.pm_market.domain.models import Market


def check_market_open(market: Market, now: int) -> None:
    phase = market_phase(market, now)
    if phase is not MarketPhase.OPEN:
        raise StateError(market.id, f"requires OPEN, market is {phase.value}")


def check_market_closed(market: Market, now: int) -> None:
    """resolve() gate: trading window over and not yet resolved."""
    phase = market_phase(market, now)
    if phase is not MarketPhase.CLOSED:
        raise StateError(market.id, f"requires CLOSED, market is {phase.value}")


def check_market_resolved(market: Market) -> None:
    if not market.resolved:
        raise StateError(market.id, "market is not resolved")


def check_conversion_allowed(market: Market, now: int, policy: SwapPolicy) -> None:
    """Raise unless the configured SwapPolicy permits conversion right now."""
    if policy is SwapPolicy.DISABLED:
        raise SwapDisabledError(market.id)
    if market.resolved:
        raise StateError(market.id, "conversion after resolution")
    if policy is SwapPolicy.OPEN_WINDOW:
        check_market_open(market, now)
