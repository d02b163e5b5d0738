"""Single entry point routing exchange callbacks into the market engine.

Swap requests become outcome conversions; whether they are honoured is the
engine's SwapPolicy (DISABLED rejects every request with SwapDisabledError).
"""

import logging

from src.pm_clearing.domain.conversion import ConversionResult
from src.pm_engine.engine.engine import MarketEngine
from src.pm_hooks.domain.events import HookEvent, Initialize, LiquidityAdded, SwapRequested
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)

HookResult = Market | int | ConversionResult


def dispatch(event: HookEvent, engine: MarketEngine) -> HookResult:
    if isinstance(event, Initialize):
        return engine.initialize_market(event.market_id)
    if isinstance(event, LiquidityAdded):
        return engine.credit_liquidity(event.provider, event.liquidity_delta)
    if isinstance(event, SwapRequested):
        logger.debug("Swap requested: market=%s sender=%s direction=%s amount=%d",
                     event.market_id, event.sender, event.direction.value, event.amount)
        return engine.convert(
            event.market_id, event.sender, event.direction.from_outcome, event.amount
        )
    raise TypeError(f"Unknown hook event: {event!r}")
