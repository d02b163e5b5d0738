"""Exchange-integration callbacks as a closed set of tagged events."""

from dataclasses import dataclass

from src.pm_common.enums import SwapDirection


@dataclass(frozen=True)
class Initialize:
    """Pool created: open a zeroed market."""

    market_id: str


@dataclass(frozen=True)
class LiquidityAdded:
    market_id: str
    provider: str
    liquidity_delta: int  # signed; points are credited by magnitude


@dataclass(frozen=True)
class SwapRequested:
    market_id: str
    sender: str
    direction: SwapDirection
    amount: int


HookEvent = Initialize | LiquidityAdded | SwapRequested
