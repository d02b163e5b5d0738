"""Request bodies for the hook endpoint, tagged by ``event``."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from src.pm_common.enums import SwapDirection
from src.pm_hooks.domain.events import HookEvent, Initialize, LiquidityAdded, SwapRequested


class InitializeBody(BaseModel):
    event: Literal["Initialize"]
    market_id: str = Field(min_length=1)

    def to_event(self) -> HookEvent:
        return Initialize(market_id=self.market_id)


class LiquidityAddedBody(BaseModel):
    event: Literal["LiquidityAdded"]
    market_id: str = Field(min_length=1)
    provider: str = Field(min_length=1)
    liquidity_delta: int

    def to_event(self) -> HookEvent:
        return LiquidityAdded(
            market_id=self.market_id,
            provider=self.provider,
            liquidity_delta=self.liquidity_delta,
        )


class SwapRequestedBody(BaseModel):
    event: Literal["SwapRequested"]
    market_id: str = Field(min_length=1)
    sender: str = Field(min_length=1)
    direction: SwapDirection
    amount: int = Field(ge=0)

    def to_event(self) -> HookEvent:
        return SwapRequested(
            market_id=self.market_id,
            sender=self.sender,
            direction=self.direction,
            amount=self.amount,
        )


AnyHookBody = InitializeBody | LiquidityAddedBody | SwapRequestedBody

HookEventBody = Annotated[AnyHookBody, Field(discriminator="event")]
