"""Pydantic schemas for pm_market API requests and responses.

Amounts and prices are WAD ints (1e18 scale); *_display fields are
human-readable renderings for front-ends.
"""

from pydantic import BaseModel, Field

from src.pm_account.domain.models import Position
from src.pm_clearing.domain.conversion import ConversionResult
from src.pm_clearing.domain.purchase import PurchaseResult
from src.pm_clearing.domain.settlement import ClaimResult, ResolutionResult
from src.pm_common.enums import MarketPhase, Outcome
from src.pm_common.fixed_point import wad_to_display
from src.pm_market.domain.models import Market

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class StartTimeRequest(BaseModel):
    start_time: int = Field(ge=0, description="Unix seconds")


class DurationRequest(BaseModel):
    duration: int = Field(ge=0, description="Seconds")


class BuyRequest(BaseModel):
    payer: str = Field(min_length=1)
    outcome: Outcome
    payment_amount: int = Field(ge=0)


class ConvertRequest(BaseModel):
    holder: str = Field(min_length=1)
    from_outcome: Outcome
    amount_in: int = Field(ge=0)


class ClaimRequest(BaseModel):
    claimant: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PricesResponse(BaseModel):
    market_id: str
    price_yes: int
    price_no: int
    price_yes_display: str
    price_no_display: str

    @classmethod
    def from_prices(cls, market_id: str, yes: int, no: int) -> "PricesResponse":
        return cls(
            market_id=market_id,
            price_yes=yes,
            price_no=no,
            price_yes_display=wad_to_display(yes),
            price_no_display=wad_to_display(no),
        )


class MarketDetail(BaseModel):
    id: str
    phase: MarketPhase
    is_open: bool
    start_time: int | None
    duration: int | None
    end_time: int | None
    resolved: bool
    outcome: Outcome | None
    yes_balance: int
    no_balance: int
    total_supply: int
    price_yes: int
    price_no: int
    pool_balance: int
    created_at: str
    resolved_at: str | None

    @classmethod
    def from_domain(
        cls,
        m: Market,
        phase: MarketPhase,
        price_yes: int,
        price_no: int,
        pool_balance: int,
    ) -> "MarketDetail":
        return cls(
            id=m.id,
            phase=phase,
            is_open=phase is MarketPhase.OPEN,
            start_time=m.start_time,
            duration=m.duration,
            end_time=m.end_time,
            resolved=m.resolved,
            outcome=m.outcome,
            yes_balance=m.yes_balance,
            no_balance=m.no_balance,
            total_supply=m.total_supply,
            price_yes=price_yes,
            price_no=price_no,
            pool_balance=pool_balance,
            created_at=m.created_at.isoformat(),
            resolved_at=m.resolved_at.isoformat() if m.resolved_at else None,
        )


class PositionResponse(BaseModel):
    market_id: str
    holder: str
    yes_amount: int
    no_amount: int

    @classmethod
    def from_domain(cls, market_id: str, p: Position) -> "PositionResponse":
        return cls(
            market_id=market_id,
            holder=p.holder,
            yes_amount=p.yes_amount,
            no_amount=p.no_amount,
        )


class HoldersResponse(BaseModel):
    market_id: str
    outcome: Outcome
    holders: list[str]
    total: int


class PurchaseResponse(BaseModel):
    market_id: str
    payer: str
    outcome: Outcome
    payment_amount: int
    amount_out: int
    rate: int

    @classmethod
    def from_result(cls, r: PurchaseResult) -> "PurchaseResponse":
        return cls(
            market_id=r.market_id,
            payer=r.payer,
            outcome=r.outcome,
            payment_amount=r.payment_amount,
            amount_out=r.amount_out,
            rate=r.rate,
        )


class ConversionResponse(BaseModel):
    market_id: str
    holder: str
    from_outcome: Outcome
    to_outcome: Outcome
    amount_in: int
    amount_out: int
    rate: int

    @classmethod
    def from_result(cls, r: ConversionResult) -> "ConversionResponse":
        return cls(
            market_id=r.market_id,
            holder=r.holder,
            from_outcome=r.from_outcome,
            to_outcome=r.to_outcome,
            amount_in=r.amount_in,
            amount_out=r.amount_out,
            rate=r.rate,
        )


class ResolutionResponse(BaseModel):
    market_id: str
    outcome: Outcome
    total_supply: int

    @classmethod
    def from_result(cls, r: ResolutionResult) -> "ResolutionResponse":
        return cls(market_id=r.market_id, outcome=r.outcome, total_supply=r.total_supply)


class ClaimResponse(BaseModel):
    market_id: str
    claimant: str
    outcome: Outcome
    redeemed_amount: int
    reward: int
    reward_display: str
    total_supply_after: int

    @classmethod
    def from_result(cls, r: ClaimResult) -> "ClaimResponse":
        return cls(
            market_id=r.market_id,
            claimant=r.claimant,
            outcome=r.outcome,
            redeemed_amount=r.redeemed_amount,
            reward=r.reward,
            reward_display=wad_to_display(r.reward),
            total_supply_after=r.total_supply_after,
        )


class MarketStatsResponse(BaseModel):
    market_id: str
    phase: MarketPhase
    yes_balance: int
    no_balance: int
    total_supply: int
    yes_holders: int
    no_holders: int
    price_yes: int
    price_no: int
    pool_balance: int
    pool_balance_display: str
