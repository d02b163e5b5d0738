"""Market settlement: fix the outcome, then pay winners pro rata from the pool.

Claim arithmetic, with P = custody pool balance, S = market.total_supply and
u = claimant's winning amount:

    reward = u * P / S
    P' = P - u * P / S = P * (S - u) / S
    S' = S - u
    P' / S' = P / S

Every claim leaves the pool-to-supply ratio unchanged, so each holder's reward
is u * P0 / S0 whatever the claim order, and the pool is exhausted (up to
floor dust) once every winning position has claimed.
"""

import logging
from dataclasses import dataclass

from src.pm_clearing.domain.custody import (
    TokenSet,
    TokenStep,
    custody_account,
)
from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import MarketEventType, Outcome
from src.pm_common.errors import NoSupplyError
from src.pm_common.fixed_point import mul_div
from src.pm_market.domain.models import Market, MarketEvent
from src.pm_risk.rules.market_phase import check_market_closed, check_market_resolved

logger = logging.getLogger(__name__)


@dataclass
class ResolutionResult:
    market_id: str
    outcome: Outcome
    total_supply: int


@dataclass
class ClaimResult:
    market_id: str
    claimant: str
    outcome: Outcome
    redeemed_amount: int
    reward: int
    pool_before: int
    total_supply_after: int


def resolve_market(market: Market, outcome: Outcome, now: int) -> ResolutionResult:
    """One-time, irreversible. Requires CLOSED; snapshots the winning supply."""
    check_market_closed(market, now)

    market.resolved = True
    market.outcome = outcome
    market.resolved_at = utc_now()
    market.total_supply = market.ledger.supply(outcome)

    market.record(MarketEvent(
        market_id=market.id,
        event_type=MarketEventType.RESOLVE,
        outcome=outcome,
        amount_out=market.total_supply,
    ))
    logger.info(
        "Resolve: market=%s outcome=%s total_supply=%d",
        market.id, outcome.value, market.total_supply,
    )
    return ResolutionResult(
        market_id=market.id, outcome=outcome, total_supply=market.total_supply
    )


def claim_reward(market: Market, tokens: TokenSet, claimant: str) -> ClaimResult:
    """Pay claimant's pro-rata share and zero their winning position.

    A zero reward is not an error; the winning position is still redeemed so
    residual dust cannot be claimed twice. Losing-side balances are untouched.
    """
    check_market_resolved(market)
    if market.total_supply == 0:
        raise NoSupplyError(market.id)

    outcome = market.outcome
    assert outcome is not None  # resolved implies outcome
    custody = custody_account(market.id)
    pool = tokens.payment.balance_of(custody)
    user_amount = market.ledger.balance_of(claimant, outcome)
    reward = mul_div(user_amount, pool, market.total_supply)

    winning_token = tokens.outcome_token(outcome)
    steps: list[TokenStep] = []
    if user_amount > 0:
        steps.append((
            lambda: winning_token.burn(custody, user_amount),
            lambda: winning_token.mint(custody, user_amount),
        ))
    if reward > 0:
        steps.append((
            lambda: tokens.payment.transfer(custody, claimant, reward),
            lambda: tokens.payment.transfer(claimant, custody, reward),
        ))
    tokens.apply(*steps)

    if reward > 0:
        market.total_supply -= user_amount
    market.ledger.debit(claimant, outcome, user_amount)

    market.record(MarketEvent(
        market_id=market.id,
        event_type=MarketEventType.CLAIM,
        holder=claimant,
        outcome=outcome,
        amount_in=user_amount,
        amount_out=reward,
    ))
    logger.info(
        "Claim: market=%s claimant=%s redeemed=%d reward=%d pool=%d supply_left=%d",
        market.id, claimant, user_amount, reward, pool, market.total_supply,
    )
    return ClaimResult(
        market_id=market.id,
        claimant=claimant,
        outcome=outcome,
        redeemed_amount=user_amount,
        reward=reward,
        pool_before=pool,
        total_supply_after=market.total_supply,
    )
