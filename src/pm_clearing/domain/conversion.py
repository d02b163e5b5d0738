"""Conversion (swap): exchange one outcome for the other at the destination's spot price.

  YES -> NO spends at price_no  = no / yes
  NO -> YES spends at price_yes = yes / no
  amount_out = amount_in * rate / 1e18

The source side shrinks and the destination side grows, so every conversion
moves the ratio seen by the next operation. A YES -> NO -> YES round trip
with both sides non-empty returns a(yes - a)/(yes + a) <= a before flooring,
so the path never gains.
"""

import logging
from dataclasses import dataclass

from src.pm_clearing.domain.custody import TokenSet, custody_account
from src.pm_common.enums import MarketEventType, Outcome, SwapPolicy
from src.pm_common.errors import InsufficientPositionError
from src.pm_market.domain.models import Market, MarketEvent
from src.pm_pricing.domain.price import price_of, quote_conversion
from src.pm_risk.rules.amount_check import check_non_negative
from src.pm_risk.rules.market_phase import check_conversion_allowed

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    market_id: str
    holder: str
    from_outcome: Outcome
    to_outcome: Outcome
    amount_in: int
    amount_out: int
    rate: int


def execute_conversion(
    market: Market,
    tokens: TokenSet,
    holder: str,
    from_outcome: Outcome,
    amount_in: int,
    now: int,
    policy: SwapPolicy,
) -> ConversionResult:
    check_non_negative("amount_in", amount_in)
    check_conversion_allowed(market, now, policy)

    held = market.ledger.balance_of(holder, from_outcome)
    if held < amount_in:
        raise InsufficientPositionError(
            f"{holder} holds {held} {from_outcome.value}, converting {amount_in}"
        )

    to_outcome = from_outcome.opposite
    rate = price_of(to_outcome, market.yes_balance, market.no_balance)
    amount_out = quote_conversion(amount_in, rate)

    custody = custody_account(market.id)
    source = tokens.outcome_token(from_outcome)
    destination = tokens.outcome_token(to_outcome)
    tokens.apply(
        (
            lambda: source.burn(custody, amount_in),
            lambda: source.mint(custody, amount_in),
        ),
        (
            lambda: destination.mint(custody, amount_out),
            lambda: destination.burn(custody, amount_out),
        ),
    )

    market.ledger.debit(holder, from_outcome, amount_in)
    market.ledger.credit(holder, to_outcome, amount_out)
    market.record(MarketEvent(
        market_id=market.id,
        event_type=MarketEventType.CONVERT,
        holder=holder,
        outcome=to_outcome,
        amount_in=amount_in,
        amount_out=amount_out,
        rate=rate,
    ))
    logger.info(
        "Convert: market=%s holder=%s %s->%s in=%d out=%d rate=%d",
        market.id, holder, from_outcome.value, to_outcome.value, amount_in, amount_out, rate,
    )
    return ConversionResult(
        market_id=market.id,
        holder=holder,
        from_outcome=from_outcome,
        to_outcome=to_outcome,
        amount_in=amount_in,
        amount_out=amount_out,
        rate=rate,
    )
