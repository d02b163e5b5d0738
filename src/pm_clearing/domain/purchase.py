"""Purchase: convert payment tokens into one outcome at the current spot price.

amount_out = payment_amount * 1e18 / price(outcome)

No minimum-output parameter: the buyer gets whatever the curve yields at call
time. Token movements happen before any ledger mutation.
"""

import logging
from dataclasses import dataclass

from src.pm_clearing.domain.custody import TokenSet, custody_account
from src.pm_common.enums import MarketEventType, Outcome
from src.pm_market.domain.models import Market, MarketEvent
from src.pm_pricing.domain.price import price_of, quote_purchase
from src.pm_risk.rules.amount_check import check_non_negative
from src.pm_risk.rules.market_phase import check_market_open

logger = logging.getLogger(__name__)


@dataclass
class PurchaseResult:
    market_id: str
    payer: str
    outcome: Outcome
    payment_amount: int
    amount_out: int
    rate: int


def execute_purchase(
    market: Market,
    tokens: TokenSet,
    outcome: Outcome,
    payer: str,
    payment_amount: int,
    now: int,
) -> PurchaseResult:
    """Buy `outcome` for `payer`. Raises StateError, ZeroAmountError, ExternalTransferError."""
    check_non_negative("payment_amount", payment_amount)
    check_market_open(market, now)

    rate = price_of(outcome, market.yes_balance, market.no_balance)
    amount_out = quote_purchase(payment_amount, rate)

    custody = custody_account(market.id)
    outcome_token = tokens.outcome_token(outcome)
    tokens.apply(
        (
            lambda: tokens.payment.transfer(payer, custody, payment_amount),
            lambda: tokens.payment.transfer(custody, payer, payment_amount),
        ),
        (
            lambda: outcome_token.mint(custody, amount_out),
            lambda: outcome_token.burn(custody, amount_out),
        ),
    )

    market.ledger.credit(payer, outcome, amount_out)
    market.record(MarketEvent(
        market_id=market.id,
        event_type=MarketEventType.BUY,
        holder=payer,
        outcome=outcome,
        amount_in=payment_amount,
        amount_out=amount_out,
        rate=rate,
    ))
    logger.info(
        "Buy: market=%s payer=%s outcome=%s paid=%d received=%d rate=%d",
        market.id, payer, outcome.value, payment_amount, amount_out, rate,
    )
    return PurchaseResult(
        market_id=market.id,
        payer=payer,
        outcome=outcome,
        payment_amount=payment_amount,
        amount_out=amount_out,
        rate=rate,
    )
