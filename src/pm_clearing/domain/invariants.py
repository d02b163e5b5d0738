"""Market invariant verification after each operation."""

import logging

from src.pm_clearing.domain.custody import TokenSet, custody_account
from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market

logger = logging.getLogger(__name__)


def verify_ledger_invariants(market: Market) -> None:
    """Raise AssertionError if the position ledger is inconsistent.

    INV-1: sum of holders' YES amounts == yes_balance
    INV-2: sum of holders' NO amounts == no_balance
    INV-3: no negative position or supply
    INV-4: settlement counter total_supply >= 0
    """
    positions = list(market.ledger.positions())
    yes_sum = sum(p.yes_amount for p in positions)
    no_sum = sum(p.no_amount for p in positions)

    assert yes_sum == market.yes_balance, (
        f"INV-1 violated: market={market.id} sum(yes)={yes_sum} != yes_balance={market.yes_balance}"
    )
    assert no_sum == market.no_balance, (
        f"INV-2 violated: market={market.id} sum(no)={no_sum} != no_balance={market.no_balance}"
    )
    negatives = [p.holder for p in positions if p.yes_amount < 0 or p.no_amount < 0]
    assert not negatives and market.yes_balance >= 0 and market.no_balance >= 0, (
        f"INV-3 violated: market={market.id} negative balances for {negatives}"
    )
    assert market.total_supply >= 0, (
        f"INV-4 violated: market={market.id} total_supply={market.total_supply} < 0"
    )

    logger.debug(
        "Invariants OK: market=%s, yes=%d, no=%d", market.id, yes_sum, no_sum
    )


def verify_custody(market: Market, tokens: TokenSet) -> list[str]:
    """INV-C: custody holds exactly the outcome tokens the ledger accounts for."""
    violations: list[str] = []
    custody = custody_account(market.id)
    for outcome in Outcome:
        held = tokens.outcome_token(outcome).balance_of(custody)
        accounted = market.ledger.supply(outcome)
        if held != accounted:
            msg = (
                f"INV-C violated: market={market.id} custody {outcome.value}={held} "
                f"!= ledger supply={accounted}"
            )
            violations.append(msg)
            logger.error(msg)
    return violations
