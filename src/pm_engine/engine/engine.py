"""MarketEngine: stateful orchestrator over the in-memory market arena.

Every public operation is synchronous and runs to completion: guards first,
token movements second, ledger mutation last. Callers that share an engine
across tasks serialise per market (see MarketApplicationService).
"""

import logging

from src.pm_account.domain.models import Position
from src.pm_account.domain.points import LiquidityPoints
from src.pm_clearing.domain.conversion import ConversionResult, execute_conversion
from src.pm_clearing.domain.custody import TokenSet, custody_account
from src.pm_clearing.domain.invariants import verify_custody, verify_ledger_invariants
from src.pm_clearing.domain.purchase import PurchaseResult, execute_purchase
from src.pm_clearing.domain.settlement import (
    ClaimResult,
    ResolutionResult,
    claim_reward,
    resolve_market,
)
from src.pm_common.datetime_utils import Clock, SystemClock
from src.pm_common.enums import MarketEventType, MarketPhase, Outcome, SwapPolicy
from src.pm_common.errors import MarketAlreadyExistsError, MarketNotFoundError
from src.pm_market.domain.lifecycle import is_open, market_phase
from src.pm_market.domain.models import Market, MarketEvent
from src.pm_pricing.domain.price import price_no, price_yes
from src.pm_risk.rules.amount_check import check_non_negative
from src.pm_token.infrastructure.memory import InMemoryToken

logger = logging.getLogger(__name__)


class MarketEngine:
    def __init__(
        self,
        tokens: TokenSet | None = None,
        clock: Clock | None = None,
        swap_policy: SwapPolicy = SwapPolicy.OPEN_WINDOW,
    ) -> None:
        self.tokens = tokens or TokenSet(
            payment=InMemoryToken("USDC"),
            yes=InMemoryToken("YES"),
            no=InMemoryToken("NO"),
        )
        self.clock: Clock = clock or SystemClock()
        self.swap_policy = swap_policy
        self.liquidity_points = LiquidityPoints()
        self._markets: dict[str, Market] = {}

    # ------------------------------------------------------------------
    # Arena
    # ------------------------------------------------------------------

    def initialize_market(self, market_id: str) -> Market:
        """Create a market with zeroed balances (pool-initialize callback)."""
        if market_id in self._markets:
            raise MarketAlreadyExistsError(market_id)
        market = Market(id=market_id)
        market.record(MarketEvent(market_id=market_id, event_type=MarketEventType.INITIALIZE))
        self._markets[market_id] = market
        logger.info("Market initialized: %s", market_id)
        return market

    def get_market(self, market_id: str) -> Market:
        market = self._markets.get(market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        return market

    def has_market(self, market_id: str) -> bool:
        return market_id in self._markets

    def market_ids(self) -> list[str]:
        return sorted(self._markets)

    def load(self, market: Market) -> None:
        """Install a market rebuilt from storage.

        Process-local tokens do not survive a restart, so their custody
        balances are re-seeded from the stored pool and the ledger supplies.
        """
        self._markets[market.id] = market
        if market.stored_pool is None:
            return
        custody = custody_account(market.id)
        for token, amount in (
            (self.tokens.payment, market.stored_pool),
            (self.tokens.yes, market.yes_balance),
            (self.tokens.no, market.no_balance),
        ):
            if isinstance(token, InMemoryToken):
                token.restore_balance(custody, amount)

    def evict(self, market_id: str) -> None:
        """Drop cached state: will lazy-reload from storage on next request."""
        self._markets.pop(market_id, None)

    # ------------------------------------------------------------------
    # Schedule / lifecycle
    # ------------------------------------------------------------------

    def set_market_start_time(self, market_id: str, start_time: int) -> Market:
        check_non_negative("start_time", start_time)
        market = self.get_market(market_id)
        self._warn_if_started(market, "start_time")
        market.start_time = start_time
        return market

    def set_market_duration(self, market_id: str, duration: int) -> Market:
        check_non_negative("duration", duration)
        market = self.get_market(market_id)
        self._warn_if_started(market, "duration")
        market.duration = duration
        return market

    def market_phase(self, market_id: str) -> MarketPhase:
        return market_phase(self.get_market(market_id), self.clock.now())

    def is_market_open(self, market_id: str) -> bool:
        return is_open(self.get_market(market_id), self.clock.now())

    def _warn_if_started(self, market: Market, field: str) -> None:
        phase = market_phase(market, self.clock.now())
        if phase not in (MarketPhase.UNCONFIGURED, MarketPhase.PENDING):
            logger.warning(
                "Schedule change on %s market: market=%s field=%s",
                phase.value, market.id, field,
            )

    # ------------------------------------------------------------------
    # Prices and balances
    # ------------------------------------------------------------------

    def price_yes(self, market_id: str) -> int:
        market = self.get_market(market_id)
        return price_yes(market.yes_balance, market.no_balance)

    def price_no(self, market_id: str) -> int:
        market = self.get_market(market_id)
        return price_no(market.yes_balance, market.no_balance)

    def position(self, market_id: str, holder: str) -> Position:
        return self.get_market(market_id).ledger.position(holder)

    def holders(self, market_id: str, outcome: Outcome) -> list[str]:
        return self.get_market(market_id).ledger.holders(outcome)

    def pool_balance(self, market_id: str) -> int:
        self.get_market(market_id)
        return self.tokens.payment.balance_of(custody_account(market_id))

    # ------------------------------------------------------------------
    # Trading and settlement
    # ------------------------------------------------------------------

    def fund_pool(self, market_id: str, sponsor: str, amount: int) -> int:
        """Move payment tokens from sponsor into the market's settlement pool."""
        check_non_negative("amount", amount)
        market = self.get_market(market_id)
        custody = custody_account(market_id)
        self.tokens.apply((
            lambda: self.tokens.payment.transfer(sponsor, custody, amount),
            lambda: self.tokens.payment.transfer(custody, sponsor, amount),
        ))
        market.record(MarketEvent(
            market_id=market_id,
            event_type=MarketEventType.FUND,
            holder=sponsor,
            amount_in=amount,
        ))
        logger.info("Pool funded: market=%s sponsor=%s amount=%d", market_id, sponsor, amount)
        return self.pool_balance(market_id)

    def buy(
        self, market_id: str, outcome: Outcome, payer: str, payment_amount: int
    ) -> PurchaseResult:
        market = self.get_market(market_id)
        return execute_purchase(
            market, self.tokens, outcome, payer, payment_amount, self.clock.now()
        )

    def convert(
        self, market_id: str, holder: str, from_outcome: Outcome, amount_in: int
    ) -> ConversionResult:
        market = self.get_market(market_id)
        return execute_conversion(
            market,
            self.tokens,
            holder,
            from_outcome,
            amount_in,
            self.clock.now(),
            self.swap_policy,
        )

    def resolve(self, market_id: str, outcome: Outcome) -> ResolutionResult:
        market = self.get_market(market_id)
        return resolve_market(market, outcome, self.clock.now())

    def claim(self, market_id: str, claimant: str) -> ClaimResult:
        market = self.get_market(market_id)
        return claim_reward(market, self.tokens, claimant)

    def credit_liquidity(self, provider: str, liquidity_delta: int) -> int:
        total = self.liquidity_points.credit(provider, liquidity_delta)
        logger.debug("Liquidity points: provider=%s delta=%d total=%d",
                     provider, liquidity_delta, total)
        return total

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def verify_invariants(self, market_id: str) -> list[str]:
        market = self.get_market(market_id)
        violations: list[str] = []
        try:
            verify_ledger_invariants(market)
        except AssertionError as e:
            logger.error("%s", e)
            violations.append(str(e))
        violations.extend(verify_custody(market, self.tokens))
        return violations
