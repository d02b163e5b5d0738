"""Admin application service: resolution, pool funding and health checks."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.enums import Outcome
from src.pm_market.application.schemas import MarketStatsResponse, ResolutionResponse
from src.pm_market.application.service import MarketApplicationService, get_market_service

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, markets: MarketApplicationService | None = None) -> None:
        self._markets = markets

    @property
    def markets(self) -> MarketApplicationService:
        # Resolved lazily so tests can swap the module-level market service.
        return self._markets or get_market_service()

    async def resolve_market(
        self, db: AsyncSession | None, market_id: str, outcome: Outcome
    ) -> ResolutionResponse:
        result = await self.markets.resolve(db, market_id, outcome)
        logger.info("Admin resolved market %s as %s", market_id, outcome.value)
        return result

    async def fund_pool(
        self, db: AsyncSession | None, market_id: str, sponsor: str, amount: int
    ) -> dict[str, Any]:
        pool_balance = await self.markets.fund_pool(db, market_id, sponsor, amount)
        return {
            "market_id": market_id,
            "sponsor": sponsor,
            "amount": amount,
            "pool_balance": pool_balance,
        }

    async def get_market_stats(
        self, db: AsyncSession | None, market_id: str
    ) -> MarketStatsResponse:
        return await self.markets.get_market_stats(db, market_id)

    async def verify_all_invariants(self) -> dict[str, object]:
        """Check the ledger sum and custody balances of every cached market."""
        violations = await self.markets.verify_invariants()
        if violations:
            logger.error("Invariant check found %d violation(s)", len(violations))
        return {"ok": len(violations) == 0, "violations": violations}
