# src/pm_market/domain/repository.py
"""Storage boundary for markets, their positions, holder sets, journal and points.

MarketApplicationService depends on this Protocol only; MarketRepository in
the infrastructure layer implements it and tests pass AsyncMock stand-ins.
"""

from collections.abc import Iterable
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Market, MarketEvent


class MarketRepositoryProtocol(Protocol):
    async def get_market(
        self,
        db: AsyncSession,
        market_id: str,
    ) -> Market | None: ...

    async def save_market(
        self,
        db: AsyncSession,
        market: Market,
        holders: Iterable[str],
        events: list[MarketEvent],
        pool_balance: int,
    ) -> None: ...

    async def get_liquidity_points(
        self,
        db: AsyncSession,
        provider: str,
    ) -> int | None: ...

    async def save_liquidity_points(
        self,
        db: AsyncSession,
        provider: str,
        points: int,
    ) -> None: ...
