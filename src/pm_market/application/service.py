"""MarketApplicationService: async composition layer over MarketEngine.

Each mutating call takes the market's asyncio.Lock, lazily loads the market
from storage if it is not cached, runs the synchronous engine operation and
then writes through. On any failure after the engine ran, the session is
rolled back, the operation's token movements are undone and the cached
market is evicted so the next call reloads the committed state.

db=None means persistence is disabled: the in-memory arena is authoritative.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_clearing.domain.conversion import ConversionResult
from src.pm_common.enums import Outcome
from src.pm_common.errors import MarketAlreadyExistsError, MarketNotFoundError
from src.pm_common.fixed_point import wad_to_display
from src.pm_engine.application.service import get_market_engine
from src.pm_engine.engine.engine import MarketEngine
from src.pm_hooks.application.dispatcher import HookResult, dispatch
from src.pm_hooks.domain.events import HookEvent, Initialize, LiquidityAdded, SwapRequested
from src.pm_market.application.schemas import (
    ClaimResponse,
    ConversionResponse,
    HoldersResponse,
    MarketDetail,
    MarketStatsResponse,
    PositionResponse,
    PricesResponse,
    PurchaseResponse,
    ResolutionResponse,
)
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LockTable:
    """One asyncio.Lock per key. An idle entry is dropped unless `retain(key)` holds."""

    def __init__(self, retain: Callable[[str], bool]) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: Counter[str] = Counter()
        self._retain = retain

    def __contains__(self, key: str) -> bool:
        return key in self._locks

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]
                if not self._retain(key):
                    del self._locks[key]


class MarketApplicationService:
    def __init__(
        self,
        engine: MarketEngine | None = None,
        repo: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._engine = engine or get_market_engine()
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._market_locks = LockTable(self._engine.has_market)
        self._points_locks = LockTable(lambda p: p in self._engine.liquidity_points)

    @property
    def engine(self) -> MarketEngine:
        return self._engine

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _ensure_loaded(self, market_id: str, db: AsyncSession | None) -> None:
        if self._engine.has_market(market_id):
            return
        if db is None:
            raise MarketNotFoundError(market_id)
        market = await self._repo.get_market(db, market_id)
        if market is None:
            raise MarketNotFoundError(market_id)
        self._engine.load(market)
        logger.info("Market loaded from storage: %s", market_id)

    async def _flush(
        self,
        market_id: str,
        db: AsyncSession | None,
        holders: Iterable[str],
        undo_log: list[Callable[[], None]],
    ) -> None:
        market = self._engine.get_market(market_id)
        events = market.drain_events()
        if db is None:
            return
        try:
            await self._repo.save_market(
                db, market, holders, events, self._engine.pool_balance(market_id)
            )
            await db.commit()
        except Exception:
            logger.error("Write-through failed, reverting market %s", market_id)
            await db.rollback()
            self._engine.tokens.revert(undo_log)
            self._engine.evict(market_id)
            raise

    async def _run(
        self,
        market_id: str,
        db: AsyncSession | None,
        op: Callable[[], T],
        holders: Iterable[str] = (),
    ) -> T:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            with self._engine.tokens.recording() as undo_log:
                result = op()
            await self._flush(market_id, db, holders, undo_log)
            return result

    async def _ensure_points_loaded(self, db: AsyncSession | None, provider: str) -> None:
        if db is None or provider in self._engine.liquidity_points:
            return
        stored = await self._repo.get_liquidity_points(db, provider)
        if stored is not None:
            self._engine.liquidity_points.restore(provider, stored)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_market(self, db: AsyncSession | None, market_id: str) -> MarketDetail:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            market = self._engine.get_market(market_id)
            return MarketDetail.from_domain(
                market,
                self._engine.market_phase(market_id),
                self._engine.price_yes(market_id),
                self._engine.price_no(market_id),
                self._engine.pool_balance(market_id),
            )

    async def get_prices(self, db: AsyncSession | None, market_id: str) -> PricesResponse:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            return PricesResponse.from_prices(
                market_id,
                self._engine.price_yes(market_id),
                self._engine.price_no(market_id),
            )

    async def is_market_open(self, db: AsyncSession | None, market_id: str) -> bool:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            return self._engine.is_market_open(market_id)

    async def get_position(
        self, db: AsyncSession | None, market_id: str, holder: str
    ) -> PositionResponse:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            return PositionResponse.from_domain(
                market_id, self._engine.position(market_id, holder)
            )

    async def get_holders(
        self, db: AsyncSession | None, market_id: str, outcome: Outcome
    ) -> HoldersResponse:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            holders = self._engine.holders(market_id, outcome)
            return HoldersResponse(
                market_id=market_id, outcome=outcome, holders=holders, total=len(holders)
            )

    async def get_market_stats(
        self, db: AsyncSession | None, market_id: str
    ) -> MarketStatsResponse:
        async with self._market_locks.hold(market_id):
            await self._ensure_loaded(market_id, db)
            market = self._engine.get_market(market_id)
            pool = self._engine.pool_balance(market_id)
            return MarketStatsResponse(
                market_id=market_id,
                phase=self._engine.market_phase(market_id),
                yes_balance=market.yes_balance,
                no_balance=market.no_balance,
                total_supply=market.total_supply,
                yes_holders=len(market.ledger.holders(Outcome.YES)),
                no_holders=len(market.ledger.holders(Outcome.NO)),
                price_yes=self._engine.price_yes(market_id),
                price_no=self._engine.price_no(market_id),
                pool_balance=pool,
                pool_balance_display=wad_to_display(pool),
            )

    async def get_liquidity_points(self, db: AsyncSession | None, provider: str) -> int:
        async with self._points_locks.hold(provider):
            await self._ensure_points_loaded(db, provider)
            return self._engine.liquidity_points.points_of(provider)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def set_start_time(
        self, db: AsyncSession | None, market_id: str, start_time: int
    ) -> MarketDetail:
        await self._run(
            market_id, db, lambda: self._engine.set_market_start_time(market_id, start_time)
        )
        return await self.get_market(db, market_id)

    async def set_duration(
        self, db: AsyncSession | None, market_id: str, duration: int
    ) -> MarketDetail:
        await self._run(
            market_id, db, lambda: self._engine.set_market_duration(market_id, duration)
        )
        return await self.get_market(db, market_id)

    async def buy(
        self,
        db: AsyncSession | None,
        market_id: str,
        outcome: Outcome,
        payer: str,
        payment_amount: int,
    ) -> PurchaseResponse:
        result = await self._run(
            market_id,
            db,
            lambda: self._engine.buy(market_id, outcome, payer, payment_amount),
            holders=[payer],
        )
        return PurchaseResponse.from_result(result)

    async def convert(
        self,
        db: AsyncSession | None,
        market_id: str,
        holder: str,
        from_outcome: Outcome,
        amount_in: int,
    ) -> ConversionResponse:
        result = await self._run(
            market_id,
            db,
            lambda: self._engine.convert(market_id, holder, from_outcome, amount_in),
            holders=[holder],
        )
        return ConversionResponse.from_result(result)

    async def resolve(
        self, db: AsyncSession | None, market_id: str, outcome: Outcome
    ) -> ResolutionResponse:
        result = await self._run(
            market_id, db, lambda: self._engine.resolve(market_id, outcome)
        )
        return ResolutionResponse.from_result(result)

    async def claim(
        self, db: AsyncSession | None, market_id: str, claimant: str
    ) -> ClaimResponse:
        result = await self._run(
            market_id,
            db,
            lambda: self._engine.claim(market_id, claimant),
            holders=[claimant],
        )
        return ClaimResponse.from_result(result)

    async def fund_pool(
        self, db: AsyncSession | None, market_id: str, sponsor: str, amount: int
    ) -> int:
        return await self._run(
            market_id, db, lambda: self._engine.fund_pool(market_id, sponsor, amount)
        )

    async def dispatch_hook(
        self, db: AsyncSession | None, event: HookEvent
    ) -> dict[str, Any]:
        """Route one exchange callback; returns a JSON-ready summary."""
        if isinstance(event, Initialize):
            async with self._market_locks.hold(event.market_id):
                if db is not None and not self._engine.has_market(event.market_id):
                    if await self._repo.get_market(db, event.market_id) is not None:
                        raise MarketAlreadyExistsError(event.market_id)
                dispatch(event, self._engine)
                await self._flush(event.market_id, db, (), [])
            return {"event": "Initialize", "market_id": event.market_id}

        if isinstance(event, LiquidityAdded):
            async with self._points_locks.hold(event.provider):
                await self._ensure_points_loaded(db, event.provider)
                before = self._engine.liquidity_points.points_of(event.provider)
                total: HookResult = dispatch(event, self._engine)
                assert isinstance(total, int)
                if db is not None:
                    try:
                        await self._repo.save_liquidity_points(db, event.provider, total)
                        await db.commit()
                    except Exception:
                        await db.rollback()
                        self._engine.liquidity_points.restore(event.provider, before)
                        raise
            return {"event": "LiquidityAdded", "provider": event.provider, "points": total}

        assert isinstance(event, SwapRequested)
        conversion = await self._run(
            event.market_id,
            db,
            lambda: dispatch(event, self._engine),
            holders=[event.sender],
        )
        assert isinstance(conversion, ConversionResult)
        return {
            "event": "SwapRequested",
            **ConversionResponse.from_result(conversion).model_dump(mode="json"),
        }

    async def verify_invariants(self) -> list[str]:
        violations: list[str] = []
        for market_id in self._engine.market_ids():
            async with self._market_locks.hold(market_id):
                violations.extend(self._engine.verify_invariants(market_id))
        return violations


_service: MarketApplicationService | None = None


def get_market_service() -> MarketApplicationService:
    global _service  # noqa: PLW0603
    if _service is None:
        _service = MarketApplicationService()
    return _service
