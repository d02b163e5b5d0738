# tests/unit/test_market_service.py
"""Unit tests for MarketApplicationService using mock repository and session."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_account.domain.models import Position
from src.pm_common.datetime_utils import FixedClock
from src.pm_common.enums import MarketEventType, Outcome, SwapDirection
from src.pm_common.errors import (
    MarketAlreadyExistsError,
    MarketNotFoundError,
    StateError,
)
from src.pm_engine.engine.engine import MarketEngine
from src.pm_hooks.domain.events import Initialize, LiquidityAdded, SwapRequested
from src.pm_market.application.service import LockTable, MarketApplicationService
from src.pm_market.domain.models import Market


def _make_market(market_id: str = "m1") -> Market:
    return Market(id=market_id, start_time=100, duration=100)


@pytest.fixture
def engine() -> MarketEngine:
    e = MarketEngine(clock=FixedClock(150))
    e.tokens.payment.mint("alice", 1_000)
    return e


@pytest.fixture
def db():
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def mock_repo():
    repo = MagicMock()
    repo.get_market = AsyncMock(return_value=None)
    repo.save_market = AsyncMock()
    repo.get_liquidity_points = AsyncMock(return_value=None)
    repo.save_liquidity_points = AsyncMock()
    return repo


class TestInMemoryMode:
    async def test_buy_without_session(self, engine, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        resp = await svc.buy(None, "m1", Outcome.YES, "alice", 10)

        assert resp.amount_out == 20
        mock_repo.get_market.assert_not_called()
        mock_repo.save_market.assert_not_called()

    async def test_unknown_market(self, engine, mock_repo) -> None:
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        with pytest.raises(MarketNotFoundError):
            await svc.get_prices(None, "ghost")
        assert "ghost" not in svc._market_locks
        assert len(svc._market_locks) == 0

    async def test_journal_drained_without_session(self, engine, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        await svc.buy(None, "m1", Outcome.YES, "alice", 10)
        await svc.buy(None, "m1", Outcome.NO, "alice", 10)

        assert engine.get_market("m1").pending_events == []

    async def test_known_market_keeps_its_lock(self, engine, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        await svc.get_prices(None, "m1")
        assert "m1" in svc._market_locks


class TestLazyLoad:
    async def test_loads_from_repo(self, engine, db, mock_repo) -> None:
        mock_repo.get_market = AsyncMock(return_value=_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        detail = await svc.get_market(db, "m1")

        assert detail.id == "m1"
        assert detail.is_open is True
        assert engine.has_market("m1")

    async def test_cached_market_skips_repo(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        await svc.is_market_open(db, "m1")
        mock_repo.get_market.assert_not_called()

    async def test_missing_in_storage(self, engine, db, mock_repo) -> None:
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        with pytest.raises(MarketNotFoundError):
            await svc.get_market(db, "m1")
        assert len(svc._market_locks) == 0


class TestWriteThrough:
    async def test_buy_saves_holder_and_events(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        await svc.buy(db, "m1", Outcome.YES, "alice", 10)

        args = mock_repo.save_market.call_args.args
        assert args[1].id == "m1"
        assert list(args[2]) == ["alice"]
        assert [e.event_type for e in args[3]] == [MarketEventType.BUY]
        db.commit.assert_awaited_once()
        assert engine.get_market("m1").pending_events == []

    async def test_save_failure_rolls_back_and_evicts(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        mock_repo.save_market = AsyncMock(side_effect=RuntimeError("db down"))
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        with pytest.raises(RuntimeError):
            await svc.buy(db, "m1", Outcome.YES, "alice", 10)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        assert not engine.has_market("m1")

    async def test_commit_failure_reverts_token_movements(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        db.commit = AsyncMock(side_effect=RuntimeError("commit lost"))
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        with pytest.raises(RuntimeError):
            await svc.buy(db, "m1", Outcome.YES, "alice", 10)

        db.rollback.assert_awaited_once()
        assert engine.tokens.payment.balance_of("alice") == 1_000
        assert engine.tokens.payment.balance_of("market:m1") == 0
        assert engine.tokens.yes.total_supply == 0
        assert not engine.has_market("m1")

    async def test_claim_commit_failure_returns_reward(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        await svc.buy(db, "m1", Outcome.YES, "alice", 10)
        engine.clock.set(250)
        await svc.resolve(db, "m1", Outcome.YES)
        db.commit = AsyncMock(side_effect=RuntimeError("commit lost"))

        with pytest.raises(RuntimeError):
            await svc.claim(db, "m1", "alice")

        assert engine.tokens.payment.balance_of("alice") == 990
        assert engine.tokens.payment.balance_of("market:m1") == 10
        assert engine.tokens.yes.balance_of("market:m1") == 20

    async def test_rejected_operation_writes_nothing(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        with pytest.raises(StateError):
            await svc.claim(db, "m1", "alice")

        mock_repo.save_market.assert_not_called()
        assert engine.has_market("m1")

    async def test_schedule_update_returns_detail(self, engine, db, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        detail = await svc.set_duration(db, "m1", 10)

        assert detail.end_time == 110
        assert detail.phase.value == "CLOSED"
        mock_repo.save_market.assert_awaited_once()


class TestDispatchHook:
    async def test_initialize_in_memory(self, engine, mock_repo) -> None:
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        result = await svc.dispatch_hook(None, Initialize("m9"))
        assert result == {"event": "Initialize", "market_id": "m9"}
        assert engine.has_market("m9")

    async def test_initialize_existing_in_storage(self, engine, db, mock_repo) -> None:
        mock_repo.get_market = AsyncMock(return_value=_make_market("m9"))
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        with pytest.raises(MarketAlreadyExistsError):
            await svc.dispatch_hook(db, Initialize("m9"))
        assert not engine.has_market("m9")

    async def test_initialize_persists(self, engine, db, mock_repo) -> None:
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        await svc.dispatch_hook(db, Initialize("m9"))
        events = mock_repo.save_market.call_args.args[3]
        assert [e.event_type for e in events] == [MarketEventType.INITIALIZE]

    async def test_liquidity_added_resumes_stored_total(self, engine, db, mock_repo) -> None:
        mock_repo.get_liquidity_points = AsyncMock(return_value=500)
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        result = await svc.dispatch_hook(db, LiquidityAdded("m1", "lp", -25))

        assert result["points"] == 525
        mock_repo.save_liquidity_points.assert_awaited_once_with(db, "lp", 525)
        db.commit.assert_awaited_once()

    async def test_concurrent_liquidity_added_keeps_both_credits(
        self, engine, db, mock_repo
    ) -> None:
        async def stored_points(_db, _provider):
            await asyncio.sleep(0)
            return 100

        mock_repo.get_liquidity_points = AsyncMock(side_effect=stored_points)
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        results = await asyncio.gather(
            svc.dispatch_hook(db, LiquidityAdded("m1", "lp", 5)),
            svc.dispatch_hook(db, LiquidityAdded("m1", "lp", 5)),
        )

        assert sorted(r["points"] for r in results) == [105, 110]
        assert engine.liquidity_points.points_of("lp") == 110
        mock_repo.get_liquidity_points.assert_awaited_once()
        assert mock_repo.save_liquidity_points.await_args.args == (db, "lp", 110)

    async def test_liquidity_commit_failure_restores_total(self, engine, db, mock_repo) -> None:
        mock_repo.get_liquidity_points = AsyncMock(return_value=500)
        db.commit = AsyncMock(side_effect=RuntimeError("commit lost"))
        svc = MarketApplicationService(engine=engine, repo=mock_repo)

        with pytest.raises(RuntimeError):
            await svc.dispatch_hook(db, LiquidityAdded("m1", "lp", 25))

        db.rollback.assert_awaited_once()
        assert engine.liquidity_points.points_of("lp") == 500

    async def test_swap_requested(self, engine, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        await svc.buy(None, "m1", Outcome.YES, "alice", 10)

        result = await svc.dispatch_hook(
            None, SwapRequested("m1", "alice", SwapDirection.YES_TO_NO, 10)
        )

        assert result["event"] == "SwapRequested"
        assert result["to_outcome"] == "NO"
        assert result["amount_out"] == 5


class TestAdminReads:
    async def test_stats_and_invariants(self, engine, mock_repo) -> None:
        engine.load(_make_market())
        svc = MarketApplicationService(engine=engine, repo=mock_repo)
        await svc.buy(None, "m1", Outcome.NO, "alice", 10)

        stats = await svc.get_market_stats(None, "m1")

        assert stats.no_balance == 20
        assert stats.no_holders == 1
        assert stats.yes_holders == 0
        assert stats.pool_balance == 10
        assert await svc.verify_invariants() == []


class TestReload:
    async def _restart(self, db, mock_repo, now: int):
        """Trade on one engine, then serve the stored rows from a fresh one."""
        first = MarketEngine(clock=FixedClock(150))
        first.tokens.payment.mint("alice", 1_000)
        first.tokens.payment.mint("bob", 1_000)
        first.load(_make_market())
        svc = MarketApplicationService(engine=first, repo=mock_repo)
        await svc.buy(db, "m1", Outcome.YES, "alice", 10)
        await svc.buy(db, "m1", Outcome.NO, "bob", 30)
        pool = mock_repo.save_market.call_args.args[4]
        assert pool == 40

        stored = _make_market()
        stored.stored_pool = pool
        stored.ledger.restore(
            [Position("alice", yes_amount=20), Position("bob", no_amount=60)],
            {Outcome.YES: {"alice"}, Outcome.NO: {"bob"}},
        )
        mock_repo.get_market = AsyncMock(return_value=stored)
        restarted = MarketEngine(clock=FixedClock(now))
        return restarted, MarketApplicationService(engine=restarted, repo=mock_repo)

    async def test_reload_then_claim(self, db, mock_repo) -> None:
        engine, svc = await self._restart(db, mock_repo, now=250)

        await svc.resolve(db, "m1", Outcome.YES)
        claim = await svc.claim(db, "m1", "alice")

        assert claim.reward == 40
        assert engine.tokens.payment.balance_of("alice") == 40
        assert engine.pool_balance("m1") == 0
        assert mock_repo.save_market.call_args.args[4] == 0
        assert await svc.verify_invariants() == []

    async def test_reload_then_convert(self, db, mock_repo) -> None:
        engine, svc = await self._restart(db, mock_repo, now=150)

        resp = await svc.convert(db, "m1", "alice", Outcome.YES, 10)

        assert resp.amount_out == 30
        assert engine.position("m1", "alice").no_amount == 30
        assert await svc.verify_invariants() == []


class TestLockTable:
    async def test_serialises_and_drops_idle_keys(self) -> None:
        locks = LockTable(lambda key: False)
        order: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("k"):
                order.append(f"{name} in")
                await asyncio.sleep(0)
                order.append(f"{name} out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a in", "a out", "b in", "b out"]
        assert len(locks) == 0

    async def test_retained_keys_stay(self) -> None:
        locks = LockTable(lambda key: key == "keep")
        async with locks.hold("keep"):
            pass
        async with locks.hold("drop"):
            pass
        assert "keep" in locks
        assert "drop" not in locks
