"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM).
WAD amounts are NUMERIC(78,0); asyncpg returns them as Decimal, so every
amount read back is passed through int().

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_account.domain.models import Position
from src.pm_common.enums import Outcome
from src.pm_market.domain.models import Market, MarketEvent

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_MARKET_SQL = text("""
    SELECT id, start_time, duration, resolved, outcome, total_supply,
           pool_balance, created_at, resolved_at
    FROM markets
    WHERE id = :market_id
""")

_GET_POSITIONS_SQL = text("""
    SELECT holder, yes_amount, no_amount
    FROM positions
    WHERE market_id = :market_id
""")

_GET_HOLDERS_SQL = text("""
    SELECT outcome, holder
    FROM market_holders
    WHERE market_id = :market_id
""")

_UPSERT_MARKET_SQL = text("""
    INSERT INTO markets
        (id, start_time, duration, resolved, outcome, total_supply,
         yes_balance, no_balance, pool_balance, created_at, resolved_at)
    VALUES
        (:id, :start_time, :duration, :resolved, :outcome, :total_supply,
         :yes_balance, :no_balance, :pool_balance, :created_at, :resolved_at)
    ON CONFLICT (id) DO UPDATE SET
        start_time   = EXCLUDED.start_time,
        duration     = EXCLUDED.duration,
        resolved     = EXCLUDED.resolved,
        outcome      = EXCLUDED.outcome,
        total_supply = EXCLUDED.total_supply,
        yes_balance  = EXCLUDED.yes_balance,
        no_balance   = EXCLUDED.no_balance,
        pool_balance = EXCLUDED.pool_balance,
        resolved_at  = EXCLUDED.resolved_at
""")

_UPSERT_POSITION_SQL = text("""
    INSERT INTO positions (market_id, holder, yes_amount, no_amount)
    VALUES (:market_id, :holder, :yes_amount, :no_amount)
    ON CONFLICT (market_id, holder) DO UPDATE SET
        yes_amount = EXCLUDED.yes_amount,
        no_amount  = EXCLUDED.no_amount
""")

_INSERT_HOLDER_SQL = text("""
    INSERT INTO market_holders (market_id, outcome, holder)
    VALUES (:market_id, :outcome, :holder)
    ON CONFLICT DO NOTHING
""")

_INSERT_EVENT_SQL = text("""
    INSERT INTO market_events
        (market_id, event_type, holder, outcome, amount_in, amount_out, rate, created_at)
    VALUES
        (:market_id, :event_type, :holder, :outcome, :amount_in, :amount_out, :rate, :created_at)
""")

_GET_POINTS_SQL = text("SELECT points FROM liquidity_points WHERE provider = :provider")

_UPSERT_POINTS_SQL = text("""
    INSERT INTO liquidity_points (provider, points)
    VALUES (:provider, :points)
    ON CONFLICT (provider) DO UPDATE SET points = EXCLUDED.points
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    return Market(
        id=row.id,
        start_time=row.start_time,
        duration=row.duration,
        resolved=row.resolved,
        outcome=Outcome(row.outcome) if row.outcome else None,
        total_supply=int(row.total_supply),
        stored_pool=int(row.pool_balance),
        created_at=row.created_at,
        resolved_at=row.resolved_at,
    )


def _row_to_position(row: Any) -> Position:
    return Position(
        holder=row.holder,
        yes_amount=int(row.yes_amount),
        no_amount=int(row.no_amount),
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    async def get_market(self, db: AsyncSession, market_id: str) -> Market | None:
        row = (await db.execute(_GET_MARKET_SQL, {"market_id": market_id})).fetchone()
        if row is None:
            return None
        market = _row_to_market(row)

        position_rows = (
            await db.execute(_GET_POSITIONS_SQL, {"market_id": market_id})
        ).fetchall()
        holder_rows = (
            await db.execute(_GET_HOLDERS_SQL, {"market_id": market_id})
        ).fetchall()

        holders: dict[Outcome, set[str]] = {Outcome.YES: set(), Outcome.NO: set()}
        for h in holder_rows:
            holders[Outcome(h.outcome)].add(h.holder)
        market.ledger.restore([_row_to_position(r) for r in position_rows], holders)
        return market

    async def save_market(
        self,
        db: AsyncSession,
        market: Market,
        holders: Iterable[str],
        events: list[MarketEvent],
        pool_balance: int,
    ) -> None:
        """Write the market row and custody pool, touched positions and new journal rows."""
        await db.execute(
            _UPSERT_MARKET_SQL,
            {
                "id": market.id,
                "start_time": market.start_time,
                "duration": market.duration,
                "resolved": market.resolved,
                "outcome": market.outcome.value if market.outcome else None,
                "total_supply": market.total_supply,
                "yes_balance": market.yes_balance,
                "no_balance": market.no_balance,
                "pool_balance": pool_balance,
                "created_at": market.created_at,
                "resolved_at": market.resolved_at,
            },
        )
        for holder in sorted(set(holders)):
            pos = market.ledger.position(holder)
            await db.execute(
                _UPSERT_POSITION_SQL,
                {
                    "market_id": market.id,
                    "holder": holder,
                    "yes_amount": pos.yes_amount,
                    "no_amount": pos.no_amount,
                },
            )
            for outcome in Outcome:
                if market.ledger.is_holder(holder, outcome):
                    await db.execute(
                        _INSERT_HOLDER_SQL,
                        {"market_id": market.id, "outcome": outcome.value, "holder": holder},
                    )
        for event in events:
            await db.execute(
                _INSERT_EVENT_SQL,
                {
                    "market_id": event.market_id,
                    "event_type": event.event_type.value,
                    "holder": event.holder,
                    "outcome": event.outcome.value if event.outcome else None,
                    "amount_in": event.amount_in,
                    "amount_out": event.amount_out,
                    "rate": event.rate,
                    "created_at": event.created_at or datetime.now(UTC),
                },
            )

    async def get_liquidity_points(self, db: AsyncSession, provider: str) -> int | None:
        points = (
            await db.execute(_GET_POINTS_SQL, {"provider": provider})
        ).scalar_one_or_none()
        return int(points) if points is not None else None

    async def save_liquidity_points(
        self, db: AsyncSession, provider: str, points: int
    ) -> None:
        await db.execute(_UPSERT_POINTS_SQL, {"provider": provider, "points": points})
