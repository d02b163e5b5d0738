# tests/integration/test_market_api.py
"""HTTP tests for market, admin, hook and account endpoints."""

from httpx import AsyncClient

from src.pm_common.datetime_utils import FixedClock
from src.pm_engine.engine.engine import MarketEngine

API = "/api/v1"
START, DURATION = 1_000, 600  # matches the clock fixture


async def _open_market(client: AsyncClient, market_id: str = "m1") -> None:
    resp = await client.post(
        f"{API}/hooks/events", json={"event": "Initialize", "market_id": market_id}
    )
    assert resp.status_code == 200
    await client.put(f"{API}/markets/{market_id}/start-time", json={"start_time": START})
    await client.put(f"{API}/markets/{market_id}/duration", json={"duration": DURATION})


class TestHealth:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"

    async def test_request_id_echoed(self, client: AsyncClient) -> None:
        resp = await client.get("/health", headers={"X-Request-ID": "req_trace"})
        assert resp.headers["X-Request-ID"] == "req_trace"


class TestMarketReads:
    async def test_unknown_market(self, client: AsyncClient) -> None:
        resp = await client.get(f"{API}/markets/ghost")
        assert resp.status_code == 404
        assert resp.json()["code"] == 3001

    async def test_fresh_market(self, client: AsyncClient) -> None:
        await _open_market(client)
        resp = await client.get(f"{API}/markets/m1")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["phase"] == "OPEN"
        assert data["end_time"] == START + DURATION
        assert data["price_yes"] == data["price_no"] == 5 * 10**17

    async def test_open_flag(self, client: AsyncClient, clock: FixedClock) -> None:
        await _open_market(client)
        clock.set(START + DURATION + 1)
        resp = await client.get(f"{API}/markets/m1/open")
        assert resp.json()["data"] == {"market_id": "m1", "is_open": False}

    async def test_initialize_twice(self, client: AsyncClient) -> None:
        await _open_market(client)
        resp = await client.post(
            f"{API}/hooks/events", json={"event": "Initialize", "market_id": "m1"}
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 3003


class TestTradingFlow:
    async def test_end_to_end(
        self, client: AsyncClient, engine: MarketEngine, clock: FixedClock
    ) -> None:
        await _open_market(client)
        engine.tokens.payment.mint("A", 10)
        engine.tokens.payment.mint("B", 1000)

        a = await client.post(
            f"{API}/markets/m1/buy",
            json={"payer": "A", "outcome": "YES", "payment_amount": 10},
        )
        b = await client.post(
            f"{API}/markets/m1/buy",
            json={"payer": "B", "outcome": "NO", "payment_amount": 1000},
        )
        assert a.json()["data"]["amount_out"] == 20
        assert b.json()["data"]["amount_out"] == 2000

        holders = (await client.get(f"{API}/markets/m1/holders/YES")).json()["data"]
        assert holders["holders"] == ["A"]

        early = await client.post(
            f"{API}/admin/markets/m1/resolve", json={"outcome": "YES"}
        )
        assert early.status_code == 422
        assert early.json()["code"] == 6001

        clock.set(START + DURATION + 1)
        resolved = await client.post(
            f"{API}/admin/markets/m1/resolve", json={"outcome": "YES"}
        )
        assert resolved.json()["data"]["total_supply"] == 20

        b_claim = await client.post(f"{API}/markets/m1/claim", json={"claimant": "B"})
        assert b_claim.json()["data"]["reward"] == 0
        a_claim = await client.post(f"{API}/markets/m1/claim", json={"claimant": "A"})
        assert a_claim.json()["data"]["reward"] == 1010

        again = await client.post(f"{API}/markets/m1/claim", json={"claimant": "B"})
        assert again.status_code == 422
        assert again.json()["code"] == 6003

        position = (await client.get(f"{API}/markets/m1/positions/B")).json()["data"]
        assert position["no_amount"] == 2000

        check = (await client.post(f"{API}/admin/verify-invariants")).json()["data"]
        assert check == {"ok": True, "violations": []}

    async def test_convert(self, client: AsyncClient, engine: MarketEngine) -> None:
        await _open_market(client)
        engine.tokens.payment.mint("A", 10)
        await client.post(
            f"{API}/markets/m1/buy",
            json={"payer": "A", "outcome": "YES", "payment_amount": 10},
        )
        resp = await client.post(
            f"{API}/markets/m1/convert",
            json={"holder": "A", "from_outcome": "YES", "amount_in": 10},
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["amount_out"] == 5

    async def test_buy_without_funds(self, client: AsyncClient) -> None:
        await _open_market(client)
        resp = await client.post(
            f"{API}/markets/m1/buy",
            json={"payer": "nobody", "outcome": "YES", "payment_amount": 10},
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 6004

    async def test_invalid_body(self, client: AsyncClient) -> None:
        await _open_market(client)
        resp = await client.post(
            f"{API}/markets/m1/buy",
            json={"payer": "A", "outcome": "YES", "payment_amount": -1},
        )
        assert resp.status_code == 422


class TestAdminAndHooks:
    async def test_fund_pool_and_stats(self, client: AsyncClient, engine: MarketEngine) -> None:
        await _open_market(client)
        engine.tokens.payment.mint("sponsor", 500)
        funded = await client.post(
            f"{API}/admin/markets/m1/fund", json={"sponsor": "sponsor", "amount": 500}
        )
        assert funded.json()["data"]["pool_balance"] == 500

        stats = (await client.get(f"{API}/admin/markets/m1/stats")).json()["data"]
        assert stats["pool_balance"] == 500
        assert stats["yes_holders"] == 0

    async def test_liquidity_points(self, client: AsyncClient) -> None:
        for delta in (100, -40):
            await client.post(f"{API}/hooks/events", json={
                "event": "LiquidityAdded", "market_id": "m1",
                "provider": "lp", "liquidity_delta": delta,
            })
        resp = await client.get(f"{API}/accounts/lp/points")
        assert resp.json()["data"] == {"address": "lp", "points": 140}

    async def test_swap_hook(self, client: AsyncClient, engine: MarketEngine) -> None:
        await _open_market(client)
        engine.tokens.payment.mint("A", 10)
        await client.post(
            f"{API}/markets/m1/buy",
            json={"payer": "A", "outcome": "YES", "payment_amount": 10},
        )
        resp = await client.post(f"{API}/hooks/events", json={
            "event": "SwapRequested", "market_id": "m1", "sender": "A",
            "direction": "YES_TO_NO", "amount": 4,
        })
        data = resp.json()["data"]
        assert data["event"] == "SwapRequested"
        assert data["amount_out"] == 2
