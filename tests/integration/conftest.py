"""API-test fixtures.

PERSISTENCE_ENABLED defaults to False, so every request runs against an
in-memory market arena. Each test gets a fresh service whose engine reads a
FixedClock, installed as the module-level singleton the routers resolve.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pm_common.datetime_utils import FixedClock
from src.pm_engine.engine.engine import MarketEngine
from src.pm_market.application import service as market_service_module
from src.pm_market.application.service import MarketApplicationService

START = 1_000
DURATION = 600


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def engine(clock: FixedClock) -> MarketEngine:
    return MarketEngine(clock=clock)


@pytest.fixture(autouse=True)
def market_service(
    monkeypatch: pytest.MonkeyPatch, engine: MarketEngine
) -> MarketApplicationService:
    svc = MarketApplicationService(engine=engine)
    monkeypatch.setattr(market_service_module, "_service", svc)
    return svc


@pytest.fixture
async def client() -> AsyncClient:
    """In-process HTTP client; the lifespan is not run, so no DB ping."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
