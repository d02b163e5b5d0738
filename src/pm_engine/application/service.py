# src/pm_engine/application/service.py
from config.settings import settings
from src.pm_clearing.domain.custody import TokenSet
from src.pm_engine.engine.engine import MarketEngine
from src.pm_token.infrastructure.memory import InMemoryToken

_engine: MarketEngine | None = None


def get_market_engine() -> MarketEngine:
    global _engine  # noqa: PLW0603
    if _engine is None:
        _engine = MarketEngine(
            tokens=TokenSet(
                payment=InMemoryToken(settings.PAYMENT_TOKEN_SYMBOL),
                yes=InMemoryToken(settings.YES_TOKEN_SYMBOL),
                no=InMemoryToken(settings.NO_TOKEN_SYMBOL),
            ),
            swap_policy=settings.SWAP_POLICY,
        )
    return _engine
