"""Tests for pm_risk rules: lifecycle gates, swap policy and amount checks."""

import pytest

from src.pm_common.enums import Outcome, SwapPolicy
from src.pm_common.errors import InvalidAmountError, StateError, SwapDisabledError
from src.pm_market.domain.models import Market
from src.pm_risk.rules.amount_check import check_non_negative
from src.pm_risk.rules.market_phase import (
    check_conversion_allowed,
    check_market_closed,
    check_market_open,
    check_market_resolved,
)

OPEN, CLOSED, PENDING = 150, 300, 50


@pytest.fixture
def market() -> Market:
    return Market(id="m", start_time=100, duration=100)


class TestAmountCheck:
    def test_zero_passes(self) -> None:
        check_non_negative("amount", 0)

    def test_negative_raises(self) -> None:
        with pytest.raises(InvalidAmountError):
            check_non_negative("amount", -1)


class TestLifecycleGates:
    def test_open_passes(self, market: Market) -> None:
        check_market_open(market, OPEN)

    @pytest.mark.parametrize("now", [PENDING, CLOSED])
    def test_open_rejects_outside_window(self, market: Market, now: int) -> None:
        with pytest.raises(StateError):
            check_market_open(market, now)

    def test_closed_passes(self, market: Market) -> None:
        check_market_closed(market, CLOSED)

    def test_closed_rejects_open(self, market: Market) -> None:
        with pytest.raises(StateError, match="requires CLOSED"):
            check_market_closed(market, OPEN)

    def test_closed_rejects_resolved(self, market: Market) -> None:
        market.resolved, market.outcome = True, Outcome.YES
        with pytest.raises(StateError):
            check_market_closed(market, CLOSED)

    def test_resolved(self, market: Market) -> None:
        with pytest.raises(StateError):
            check_market_resolved(market)
        market.resolved, market.outcome = True, Outcome.YES
        check_market_resolved(market)


class TestConversionPolicy:
    @pytest.mark.parametrize("now", [PENDING, OPEN, CLOSED])
    def test_disabled_always_rejects(self, market: Market, now: int) -> None:
        with pytest.raises(SwapDisabledError):
            check_conversion_allowed(market, now, SwapPolicy.DISABLED)

    def test_open_window(self, market: Market) -> None:
        check_conversion_allowed(market, OPEN, SwapPolicy.OPEN_WINDOW)
        with pytest.raises(StateError):
            check_conversion_allowed(market, CLOSED, SwapPolicy.OPEN_WINDOW)

    @pytest.mark.parametrize("now", [PENDING, OPEN, CLOSED])
    def test_until_resolved_allows_any_unresolved_phase(
        self, market: Market, now: int
    ) -> None:
        check_conversion_allowed(market, now, SwapPolicy.UNTIL_RESOLVED)

    def test_until_resolved_rejects_after_resolution(self, market: Market) -> None:
        market.resolved, market.outcome = True, Outcome.NO
        with pytest.raises(StateError):
            check_conversion_allowed(market, CLOSED, SwapPolicy.UNTIL_RESOLVED)
