"""Liquidity incentive points: additive counter per provider address."""


class LiquidityPoints:
    def __init__(self) -> None:
        self._points: dict[str, int] = {}

    def credit(self, provider: str, liquidity_delta: int) -> int:
        """Add |liquidity_delta| to provider; returns the new total."""
        total = self._points.get(provider, 0) + abs(liquidity_delta)
        self._points[provider] = total
        return total

    def __contains__(self, provider: object) -> bool:
        return provider in self._points

    def points_of(self, provider: str) -> int:
        return self._points.get(provider, 0)

    def restore(self, provider: str, points: int) -> None:
        self._points[provider] = points

    def items(self) -> list[tuple[str, int]]:
        return sorted(self._points.items())
