"""Fixed-point integer arithmetic for 1e18-scaled amounts.

All prices, balances and payouts are int with WAD (1e18) scale. No float, no Decimal.
Every division floors; rounding dust is tolerated, never corrected.
"""

WAD = 10**18
NEUTRAL_PRICE = WAD // 2  # 0.5: maximal uncertainty
WAD_SQUARED = WAD * WAD


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) on non-negative ints."""
    if denominator <= 0:
        raise ValueError(f"Denominator must be positive, got {denominator}")
    return a * b // denominator


def wad_to_display(amount: int, places: int = 6) -> str:
    """Render a WAD amount: 1_500000000000000000 -> '1.500000', -WAD -> '-1.000000'."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), WAD)
    frac_str = f"{frac:018d}"[:places]
    if places == 0:
        return f"{sign}{whole:,}"
    return f"{sign}{whole:,}.{frac_str}"
