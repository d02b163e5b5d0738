"""Balance-ratio price curve for binary outcome markets.

price(own, other) = own * 1e18 / other   when both sides hold supply
                  = 0.5e18               when either side is empty

The price of an outcome is its own aggregate supply relative to the opposite
side's supply. There is no slippage formula: a price only moves when
purchases or conversions change the balances. When both sides are non-zero
price_yes * price_no == 1e36 up to floor-division error.
"""

from src.pm_common.enums import Outcome
from src.pm_common.errors import ZeroAmountError
from src.pm_common.fixed_point import NEUTRAL_PRICE, WAD, mul_div


def price(own_balance: int, other_balance: int) -> int:
    if own_balance == 0 or other_balance == 0:
        return NEUTRAL_PRICE
    return mul_div(own_balance, WAD, other_balance)


def price_yes(yes_balance: int, no_balance: int) -> int:
    return price(yes_balance, no_balance)


def price_no(yes_balance: int, no_balance: int) -> int:
    return price(no_balance, yes_balance)


def price_of(outcome: Outcome, yes_balance: int, no_balance: int) -> int:
    if outcome is Outcome.YES:
        return price_yes(yes_balance, no_balance)
    return price_no(yes_balance, no_balance)


def quote_purchase(payment_amount: int, rate: int) -> int:
    """Outcome tokens received for payment_amount at rate. Raises ZeroAmountError."""
    if rate == 0:
        raise ZeroAmountError("price rounded to zero")
    amount_out = mul_div(payment_amount, WAD, rate)
    if amount_out == 0:
        raise ZeroAmountError(f"payment {payment_amount} too small at price {rate}")
    return amount_out


def quote_conversion(amount_in: int, rate: int) -> int:
    """Destination tokens for amount_in at the destination's price. Raises ZeroAmountError."""
    amount_out = mul_div(amount_in, rate, WAD)
    if amount_out == 0:
        raise ZeroAmountError(f"conversion of {amount_in} at price {rate} yields nothing")
    return amount_out
