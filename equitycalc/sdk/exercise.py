"""Exercise cost and simple value helpers.

All functions accept raw form input (numbers, numeric strings, None) and
return 0.0 for anything unusable instead of raising.
"""

from typing import Any

from .coerce import to_price, to_shares


def compute_exercise_cost(shares: Any, strike_price: Any) -> float:
    """Cash needed to exercise `shares` options at `strike_price`.

    Examples:
        compute_exercise_cost(100, 2.5)      # -> 250.0
        compute_exercise_cost("200", "1.5")  # -> 300.0
        compute_exercise_cost(None, 10)      # -> 0.0
    """
    if not shares or not strike_price:
        return 0.0

    num_shares = to_shares(shares)
    num_strike = to_price(strike_price)

    return num_shares * num_strike


def compute_current_value(shares: Any, price: Any) -> float:
    """Market value of `shares` at `price` per share."""
    num_shares = to_shares(shares)
    num_price = to_price(price)
    if not num_shares or not num_price:
        return 0.0
    return num_shares * num_price


def compute_vesting_percentage(vested_shares: Any, total_shares: Any) -> float:
    """Vested shares as a percentage of total, capped to 0-100.

    A zero total counts as 1 so partially entered grants never divide by zero.
    """
    vested = to_price(vested_shares)
    total = to_price(total_shares) or 1
    return min(100.0, max(0.0, vested / total * 100))


def compute_return_percentage(current_price: Any, basis_price: Any) -> float:
    """Percentage gain of current_price over basis_price (a zero basis counts as 1)."""
    if current_price is None:
        return 0.0
    current = to_price(current_price)
    if not current:
        return 0.0
    basis = to_price(basis_price) or 1
    return (current - basis) / basis * 100
