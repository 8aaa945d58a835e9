"""
Constant-product pricing engine.

Pure integer functions over smallest-denomination token units. Every
division floors, so rounding always favors the pool over the user. This is
the intended policy and is relied on by the invariants below:

- swaps never decrease reserve_in * reserve_out
- withdrawing freshly minted units never returns more than was deposited
"""

from decimal import Decimal

BPS_DENOMINATOR = 10_000

# Ledger amounts are signed 64-bit integers.
MAX_UNITS = 2**63 - 1


def isqrt(n: int) -> int:
    """Integer square root (floor) by Newton's method on arbitrary-precision ints."""
    if n < 0:
        raise ValueError(f"isqrt of negative number: {n}")
    if n < 2:
        return n
    x0 = n
    x1 = (x0 + 1) >> 1
    while x1 < x0:
        x0 = x1
        x1 = (x1 + n // x1) >> 1
    return x0


def amount_in_after_fee(amount_in: int, fee_bps: int) -> int:
    """Input left for the exchange once the fee is kept by the pool."""
    return amount_in * (BPS_DENOMINATOR - fee_bps) // BPS_DENOMINATOR


def quote_swap_output(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int) -> int:
    """
    Output for an exact-in swap.

        after_fee  = floor(amount_in * (10000 - fee_bps) / 10000)
        amount_out = floor(reserve_out * after_fee / (reserve_in + after_fee))

    Returns 0 (a failed quote, not an error) for non-positive input or an
    empty side.
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    after_fee = amount_in_after_fee(amount_in, fee_bps)
    denominator = reserve_in + after_fee
    if denominator <= 0:
        return 0
    return reserve_out * after_fee // denominator


def quote_mint_units(
    amount_a: int,
    amount_b: int,
    reserve_a: int,
    reserve_b: int,
    total_units: int,
) -> int:
    """
    Liquidity units minted for a two-sided deposit.

    First deposit (no units issued, or an empty side): floor(sqrt(a * b)).
    Otherwise the smaller of the two proportional claims, so a deposit off
    the current ratio cannot dilute existing holders.
    """
    if amount_a <= 0 or amount_b <= 0:
        return 0
    if total_units <= 0 or reserve_a <= 0 or reserve_b <= 0:
        return isqrt(amount_a * amount_b)
    units_a = amount_a * total_units // reserve_a
    units_b = amount_b * total_units // reserve_b
    return max(0, min(units_a, units_b))


def quote_burn_amounts(units: int, reserve_a: int, reserve_b: int, total_units: int) -> tuple[int, int]:
    """Proportional withdrawal for burning `units`."""
    if units <= 0 or total_units <= 0:
        return 0, 0
    return reserve_a * units // total_units, reserve_b * units // total_units


def paired_amount(amount: int, reserve_from: int, reserve_to: int) -> int:
    """Amount of the other side matching `amount` at the current reserve ratio."""
    if amount <= 0 or reserve_from <= 0 or reserve_to <= 0:
        return 0
    return amount * reserve_to // reserve_from


def min_output_after_slippage(amount_out: int, slippage_bps: int) -> int:
    """Lowest acceptable output for a slippage tolerance."""
    return amount_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def burn_units_for_percent(units: int, percent: Decimal) -> int:
    """floor(units * percent / 100), exact for any precision of `percent`."""
    numerator, denominator = _as_fraction(percent)
    return units * numerator // (denominator * 100)


def to_units(amount: Decimal, decimals: int) -> int:
    """Convert a token amount to smallest units, flooring any excess precision."""
    numerator, denominator = _as_fraction(amount)
    return numerator * 10 ** decimals // denominator


def to_tokens(units: int, decimals: int) -> Decimal:
    """Convert smallest units to a token amount."""
    return Decimal(units).scaleb(-decimals)


def _as_fraction(value: Decimal) -> tuple[int, int]:
    # Integer arithmetic avoids the decimal context's 28-digit rounding.
    value = Decimal(value)
    if not value.is_finite():
        raise ValueError(f"Not a finite amount: {value}")
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits)) or "0")
    if sign:
        coefficient = -coefficient
    if exponent >= 0:
        return coefficient * 10 ** exponent, 1
    return coefficient, 10 ** -exponent
