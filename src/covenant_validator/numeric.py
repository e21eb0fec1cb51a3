"""
Fixed-point numeric invariants for covenant messages.

CosmWasm ``Decimal`` values are 128-bit unsigned integers scaled by
10^18. They are converted to ``decimal.Decimal`` under a dedicated
high-precision context before any arithmetic, so divisions never
truncate and share sums compare exactly.

Rules implemented here (all pure; validators record the outcomes):

- **Share sum**: a partition must add up to exactly ``1``, no epsilon.
- **Share range**: each share lies in ``[0, 1]``.
- **Leg proportionality**: ``leg == total * share``, exactly.
- **Price band**: ``expected`` in ``[current * 0.95, current * 1.05)``.
- **Spread ratio**: ``spread / expected * 100`` rounded to a whole percent.
- **Single-side LP limit**: ``ceil_away(contribution - contribution * pct / 100)``.
"""

from __future__ import annotations

import decimal
from decimal import ROUND_HALF_UP, ROUND_UP, Decimal
from typing import Iterable, Union

from covenant_validator.errors import FixedPointOverflowError

FIXED_POINT_DECIMALS = 18
FIXED_POINT_SCALE = 10 ** FIXED_POINT_DECIMALS
UINT128_MAX = 2 ** 128 - 1

PRICE_BAND_LOWER = Decimal("0.95")
PRICE_BAND_UPPER = Decimal("1.05")

# 39 integer digits + 18 fractional digits fit comfortably.
_CONTEXT = decimal.Context(
    prec=80,
    rounding=decimal.ROUND_HALF_EVEN,
    traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
)

ONE = Decimal(1)
ZERO = Decimal(0)
HUNDRED = Decimal(100)


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def from_atomics(atomics: int) -> Decimal:
    """Convert 10^18-scaled atomics into a ``Decimal``."""
    if atomics < 0 or atomics > UINT128_MAX:
        raise FixedPointOverflowError(
            f"fixed-point atomics {atomics} outside the 128-bit unsigned range"
        )
    with decimal.localcontext(_CONTEXT):
        return Decimal(atomics) / Decimal(FIXED_POINT_SCALE)


def to_atomics(value: Decimal) -> int:
    """Convert a ``Decimal`` back to 10^18-scaled atomics.

    Raises:
        FixedPointOverflowError: if the value has more than 18 fractional
            digits or its atomics do not fit 128 bits.
    """
    with decimal.localcontext(_CONTEXT):
        scaled = value * FIXED_POINT_SCALE
        if scaled != scaled.to_integral_value():
            raise FixedPointOverflowError(
                f"{value} has more than {FIXED_POINT_DECIMALS} decimal places"
            )
        atomics = int(scaled)
    if atomics < 0 or atomics > UINT128_MAX:
        raise FixedPointOverflowError(
            f"{value} does not fit a 128-bit fixed-point decimal"
        )
    return atomics


def checked_fixed_point(value: Decimal) -> Decimal:
    """Round-trip a configured decimal through its on-chain representation."""
    return from_atomics(to_atomics(value))


def display_amount(amount: int, decimals: int) -> Decimal:
    """Atomic units to display units (``1_500_000 uatom`` -> ``1.5``)."""
    with decimal.localcontext(_CONTEXT):
        return Decimal(amount) / (Decimal(10) ** decimals)


# ---------------------------------------------------------------------------
# Shares and contributions
# ---------------------------------------------------------------------------


def share_in_range(share: Decimal) -> bool:
    return ZERO <= share <= ONE


def shares_sum_to_one(shares: Iterable[Decimal]) -> bool:
    """Exact equality with ``1``; values are committed on-chain as-is."""
    with decimal.localcontext(_CONTEXT):
        return sum(shares, ZERO) == ONE


def expected_leg_amount(total: int, share: Decimal) -> Decimal:
    """Amount a share-derived leg must carry out of ``total``."""
    with decimal.localcontext(_CONTEXT):
        return Decimal(total) * share


def leg_matches_share(total: int, share: Decimal, leg_amount: int) -> bool:
    with decimal.localcontext(_CONTEXT):
        return Decimal(leg_amount) == expected_leg_amount(total, share)


# ---------------------------------------------------------------------------
# Pool price
# ---------------------------------------------------------------------------


def current_pool_price(asset_a_amount: int, asset_b_amount: int) -> Decimal:
    """Spot price from reserves; an empty B reserve yields ``0``."""
    if asset_b_amount == 0:
        return ZERO
    with decimal.localcontext(_CONTEXT):
        return Decimal(asset_a_amount) / Decimal(asset_b_amount)


def price_band(current_price: Decimal) -> tuple[Decimal, Decimal]:
    """Half-open ``[lower, upper)`` sanity band around the pool price."""
    with decimal.localcontext(_CONTEXT):
        return current_price * PRICE_BAND_LOWER, current_price * PRICE_BAND_UPPER


def within_price_band(expected_spot_price: Decimal, current_price: Decimal) -> bool:
    lower, upper = price_band(current_price)
    return lower <= expected_spot_price < upper


def acceptable_spread_pct(acceptable_price_spread: Decimal, expected_spot_price: Decimal) -> Decimal:
    """Spread as a whole percentage of the expected price (``0`` if price is 0)."""
    if expected_spot_price == ZERO:
        return ZERO
    with decimal.localcontext(_CONTEXT):
        ratio = acceptable_price_spread / expected_spot_price * HUNDRED
        return ratio.quantize(ONE, rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Single-side LP limits
# ---------------------------------------------------------------------------


def single_side_lp_limit(contribution: Union[int, Decimal], limit_pct: int) -> int:
    """Expected single-side limit for a contribution.

    ``contribution - contribution * pct / 100`` rounded away from zero,
    e.g. ``333`` at 10% gives ``299.7`` -> ``300``.
    """
    with decimal.localcontext(_CONTEXT):
        amount = Decimal(contribution)
        limit = amount - amount * Decimal(limit_pct) / HUNDRED
        return int(limit.quantize(ONE, rounding=ROUND_UP))
