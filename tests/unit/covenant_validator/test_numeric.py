"""Tests for fixed-point numeric rules."""

from decimal import Decimal

import pytest

from covenant_validator import numeric
from covenant_validator.errors import FixedPointOverflowError


class TestFixedPoint:
    def test_atomics_conversion(self):
        assert numeric.to_atomics(Decimal("0.35")) == 350_000_000_000_000_000
        assert numeric.from_atomics(10 ** 18) == Decimal(1)

    def test_smallest_fraction_survives(self):
        value = Decimal("0.000000000000000001")
        assert numeric.checked_fixed_point(value) == value

    def test_too_many_places_overflows(self):
        with pytest.raises(FixedPointOverflowError):
            numeric.to_atomics(Decimal("0.0000000000000000001"))

    def test_out_of_range_overflows(self):
        with pytest.raises(FixedPointOverflowError):
            numeric.to_atomics(Decimal(2 ** 128))
        with pytest.raises(FixedPointOverflowError):
            numeric.from_atomics(-1)

    def test_display_amount(self):
        assert numeric.display_amount(1_500_000, 6) == Decimal("1.5")


class TestShares:
    def test_exact_sum_passes(self):
        assert numeric.shares_sum_to_one([Decimal("0.35"), Decimal("0.65")])

    def test_off_by_one_atomic_fails(self):
        assert not numeric.shares_sum_to_one([Decimal("0.35"), Decimal("0.649999999999999999")])

    def test_share_range_is_inclusive(self):
        assert numeric.share_in_range(Decimal(0))
        assert numeric.share_in_range(Decimal(1))
        assert not numeric.share_in_range(Decimal("1.000000000000000001"))

    def test_leg_matches_share(self):
        assert numeric.leg_matches_share(10_000, Decimal("0.35"), 3_500)
        assert not numeric.leg_matches_share(10_000, Decimal("0.35"), 3_499)

    def test_fractional_leg_never_matches(self):
        # 333 * 0.5 = 166.5 cannot be carried by an integer amount
        assert not numeric.leg_matches_share(333, Decimal("0.5"), 166)
        assert not numeric.leg_matches_share(333, Decimal("0.5"), 167)


class TestPriceBand:
    def test_close_price_is_within_band(self):
        assert numeric.within_price_band(Decimal(103), Decimal(100))

    def test_far_price_is_outside_band(self):
        assert not numeric.within_price_band(Decimal(120), Decimal(100))

    def test_band_is_half_open(self):
        assert numeric.within_price_band(Decimal(95), Decimal(100))
        assert not numeric.within_price_band(Decimal(105), Decimal(100))

    def test_empty_reserve_gives_zero_price(self):
        assert numeric.current_pool_price(1_000, 0) == Decimal(0)

    def test_current_pool_price(self):
        assert numeric.current_pool_price(1_000_000, 10_000_000) == Decimal("0.1")

    def test_spread_pct_rounds_half_up(self):
        assert numeric.acceptable_spread_pct(Decimal("0.01"), Decimal("0.1")) == Decimal(10)
        assert numeric.acceptable_spread_pct(Decimal("0.125"), Decimal("1")) == Decimal(13)

    def test_spread_pct_with_zero_price(self):
        assert numeric.acceptable_spread_pct(Decimal("0.01"), Decimal(0)) == Decimal(0)


class TestSingleSideLimit:
    @pytest.mark.parametrize(
        "contribution,pct,expected",
        [
            (1000, 10, 900),
            (333, 10, 300),
            (5_000_000_000, 10, 4_500_000_000),
            (1000, 0, 1000),
        ],
    )
    def test_limit(self, contribution, pct, expected):
        assert numeric.single_side_lp_limit(contribution, pct) == expected
