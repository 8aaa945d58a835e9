"""
Unit tests for the constant-product pricing engine.

Tests cover:
- Swap output formula, worked example and failed quotes
- Monotonicity in amount and fee
- Constant product never decreases
- First and subsequent mint, burn
- Deposit/withdraw round trip never pays out more than was deposited
- Integer square root and unit conversions
"""

import pytest
from decimal import Decimal

from poolkeeper.domain import pricing


# =============================================================================
# SWAP OUTPUT TESTS
# =============================================================================


class TestQuoteSwapOutput:
    """Tests for quote_swap_output."""

    def test_worked_example(self):
        """
        GIVEN reserves (1_000_000, 1_000_000) and a 30 bps fee
        WHEN 10_000 units are sold
        THEN after-fee input is 9_970 and output is 9_871
        """
        assert pricing.amount_in_after_fee(10_000, 30) == 9_970
        assert pricing.quote_swap_output(10_000, 1_000_000, 1_000_000, 30) == 9_871

    @pytest.mark.parametrize(
        "amount_in,reserve_in,reserve_out",
        [
            (0, 1_000, 1_000),
            (-5, 1_000, 1_000),
            (10, 0, 1_000),
            (10, 1_000, 0),
            (10, -1, 1_000),
        ],
    )
    def test_invalid_inputs_quote_zero(self, amount_in, reserve_in, reserve_out):
        """
        GIVEN a non-positive amount or an empty side
        WHEN I quote
        THEN the output is 0, not an error
        """
        assert pricing.quote_swap_output(amount_in, reserve_in, reserve_out, 30) == 0

    def test_full_fee_quotes_zero(self):
        assert pricing.quote_swap_output(10_000, 1_000_000, 1_000_000, 10_000) == 0

    def test_output_never_reaches_reserve(self):
        """
        GIVEN a trade far larger than the pool
        WHEN I quote
        THEN the output stays strictly below the output reserve
        """
        out = pricing.quote_swap_output(10 ** 30, 1_000, 5_000, 0)
        assert 0 < out < 5_000

    def test_monotonic_in_amount(self):
        """
        GIVEN fixed reserves and fee
        WHEN the input grows
        THEN the output never decreases
        """
        previous = 0
        for amount in range(0, 50_000, 997):
            out = pricing.quote_swap_output(amount, 3_000_000, 7_000_000, 30)
            assert out >= previous
            previous = out

    def test_non_increasing_in_fee(self):
        """
        GIVEN fixed reserves and input
        WHEN the fee grows
        THEN the output never increases
        """
        previous = None
        for fee in range(0, 10_001, 250):
            out = pricing.quote_swap_output(123_456, 9_000_000, 4_000_000, fee)
            if previous is not None:
                assert out <= previous
            previous = out

    @pytest.mark.parametrize(
        "amount_in,reserve_in,reserve_out,fee_bps",
        [
            (10_000, 1_000_000, 1_000_000, 30),
            (1, 1_000_000, 1_000_000, 30),
            (999_999, 17, 123_456_789, 5),
            (5_000_000_000, 8_000_000_000, 2_000_000_000, 100),
            (77, 1_000, 1_000, 0),
        ],
    )
    def test_constant_product_does_not_decrease(self, amount_in, reserve_in, reserve_out, fee_bps):
        """
        GIVEN any valid trade
        WHEN it is priced
        THEN reserve_in * reserve_out <= (reserve_out - out) * (reserve_in + after_fee)
        """
        after_fee = pricing.amount_in_after_fee(amount_in, fee_bps)
        out = pricing.quote_swap_output(amount_in, reserve_in, reserve_out, fee_bps)
        assert reserve_in * reserve_out <= (reserve_out - out) * (reserve_in + after_fee)


# =============================================================================
# MINT / BURN TESTS
# =============================================================================


class TestMintAndBurn:
    """Tests for quote_mint_units and quote_burn_amounts."""

    def test_first_deposit_mints_geometric_mean(self):
        """
        GIVEN an empty pool
        WHEN 1_000_000 A and 4_000_000 B are deposited
        THEN floor(sqrt(a * b)) = 2_000_000 units are minted
        """
        assert pricing.quote_mint_units(1_000_000, 4_000_000, 0, 0, 0) == 2_000_000

    def test_first_deposit_when_a_reserve_is_empty(self):
        """
        GIVEN units outstanding but one empty reserve side
        WHEN a deposit is quoted
        THEN it is treated as a first deposit
        """
        assert pricing.quote_mint_units(9, 4, 0, 100, 50) == 6

    def test_subsequent_deposit_mints_proportionally(self):
        """
        GIVEN reserves (10_000_000, 40_000_000) and 2_000_000 units
        WHEN (1_000_000, 4_000_000) is deposited
        THEN 200_000 units are minted
        """
        assert pricing.quote_mint_units(1_000_000, 4_000_000, 10_000_000, 40_000_000, 2_000_000) == 200_000

    def test_off_ratio_deposit_mints_smaller_claim(self):
        """
        GIVEN reserves (10_000_000, 40_000_000) and 2_000_000 units
        WHEN (1_000_000, 8_000_000) is deposited (too much B)
        THEN minting follows the A side only
        """
        assert pricing.quote_mint_units(1_000_000, 8_000_000, 10_000_000, 40_000_000, 2_000_000) == 200_000

    def test_large_first_deposit_is_exact(self):
        """
        GIVEN amounts whose product exceeds float precision
        WHEN the first deposit is quoted
        THEN the result is the exact integer square root
        """
        a = 123_456_789_012_345_678
        b = 987_654_321_098_765_432
        units = pricing.quote_mint_units(a, b, 0, 0, 0)
        assert units * units <= a * b < (units + 1) * (units + 1)

    def test_non_positive_deposit_mints_nothing(self):
        assert pricing.quote_mint_units(0, 100, 0, 0, 0) == 0
        assert pricing.quote_mint_units(100, -1, 10, 10, 10) == 0

    def test_burn_is_proportional(self):
        assert pricing.quote_burn_amounts(500, 10_000, 40_000, 2_000) == (2_500, 10_000)

    def test_burn_without_units_returns_nothing(self):
        assert pricing.quote_burn_amounts(10, 1_000, 1_000, 0) == (0, 0)
        assert pricing.quote_burn_amounts(0, 1_000, 1_000, 10) == (0, 0)

    @pytest.mark.parametrize(
        "reserve_a,reserve_b,total,amount_a",
        [
            (10_000_000, 40_000_000, 2_000_000, 1_000_000),
            (3_333_333, 7_777_777, 1_234_567, 999_999),
            (1_000, 1_000_000, 31_622, 7),
            (5, 5, 5, 1),
        ],
    )
    def test_round_trip_never_returns_more(self, reserve_a, reserve_b, total, amount_a):
        """
        GIVEN a deposit at the current ratio
        WHEN all minted units are withdrawn immediately
        THEN each side returned is at most what was deposited
        """
        amount_b = pricing.paired_amount(amount_a, reserve_a, reserve_b)
        minted = pricing.quote_mint_units(amount_a, amount_b, reserve_a, reserve_b, total)
        out_a, out_b = pricing.quote_burn_amounts(
            minted, reserve_a + amount_a, reserve_b + amount_b, total + minted
        )
        assert out_a <= amount_a
        assert out_b <= amount_b


# =============================================================================
# HELPER TESTS
# =============================================================================


class TestHelpers:
    """Tests for isqrt, slippage and unit conversion."""

    @pytest.mark.parametrize("n,expected", [(0, 0), (1, 1), (3, 1), (4, 2), (15, 3), (16, 4), (10 ** 40, 10 ** 20)])
    def test_isqrt(self, n, expected):
        assert pricing.isqrt(n) == expected

    def test_isqrt_rejects_negative(self):
        with pytest.raises(ValueError):
            pricing.isqrt(-1)

    def test_min_output_after_slippage(self):
        assert pricing.min_output_after_slippage(9_871, 50) == 9_821
        assert pricing.min_output_after_slippage(9_871, 0) == 9_871

    def test_paired_amount(self):
        assert pricing.paired_amount(1_000, 10_000, 40_000) == 4_000
        assert pricing.paired_amount(1_000, 0, 40_000) == 0

    def test_burn_units_for_percent_floors(self):
        assert pricing.burn_units_for_percent(999, Decimal("50")) == 499
        assert pricing.burn_units_for_percent(1_000, Decimal("100")) == 1_000
        assert pricing.burn_units_for_percent(1, Decimal("33.3")) == 0

    def test_to_units_floors_excess_precision(self):
        assert pricing.to_units(Decimal("1.2345678"), 6) == 1_234_567
        assert pricing.to_units(Decimal("20"), 6) == 20_000_000
        assert pricing.to_units(Decimal("0.0000001"), 6) == 0

    def test_to_units_is_exact_beyond_context_precision(self):
        assert pricing.to_units(Decimal("0." + "9" * 29), 6) == 999_999
        assert pricing.to_units(Decimal("123456789012345678901234567890.1234567"), 6) == (
            123_456_789_012_345_678_901_234_567_890_123_456
        )

    def test_burn_units_for_percent_is_exact_for_long_percent(self):
        percent = Decimal("33." + "3" * 30)
        assert pricing.burn_units_for_percent(10 ** 30, percent) == int("3" * 30)
        assert pricing.burn_units_for_percent(1_000, Decimal("99." + "9" * 30)) == 999

    def test_max_units_is_signed_64_bit(self):
        assert pricing.MAX_UNITS == 9_223_372_036_854_775_807

    def test_to_tokens(self):
        assert pricing.to_tokens(9_871, 6) == Decimal("0.009871")
