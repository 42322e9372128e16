#!/usr/bin/env python3
"""
Fixed-Point Kernel Tests

WAD arithmetic, 256-bit range checks and signed truncation.
"""

import pytest

from rebase_protocol_sim.core.errors import ArithmeticOverflow
from rebase_protocol_sim.core.fixed_point import (
    WAD, UINT256_MAX, INT256_MAX,
    wad_mul, wad_div, mul_div, mul_div_rounding_up, signed_div, signed_mul_div,
    wad_mul_repeat, to_wad, from_wad, format_wad, check_uint256,
)


class TestWadArithmetic:
    """Multiplication and division at 18 decimals"""

    def test_wad_mul_scales_once(self):
        assert wad_mul(2 * WAD, 3 * WAD) == 6 * WAD
        assert wad_mul(15 * 10 ** 17, 2 * WAD) == 3 * WAD

    def test_wad_mul_floors(self):
        assert wad_mul(1, 1) == 0
        assert wad_mul(WAD + 1, WAD - 1) == WAD - 1

    def test_wad_mul_overflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            wad_mul(UINT256_MAX, 2)

    def test_negative_operand_rejected(self):
        with pytest.raises(ArithmeticOverflow):
            wad_mul(-WAD, WAD)

    def test_wad_div(self):
        assert wad_div(WAD, 3 * WAD) == 333_333_333_333_333_333
        assert wad_div(6 * WAD, 2 * WAD) == 3 * WAD

    def test_wad_div_by_zero(self):
        with pytest.raises(ArithmeticOverflow):
            wad_div(WAD, 0)

    def test_arithmetic_overflow_is_arithmetic_error(self):
        """Callers catching ArithmeticError also see overflow"""
        with pytest.raises(ArithmeticError):
            check_uint256(UINT256_MAX + 1)


class TestMulDiv:

    def test_intermediate_product_may_exceed_256_bits(self):
        assert mul_div(2 ** 255, 4, 8) == 2 ** 254

    def test_result_must_fit(self):
        with pytest.raises(ArithmeticOverflow):
            mul_div(UINT256_MAX, 2, 1)

    def test_rounding_up(self):
        assert mul_div(5, 1, 2) == 2
        assert mul_div_rounding_up(5, 1, 2) == 3
        assert mul_div_rounding_up(4, 1, 2) == 2


class TestSignedDivision:
    """Signed division truncates toward zero, never toward negative infinity"""

    @pytest.mark.parametrize("numerator,denominator,expected", [
        (7, 2, 3),
        (-7, 2, -3),
        (7, -2, -3),
        (-7, -2, 3),
        (-1, 3, 0),
    ])
    def test_truncation_toward_zero(self, numerator, denominator, expected):
        assert signed_div(numerator, denominator) == expected

    def test_signed_mul_div_checks_product(self):
        with pytest.raises(ArithmeticOverflow):
            signed_mul_div(INT256_MAX, 2, 1)

    def test_signed_mul_div(self):
        assert signed_mul_div(-10, 10, 3) == -33

    def test_signed_division_by_zero(self):
        with pytest.raises(ArithmeticOverflow):
            signed_div(1, 0)


class TestPowAndConversion:

    def test_wad_mul_repeat_matches_chained_multiplication(self):
        rate = 115 * 10 ** 16
        assert wad_mul_repeat(WAD, rate, 0) == WAD
        assert wad_mul_repeat(WAD, rate, 1) == rate
        assert wad_mul_repeat(WAD, rate, 2) == 1_322_500_000_000_000_000
        assert wad_mul_repeat(WAD, rate, 5) == wad_mul(wad_mul(wad_mul(wad_mul(rate, rate), rate), rate), rate)
        assert wad_mul_repeat(3 * WAD, 2 * WAD, 3) == 24 * WAD

    def test_wad_mul_repeat_floors_each_step(self):
        # 1 * 1.5 -> 1 (floored), then 1 * 1.5 -> 1 again
        assert wad_mul_repeat(1, 15 * 10 ** 17, 2) == 1

    def test_wad_mul_repeat_negative_count(self):
        with pytest.raises(ValueError):
            wad_mul_repeat(WAD, WAD, -1)

    def test_wad_mul_repeat_overflow(self):
        with pytest.raises(ArithmeticOverflow):
            wad_mul_repeat(UINT256_MAX // WAD, 2 * WAD, 2)

    def test_to_wad_truncates(self):
        assert to_wad("1.5") == 15 * 10 ** 17
        assert to_wad(0.1) == 10 ** 17
        assert to_wad("0.0000000000000000019") == 1

    def test_from_wad_and_format(self):
        assert str(from_wad(15 * 10 ** 17)) == "1.5"
        assert format_wad(1_234_567 * 10 ** 14) == "123.4567"
        assert format_wad(10 ** 25) == "10,000,000.0000"
