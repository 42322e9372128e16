#!/usr/bin/env python3
"""
Target Schedule and Rebase Adjustment Tests
"""

import pytest

from rebase_protocol_sim.core.errors import ArithmeticOverflow
from rebase_protocol_sim.core.fixed_point import WAD
from rebase_protocol_sim.core.rebase_math import (
    calculate_adjustment, clamp_delta, max_adjustment, raw_rebase_delta,
)
from rebase_protocol_sim.core.target_price import DEFAULT_REBASE_INTERVAL, TargetPriceSchedule

SUPPLY = 10_000_000 * WAD
INTERVAL = DEFAULT_REBASE_INTERVAL


class TestTargetPriceSchedule:
    """initial * 1.15^n over whole 12-hour intervals"""

    def setup_method(self):
        self.schedule = TargetPriceSchedule()

    def test_whole_intervals_only(self):
        assert self.schedule.intervals_passed(0, INTERVAL - 1) == 0
        assert self.schedule.intervals_passed(0, INTERVAL) == 1
        assert self.schedule.intervals_passed(0, 3 * INTERVAL + 5) == 3

    def test_compounding(self):
        assert self.schedule.target_price(0, 0) == WAD
        assert self.schedule.target_price(0, INTERVAL) == 115 * 10 ** 16
        assert self.schedule.target_price(0, 2 * INTERVAL) == 1_322_500_000_000_000_000

    def test_monotonic_non_decreasing(self):
        targets = [self.schedule.target_price(0, t) for t in range(0, 20 * INTERVAL, INTERVAL // 3)]
        assert targets == sorted(targets)

    def test_next_increase_time(self):
        assert self.schedule.next_increase_time(0, 100) == INTERVAL
        assert self.schedule.next_increase_time(0, INTERVAL) == 2 * INTERVAL

    def test_time_before_anchor(self):
        with pytest.raises(ValueError):
            self.schedule.target_price(100, 99)

    def test_decreasing_rate_rejected(self):
        with pytest.raises(ValueError):
            TargetPriceSchedule(price_increase_rate=WAD - 1)

    def test_target_overflow_raises(self):
        with pytest.raises(ArithmeticOverflow):
            self.schedule.target_price_at(1000)


class TestRebaseAdjustment:

    def test_max_adjustment(self):
        assert max_adjustment(SUPPLY) == 1_500_000 * WAD

    def test_expansion_below_clamp(self):
        adjustment = calculate_adjustment(WAD, 115 * 10 ** 16, SUPPLY)
        assert adjustment.raw_delta == (15 * 10 ** 16 * SUPPLY) // (115 * 10 ** 16)
        assert adjustment.clamped_delta == adjustment.raw_delta
        assert not adjustment.was_clamped

    def test_expansion_clamped(self):
        adjustment = calculate_adjustment(WAD // 2, 115 * 10 ** 16, SUPPLY)
        assert adjustment.clamped_delta == 1_500_000 * WAD
        assert adjustment.was_clamped

    def test_contraction_clamped(self):
        adjustment = calculate_adjustment(2 * WAD, 115 * 10 ** 16, SUPPLY)
        assert adjustment.raw_delta < -1_500_000 * WAD
        assert adjustment.clamped_delta == -1_500_000 * WAD

    def test_equal_prices_are_a_noop(self):
        adjustment = calculate_adjustment(WAD, WAD, SUPPLY)
        assert adjustment.raw_delta == 0
        assert adjustment.is_noop

    def test_denominator_is_target_price(self):
        """10% above target removes 10% of supply, not 1/1.1 of it"""
        assert raw_rebase_delta(11 * 10 ** 17, WAD, 1000 * WAD) == -100 * WAD

    def test_negative_delta_truncates_toward_zero(self):
        assert raw_rebase_delta(4, 3, 1) == 0
        assert raw_rebase_delta(5, 3, 2) == -1

    def test_zero_target(self):
        with pytest.raises(ArithmeticOverflow):
            raw_rebase_delta(WAD, 0, SUPPLY)

    def test_zero_supply(self):
        assert calculate_adjustment(WAD // 2, WAD, 0).clamped_delta == 0

    def test_clamp_is_symmetric(self):
        assert clamp_delta(10, 3) == 3
        assert clamp_delta(-10, 3) == -3
        assert clamp_delta(2, 3) == 2


@pytest.mark.parametrize("supply", [1, 7, WAD, SUPPLY, 10 ** 30])
@pytest.mark.parametrize("current_price, target_price", [
    (WAD // 2, 115 * 10 ** 16),
    (2 * WAD, 115 * 10 ** 16),
    (WAD, WAD),
    (1, WAD),
    (10 * WAD, WAD),
    (WAD, 3 * WAD),
    (WAD + 1, WAD),
])
def test_adjustment_bounded_and_moves_toward_target(supply, current_price, target_price):
    adjustment = calculate_adjustment(current_price, target_price, supply)
    delta = adjustment.clamped_delta

    assert abs(delta) <= max_adjustment(supply)
    if current_price == target_price:
        assert delta == 0
    elif current_price < target_price:
        assert delta >= 0
        assert adjustment.raw_delta >= 0
    else:
        assert delta <= 0
        assert adjustment.raw_delta <= 0
    if delta != 0:
        assert (delta > 0) == (adjustment.raw_delta > 0)
