#!/usr/bin/env python3
"""
Target Price Scheduler

The target price is never stored. It is recomputed from the number of whole
rebase intervals elapsed since an anchor time:

    target(n) = initial * rate^n

evaluated in WAD fixed point, flooring after every multiplication.
"""

from enum import Enum

from .fixed_point import WAD, check_uint256, wad_mul_repeat

DEFAULT_REBASE_INTERVAL = 12 * 60 * 60
DEFAULT_INITIAL_TARGET_PRICE = WAD  # $1.00
DEFAULT_PRICE_INCREASE_RATE = 115 * 10 ** 16  # 1.15x per interval


class ScheduleAnchor(str, Enum):
    """Which timestamp the interval count is measured from"""
    DEPLOYMENT = "deployment"
    LAST_REBASE = "last_rebase"


class TargetPriceSchedule:
    """Compounding target price on a fixed interval grid"""

    def __init__(
        self,
        initial_target_price: int = DEFAULT_INITIAL_TARGET_PRICE,
        price_increase_rate: int = DEFAULT_PRICE_INCREASE_RATE,
        interval: int = DEFAULT_REBASE_INTERVAL,
    ):
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        if price_increase_rate < WAD:
            raise ValueError("Price increase rate below 1.0 would make the target decrease")
        self.initial_target_price = check_uint256(initial_target_price, "initial target price")
        self.price_increase_rate = check_uint256(price_increase_rate, "price increase rate")
        self.interval = interval

    def intervals_passed(self, anchor_time: int, now: int) -> int:
        if now < anchor_time:
            raise ValueError(f"Current time {now} precedes anchor {anchor_time}")
        return (now - anchor_time) // self.interval

    def target_price_at(self, intervals: int) -> int:
        """Target after `intervals` whole intervals; raises ArithmeticOverflow past uint256"""
        if intervals < 0:
            raise ValueError(f"Interval count must be non-negative, got {intervals}")
        return wad_mul_repeat(self.initial_target_price, self.price_increase_rate, intervals)

    def target_price(self, anchor_time: int, now: int) -> int:
        return self.target_price_at(self.intervals_passed(anchor_time, now))

    def next_increase_time(self, anchor_time: int, now: int) -> int:
        """Timestamp at which the target next steps up"""
        return anchor_time + (self.intervals_passed(anchor_time, now) + 1) * self.interval
