#!/usr/bin/env python3
"""
Rebase Adjustment Calculator

raw_delta = (target - current) * supply / target

The denominator is the target price: the delta is a fraction of the target,
not a percentage move of the current price. The result is clamped to
+/- supply * max_rebase_rate.
"""

from dataclasses import dataclass

from .errors import ArithmeticOverflow
from .fixed_point import WAD, check_int256, check_uint256, signed_mul_div

DEFAULT_MAX_REBASE_RATE = 15 * 10 ** 16  # 15% of supply per rebase


@dataclass(frozen=True)
class RebaseAdjustment:
    """One computed supply delta; positive means expand supply"""
    current_price: int
    target_price: int
    total_supply: int
    raw_delta: int
    clamped_delta: int
    max_adjustment: int

    @property
    def is_noop(self) -> bool:
        return self.clamped_delta == 0

    @property
    def was_clamped(self) -> bool:
        return self.raw_delta != self.clamped_delta


def max_adjustment(total_supply: int, max_rebase_rate: int = DEFAULT_MAX_REBASE_RATE) -> int:
    """Largest absolute supply change allowed in one rebase"""
    product = check_uint256(check_uint256(total_supply) * check_uint256(max_rebase_rate), "max adjustment product")
    return product // WAD


def raw_rebase_delta(current_price: int, target_price: int, total_supply: int) -> int:
    """Unclamped signed delta, truncated toward zero"""
    if current_price == target_price:
        return 0
    if target_price == 0:
        raise ArithmeticOverflow("Target price of zero")
    price_gap = check_int256(check_uint256(target_price) - check_uint256(current_price), "price gap")
    return signed_mul_div(price_gap, check_int256(total_supply), check_int256(target_price))


def clamp_delta(delta: int, limit: int) -> int:
    if delta > limit:
        return limit
    if delta < -limit:
        return -limit
    return delta


def calculate_adjustment(
    current_price: int,
    target_price: int,
    total_supply: int,
    max_rebase_rate: int = DEFAULT_MAX_REBASE_RATE,
) -> RebaseAdjustment:
    limit = max_adjustment(total_supply, max_rebase_rate)
    raw_delta = raw_rebase_delta(current_price, target_price, total_supply)
    return RebaseAdjustment(
        current_price=current_price,
        target_price=target_price,
        total_supply=total_supply,
        raw_delta=raw_delta,
        clamped_delta=clamp_delta(raw_delta, limit),
        max_adjustment=limit,
    )
