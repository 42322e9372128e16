#!/usr/bin/env python3
"""
Uniswap V3 Tick Math

Exact integer conversion between ticks and prices:
- tick -> sqrt ratio in Q64.96 (bit decomposition of 1.0001^(tick/2))
- tick -> quote amount for a base amount, honoring pool token ordering

price(token1 in token0) = 1.0001^tick. Oracle ticks follow the same convention.
"""

import math
from typing import Tuple

from .fixed_point import UINT128_MAX, UINT256_MAX, mul_div

MIN_TICK = -887272
MAX_TICK = 887272
Q96 = 2 ** 96
Q128 = 2 ** 128
Q192 = 2 ** 192
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342
TICK_BASE = 1.0001

# (bit, multiplier) pairs; each multiplier is 2^128 / sqrt(1.0001)^bit
_SQRT_RATIO_FACTORS: Tuple[Tuple[int, int], ...] = (
    (0x2, 0xfff97272373d413259a46990580e213a),
    (0x4, 0xfff2e50f5f656932ef12357cf3c7fdcc),
    (0x8, 0xffe5caca7e10e4e61c3624eaa0941cd0),
    (0x10, 0xffcb9843d60f6159c9db58835c926644),
    (0x20, 0xff973b41fa98c081472e6896dfb254c0),
    (0x40, 0xff2ea16466c96a3843ec78b326b52861),
    (0x80, 0xfe5dee046a99a2a811c461f1969c3053),
    (0x100, 0xfcbe86c7900a88aedcffc83b479aa3a4),
    (0x200, 0xf987a7253ac413176f2b074cf7815e54),
    (0x400, 0xf3392b0822b70005940c7a398e4b70f3),
    (0x800, 0xe7159475a2c29b7443b29c7fa6e889d9),
    (0x1000, 0xd097f3bdfd2022b8845ad8f792aa5825),
    (0x2000, 0xa9f746462d870fdf8a65dc1f90e061e5),
    (0x4000, 0x70d869a156d2a1b890bb3df62baf32f7),
    (0x8000, 0x31be135f97d08fd981231505542fcfa6),
    (0x10000, 0x9aa508b5b7a84e1c677de54f3e99bc9),
    (0x20000, 0x5d6af8dedb81196699c329225ee604),
    (0x40000, 0x2216e584f5fa1ea926041bedfe98),
    (0x80000, 0x48a170391f7dc42444e8fa2),
)


def get_sqrt_ratio_at_tick(tick: int) -> int:
    """Calculate sqrt(1.0001^tick) * 2^96, rounded up, using exact integer math"""
    if tick < MIN_TICK or tick > MAX_TICK:
        raise ValueError(f"Tick {tick} out of bounds [{MIN_TICK}, {MAX_TICK}]")

    abs_tick = abs(tick)
    if abs_tick & 0x1:
        ratio = 0xfffcb933bd6fad37aa2d162d1a594001
    else:
        ratio = 0x100000000000000000000000000000000

    for bit, factor in _SQRT_RATIO_FACTORS:
        if abs_tick & bit:
            ratio = (ratio * factor) >> 128

    if tick > 0:
        ratio = UINT256_MAX // ratio

    # Q128.128 -> Q64.96, rounding up so the result never understates the price
    return (ratio >> 32) + (0 if ratio % (1 << 32) == 0 else 1)


def sort_tokens(token_a: str, token_b: str) -> Tuple[str, str]:
    """Order two token identifiers the way pools order token0/token1"""
    if token_a.lower() == token_b.lower():
        raise ValueError(f"Identical tokens: {token_a}")
    if token_a.lower() < token_b.lower():
        return token_a, token_b
    return token_b, token_a


def get_quote_at_tick(tick: int, base_amount: int, base_token: str, quote_token: str) -> int:
    """
    Amount of quote_token received for base_amount of base_token at a tick.

    When base_token is token0 the tick price applies directly, otherwise the
    ratio is inverted. Ratios above uint128 take the X128 path to avoid
    overflowing the squared value.
    """
    if base_amount < 0 or base_amount > UINT128_MAX:
        raise ValueError(f"Base amount {base_amount} must fit in uint128")

    sqrt_ratio_x96 = get_sqrt_ratio_at_tick(tick)
    base_is_token0 = sort_tokens(base_token, quote_token)[0] == base_token

    if sqrt_ratio_x96 <= UINT128_MAX:
        ratio_x192 = sqrt_ratio_x96 * sqrt_ratio_x96
        if base_is_token0:
            return mul_div(ratio_x192, base_amount, Q192)
        return mul_div(Q192, base_amount, ratio_x192)

    ratio_x128 = mul_div(sqrt_ratio_x96, sqrt_ratio_x96, 1 << 64)
    if base_is_token0:
        return mul_div(ratio_x128, base_amount, Q128)
    return mul_div(Q128, base_amount, ratio_x128)


def tick_to_price(tick: int) -> float:
    """Float approximation of 1.0001^tick for analysis and charts"""
    return TICK_BASE ** tick


def price_to_tick(price: float) -> int:
    """Greatest tick whose price does not exceed `price`"""
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    tick = math.floor(math.log(price) / math.log(TICK_BASE))
    return max(MIN_TICK, min(MAX_TICK, tick))
