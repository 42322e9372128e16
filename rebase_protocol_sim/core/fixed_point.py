#!/usr/bin/env python3
"""
Fixed-Point Arithmetic Kernel

18-decimal ("WAD") integer arithmetic with EVM overflow semantics:
- every intermediate product is range-checked against uint256/int256
- unsigned division floors, signed division truncates toward zero
- nothing ever wraps silently; out-of-range values raise ArithmeticOverflow

Prices and supplies are plain Python ints holding raw units (1.0 == 10**18).
"""

from decimal import Decimal, ROUND_DOWN
from typing import Union

from .errors import ArithmeticOverflow

WAD = 10 ** 18
UINT128_MAX = 2 ** 128 - 1
UINT256_MAX = 2 ** 256 - 1
INT256_MAX = 2 ** 255 - 1
INT256_MIN = -(2 ** 255)


def check_uint256(value: int, label: str = "value") -> int:
    """Raise ArithmeticOverflow unless 0 <= value <= 2**256 - 1"""
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflow(f"{label} {value} outside uint256 range")
    return value


def check_int256(value: int, label: str = "value") -> int:
    """Raise ArithmeticOverflow unless value fits a signed 256-bit integer"""
    if value < INT256_MIN or value > INT256_MAX:
        raise ArithmeticOverflow(f"{label} {value} outside int256 range")
    return value


def wad_mul(a: int, b: int) -> int:
    """Multiply two WAD values, dividing once by the scale (floor)"""
    product = check_uint256(check_uint256(a) * check_uint256(b), "wad_mul product")
    return product // WAD


def wad_div(a: int, b: int) -> int:
    """Divide two WAD values, scaling the numerator first to keep precision"""
    if b == 0:
        raise ArithmeticOverflow("wad_div division by zero")
    numerator = check_uint256(check_uint256(a) * WAD, "wad_div numerator")
    return numerator // check_uint256(b)


def mul_div(a: int, b: int, denominator: int) -> int:
    """Full-precision floor(a * b / denominator); only the result must fit uint256"""
    if denominator == 0:
        raise ArithmeticOverflow("mul_div division by zero")
    result = check_uint256(a) * check_uint256(b) // check_uint256(denominator)
    return check_uint256(result, "mul_div result")


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """Full-precision ceil(a * b / denominator)"""
    if denominator == 0:
        raise ArithmeticOverflow("mul_div division by zero")
    product = check_uint256(a) * check_uint256(b)
    result = -(-product // check_uint256(denominator))
    return check_uint256(result, "mul_div result")


def signed_div(numerator: int, denominator: int) -> int:
    """Signed integer division truncating toward zero"""
    if denominator == 0:
        raise ArithmeticOverflow("signed division by zero")
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        quotient = -quotient
    return check_int256(quotient, "signed quotient")


def signed_mul_div(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator in int256, product checked before the division"""
    product = check_int256(check_int256(a) * check_int256(b), "signed product")
    return signed_div(product, check_int256(denominator))


def wad_mul_repeat(value: int, factor: int, times: int) -> int:
    """
    Multiply `value` by the WAD `factor` `times` times.

    Floors after every multiplication, so the result carries at most `times`
    units of truncation and raises ArithmeticOverflow as soon as a step leaves
    uint256.
    """
    if times < 0:
        raise ValueError(f"Repeat count must be non-negative, got {times}")
    result = check_uint256(value)
    for _ in range(times):
        result = wad_mul(result, factor)
    return result


def to_wad(value: Union[int, float, str, Decimal]) -> int:
    """Convert a human-readable number to raw WAD units (truncating)"""
    scaled = (Decimal(str(value)) * WAD).to_integral_value(rounding=ROUND_DOWN)
    return int(scaled)


def from_wad(raw: int) -> Decimal:
    """Convert raw WAD units back to an exact Decimal"""
    return Decimal(raw) / Decimal(WAD)


def format_wad(raw: int, places: int = 4) -> str:
    """Render raw WAD units for reports and log lines"""
    quantum = Decimal(1).scaleb(-places)
    return f"{from_wad(raw).quantize(quantum, rounding=ROUND_DOWN):,}"
