#!/usr/bin/env python3
"""
TWAP Price Adapter and Cross-Pair Price Composer

Turns oracle ticks into 18-decimal prices and chains two legs
(token -> intermediate, intermediate -> USD) into a single token/USD price.
Both legs are always read with the same window argument.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError, WindowTooShort
from .fixed_point import wad_mul
from .ledger import is_null_address
from .oracle import PriceOracle
from .tick_math import get_quote_at_tick, price_to_tick, sort_tokens

logger = logging.getLogger(__name__)

MIN_TWAP_WINDOW = 15 * 60  # seconds
WAD_DECIMALS = 18


@dataclass(frozen=True)
class PricePool:
    """An oracle pool and the direction in which to read it"""
    pool_id: str
    base_token: str
    quote_token: str
    base_decimals: int = 18
    quote_decimals: int = 18


@dataclass(frozen=True)
class OracleObservation:
    """One TWAP reading, discarded after the call that produced it"""
    pool_id: str
    window: int
    tick: int
    harmonic_mean_liquidity: int
    price: int  # quote per base, WAD


@dataclass(frozen=True)
class CompositePrice:
    """Both legs plus the composed token/USD price"""
    window: int
    asset_leg: OracleObservation
    usd_leg: OracleObservation
    price: int


def scale_to_wad(amount: int, decimals: int) -> int:
    """Rescale a token amount with `decimals` places to 18 places"""
    if decimals <= WAD_DECIMALS:
        return amount * 10 ** (WAD_DECIMALS - decimals)
    return amount // 10 ** (decimals - WAD_DECIMALS)


def compose_prices(asset_price: int, usd_price: int) -> int:
    """Chain token->intermediate and intermediate->USD into token->USD"""
    return wad_mul(asset_price, usd_price)


def require_pool(pool: Optional[PricePool], label: str) -> PricePool:
    if pool is None or is_null_address(pool.pool_id):
        raise ConfigurationError(f"{label} price pool is not configured")
    return pool


class TwapPriceAdapter:
    """Reads a time-weighted average tick and converts it to a WAD price ratio"""

    def __init__(self, oracle: PriceOracle, min_window: int = MIN_TWAP_WINDOW):
        self.oracle = oracle
        self.min_window = min_window

    def validate_window(self, window: int) -> None:
        if window < self.min_window:
            raise WindowTooShort(window, self.min_window)

    def observe(self, pool: PricePool, window: int) -> OracleObservation:
        require_pool(pool, "Requested")
        self.validate_window(window)

        # OracleUnavailable propagates unchanged; retrying is the caller's decision
        tick, harmonic_mean_liquidity = self.oracle.consult(pool.pool_id, window)

        quote_amount = get_quote_at_tick(
            tick,
            10 ** pool.base_decimals,
            pool.base_token,
            pool.quote_token,
        )
        price = scale_to_wad(quote_amount, pool.quote_decimals)

        logger.debug("pool=%s window=%ss tick=%d price=%d", pool.pool_id, window, tick, price)
        return OracleObservation(
            pool_id=pool.pool_id,
            window=window,
            tick=tick,
            harmonic_mean_liquidity=harmonic_mean_liquidity,
            price=price,
        )

    def get_twap_price(self, pool: PricePool, window: int) -> int:
        return self.observe(pool, window).price


class CrossPairPriceFeed:
    """Token/USD price composed from two TWAP legs"""

    def __init__(
        self,
        adapter: TwapPriceAdapter,
        asset_pool: Optional[PricePool] = None,
        usd_pool: Optional[PricePool] = None,
    ):
        self.adapter = adapter
        self.asset_pool = asset_pool
        self.usd_pool = usd_pool

    def set_pools(self, asset_pool: PricePool, usd_pool: PricePool) -> None:
        # Validate both before assigning either
        asset_pool = require_pool(asset_pool, "Asset")
        usd_pool = require_pool(usd_pool, "USD")
        self.asset_pool = asset_pool
        self.usd_pool = usd_pool

    @property
    def is_configured(self) -> bool:
        return self.asset_pool is not None and self.usd_pool is not None

    def observe(self, window: int) -> CompositePrice:
        asset_pool = require_pool(self.asset_pool, "Asset")
        usd_pool = require_pool(self.usd_pool, "USD")
        self.adapter.validate_window(window)

        asset_leg = self.adapter.observe(asset_pool, window)
        usd_leg = self.adapter.observe(usd_pool, window)
        return CompositePrice(
            window=window,
            asset_leg=asset_leg,
            usd_leg=usd_leg,
            price=compose_prices(asset_leg.price, usd_leg.price),
        )

    def get_current_price_in_usd(self, window: int) -> int:
        return self.observe(window).price


def price_to_pool_tick(pool: PricePool, price: float) -> int:
    """
    Pool tick at which one whole base token is worth `price` whole quote tokens.

    Used by simulations to feed the oracle; the inverse of TwapPriceAdapter
    up to tick rounding.
    """
    if price <= 0:
        raise ValueError(f"Price must be positive, got {price}")
    raw_price = price * 10 ** pool.quote_decimals / 10 ** pool.base_decimals
    token0, _ = sort_tokens(pool.base_token, pool.quote_token)
    if token0 == pool.base_token:
        return price_to_tick(raw_price)
    return price_to_tick(1.0 / raw_price)
