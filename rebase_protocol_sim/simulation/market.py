#!/usr/bin/env python3
"""
Two-Leg Market Model

Geometric Brownian motion for the token/intermediate and intermediate/USD
legs, plus a constant-elasticity demand response to supply changes:

    token_price *= (old_supply / new_supply) ** elasticity
"""

import math
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..engine.config import PoolConfig

MINUTES_PER_YEAR = 365 * 24 * 60


class TwoLegMarket:
    """Evolves both oracle legs; all prices are floats in whole tokens"""

    def __init__(self, asset_pool: PoolConfig, usd_pool: PoolConfig,
                 supply_elasticity: float = 0.8, seed: Optional[int] = None):
        self.asset_pool = asset_pool
        self.usd_pool = usd_pool
        self.supply_elasticity = supply_elasticity
        self.rng = np.random.default_rng(seed)

        self.asset_price = asset_pool.initial_price
        self.usd_price = usd_pool.initial_price
        self.price_history: List[Tuple[float, float]] = [(self.asset_price, self.usd_price)]

    @property
    def token_usd_price(self) -> float:
        return self.asset_price * self.usd_price

    def step(self, minutes: int) -> Tuple[float, float]:
        """Advance both legs by `minutes` and return (asset_price, usd_price)"""
        dt = minutes / MINUTES_PER_YEAR
        shocks = self.rng.standard_normal(2)
        self.asset_price = self._evolve(self.asset_price, self.asset_pool, dt, shocks[0])
        self.usd_price = self._evolve(self.usd_price, self.usd_pool, dt, shocks[1])
        self.price_history.append((self.asset_price, self.usd_price))
        return self.asset_price, self.usd_price

    def apply_supply_change(self, old_supply: int, new_supply: int) -> float:
        """Reprice the token leg after a rebase; returns the multiplier applied"""
        if old_supply <= 0 or new_supply <= 0:
            return 1.0
        multiplier = (old_supply / new_supply) ** self.supply_elasticity
        self.asset_price *= multiplier
        return multiplier

    def get_statistics(self) -> Dict[str, float]:
        token_usd = np.array([asset * usd for asset, usd in self.price_history])
        returns = np.diff(np.log(token_usd)) if len(token_usd) > 1 else np.array([0.0])
        return {
            "initial_token_usd": float(token_usd[0]),
            "final_token_usd": float(token_usd[-1]),
            "min_token_usd": float(token_usd.min()),
            "max_token_usd": float(token_usd.max()),
            "log_return_std": float(returns.std()),
        }

    @staticmethod
    def _evolve(price: float, pool: PoolConfig, dt: float, shock: float) -> float:
        sigma = pool.annual_volatility
        drift = (pool.annual_drift - 0.5 * sigma ** 2) * dt
        return price * math.exp(drift + sigma * math.sqrt(dt) * shock)
