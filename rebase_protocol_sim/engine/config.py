#!/usr/bin/env python3
"""
Configuration schemas for the rebase controller and its simulation.

Pydantic models validate every tunable up front so a bad parameter fails at
load time rather than halfway through a run. Integer fields holding prices or
rates are raw WAD units (1.0 == 10**18).
"""

from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Optional

from ..core.fixed_point import WAD
from ..core.pricing import MIN_TWAP_WINDOW, PricePool
from ..core.rebase_math import DEFAULT_MAX_REBASE_RATE
from ..core.target_price import (
    DEFAULT_INITIAL_TARGET_PRICE, DEFAULT_PRICE_INCREASE_RATE, DEFAULT_REBASE_INTERVAL,
    ScheduleAnchor,
)

# Token identifiers ordered like mainnet addresses (USDC < RBT < WETH)
RBT_TOKEN = "0x7a3d5e1c9b2f4a6d8e0c1b3a5f7d9e2c4b6a8f01"
WETH_TOKEN = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC_TOKEN = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


class PoolConfig(BaseModel):
    """One oracle pool plus the market parameters used to simulate it"""
    pool_id: str = Field(min_length=1, description="Pool identifier passed to the oracle")
    base_token: str = Field(min_length=1, description="Token being priced")
    quote_token: str = Field(min_length=1, description="Token the price is expressed in")
    base_decimals: int = Field(ge=0, le=38, default=18)
    quote_decimals: int = Field(ge=0, le=38, default=18)

    initial_price: float = Field(gt=0, description="Whole quote tokens per whole base token")
    liquidity: int = Field(gt=0, default=10 ** 21, description="Active in-range liquidity")
    annual_volatility: float = Field(ge=0, le=5, default=0.6, description="Annualized volatility")
    annual_drift: float = Field(ge=-5, le=5, default=0.0, description="Annualized log drift")

    @validator('quote_token')
    def validate_distinct_tokens(cls, v, values):
        """Base and quote must be different tokens"""
        base_token = values.get('base_token')
        if base_token is not None and base_token.lower() == v.lower():
            raise ValueError("base_token and quote_token must differ")
        return v

    def to_price_pool(self) -> PricePool:
        return PricePool(
            pool_id=self.pool_id,
            base_token=self.base_token,
            quote_token=self.quote_token,
            base_decimals=self.base_decimals,
            quote_decimals=self.quote_decimals,
        )


class RebaseControllerConfig(BaseModel):
    """Rebase controller parameters"""
    owner: str = Field(min_length=1, default="owner")
    reserve_holder: str = Field(min_length=1, default="rebase-controller")
    initial_supply: int = Field(ge=0, default=10_000_000 * WAD, description="Minted to the reserve holder")

    initial_target_price: int = Field(gt=0, default=DEFAULT_INITIAL_TARGET_PRICE)
    price_increase_rate: int = Field(default=DEFAULT_PRICE_INCREASE_RATE, description="Per-interval multiplier")
    max_rebase_rate: int = Field(default=DEFAULT_MAX_REBASE_RATE, description="Max fraction of supply per rebase")
    rebase_interval: int = Field(gt=0, default=DEFAULT_REBASE_INTERVAL, description="Seconds between rebases")
    min_twap_window: int = Field(gt=0, default=MIN_TWAP_WINDOW, description="Shortest accepted TWAP window")

    schedule_anchor: ScheduleAnchor = ScheduleAnchor.DEPLOYMENT
    advance_epoch_on_zero_delta: bool = False

    @validator('price_increase_rate')
    def validate_increase_rate(cls, v):
        if v < WAD:
            raise ValueError("price_increase_rate must be at least 1.0 (10**18)")
        return v

    @validator('max_rebase_rate')
    def validate_max_rebase_rate(cls, v):
        if not 0 < v <= WAD:
            raise ValueError("max_rebase_rate must be in (0, 10**18]")
        return v


def default_asset_pool() -> PoolConfig:
    return PoolConfig(
        pool_id="RBT/WETH",
        base_token=RBT_TOKEN,
        quote_token=WETH_TOKEN,
        initial_price=1.0 / 3000.0,
        annual_volatility=1.2,
    )


def default_usd_pool() -> PoolConfig:
    return PoolConfig(
        pool_id="WETH/USDC",
        base_token=WETH_TOKEN,
        quote_token=USDC_TOKEN,
        quote_decimals=6,
        initial_price=3000.0,
        annual_volatility=0.6,
    )


class SimulationConfig(BaseModel):
    """Discrete-time simulation of keepers triggering rebases against a TWAP oracle"""
    scenario_name: str = Field(default="Baseline")
    duration_days: float = Field(gt=0, default=30)
    step_minutes: int = Field(gt=0, default=5, description="Market/oracle update cadence")
    keeper_minutes: int = Field(gt=0, default=60, description="How often a keeper calls rebase()")
    twap_window_minutes: int = Field(gt=0, default=30, description="Window passed to rebase() for both legs")
    seed: Optional[int] = Field(default=42)
    start_timestamp: int = Field(ge=0, default=1_700_000_000)
    supply_elasticity: float = Field(ge=0, le=2, default=0.8, description="Price response to supply change")
    warmup_minutes: int = Field(ge=0, default=60, description="Oracle history before the controller deploys")

    asset_pool: PoolConfig = Field(default_factory=default_asset_pool)
    usd_pool: PoolConfig = Field(default_factory=default_usd_pool)
    controller: RebaseControllerConfig = Field(default_factory=RebaseControllerConfig)

    @validator('keeper_minutes')
    def validate_keeper_cadence(cls, v, values):
        """Keepers act on market steps, so the cadence must align with them"""
        step = values.get('step_minutes')
        if step and v % step != 0:
            raise ValueError("keeper_minutes must be a multiple of step_minutes")
        return v

    @property
    def total_steps(self) -> int:
        return int(self.duration_days * 24 * 60) // self.step_minutes

    @property
    def twap_window(self) -> int:
        return self.twap_window_minutes * 60


class MarketScenarios:
    """Preset market conditions for quick comparisons"""

    BASELINE = {
        "name": "Baseline",
        "description": "Default volatility, no drift",
        "overrides": {},
    }

    FLAT_MARKET = {
        "name": "Flat_Market",
        "description": "Zero volatility on both legs",
        "overrides": {"asset_pool": {"annual_volatility": 0.0}, "usd_pool": {"annual_volatility": 0.0}},
    }

    ETH_BULL = {
        "name": "ETH_Bull",
        "description": "Intermediate asset rallies 150% annualized",
        "overrides": {"usd_pool": {"annual_drift": 1.5}},
    }

    ETH_CRASH = {
        "name": "ETH_Crash",
        "description": "Intermediate asset bleeds -300% annualized with high volatility",
        "overrides": {"usd_pool": {"annual_drift": -3.0, "annual_volatility": 1.2}},
    }

    INELASTIC_DEMAND = {
        "name": "Inelastic_Demand",
        "description": "Supply changes barely move the token price",
        "overrides": {"supply_elasticity": 0.1},
    }

    @classmethod
    def get_all_scenarios(cls) -> List[dict]:
        return [cls.BASELINE, cls.FLAT_MARKET, cls.ETH_BULL, cls.ETH_CRASH, cls.INELASTIC_DEMAND]

    @classmethod
    def get_scenario_by_name(cls, name: str) -> Optional[dict]:
        for scenario in cls.get_all_scenarios():
            if scenario["name"] == name:
                return scenario
        return None

    @classmethod
    def build_config(cls, name: str, **overrides: Any) -> SimulationConfig:
        """SimulationConfig for a named scenario with extra top-level overrides applied"""
        scenario = cls.get_scenario_by_name(name)
        if scenario is None:
            raise ValueError(f"Unknown scenario: {name}")

        base = SimulationConfig(scenario_name=name)
        data: Dict[str, Any] = base.dict()
        for key, value in scenario["overrides"].items():
            if isinstance(value, dict):
                data[key].update(value)
            else:
                data[key] = value
        data.update({key: value for key, value in overrides.items() if value is not None})
        return SimulationConfig(**data)
