"""
Rebase Protocol Simulation

A rebasing token supply controller driven by a two-leg Uniswap V3 style TWAP
oracle, plus a market simulation for studying how supply adjustments track a
compounding target price.
"""

__version__ = "1.0.0"
__author__ = "Rebase Protocol Team"

# Core components
from .core.controller import RebaseController, RebaseEpoch, RebaseState, RebaseExecuted
from .core.errors import (
    RebaseProtocolError, ConfigurationError, WindowTooShort, OracleUnavailable,
    RebaseNotDue, ArithmeticOverflow, ReentrantRebase, Unauthorized,
)
from .core.ledger import TokenLedger
from .core.oracle import PriceOracle, ObservationOracle
from .core.pricing import PricePool, TwapPriceAdapter, CrossPairPriceFeed
from .core.rebase_math import RebaseAdjustment, calculate_adjustment
from .core.target_price import TargetPriceSchedule, ScheduleAnchor

# Engine
from .engine.config import PoolConfig, RebaseControllerConfig, SimulationConfig, MarketScenarios
from .engine.factory import create_controller, create_configured_controller

# Simulation
from .simulation.engine import RebaseSimulationEngine

# Analysis
from .analysis.metrics import RebaseMetricsCalculator

__all__ = [
    # Core
    "RebaseController", "RebaseEpoch", "RebaseState", "RebaseExecuted",
    "RebaseProtocolError", "ConfigurationError", "WindowTooShort", "OracleUnavailable",
    "RebaseNotDue", "ArithmeticOverflow", "ReentrantRebase", "Unauthorized",
    "TokenLedger", "PriceOracle", "ObservationOracle",
    "PricePool", "TwapPriceAdapter", "CrossPairPriceFeed",
    "RebaseAdjustment", "calculate_adjustment",
    "TargetPriceSchedule", "ScheduleAnchor",

    # Engine
    "PoolConfig", "RebaseControllerConfig", "SimulationConfig", "MarketScenarios",
    "create_controller", "create_configured_controller",

    # Simulation
    "RebaseSimulationEngine",

    # Analysis
    "RebaseMetricsCalculator"
]
