"""Configuration and wiring"""

from .config import PoolConfig, RebaseControllerConfig, SimulationConfig, MarketScenarios
from .factory import create_controller, create_configured_controller

__all__ = [
    "PoolConfig", "RebaseControllerConfig", "SimulationConfig", "MarketScenarios",
    "create_controller", "create_configured_controller",
]
