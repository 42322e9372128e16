"""Market simulation around the rebase controller"""

from .clock import SimulationClock
from .market import TwoLegMarket
from .engine import RebaseSimulationEngine

__all__ = ["SimulationClock", "TwoLegMarket", "RebaseSimulationEngine"]
