"""Results, metrics and charts"""

from .metrics import RebaseMetricsCalculator
from .results_manager import ResultsManager, RunMetadata

__all__ = ["RebaseMetricsCalculator", "ResultsManager", "RunMetadata"]
