"""Core rebase controller components"""

from .errors import (
    RebaseProtocolError, ConfigurationError, WindowTooShort, OracleUnavailable,
    RebaseNotDue, ArithmeticOverflow, ReentrantRebase, Unauthorized,
    InsufficientBalance, InsufficientAllowance,
)
from .fixed_point import WAD, wad_mul, wad_div, wad_mul_repeat, to_wad, from_wad, format_wad
from .ledger import TokenLedger, ZERO_ADDRESS
from .oracle import PriceOracle, ObservationOracle
from .pricing import (
    MIN_TWAP_WINDOW, PricePool, OracleObservation, CompositePrice,
    TwapPriceAdapter, CrossPairPriceFeed, compose_prices, price_to_pool_tick,
)
from .target_price import TargetPriceSchedule, ScheduleAnchor
from .rebase_math import RebaseAdjustment, calculate_adjustment
from .controller import (
    RebaseController, RebaseEpoch, RebaseState,
    RebaseExecuted, PricePoolsUpdated, OwnershipTransferred,
)

__all__ = [
    "RebaseProtocolError", "ConfigurationError", "WindowTooShort", "OracleUnavailable",
    "RebaseNotDue", "ArithmeticOverflow", "ReentrantRebase", "Unauthorized",
    "InsufficientBalance", "InsufficientAllowance",
    "WAD", "wad_mul", "wad_div", "wad_mul_repeat", "to_wad", "from_wad", "format_wad",
    "TokenLedger", "ZERO_ADDRESS",
    "PriceOracle", "ObservationOracle",
    "MIN_TWAP_WINDOW", "PricePool", "OracleObservation", "CompositePrice",
    "TwapPriceAdapter", "CrossPairPriceFeed", "compose_prices", "price_to_pool_tick",
    "TargetPriceSchedule", "ScheduleAnchor",
    "RebaseAdjustment", "calculate_adjustment",
    "RebaseController", "RebaseEpoch", "RebaseState",
    "RebaseExecuted", "PricePoolsUpdated", "OwnershipTransferred",
]
