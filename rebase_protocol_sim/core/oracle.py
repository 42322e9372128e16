#!/usr/bin/env python3
"""
TWAP Price Oracle

The controller only consults an oracle through PriceOracle.consult. The
ObservationOracle below is the in-memory data source used by simulations and
tests: it keeps Uniswap V3 style accumulators per pool
- tick_cumulative: sum of tick * seconds
- seconds_per_liquidity_cumulative_x128: sum of (seconds << 128) / liquidity
and answers time-weighted queries by interpolating between observations.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Sequence, Tuple

from .errors import OracleUnavailable
from .tick_math import MAX_TICK, MIN_TICK

logger = logging.getLogger(__name__)

MAX_CARDINALITY = 65535
UINT160_MAX = 2 ** 160 - 1


class PriceOracle(ABC):
    """Narrow interface the controller consumes"""

    @abstractmethod
    def consult(self, pool_id: str, window: int) -> Tuple[int, int]:
        """Return (time-weighted average tick, harmonic mean liquidity) over `window` seconds"""


@dataclass(frozen=True)
class Observation:
    """Accumulator snapshot written when a pool's tick or liquidity changes"""
    timestamp: int
    tick_cumulative: int
    seconds_per_liquidity_cumulative_x128: int


@dataclass
class PoolOracleState:
    """Active tick/liquidity plus the observation history of one pool"""
    tick: int
    liquidity: int
    observations: List[Observation] = field(default_factory=list)


def _transform(last: Observation, timestamp: int, tick: int, liquidity: int) -> Observation:
    """Advance an observation to `timestamp` assuming `tick` and `liquidity` held throughout"""
    delta = timestamp - last.timestamp
    return Observation(
        timestamp=timestamp,
        tick_cumulative=last.tick_cumulative + tick * delta,
        seconds_per_liquidity_cumulative_x128=(
            last.seconds_per_liquidity_cumulative_x128 + (delta << 128) // max(liquidity, 1)
        ),
    )


class ObservationOracle(PriceOracle):
    """In-memory TWAP oracle over any number of pools sharing one clock"""

    def __init__(self, clock: Callable[[], int], cardinality: int = MAX_CARDINALITY):
        if cardinality < 1 or cardinality > MAX_CARDINALITY:
            raise ValueError(f"Cardinality must be in [1, {MAX_CARDINALITY}], got {cardinality}")
        self.clock = clock
        self.cardinality = cardinality
        self.pools: Dict[str, PoolOracleState] = {}

    def initialize_pool(self, pool_id: str, tick: int, liquidity: int) -> None:
        """Register a pool; its history starts at the current time"""
        if pool_id in self.pools:
            raise ValueError(f"Pool {pool_id!r} already initialized")
        self._validate(tick, liquidity)
        now = self.clock()
        self.pools[pool_id] = PoolOracleState(
            tick=tick,
            liquidity=liquidity,
            observations=[Observation(now, 0, 0)],
        )

    def update(self, pool_id: str, tick: int, liquidity: int = None) -> None:
        """Record that the pool moved to `tick` (and optionally new liquidity) now"""
        state = self._get_pool(pool_id)
        if liquidity is None:
            liquidity = state.liquidity
        self._validate(tick, liquidity)

        now = self.clock()
        last = state.observations[-1]
        if now < last.timestamp:
            raise ValueError(f"Clock went backwards: {now} < {last.timestamp}")

        # At most one observation per timestamp; a same-second update only changes the active tick
        if now > last.timestamp:
            state.observations.append(_transform(last, now, state.tick, state.liquidity))
            if len(state.observations) > self.cardinality:
                del state.observations[0]

        state.tick = tick
        state.liquidity = liquidity

    def current_tick(self, pool_id: str) -> int:
        return self._get_pool(pool_id).tick

    def oldest_observation_age(self, pool_id: str) -> int:
        """Seconds of history available for `pool_id`"""
        state = self._get_pool(pool_id)
        return self.clock() - state.observations[0].timestamp

    def observe(self, pool_id: str, seconds_agos: Sequence[int]) -> Tuple[List[int], List[int]]:
        """Cumulative tick and seconds-per-liquidity values at each of `seconds_agos`"""
        state = self._get_pool(pool_id)
        now = self.clock()
        tick_cumulatives = []
        seconds_per_liquidity = []
        for seconds_ago in seconds_agos:
            observation = self._observe_single(pool_id, state, now, seconds_ago)
            tick_cumulatives.append(observation.tick_cumulative)
            seconds_per_liquidity.append(observation.seconds_per_liquidity_cumulative_x128)
        return tick_cumulatives, seconds_per_liquidity

    def consult(self, pool_id: str, window: int) -> Tuple[int, int]:
        if window <= 0:
            raise OracleUnavailable(pool_id, f"window must be positive, got {window}")

        tick_cumulatives, seconds_per_liquidity = self.observe(pool_id, [window, 0])

        # Floor division rounds the mean toward negative infinity
        mean_tick = (tick_cumulatives[1] - tick_cumulatives[0]) // window

        liquidity_delta = seconds_per_liquidity[1] - seconds_per_liquidity[0]
        if liquidity_delta == 0:
            harmonic_mean_liquidity = 0
        else:
            harmonic_mean_liquidity = (window * UINT160_MAX) // (liquidity_delta << 32)

        logger.debug(
            "consult pool=%s window=%ss mean_tick=%d harmonic_liquidity=%d",
            pool_id, window, mean_tick, harmonic_mean_liquidity,
        )
        return mean_tick, harmonic_mean_liquidity

    def _get_pool(self, pool_id: str) -> PoolOracleState:
        state = self.pools.get(pool_id)
        if state is None:
            raise OracleUnavailable(pool_id, "pool not initialized")
        return state

    def _observe_single(self, pool_id: str, state: PoolOracleState, now: int, seconds_ago: int) -> Observation:
        if seconds_ago < 0:
            raise ValueError(f"seconds_ago must be non-negative, got {seconds_ago}")

        target = now - seconds_ago
        observations = state.observations
        oldest = observations[0]
        newest = observations[-1]

        if target < oldest.timestamp:
            raise OracleUnavailable(
                pool_id,
                f"insufficient history: need {seconds_ago}s, have {now - oldest.timestamp}s",
            )

        if target >= newest.timestamp:
            if target == newest.timestamp:
                return newest
            return _transform(newest, target, state.tick, state.liquidity)

        before, after = self._surrounding(observations, target)
        if target == before.timestamp:
            return before

        observation_delta = after.timestamp - before.timestamp
        target_delta = target - before.timestamp
        return Observation(
            timestamp=target,
            tick_cumulative=(
                before.tick_cumulative
                + (after.tick_cumulative - before.tick_cumulative) // observation_delta * target_delta
            ),
            seconds_per_liquidity_cumulative_x128=(
                before.seconds_per_liquidity_cumulative_x128
                + (after.seconds_per_liquidity_cumulative_x128 - before.seconds_per_liquidity_cumulative_x128)
                * target_delta // observation_delta
            ),
        )

    @staticmethod
    def _surrounding(observations: List[Observation], target: int) -> Tuple[Observation, Observation]:
        """Binary search for the observations at-or-before and after `target`"""
        low = 0
        high = len(observations) - 1
        while high - low > 1:
            mid = (low + high) // 2
            if observations[mid].timestamp <= target:
                low = mid
            else:
                high = mid
        return observations[low], observations[high]

    @staticmethod
    def _validate(tick: int, liquidity: int) -> None:
        if tick < MIN_TICK or tick > MAX_TICK:
            raise ValueError(f"Tick {tick} out of bounds [{MIN_TICK}, {MAX_TICK}]")
        if liquidity < 0:
            raise ValueError(f"Liquidity must be non-negative, got {liquidity}")
