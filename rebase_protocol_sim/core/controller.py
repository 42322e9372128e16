#!/usr/bin/env python3
"""
Rebase Controller

Gate and supply mutator for the rebasing token. A rebase:
1. checks now >= last_rebase_time + rebase_interval
2. reads the token/USD TWAP from two chained pools
3. recomputes the compounding target price
4. clamps the supply delta to max_rebase_rate of total supply
5. mints to / burns from the reserve holder and advances the epoch

Steps 1-5 run under one lock. Concurrent callers are serialized, and a rebase
triggered from inside a running rebase on the same thread is rejected. Any
failure restores the ledger and the epoch marker.
"""

import logging
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple, Union

from .errors import ConfigurationError, RebaseNotDue, ReentrantRebase, Unauthorized
from .fixed_point import format_wad
from .ledger import TokenLedger, is_null_address
from .oracle import PriceOracle
from .pricing import MIN_TWAP_WINDOW, CompositePrice, CrossPairPriceFeed, PricePool, TwapPriceAdapter
from .rebase_math import DEFAULT_MAX_REBASE_RATE, RebaseAdjustment, calculate_adjustment
from .target_price import (
    DEFAULT_INITIAL_TARGET_PRICE, DEFAULT_PRICE_INCREASE_RATE, DEFAULT_REBASE_INTERVAL,
    ScheduleAnchor, TargetPriceSchedule,
)

logger = logging.getLogger(__name__)


class RebaseState(Enum):
    """Lifecycle of the rebase gate"""
    IDLE = "idle"
    ELIGIBLE = "eligible"
    EXECUTING = "executing"


@dataclass
class RebaseEpoch:
    """Timing state; last_rebase_time never decreases"""
    last_rebase_time: int
    rebase_interval: int = DEFAULT_REBASE_INTERVAL

    @property
    def next_rebase_time(self) -> int:
        return self.last_rebase_time + self.rebase_interval

    def is_due(self, now: int) -> bool:
        return now >= self.next_rebase_time

    def advance(self, now: int) -> None:
        if now < self.last_rebase_time:
            raise ValueError(f"Epoch cannot move backwards: {now} < {self.last_rebase_time}")
        self.last_rebase_time = now


@dataclass(frozen=True)
class PricePoolsUpdated:
    asset_pool: str
    usd_pool: str
    timestamp: int


@dataclass(frozen=True)
class OwnershipTransferred:
    previous_owner: str
    new_owner: str
    timestamp: int


@dataclass(frozen=True)
class RebaseExecuted:
    new_total_supply: int
    delta: int
    timestamp: int
    current_price: int
    target_price: int


ControllerEvent = Union[PricePoolsUpdated, OwnershipTransferred, RebaseExecuted]
EventListener = Callable[[ControllerEvent], None]


class RebaseController:
    """Owns total supply and the rebase epoch; anyone may trigger rebase()"""

    def __init__(
        self,
        oracle: PriceOracle,
        ledger: Optional[TokenLedger] = None,
        clock: Optional[Callable[[], int]] = None,
        owner: str = "owner",
        reserve_holder: str = "rebase-controller",
        initial_supply: int = 0,
        initial_target_price: int = DEFAULT_INITIAL_TARGET_PRICE,
        price_increase_rate: int = DEFAULT_PRICE_INCREASE_RATE,
        max_rebase_rate: int = DEFAULT_MAX_REBASE_RATE,
        rebase_interval: int = DEFAULT_REBASE_INTERVAL,
        min_twap_window: int = MIN_TWAP_WINDOW,
        schedule_anchor: ScheduleAnchor = ScheduleAnchor.DEPLOYMENT,
        advance_epoch_on_zero_delta: bool = False,
    ):
        if is_null_address(owner):
            raise ConfigurationError("Owner is the null address")
        if is_null_address(reserve_holder):
            raise ConfigurationError("Reserve holder is the null address")

        self.clock = clock or (lambda: int(time.time()))
        self.ledger = ledger or TokenLedger()
        self.owner = owner
        self.reserve_holder = reserve_holder
        self.max_rebase_rate = max_rebase_rate
        self.schedule_anchor = ScheduleAnchor(schedule_anchor)
        self.advance_epoch_on_zero_delta = advance_epoch_on_zero_delta

        self.schedule = TargetPriceSchedule(initial_target_price, price_increase_rate, rebase_interval)
        self.price_feed = CrossPairPriceFeed(TwapPriceAdapter(oracle, min_twap_window))

        self.deployed_at = self.clock()
        self.epoch = RebaseEpoch(last_rebase_time=self.deployed_at, rebase_interval=rebase_interval)
        self.rebase_count = 0

        self.events: List[ControllerEvent] = []
        self._listeners: List[EventListener] = []
        self._lock = threading.RLock()
        self._executing_thread: Optional[int] = None

        if initial_supply > 0:
            self.ledger.mint(self.reserve_holder, initial_supply)

    # Read-only views

    @property
    def total_supply(self) -> int:
        return self.ledger.total_supply

    @property
    def initial_target_price(self) -> int:
        return self.schedule.initial_target_price

    @property
    def state(self) -> RebaseState:
        if self._executing_thread is not None:
            return RebaseState.EXECUTING
        if self.epoch.is_due(self.clock()):
            return RebaseState.ELIGIBLE
        return RebaseState.IDLE

    def is_rebase_due(self) -> bool:
        return self.epoch.is_due(self.clock())

    def seconds_until_next_rebase(self) -> int:
        return max(0, self.epoch.next_rebase_time - self.clock())

    def get_current_price_in_usd(self, window: int) -> int:
        return self.price_feed.get_current_price_in_usd(window)

    def get_current_target_price(self) -> int:
        return self.schedule.target_price(self._anchor_time(), self.clock())

    def preview_rebase(self, window: int) -> Tuple[CompositePrice, RebaseAdjustment]:
        """Observed prices and the adjustment a rebase would apply right now"""
        return self._compute(window, self.clock())

    def calculate_rebase_amount(self, window: int) -> int:
        return self.preview_rebase(window)[1].clamped_delta

    def get_state(self) -> dict:
        return {
            "total_supply": self.total_supply,
            "last_rebase_time": self.epoch.last_rebase_time,
            "asset_pool": self.price_feed.asset_pool.pool_id if self.price_feed.asset_pool else None,
            "usd_pool": self.price_feed.usd_pool.pool_id if self.price_feed.usd_pool else None,
            "initial_target_price": self.initial_target_price,
            "max_rebase_rate": self.max_rebase_rate,
            "rebase_count": self.rebase_count,
            "state": self.state.value,
        }

    # Events

    def subscribe(self, listener: EventListener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: ControllerEvent) -> None:
        self.events.append(event)
        for listener in list(self._listeners):
            listener(event)

    # Administration

    def set_price_pools(self, caller: str, asset_pool: PricePool, usd_pool: PricePool) -> None:
        """Owner-only: configure the token->intermediate and intermediate->USD pools"""
        self._require_owner(caller)
        with self._lock:
            previous_pools = (self.price_feed.asset_pool, self.price_feed.usd_pool)
            event_count = len(self.events)
            try:
                self.price_feed.set_pools(asset_pool, usd_pool)
                self._emit(PricePoolsUpdated(asset_pool.pool_id, usd_pool.pool_id, self.clock()))
            except Exception:
                self.price_feed.asset_pool, self.price_feed.usd_pool = previous_pools
                del self.events[event_count:]
                raise
            logger.info("Price pools set: asset=%s usd=%s", asset_pool.pool_id, usd_pool.pool_id)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self._require_owner(caller)
        if is_null_address(new_owner):
            raise ConfigurationError("New owner is the null address")
        with self._lock:
            previous_owner = self.owner
            event_count = len(self.events)
            try:
                self.owner = new_owner
                self._emit(OwnershipTransferred(previous_owner, new_owner, self.clock()))
            except Exception:
                self.owner = previous_owner
                del self.events[event_count:]
                raise
            logger.info("Ownership transferred: %s -> %s", previous_owner, new_owner)

    def _require_owner(self, caller: str) -> None:
        if caller != self.owner:
            raise Unauthorized(caller)

    # Rebase

    def rebase(self, window: int) -> RebaseAdjustment:
        """Apply one clamped supply adjustment if the interval has elapsed"""
        thread_id = threading.get_ident()
        if self._executing_thread == thread_id:
            raise ReentrantRebase("rebase() called while a rebase is executing")

        with self._lock:
            self._executing_thread = thread_id
            try:
                return self._execute_rebase(window)
            finally:
                self._executing_thread = None

    def _execute_rebase(self, window: int) -> RebaseAdjustment:
        now = self.clock()
        if not self.epoch.is_due(now):
            raise RebaseNotDue(now, self.epoch.next_rebase_time)

        composite, adjustment = self._compute(window, now)
        delta = adjustment.clamped_delta

        if delta == 0:
            # A flat-price rebase does not consume the interval unless configured to
            if self.advance_epoch_on_zero_delta:
                self.epoch.advance(now)
            logger.info("Rebase skipped at %d: price equals target %s", now, format_wad(adjustment.target_price))
            return adjustment

        ledger_snapshot = self.ledger.snapshot()
        previous_rebase_time = self.epoch.last_rebase_time
        previous_count = self.rebase_count
        event_count = len(self.events)
        try:
            if delta > 0:
                self.ledger.mint(self.reserve_holder, delta)
            else:
                self.ledger.burn(self.reserve_holder, -delta)
            self.epoch.advance(now)
            self.rebase_count += 1
            self._emit(RebaseExecuted(
                new_total_supply=self.ledger.total_supply,
                delta=delta,
                timestamp=now,
                current_price=composite.price,
                target_price=adjustment.target_price,
            ))
        except Exception:
            self.ledger.restore(ledger_snapshot)
            self.epoch.last_rebase_time = previous_rebase_time
            self.rebase_count = previous_count
            del self.events[event_count:]
            raise

        logger.info(
            "Rebase #%d at %d: price=%s target=%s delta=%s%s supply=%s",
            self.rebase_count, now,
            format_wad(composite.price), format_wad(adjustment.target_price),
            format_wad(delta), " (clamped)" if adjustment.was_clamped else "",
            format_wad(self.ledger.total_supply),
        )
        return adjustment

    def _anchor_time(self) -> int:
        if self.schedule_anchor == ScheduleAnchor.LAST_REBASE:
            return self.epoch.last_rebase_time
        return self.deployed_at

    def _compute(self, window: int, now: int) -> Tuple[CompositePrice, RebaseAdjustment]:
        composite = self.price_feed.observe(window)
        target_price = self.schedule.target_price(self._anchor_time(), now)
        adjustment = calculate_adjustment(
            composite.price,
            target_price,
            self.ledger.total_supply,
            self.max_rebase_rate,
        )
        logger.debug(
            "window=%ss price=%d target=%d raw_delta=%d clamped_delta=%d",
            window, composite.price, target_price, adjustment.raw_delta, adjustment.clamped_delta,
        )
        return composite, adjustment
