#!/usr/bin/env python3
"""
Rebase Simulation Engine

Steps a two-leg market forward, feeds every move into the TWAP oracle, and has
a keeper call rebase() on a fixed cadence. Keepers do not know whether a rebase
is due; rejections are counted, not treated as failures.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.controller import RebaseController, RebaseExecuted
from ..core.errors import ArithmeticOverflow, OracleUnavailable, RebaseNotDue
from ..core.fixed_point import from_wad
from ..core.oracle import ObservationOracle
from ..core.pricing import price_to_pool_tick
from ..engine.config import SimulationConfig
from ..engine.factory import create_configured_controller
from .clock import SimulationClock
from .market import TwoLegMarket

logger = logging.getLogger(__name__)


class RebaseSimulationEngine:
    """Drives one controller through a simulated market"""

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.clock = SimulationClock(config.start_timestamp)
        self.oracle = ObservationOracle(self.clock)
        self.market = TwoLegMarket(
            config.asset_pool, config.usd_pool,
            supply_elasticity=config.supply_elasticity, seed=config.seed,
        )

        self.asset_pool = config.asset_pool.to_price_pool()
        self.usd_pool = config.usd_pool.to_price_pool()
        self.oracle.initialize_pool(
            self.asset_pool.pool_id,
            price_to_pool_tick(self.asset_pool, self.market.asset_price),
            config.asset_pool.liquidity,
        )
        self.oracle.initialize_pool(
            self.usd_pool.pool_id,
            price_to_pool_tick(self.usd_pool, self.market.usd_price),
            config.usd_pool.liquidity,
        )

        # Oracle history must cover the TWAP window before the first keeper call
        self.current_minute = 0
        self._warm_up()

        self.controller: RebaseController = create_configured_controller(
            config.controller, self.oracle, config.asset_pool, config.usd_pool, clock=self.clock,
        )
        self.controller.subscribe(self._on_controller_event)

        self.metrics_history: List[Dict[str, Any]] = []
        self.rebase_events: List[Dict[str, Any]] = []
        self.keeper_stats = {
            "attempts": 0,
            "executed": 0,
            "not_due": 0,
            "zero_delta": 0,
            "clamped": 0,
            "oracle_unavailable": 0,
            "arithmetic_overflow": 0,
        }

    def run_simulation(self) -> Dict[str, Any]:
        """Run the configured number of steps and return the results dictionary"""
        total_steps = self.config.total_steps
        logger.info(
            "Running %s: %d steps of %d min, keeper every %d min, window %ds",
            self.config.scenario_name, total_steps, self.config.step_minutes,
            self.config.keeper_minutes, self.config.twap_window,
        )

        for step in range(1, total_steps + 1):
            self._advance_market(self.config.step_minutes)
            rebase_delta = None
            if (step * self.config.step_minutes) % self.config.keeper_minutes == 0:
                rebase_delta = self._keeper_call()
            self._record_metrics(rebase_delta)

        return self._generate_results()

    def _warm_up(self) -> None:
        while self.current_minute < self.config.warmup_minutes:
            self._advance_market(self.config.step_minutes)

    def _advance_market(self, minutes: int) -> None:
        self.clock.advance(minutes * 60)
        self.current_minute += minutes
        asset_price, usd_price = self.market.step(minutes)
        self._push_prices(asset_price, usd_price)

    def _push_prices(self, asset_price: float, usd_price: float) -> None:
        self.oracle.update(self.asset_pool.pool_id, price_to_pool_tick(self.asset_pool, asset_price))
        self.oracle.update(self.usd_pool.pool_id, price_to_pool_tick(self.usd_pool, usd_price))

    def _keeper_call(self) -> Optional[int]:
        """One permissionless rebase attempt; returns the applied delta if any"""
        self.keeper_stats["attempts"] += 1
        supply_before = self.controller.total_supply
        try:
            adjustment = self.controller.rebase(self.config.twap_window)
        except RebaseNotDue:
            self.keeper_stats["not_due"] += 1
            return None
        except OracleUnavailable as e:
            self.keeper_stats["oracle_unavailable"] += 1
            logger.warning("Keeper call at minute %d failed: %s", self.current_minute, e)
            return None
        except ArithmeticOverflow as e:
            self.keeper_stats["arithmetic_overflow"] += 1
            logger.warning("Keeper call at minute %d overflowed: %s", self.current_minute, e)
            return None

        if adjustment.is_noop:
            self.keeper_stats["zero_delta"] += 1
            return 0

        self.keeper_stats["executed"] += 1
        if adjustment.was_clamped:
            self.keeper_stats["clamped"] += 1

        # Holders re-price the token after the supply change
        self.market.apply_supply_change(supply_before, self.controller.total_supply)
        self._push_prices(self.market.asset_price, self.market.usd_price)
        return adjustment.clamped_delta

    def _on_controller_event(self, event) -> None:
        if isinstance(event, RebaseExecuted):
            self.rebase_events.append({
                "minute": self.current_minute,
                "timestamp": event.timestamp,
                "delta": event.delta,
                "new_total_supply": event.new_total_supply,
                "current_price": event.current_price,
                "target_price": event.target_price,
            })

    def _record_metrics(self, rebase_delta: Optional[int]) -> None:
        try:
            twap_price = float(from_wad(self.controller.get_current_price_in_usd(self.config.twap_window)))
        except (OracleUnavailable, ArithmeticOverflow):
            twap_price = None
        try:
            target_price = float(from_wad(self.controller.get_current_target_price()))
        except ArithmeticOverflow:
            # Target has compounded past uint256
            target_price = None

        self.metrics_history.append({
            "minute": self.current_minute,
            "timestamp": self.clock.now,
            "spot_price": self.market.token_usd_price,
            "twap_price": twap_price,
            "target_price": target_price,
            "intermediate_usd_price": self.market.usd_price,
            "total_supply": float(from_wad(self.controller.total_supply)),
            "rebase_delta": float(from_wad(rebase_delta)) if rebase_delta else 0.0,
            "rebased": bool(rebase_delta),
        })

    def _generate_results(self) -> Dict[str, Any]:
        return {
            "scenario_name": self.config.scenario_name,
            "config": self.config.dict(),
            "metrics_history": self.metrics_history,
            "rebase_events": self.rebase_events,
            "keeper_stats": dict(self.keeper_stats),
            "market_statistics": self.market.get_statistics(),
            "final_state": self.controller.get_state(),
        }
