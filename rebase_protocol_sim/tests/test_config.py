#!/usr/bin/env python3
"""
Configuration Validation Tests
"""

import pytest
from pydantic import ValidationError

from rebase_protocol_sim.core.fixed_point import WAD
from rebase_protocol_sim.core.target_price import ScheduleAnchor
from rebase_protocol_sim.engine.config import (
    USDC_TOKEN, WETH_TOKEN, MarketScenarios, PoolConfig, RebaseControllerConfig, SimulationConfig,
)
from rebase_protocol_sim.engine.factory import create_configured_controller
from rebase_protocol_sim.core.oracle import ObservationOracle
from rebase_protocol_sim.simulation.clock import SimulationClock


class TestConfigValidation:

    def test_defaults(self):
        config = SimulationConfig()
        assert config.controller.price_increase_rate == 115 * 10 ** 16
        assert config.controller.max_rebase_rate == 15 * 10 ** 16
        assert config.controller.rebase_interval == 43200
        assert config.controller.schedule_anchor == ScheduleAnchor.DEPLOYMENT
        assert config.twap_window == 1800
        assert config.total_steps == 30 * 24 * 12

    def test_keeper_cadence_must_align_with_steps(self):
        with pytest.raises(ValidationError):
            SimulationConfig(step_minutes=5, keeper_minutes=7)

    def test_pool_tokens_must_differ(self):
        with pytest.raises(ValidationError):
            PoolConfig(pool_id="bad", base_token=WETH_TOKEN, quote_token=WETH_TOKEN.lower(), initial_price=1.0)

    def test_decreasing_target_rejected(self):
        with pytest.raises(ValidationError):
            RebaseControllerConfig(price_increase_rate=WAD - 1)

    @pytest.mark.parametrize("rate", [0, WAD + 1])
    def test_max_rebase_rate_bounds(self, rate):
        with pytest.raises(ValidationError):
            RebaseControllerConfig(max_rebase_rate=rate)

    def test_usd_pool_price_pool(self):
        pool = SimulationConfig().usd_pool.to_price_pool()
        assert pool.quote_token == USDC_TOKEN
        assert pool.quote_decimals == 6


class TestMarketScenarios:

    def test_all_scenarios_build(self):
        for scenario in MarketScenarios.get_all_scenarios():
            config = MarketScenarios.build_config(scenario["name"])
            assert config.scenario_name == scenario["name"]

    def test_nested_overrides(self):
        config = MarketScenarios.build_config("ETH_Crash", duration_days=2, seed=None)
        assert config.usd_pool.annual_drift == -3.0
        assert config.usd_pool.quote_decimals == 6
        assert config.duration_days == 2
        assert config.seed == 42

    def test_unknown_scenario(self):
        with pytest.raises(ValueError):
            MarketScenarios.build_config("Nope")


class TestControllerFactory:

    def test_configured_controller(self):
        config = SimulationConfig()
        clock = SimulationClock(config.start_timestamp)
        controller = create_configured_controller(
            config.controller, ObservationOracle(clock), config.asset_pool, config.usd_pool, clock=clock,
        )
        assert controller.total_supply == config.controller.initial_supply
        assert controller.ledger.balance_of(config.controller.reserve_holder) == config.controller.initial_supply
        assert controller.price_feed.is_configured
        assert controller.deployed_at == config.start_timestamp
