#!/usr/bin/env python3
"""
Simulation Engine, Metrics and Results Tests

Short end-to-end runs of the keeper loop against the simulated market.
"""

import json
import pytest

from rebase_protocol_sim.analysis.metrics import RebaseMetricsCalculator
from rebase_protocol_sim.analysis.results_manager import ResultsManager, RunMetadata
from rebase_protocol_sim.core.fixed_point import WAD
from rebase_protocol_sim.engine.config import MarketScenarios, PoolConfig
from rebase_protocol_sim.main import main
from rebase_protocol_sim.simulation.engine import RebaseSimulationEngine
from rebase_protocol_sim.simulation.market import TwoLegMarket


class TestTwoLegMarket:

    def setup_method(self):
        self.asset = PoolConfig(pool_id="a", base_token="0x01", quote_token="0x02", initial_price=0.5)
        self.usd = PoolConfig(pool_id="u", base_token="0x02", quote_token="0x03", initial_price=2.0)

    def test_seeded_paths_repeat(self):
        first = TwoLegMarket(self.asset, self.usd, seed=7)
        second = TwoLegMarket(self.asset, self.usd, seed=7)
        assert [first.step(5) for _ in range(10)] == [second.step(5) for _ in range(10)]

    def test_supply_expansion_lowers_price(self):
        market = TwoLegMarket(self.asset, self.usd, supply_elasticity=1.0)
        assert market.token_usd_price == pytest.approx(1.0)
        multiplier = market.apply_supply_change(100, 125)
        assert multiplier == pytest.approx(0.8)
        assert market.token_usd_price == pytest.approx(0.8)


class TestRebaseSimulationEngine:
    """Flat market: every due keeper call expands supply"""

    def setup_method(self):
        config = MarketScenarios.build_config("Flat_Market", duration_days=1.5)
        self.engine = RebaseSimulationEngine(config)
        self.results = self.engine.run_simulation()

    def test_rebases_every_interval(self):
        stats = self.results["keeper_stats"]
        assert stats["attempts"] == 36
        assert stats["executed"] == 3
        assert stats["not_due"] == 33
        assert stats["oracle_unavailable"] == 0
        assert len(self.results["rebase_events"]) == 3

    def test_supply_grows_toward_target(self):
        history = self.results["metrics_history"]
        assert history[-1]["total_supply"] > history[0]["total_supply"]
        assert all(event["delta"] > 0 for event in self.results["rebase_events"])
        assert all(row["twap_price"] is not None for row in history)

    def test_metrics_summary(self):
        summary = RebaseMetricsCalculator(self.results).calculate_summary()
        assert summary["rebase_count"] == 3
        assert summary["expansions"] == 3
        assert summary["contractions"] == 0
        assert summary["final_target_price"] == pytest.approx(1.15 ** 3)
        assert summary["supply_change_rate"] > 0

    def test_results_round_trip_through_manager(self, tmp_path):
        manager = ResultsManager(str(tmp_path / "results"))
        run_dir = manager.create_run_directory("Flat_Market")
        assert run_dir.name.startswith("run_001_")

        metadata = RunMetadata(
            run_id=run_dir.name,
            scenario_name="Flat_Market",
            timestamp="2025-01-01T00:00:00",
            parameters=manager.make_serializable(self.results["config"]),
            execution_time=1.0,
        )
        manager.save_results(run_dir, self.results, metadata)

        loaded = manager.load_results(run_dir)
        assert loaded["scenario_name"] == "Flat_Market"
        assert loaded["config"]["controller"]["schedule_anchor"] == "deployment"
        assert loaded["final_state"]["rebase_count"] == 3
        assert manager.load_metadata(run_dir).scenario_name == "Flat_Market"
        assert len(manager.list_scenario_runs("Flat_Market")) == 1


class TestTargetOverflow:
    """Hourly 100x target growth passes uint256 within a day"""

    def setup_method(self):
        config = MarketScenarios.build_config(
            "Flat_Market",
            duration_days=1,
            step_minutes=60,
            keeper_minutes=60,
            controller={"rebase_interval": 3600, "price_increase_rate": 100 * WAD},
        )
        self.results = RebaseSimulationEngine(config).run_simulation()

    def test_run_completes_and_counts_overflows(self):
        stats = self.results["keeper_stats"]
        assert stats["attempts"] == 24
        assert stats["executed"] > 0
        assert stats["arithmetic_overflow"] > 0
        assert stats["executed"] + stats["arithmetic_overflow"] == stats["attempts"]

    def test_overflowed_target_recorded_as_missing(self):
        history = self.results["metrics_history"]
        assert history[0]["target_price"] is not None
        assert history[-1]["target_price"] is None

    def test_summary_uses_last_finite_target(self):
        summary = RebaseMetricsCalculator(self.results).calculate_summary()
        assert summary["rebase_count"] == self.results["keeper_stats"]["executed"]
        assert summary["final_target_price"] > 1.0


class TestCommandLine:

    def test_list_scenarios(self, capsys):
        assert main(["--list-scenarios"]) == 0
        assert "ETH_Crash" in capsys.readouterr().out

    def test_exports(self, tmp_path):
        output = tmp_path / "run.json"
        csv = tmp_path / "history.csv"
        assert main(["--days", "1", "--scenario", "Flat_Market", "--output", str(output), "--csv", str(csv)]) == 0

        with open(output) as f:
            exported = json.load(f)
        assert exported["key_metrics"]["rebase_count"] == 2
        assert csv.read_text().startswith("minute,")
        daily = tmp_path / "history_daily.csv"
        assert daily.read_text().startswith("day_index,")

    def test_invalid_configuration(self):
        assert main(["--step-minutes", "5", "--keeper-minutes", "7"]) == 1
