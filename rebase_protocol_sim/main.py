#!/usr/bin/env python3
"""
Rebase Protocol Simulation - Main Entry Point

Runs the rebase controller against a simulated two-leg market and reports how
the TWAP price tracked the compounding target.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Optional

from .analysis.metrics import RebaseMetricsCalculator
from .analysis.results_manager import ResultsManager, RunMetadata
from .core.fixed_point import to_wad
from .engine.config import MarketScenarios, SimulationConfig
from .simulation.engine import RebaseSimulationEngine


def main(argv: Optional[list] = None) -> int:
    """Main entry point with command-line interface"""

    parser = argparse.ArgumentParser(
        description="Rebasing Token Controller Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m rebase_protocol_sim.main --quick
  python -m rebase_protocol_sim.main --scenario ETH_Crash --days 60 --charts charts/
  python -m rebase_protocol_sim.main --days 14 --keeper-minutes 15 --window-minutes 60 --output run.json
  python -m rebase_protocol_sim.main --list-scenarios
        """
    )

    parser.add_argument('--quick', action='store_true',
                        help='Run a 3-day baseline simulation')
    parser.add_argument('--scenario', type=str, default="Baseline",
                        help='Market scenario to run (default: Baseline)')
    parser.add_argument('--list-scenarios', action='store_true',
                        help='List available market scenarios')

    parser.add_argument('--days', type=float,
                        help='Simulated duration in days (default: 30)')
    parser.add_argument('--step-minutes', type=int,
                        help='Market and oracle update cadence (default: 5)')
    parser.add_argument('--keeper-minutes', type=int,
                        help='How often a keeper calls rebase() (default: 60)')
    parser.add_argument('--window-minutes', type=int,
                        help='TWAP window passed to rebase() (default: 30)')
    parser.add_argument('--seed', type=int,
                        help='Random seed for the market model')
    parser.add_argument('--volatility', type=float,
                        help='Annualized volatility of the token/intermediate leg')
    parser.add_argument('--elasticity', type=float,
                        help='Token price response to supply changes (default: 0.8)')
    parser.add_argument('--initial-supply', type=float,
                        help='Initial token supply in whole tokens (default: 10,000,000)')

    parser.add_argument('--output', type=str,
                        help='Export results to JSON file')
    parser.add_argument('--csv', type=str,
                        help='Export the per-step history to CSV')
    parser.add_argument('--charts', type=str, metavar='DIR',
                        help='Write charts to DIR')
    parser.add_argument('--save', action='store_true',
                        help='Save results under results/<scenario>/run_NNN_<timestamp>/')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output (log every rebase)')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_scenarios:
        list_scenarios()
        return 0

    try:
        config = create_simulation_config(args)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 1

    print(f"Running Rebase Simulation: {config.scenario_name}")
    print("=" * 50)

    start_time = time.time()
    engine = RebaseSimulationEngine(config)
    results = engine.run_simulation()
    execution_time = time.time() - start_time

    calculator = RebaseMetricsCalculator(results)
    key_metrics = calculator.calculate_summary()
    print_summary(key_metrics, results["keeper_stats"], execution_time)

    manager = ResultsManager() if args.save else None
    serializable = ResultsManager.make_serializable(results)

    if args.output:
        with open(args.output, 'w') as f:
            json.dump({**serializable, "key_metrics": ResultsManager.make_serializable(key_metrics)}, f, indent=2)
        print(f"Results exported to: {args.output}")

    if args.csv:
        csv_path = Path(args.csv)
        calculator.to_dataframe().to_csv(csv_path, index=False)
        daily_path = csv_path.with_name(f"{csv_path.stem}_daily{csv_path.suffix or '.csv'}")
        calculator.daily_summary().to_csv(daily_path)
        print(f"History exported to: {csv_path} (daily summary: {daily_path})")

    charts_dir = Path(args.charts) if args.charts else None
    if manager is not None:
        run_dir = manager.create_run_directory(config.scenario_name)
        metadata = RunMetadata(
            run_id=run_dir.name,
            scenario_name=config.scenario_name,
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%S"),
            parameters=serializable["config"],
            execution_time=execution_time,
        )
        manager.save_results(run_dir, results, metadata)
        manager.save_summary_report(run_dir, {
            "metadata": {**serializable["config"], "scenario_name": config.scenario_name,
                         "timestamp": metadata.timestamp, "execution_time": execution_time},
            "key_metrics": key_metrics,
            "keeper_stats": results["keeper_stats"],
        })
        charts_dir = charts_dir or run_dir / "charts"
        print(f"Results saved to: {run_dir}")

    if charts_dir is not None:
        from .analysis.charts import RebaseChartGenerator
        for chart in RebaseChartGenerator().generate_charts(results, charts_dir):
            print(f"Chart written: {chart}")

    return 0


def create_simulation_config(args) -> SimulationConfig:
    """Merge the chosen scenario with command-line overrides"""
    overrides = {
        "duration_days": 3 if args.quick else args.days,
        "step_minutes": args.step_minutes,
        "keeper_minutes": args.keeper_minutes,
        "twap_window_minutes": args.window_minutes,
        "seed": args.seed,
        "supply_elasticity": args.elasticity,
    }
    config = MarketScenarios.build_config(args.scenario, **overrides)

    if args.volatility is not None or args.initial_supply is not None:
        data = config.dict()
        if args.volatility is not None:
            data["asset_pool"]["annual_volatility"] = args.volatility
        if args.initial_supply is not None:
            data["controller"]["initial_supply"] = to_wad(args.initial_supply)
        config = SimulationConfig(**data)
    return config


def list_scenarios():
    print("Available Market Scenarios:")
    print("-" * 40)
    for scenario in MarketScenarios.get_all_scenarios():
        print(f"  {scenario['name']:<18} {scenario['description']}")


def print_summary(key_metrics: dict, keeper_stats: dict, execution_time: float):
    print(f"\nDays simulated:        {key_metrics.get('days_simulated', 0):.1f}")
    print(f"Supply:                {key_metrics.get('initial_supply', 0):,.0f} -> "
          f"{key_metrics.get('final_supply', 0):,.0f} ({key_metrics.get('supply_change_rate', 0):+.2%})")
    print(f"Final TWAP price:      ${key_metrics.get('final_twap_price', 0):,.4f}")
    print(f"Final target price:    ${key_metrics.get('final_target_price', 0):,.4f}")
    print(f"Mean |tracking error|: {key_metrics.get('mean_abs_tracking_error', 0):.2%}")
    print(f"Rebases:               {key_metrics.get('rebase_count', 0)} "
          f"({key_metrics.get('expansions', 0)} expansions, {key_metrics.get('contractions', 0)} contractions)")
    print(f"Keeper calls:          {keeper_stats['attempts']} attempts, {keeper_stats['not_due']} not due, "
          f"{keeper_stats['zero_delta']} zero delta, {keeper_stats['clamped']} clamped")
    print(f"Execution time:        {execution_time:.2f}s")


if __name__ == "__main__":
    sys.exit(main())
