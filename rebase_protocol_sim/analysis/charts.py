#!/usr/bin/env python3
"""
Rebase Chart Generator

One 2x2 figure per run: price vs target, total supply, tracking error
distribution, and per-rebase supply deltas.
"""

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import seaborn as sns
from pathlib import Path
from typing import Any, Dict, List

from .metrics import RebaseMetricsCalculator


class RebaseChartGenerator:
    """Renders simulation results to PNG files"""

    def __init__(self):
        self._setup_styling()

    def _setup_styling(self):
        sns.set_palette("husl")
        plt.rcParams.update({
            'figure.figsize': (14, 10),
            'font.size': 11,
            'axes.titlesize': 13,
            'axes.labelsize': 11,
            'legend.fontsize': 9,
        })

    def generate_charts(self, results: Dict[str, Any], charts_dir: Path) -> List[Path]:
        charts_dir = Path(charts_dir)
        charts_dir.mkdir(parents=True, exist_ok=True)

        df = RebaseMetricsCalculator(results).to_dataframe()
        if df.empty:
            return []

        scenario_name = results.get("scenario_name", "Simulation")
        fig, ((ax1, ax2), (ax3, ax4)) = plt.subplots(2, 2)
        fig.suptitle(f"Rebase Controller: {scenario_name}", fontsize=15, fontweight='bold')

        ax1.plot(df["day"], df["spot_price"], label="Spot", alpha=0.5, linewidth=1)
        ax1.plot(df["day"], df["twap_price"], label="TWAP", linewidth=1.5)
        ax1.step(df["day"], df["target_price"], label="Target", where="post", linestyle="--", color="black")
        ax1.set_title("Token Price vs Target (USD)")
        ax1.set_xlabel("Day")
        ax1.set_yscale("log")
        ax1.legend()
        ax1.grid(True, alpha=0.3)

        ax2.plot(df["day"], df["total_supply"] / 1e6, color="tab:purple")
        ax2.set_title("Total Supply (millions)")
        ax2.set_xlabel("Day")
        ax2.grid(True, alpha=0.3)

        sns.histplot(df["tracking_error"].dropna() * 100, bins=50, kde=True, ax=ax3)
        ax3.set_title("TWAP / Target - 1 (%)")
        ax3.set_xlabel("Tracking error (%)")

        rebases = df[df["rebased"]]
        colors = ["tab:green" if delta > 0 else "tab:red" for delta in rebases["rebase_delta"]]
        ax4.bar(rebases["day"], rebases["rebase_delta"] / 1e6, width=0.3, color=colors)
        ax4.axhline(0, color="black", linewidth=0.8)
        ax4.set_title("Rebase Deltas (millions)")
        ax4.set_xlabel("Day")
        ax4.grid(True, alpha=0.3)

        plt.tight_layout()
        chart_path = charts_dir / "rebase_overview.png"
        plt.savefig(chart_path, dpi=150, bbox_inches='tight')
        plt.close(fig)
        return [chart_path]
