#!/usr/bin/env python3
"""
Rebase Tracking Metrics

How closely the observed TWAP price followed the target, and what it cost in
supply churn.
"""

import numpy as np
import pandas as pd
from typing import Any, Dict


class RebaseMetricsCalculator:
    """Summary statistics over one simulation's results dictionary"""

    def __init__(self, results: Dict[str, Any]):
        self.results = results
        self.history = pd.DataFrame(results.get("metrics_history", []))
        self.events = pd.DataFrame(results.get("rebase_events", []))

    def to_dataframe(self) -> pd.DataFrame:
        """Per-step history with tracking error and elapsed days added"""
        df = self.history.copy()
        if df.empty:
            return df
        for column in ("twap_price", "target_price"):
            df[column] = pd.to_numeric(df[column], errors="coerce")
        df["day"] = (df["minute"] - df["minute"].iloc[0]) / (24 * 60)
        df["tracking_error"] = df["twap_price"] / df["target_price"] - 1.0
        return df

    def calculate_summary(self) -> Dict[str, Any]:
        df = self.to_dataframe()
        if df.empty:
            return {"steps": 0}

        supply = df["total_supply"].to_numpy()
        tracking = df["tracking_error"].dropna().to_numpy()
        deltas = df.loc[df["rebased"], "rebase_delta"].to_numpy()

        return {
            "steps": int(len(df)),
            "days_simulated": float(df["day"].iloc[-1]),
            "initial_supply": float(supply[0]),
            "final_supply": float(supply[-1]),
            "supply_change_rate": float(supply[-1] / supply[0] - 1.0) if supply[0] else 0.0,
            "final_twap_price": self._last_valid(df["twap_price"]),
            "final_target_price": self._last_valid(df["target_price"]),
            "mean_abs_tracking_error": float(np.mean(np.abs(tracking))) if len(tracking) else 0.0,
            "max_abs_tracking_error": float(np.max(np.abs(tracking))) if len(tracking) else 0.0,
            "rebase_count": int(len(deltas)),
            "expansions": int((deltas > 0).sum()),
            "contractions": int((deltas < 0).sum()),
            "largest_expansion": float(deltas.max()) if len(deltas) and deltas.max() > 0 else 0.0,
            "largest_contraction": float(deltas.min()) if len(deltas) and deltas.min() < 0 else 0.0,
        }

    def daily_summary(self) -> pd.DataFrame:
        """End-of-day prices and supply"""
        df = self.to_dataframe()
        if df.empty:
            return df
        df["day_index"] = df["day"].astype(int)
        return df.groupby("day_index").agg(
            spot_price=("spot_price", "last"),
            twap_price=("twap_price", "last"),
            target_price=("target_price", "last"),
            total_supply=("total_supply", "last"),
            rebases=("rebased", "sum"),
        )

    @staticmethod
    def _last_valid(series: pd.Series) -> float:
        valid = series.dropna()
        return float(valid.iloc[-1]) if not valid.empty else float("nan")
