#!/usr/bin/env python3
"""
Results Management System

Handles automatic results storage, versioning, and directory management.
"""

import json
import threading
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class RunMetadata:
    """Metadata for a single simulation run"""
    run_id: str
    scenario_name: str
    timestamp: str
    parameters: Dict[str, Any]
    execution_time: float
    status: str = "completed"


class ResultsManager:
    """Stores each run under results/<scenario>/run_NNN_<timestamp>/"""

    def __init__(self, base_results_dir: str = "results"):
        self.base_results_dir = Path(base_results_dir)
        self._lock = threading.Lock()
        self.base_results_dir.mkdir(parents=True, exist_ok=True)

    def create_run_directory(self, scenario_name: str) -> Path:
        """
        Create a new run directory with sequential numbering

        Args:
            scenario_name: Name of the simulated scenario

        Returns:
            Path to the created run directory
        """
        with self._lock:
            scenario_dir = self.base_results_dir / scenario_name
            scenario_dir.mkdir(exist_ok=True)

            run_number = self._get_next_run_number(scenario_dir)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            run_dir = scenario_dir / f"run_{run_number:03d}_{timestamp}"
            run_dir.mkdir(exist_ok=True)
            (run_dir / "charts").mkdir(exist_ok=True)
            return run_dir

    def _get_next_run_number(self, scenario_dir: Path) -> int:
        run_numbers = []
        for run_dir in scenario_dir.iterdir():
            if not run_dir.is_dir() or not run_dir.name.startswith("run_"):
                continue
            try:
                run_numbers.append(int(run_dir.name.split("_")[1]))
            except (ValueError, IndexError):
                continue
        return max(run_numbers) + 1 if run_numbers else 1

    def save_results(self, run_dir: Path, results: Dict[str, Any], metadata: RunMetadata) -> Path:
        """Write results.json and metadata.json; returns the results path"""
        results_file = run_dir / "results.json"
        with open(results_file, 'w') as f:
            json.dump(self.make_serializable(results), f, indent=2)

        with open(run_dir / "metadata.json", 'w') as f:
            json.dump(self.make_serializable(asdict(metadata)), f, indent=2)

        return results_file

    def save_summary_report(self, run_dir: Path, summary: Dict[str, Any]) -> Path:
        summary_file = run_dir / "summary.md"
        with open(summary_file, 'w') as f:
            f.write(self._generate_markdown_summary(summary))
        return summary_file

    def _generate_markdown_summary(self, summary: Dict[str, Any]) -> str:
        md_content = ["# Rebase Simulation Summary\n"]

        if "metadata" in summary:
            metadata = summary["metadata"]
            md_content.append("## Run Information")
            md_content.append(f"- **Scenario**: {metadata.get('scenario_name', 'Unknown')}")
            md_content.append(f"- **Timestamp**: {metadata.get('timestamp', 'Unknown')}")
            md_content.append(f"- **Execution Time**: {metadata.get('execution_time', 0):.2f}s")
            md_content.append("")

        if "key_metrics" in summary:
            md_content.append("## Key Metrics")
            for key, value in summary["key_metrics"].items():
                label = key.replace('_', ' ').title()
                if isinstance(value, float) and (key.endswith("_rate") or "tracking_error" in key):
                    md_content.append(f"- **{label}**: {value:.2%}")
                elif isinstance(value, float) and "price" in key:
                    md_content.append(f"- **{label}**: ${value:,.4f}")
                elif isinstance(value, float):
                    md_content.append(f"- **{label}**: {value:,.2f}")
                else:
                    md_content.append(f"- **{label}**: {value}")
            md_content.append("")

        if "keeper_stats" in summary:
            md_content.append("## Keeper Calls")
            for key, value in summary["keeper_stats"].items():
                md_content.append(f"- **{key.replace('_', ' ').title()}**: {value}")
            md_content.append("")

        md_content.append("## Generated Charts")
        md_content.append("- Overview: `charts/rebase_overview.png`")
        return "\n".join(md_content)

    def list_scenario_runs(self, scenario_name: str) -> List[Dict[str, Any]]:
        scenario_dir = self.base_results_dir / scenario_name
        if not scenario_dir.exists():
            return []

        runs = []
        for run_dir in scenario_dir.iterdir():
            if not run_dir.is_dir() or not run_dir.name.startswith("run_"):
                continue
            metadata = self.load_metadata(run_dir)
            if metadata is not None:
                runs.append({"run_id": run_dir.name, "path": str(run_dir), **asdict(metadata)})
            else:
                runs.append({"run_id": run_dir.name, "path": str(run_dir), "scenario_name": scenario_name})

        runs.sort(key=lambda x: x["run_id"])
        return runs

    def load_results(self, run_path: Path) -> Optional[Dict[str, Any]]:
        results_file = Path(run_path) / "results.json"
        if not results_file.exists():
            return None
        try:
            with open(results_file, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError:
            return None

    def load_metadata(self, run_path: Path) -> Optional[RunMetadata]:
        metadata_file = Path(run_path) / "metadata.json"
        if not metadata_file.exists():
            return None
        try:
            with open(metadata_file, 'r') as f:
                return RunMetadata(**json.load(f))
        except (json.JSONDecodeError, TypeError):
            return None

    @staticmethod
    def make_serializable(obj: Any) -> Any:
        """Convert objects to JSON-serializable format"""
        if hasattr(obj, 'tolist'):  # numpy arrays
            return obj.tolist()
        elif hasattr(obj, 'item'):  # numpy scalars
            return obj.item()
        elif hasattr(obj, 'value') and hasattr(obj, 'name'):  # Enum
            return obj.value
        elif isinstance(obj, (set, frozenset)):
            return list(obj)
        elif isinstance(obj, dict):
            return {
                (k.value if hasattr(k, 'value') else k): ResultsManager.make_serializable(v)
                for k, v in obj.items()
            }
        elif isinstance(obj, (list, tuple)):
            return [ResultsManager.make_serializable(item) for item in obj]
        elif isinstance(obj, float) and obj != obj:  # NaN
            return None
        return obj
