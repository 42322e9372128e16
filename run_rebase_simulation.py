#!/usr/bin/env python3
"""
Rebase Protocol Simulation Runner

Convenience script to run the rebase simulation from the repository root.
Forwards all arguments to rebase_protocol_sim.main.
"""

import sys
import subprocess
from pathlib import Path


def main():
    """Run the rebase simulation with proper path handling"""

    script_dir = Path(__file__).parent.absolute()
    package_dir = script_dir / "rebase_protocol_sim"

    if not package_dir.exists():
        print("Error: rebase_protocol_sim directory not found!")
        print(f"Expected location: {package_dir}")
        return 1

    cmd = [sys.executable, "-m", "rebase_protocol_sim.main"] + sys.argv[1:]

    try:
        result = subprocess.run(cmd, cwd=str(script_dir))
        return result.returncode
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1
    except OSError as e:
        print(f"Error running simulation: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
