#!/usr/bin/env python3
"""
Simulated clock shared by the oracle and the controller.
"""


class SimulationClock:
    """Monotonic integer-second clock advanced explicitly by the engine"""

    def __init__(self, start_timestamp: int = 0):
        self.now = start_timestamp

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards by {seconds}s")
        self.now += seconds
        return self.now
