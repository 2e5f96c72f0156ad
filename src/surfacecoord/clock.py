"""
Clock interface for deterministic time handling
All coordination timestamps are expressed in milliseconds.
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Clock interface for deterministic time handling"""

    def now_ms(self) -> float:
        """Get current time in milliseconds"""
        ...


class SystemClock:
    """System clock implementation backed by the monotonic timer"""

    def now_ms(self) -> float:
        """Get current time in milliseconds"""
        return time.monotonic() * 1000.0


class DeterministicClock:
    """Deterministic clock for testing and replay"""

    def __init__(self, start_ms: float = 0.0):
        self._start_ms = start_ms
        self._current_ms = start_ms

    def now_ms(self) -> float:
        """Get deterministic current time"""
        return self._current_ms

    def advance(self, ms: float) -> None:
        """Advance time by the specified number of milliseconds"""
        if ms < 0:
            raise ValueError(f"Cannot move clock backwards ({ms}ms)")
        self._current_ms += ms

    def set_time(self, new_ms: float) -> None:
        """Set the current time"""
        self._current_ms = new_ms

    def elapsed_ms(self) -> float:
        """Time elapsed since the clock was created"""
        return self._current_ms - self._start_ms
