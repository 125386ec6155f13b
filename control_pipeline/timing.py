"""Timing utilities for the real-time constraints refresh loop.

Measures how much of the control period the per-tick work consumes.
A tick is split into two phases:
    rhs_update: refreshing the right-hand side from the auxiliary state
    export:     copying rhs into the solver-side buffer
"""

import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Optional

import numpy as np


@dataclass
class TimingStatistics:
    """Statistics for timing measurements.

    Attributes:
        mean_s: Mean timing in seconds
        max_s: Maximum timing in seconds
        min_s: Minimum timing in seconds
        std_s: Standard deviation in seconds
        count: Number of measurements
    """

    mean_s: float
    max_s: float
    min_s: float
    std_s: float
    count: int


@dataclass
class IterationTiming:
    """Timing breakdown for a single control tick.

    Attributes:
        rhs_update_time_s: Time for the right-hand side refresh
        export_time_s: Time for copying rhs into solver buffers
        total_time_s: Total tick time
    """

    rhs_update_time_s: float = 0.0
    export_time_s: float = 0.0
    total_time_s: float = 0.0


class ControlLoopTimer:
    """Per-tick phase timer with deadline accounting.

    Attributes:
        deadline_s: Target tick period (the control period)
    """

    PHASES = ('rhs_update', 'export', 'total')

    def __init__(self, deadline_s: float, history_length: int = 100) -> None:
        """Initialize control loop timer.

        Args:
            deadline_s: Target tick period (e.g., 0.01 for 100 Hz)
            history_length: Number of ticks kept for statistics
        """
        if deadline_s <= 0:
            raise ValueError(f"deadline_s must be positive, got {deadline_s}")
        if history_length <= 0:
            raise ValueError(f"history_length must be positive, got {history_length}")

        self._deadline_s = deadline_s
        self._history: Deque[IterationTiming] = deque(maxlen=history_length)
        self._deadline_violations = 0
        self._tick_start: Optional[float] = None
        self._rhs_update_end: Optional[float] = None
        self._export_end: Optional[float] = None

    def start_iteration(self) -> None:
        """Mark start of a control tick."""
        self._tick_start = time.perf_counter()
        self._rhs_update_end = None
        self._export_end = None

    def mark_rhs_update_complete(self) -> None:
        self._rhs_update_end = time.perf_counter()

    def mark_export_complete(self) -> None:
        self._export_end = time.perf_counter()

    def end_iteration(self) -> IterationTiming:
        """Close the tick, record it and check the deadline.

        Returns:
            Timing breakdown for this tick

        Raises:
            RuntimeError: If start_iteration() was not called
        """
        tick_end = time.perf_counter()
        if self._tick_start is None:
            raise RuntimeError("start_iteration() was not called")

        timing = IterationTiming(total_time_s=tick_end - self._tick_start)
        if self._rhs_update_end is not None:
            timing.rhs_update_time_s = self._rhs_update_end - self._tick_start
            if self._export_end is not None:
                timing.export_time_s = self._export_end - self._rhs_update_end

        if timing.total_time_s > self._deadline_s:
            self._deadline_violations += 1
        self._history.append(timing)
        self._tick_start = None
        return timing

    def get_remaining_time_s(self) -> float:
        """Time left in the current tick (negative if overdue)."""
        if self._tick_start is None:
            return self._deadline_s
        return self._deadline_s - (time.perf_counter() - self._tick_start)

    def compute_statistics(self, phase: str = 'total') -> Optional[TimingStatistics]:
        """Statistics of one phase over the kept history.

        Args:
            phase: One of 'rhs_update', 'export', 'total'

        Returns:
            Statistics if history is not empty, None otherwise
        """
        if phase not in self.PHASES:
            raise ValueError(f"phase must be one of {self.PHASES}, got '{phase}'")
        if not self._history:
            return None

        durations = np.array([getattr(t, f'{phase}_time_s') for t in self._history])
        return TimingStatistics(
            mean_s=float(np.mean(durations)),
            max_s=float(np.max(durations)),
            min_s=float(np.min(durations)),
            std_s=float(np.std(durations)),
            count=len(durations),
        )

    @property
    def utilization(self) -> float:
        """Mean fraction of the control period spent per tick."""
        stats = self.compute_statistics()
        if stats is None:
            return 0.0
        return stats.mean_s / self._deadline_s

    @property
    def deadline_s(self) -> float:
        return self._deadline_s

    @property
    def deadline_violations(self) -> int:
        """Number of deadline violations since creation."""
        return self._deadline_violations

    @property
    def iteration_count(self) -> int:
        """Number of ticks currently kept in history."""
        return len(self._history)
