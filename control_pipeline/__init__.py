"""Control pipeline module for the walking stabilizer constraints.

This module provides the per-tick host around the MIQP linear
constraints assembler.

Public API:
    - WalkingConstraintsController: Per-tick rhs refresh and buffer export
    - ConstraintsSnapshot: Solver inputs for one tick
    - ControlLoopTimer: Timing utilities
    - IterationTiming: Timing breakdown dataclass
    - TimingStatistics: Timing statistics dataclass
"""

from control_pipeline.controller import (
    WalkingConstraintsController,
    ConstraintsSnapshot,
)
from control_pipeline.timing import (
    ControlLoopTimer,
    IterationTiming,
    TimingStatistics,
)

__all__ = [
    'WalkingConstraintsController',
    'ConstraintsSnapshot',
    'ControlLoopTimer',
    'IterationTiming',
    'TimingStatistics',
]
