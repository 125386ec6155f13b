"""Per-tick host for the MIQP linear constraints.

This module provides the control-loop side of the constraints assembler:
1. Startup: build the assembler (configuration errors abort startup)
2. Every tick: refresh the right-hand side from the auxiliary state
3. Export A and rhs into long-lived solver buffers
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

import numpy as np

from miqp_constraints.config import ConstraintsConfig
from miqp_constraints.linear_constraints import MIQPLinearConstraints
from miqp_constraints._internal.validation import ConfigurationError, StateDimensionError
from control_pipeline.timing import ControlLoopTimer, IterationTiming

logger = logging.getLogger(__name__)


@dataclass
class ConstraintsSnapshot:
    """Solver inputs produced by one control tick.

    The arrays are the controller's long-lived buffers and are
    overwritten by the next tick.

    Attributes:
        constraints_matrix: A (n_constraints, N·2)
        rhs: Right-hand side (n_constraints,)
        rhs_is_stale: True if this tick's state was rejected and the last
            valid rhs is being reused
        has_valid_rhs: False until some tick has been accepted; while False,
            rhs is the state-independent placeholder fc tiled N times
        timing: Timing breakdown for this tick
    """

    constraints_matrix: np.ndarray
    rhs: np.ndarray
    rhs_is_stale: bool
    has_valid_rhs: bool
    timing: IterationTiming


class WalkingConstraintsController:
    """Drives MIQPLinearConstraints from the control loop.

    Owns the solver-side buffers, sized once from the assembler. A is
    immutable, so it is exported a single time at construction; only
    rhs is refreshed per tick.

    Attributes:
        constraints: Assembled MIQP linear constraints
        timer: Control loop timer for performance monitoring
    """

    def __init__(
        self,
        constraints: MIQPLinearConstraints,
        state_history_length: int = 10,
        timing_history_length: int = 100,
    ) -> None:
        """Initialize the controller.

        Args:
            constraints: Ready constraints assembler
            state_history_length: Number of accepted auxiliary states kept
            timing_history_length: Number of ticks kept for timing statistics
        """
        if state_history_length <= 0:
            raise ConfigurationError(
                f"state_history_length must be positive, got {state_history_length}"
            )

        self._constraints = constraints
        self._timer = ControlLoopTimer(
            deadline_s=constraints.control_period_s,
            history_length=timing_history_length,
        )

        n_constraints = constraints.get_total_number_of_constraints()
        self._constraints_matrix = np.zeros(
            (n_constraints, constraints.number_of_decision_variables)
        )
        self._rhs = np.zeros(n_constraints)
        constraints.get_constraints_matrix_a(self._constraints_matrix)
        constraints.get_rhs(self._rhs)

        self._state_history: Deque[np.ndarray] = deque(maxlen=state_history_length)
        self._rejected_ticks = 0
        self._has_valid_rhs = False

    @classmethod
    def from_yaml(cls, yaml_path: str, **kwargs) -> 'WalkingConstraintsController':
        """Build the controller from a constraints YAML file.

        Args:
            yaml_path: Path to the constraints configuration
            **kwargs: Forwarded to the constructor

        Returns:
            Ready WalkingConstraintsController

        Raises:
            ConfigurationError: If the configuration is invalid; the owning
                module must not enter active control
        """
        try:
            config = ConstraintsConfig.from_yaml(yaml_path)
            constraints = MIQPLinearConstraints.from_config(config)
        except ConfigurationError:
            logger.error("Invalid MIQP constraints configuration in %s", yaml_path)
            raise
        return cls(constraints, **kwargs)

    def step(self, auxiliary_state) -> ConstraintsSnapshot:
        """Execute one control tick.

        A rejected state leaves rhs at the last accepted tick's value. If no
        tick has been accepted yet, that is the constructor-time placeholder
        and the snapshot reports has_valid_rhs=False.

        Args:
            auxiliary_state: Auxiliary state xi_k observed this tick (6,)

        Returns:
            Snapshot with A, rhs and timing for the solver call
        """
        self._timer.start_iteration()

        rhs_is_stale = False
        try:
            self._constraints.update_rhs(auxiliary_state)
        except StateDimensionError as error:
            self._rejected_ticks += 1
            rhs_is_stale = True
            logger.warning(
                "Rejected auxiliary state, reusing last valid rhs: %s", error
            )
        else:
            self._has_valid_rhs = True
            self._state_history.append(self._constraints.last_auxiliary_state)
        self._timer.mark_rhs_update_complete()

        if not rhs_is_stale:
            self._constraints.get_rhs(self._rhs)
        self._timer.mark_export_complete()

        timing = self._timer.end_iteration()
        if timing.total_time_s > self._timer.deadline_s:
            logger.warning(
                "Constraints tick took %.3f ms (deadline %.3f ms)",
                timing.total_time_s * 1e3,
                self._timer.deadline_s * 1e3,
            )

        return ConstraintsSnapshot(
            constraints_matrix=self._constraints_matrix,
            rhs=self._rhs,
            rhs_is_stale=rhs_is_stale,
            has_valid_rhs=self._has_valid_rhs,
            timing=timing,
        )

    @property
    def constraints(self) -> MIQPLinearConstraints:
        return self._constraints

    @property
    def timer(self) -> ControlLoopTimer:
        return self._timer

    @property
    def rejected_ticks(self) -> int:
        """Number of ticks whose auxiliary state was rejected."""
        return self._rejected_ticks

    @property
    def has_valid_rhs(self) -> bool:
        """False until one tick has been accepted."""
        return self._has_valid_rhs

    @property
    def state_history(self) -> List[np.ndarray]:
        """Accepted auxiliary states, oldest first."""
        return list(self._state_history)

    @property
    def last_state(self) -> Optional[np.ndarray]:
        if not self._state_history:
            return None
        return self._state_history[-1]
