"""Discrete-time CoM preview model.

The auxiliary state xi = [c, dc, ddc] follows a planar triple integrator
driven by the CoM jerk. Discretizing with a zero-order hold over one
control period gives the preview recurrence

    xi[k+j+1] = Q·xi[k+j] + T·x[k+j+1]

with

    Q  = [[I, dt·I, dt²/2·I],        Bh = [[dt³/6·I],
          [0,    I,   dt·I],               [dt²/2·I],
          [0,    0,      I]]               [dt·I   ]]

Since the preview input is the CoM jerk, T coincides with Bh.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np
import scipy.linalg

from preview_model.parameters import (
    AUXILIARY_STATE_DIMENSION,
    DECISION_DIMENSION,
    PLANAR_DIMENSION,
    POSITION_SLICE,
    VELOCITY_SLICE,
    ACCELERATION_SLICE,
    STANDARD_GRAVITY_MPS2,
)
from preview_model._internal.validation import (
    validate_positive,
    validate_auxiliary_state,
    validate_decision_vector,
)


def _build_continuous_jerk_model() -> Tuple[np.ndarray, np.ndarray]:
    """Continuous planar triple integrator: d/dt xi = A·xi + B·jerk."""
    identity = np.eye(PLANAR_DIMENSION)

    state_matrix = np.zeros((AUXILIARY_STATE_DIMENSION, AUXILIARY_STATE_DIMENSION))
    state_matrix[POSITION_SLICE, VELOCITY_SLICE] = identity
    state_matrix[VELOCITY_SLICE, ACCELERATION_SLICE] = identity

    control_matrix = np.zeros((AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION))
    control_matrix[ACCELERATION_SLICE, :] = identity

    return state_matrix, control_matrix


def _discretize_jerk_model(control_period_s: float) -> Tuple[np.ndarray, np.ndarray]:
    """Zero-order-hold discretization of the jerk model.

    Args:
        control_period_s: Control period dt in seconds

    Returns:
        Tuple of (Q, Bh) with shapes (6, 6) and (6, 2)
    """
    validate_positive(control_period_s, 'control_period_s')

    state_matrix, control_matrix = _build_continuous_jerk_model()

    # M = [[A,  B],
    #      [0,  0]]
    augmented_dimension = AUXILIARY_STATE_DIMENSION + DECISION_DIMENSION
    augmented_matrix = np.zeros((augmented_dimension, augmented_dimension))
    augmented_matrix[:AUXILIARY_STATE_DIMENSION, :AUXILIARY_STATE_DIMENSION] = state_matrix
    augmented_matrix[:AUXILIARY_STATE_DIMENSION, AUXILIARY_STATE_DIMENSION:] = control_matrix

    # exp(M·dt) = [[Q, Bh],
    #              [0,  I]]
    augmented_exponential = scipy.linalg.expm(augmented_matrix * control_period_s)

    transition = augmented_exponential[
        :AUXILIARY_STATE_DIMENSION, :AUXILIARY_STATE_DIMENSION
    ]
    com_input = augmented_exponential[
        :AUXILIARY_STATE_DIMENSION, AUXILIARY_STATE_DIMENSION:
    ]
    return np.array(transition), np.array(com_input)


def build_matrix_q(control_period_s: float) -> np.ndarray:
    """Build the state-transition block Q of the preview recurrence.

    Args:
        control_period_s: Control period dt in seconds

    Returns:
        Q matrix (6, 6)

    Raises:
        ValueError: If control_period_s is not strictly positive
    """
    transition, _ = _discretize_jerk_model(control_period_s)
    return transition


def build_bh(control_period_s: float) -> np.ndarray:
    """Build the input block Bh of the CoM jerk process.

    Args:
        control_period_s: Control period dt in seconds

    Returns:
        Bh matrix (6, 2) = [dt³/6·I; dt²/2·I; dt·I]

    Raises:
        ValueError: If control_period_s is not strictly positive
    """
    _, com_input = _discretize_jerk_model(control_period_s)
    return com_input


def build_matrix_t(control_period_s: float) -> np.ndarray:
    """Build the input-to-state block T of the preview recurrence.

    The per-step decision is the CoM jerk, so T is the jerk input block Bh.

    Args:
        control_period_s: Control period dt in seconds

    Returns:
        T matrix (6, 2)

    Raises:
        ValueError: If control_period_s is not strictly positive
    """
    return build_bh(control_period_s)


def build_zmp_projection(
    com_height_m: float,
    gravity_mps2: float = STANDARD_GRAVITY_MPS2,
) -> np.ndarray:
    """Build the cart-table map from auxiliary state to ZMP.

    z = c - (h / g)·ddc

    Args:
        com_height_m: Constant CoM height h
        gravity_mps2: Gravitational acceleration g

    Returns:
        ZMP projection matrix (2, 6)
    """
    validate_positive(com_height_m, 'com_height_m')
    validate_positive(gravity_mps2, 'gravity_mps2')

    identity = np.eye(PLANAR_DIMENSION)
    projection = np.zeros((PLANAR_DIMENSION, AUXILIARY_STATE_DIMENSION))
    projection[:, POSITION_SLICE] = identity
    projection[:, ACCELERATION_SLICE] = -(com_height_m / gravity_mps2) * identity
    return projection


@dataclass(frozen=True)
class PreviewModel:
    """Constant matrices of the preview recurrence.

    Represents: xi[k+j+1] = Q·xi[k+j] + T·x[k+j+1]

    Matrices are stored read-only; a new control period requires a new
    PreviewModel (and a new constraints assembler).

    Attributes:
        control_period_s: Control period dt
        state_transition_matrix: Q (6, 6)
        preview_input_matrix: T (6, 2)
        com_input_matrix: Bh (6, 2)
    """
    control_period_s: float
    state_transition_matrix: np.ndarray
    preview_input_matrix: np.ndarray
    com_input_matrix: np.ndarray

    def __post_init__(self):
        """Validate matrix dimensions and freeze the arrays."""
        validate_positive(self.control_period_s, 'control_period_s')
        expected_shapes = (
            ('state_transition_matrix', (AUXILIARY_STATE_DIMENSION, AUXILIARY_STATE_DIMENSION)),
            ('preview_input_matrix', (AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION)),
            ('com_input_matrix', (AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION)),
        )
        for name, shape in expected_shapes:
            matrix = getattr(self, name)
            if matrix.shape != shape:
                raise ValueError(f"{name} must be {shape}, got {matrix.shape}")
            matrix.setflags(write=False)

    @classmethod
    def from_control_period(cls, control_period_s: float) -> 'PreviewModel':
        """Build Q, T and Bh for a control period.

        Args:
            control_period_s: Control period dt in seconds

        Returns:
            PreviewModel instance

        Raises:
            ValueError: If control_period_s is not strictly positive
        """
        return cls(
            control_period_s=control_period_s,
            state_transition_matrix=build_matrix_q(control_period_s),
            preview_input_matrix=build_matrix_t(control_period_s),
            com_input_matrix=build_bh(control_period_s),
        )

    def propagate(self, state: np.ndarray, decision: np.ndarray) -> np.ndarray:
        """Advance the auxiliary state by one preview step.

        Args:
            state: Auxiliary state xi[k+j] (6,)
            decision: Decision x[k+j+1] (2,)

        Returns:
            Auxiliary state xi[k+j+1] (6,)
        """
        state = np.asarray(state, dtype=float)
        decision = np.asarray(decision, dtype=float)
        validate_auxiliary_state(state)
        validate_decision_vector(decision)

        return (
            self.state_transition_matrix @ state
            + self.preview_input_matrix @ decision
        )

    def rollout(self, initial_state: np.ndarray, decisions: np.ndarray) -> np.ndarray:
        """Roll the recurrence out over a sequence of decisions.

        Args:
            initial_state: Auxiliary state xi[k] (6,)
            decisions: Decisions x[k+1..k+N] (N, 2)

        Returns:
            State trajectory xi[k..k+N] (N+1, 6)
        """
        decisions = np.asarray(decisions, dtype=float)
        if decisions.ndim != 2 or decisions.shape[1] != DECISION_DIMENSION:
            raise ValueError(
                f"decisions must have shape (N, {DECISION_DIMENSION}), "
                f"got {decisions.shape}"
            )

        trajectory = np.zeros((decisions.shape[0] + 1, AUXILIARY_STATE_DIMENSION))
        trajectory[0] = np.asarray(initial_state, dtype=float)
        for step_index, decision in enumerate(decisions):
            trajectory[step_index + 1] = self.propagate(trajectory[step_index], decision)
        return trajectory
