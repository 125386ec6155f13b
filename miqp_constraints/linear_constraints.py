"""Stacked linear inequality constraints for the MIQP walking stabilizer.

Builds, over an N-step preview window, the system consumed by the
MIQP solver at every control tick:

    A·X <= fc_bar - B·xi_k

where X = [x[k+1]; ...; x[k+N]] stacks the per-step decisions. Row
block i collects the family constraints

    Acl·xi[k+i] + Acr·xi[k+i+1] <= fc

with Acl (Acr) the stacked same-step (next-step) family blocks. Unrolling
the preview recurrence xi[k+j+1] = Q·xi[k+j] + T·x[k+j+1] gives

    A = [ Acr·T                    0                   ...  0     ]
        [ (Acl + Acr·Q)·T          Acr·T               ...  0     ]
        [ (Acl·Q + Acr·Q²)·T       (Acl + Acr·Q)·T     ...  0     ]
        [ ...                                               Acr·T ]

    B = [ Acl + Acr·Q; Acl·Q + Acr·Q²; ...; Acl·Q^(N-1) + Acr·Q^N ]

A and B depend only on the family set, dt and N and are built once.
Only the right-hand side changes per tick.
"""

import enum
import logging
from typing import List, Optional, Sequence

import numpy as np

from preview_model.parameters import AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION
from preview_model.preview_model import PreviewModel
from miqp_constraints.config import ConstraintsConfig, create_constraint_sources_from_config
from miqp_constraints.constraint_sources import ConstraintSource
from miqp_constraints._internal.validation import (
    ConfigurationError,
    coerce_auxiliary_state,
    validate_family_blocks,
    validate_output_buffer,
    validate_positive,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)


class AssemblyStage(enum.Enum):
    """Construction stages, traversed once and in order."""
    UNINITIALIZED = 0
    BLOCKS_BUILT = 1
    PREVIEW_MODEL_READY = 2
    MATRIX_ASSEMBLED = 3
    READY = 4


class MIQPLinearConstraints:
    """Horizon-wide linear constraints A·X <= rhs.

    Construction queries every constraint family once, builds the preview
    model and assembles A. Afterwards only update_rhs mutates state.
    Changing dt, N or the family set requires a new instance.

    Attributes:
        preview_horizon_steps: Number of preview steps N
        control_period_s: Control period dt
        constraints_per_step: Sum of the family constraint counts
        number_of_decision_variables: N·2 columns of A
    """

    def __init__(
        self,
        control_period_s: float,
        preview_horizon_steps: int,
        constraint_sources: Sequence[ConstraintSource],
    ) -> None:
        """Assemble the constraint system.

        Args:
            control_period_s: Control period dt in seconds
            preview_horizon_steps: Preview window length N
            constraint_sources: Constraint families, stacked in this order

        Raises:
            ConfigurationError: If dt or N are invalid, no family is given,
                or a family produces malformed blocks
        """
        validate_positive(control_period_s, 'control_period_s')
        validate_positive_integer(preview_horizon_steps, 'preview_horizon_steps')
        if len(constraint_sources) == 0:
            raise ConfigurationError("At least one constraint source is required")

        self._dt = float(control_period_s)
        self._N = int(preview_horizon_steps)
        self._stage = AssemblyStage.UNINITIALIZED
        self._last_state: Optional[np.ndarray] = None

        self._build_family_blocks(constraint_sources)
        self._build_preview_model()
        self._build_constraints_matrix()
        self._set_stage(AssemblyStage.READY)

        logger.info(
            "Assembled MIQP linear constraints: %d families, %d rows per step, "
            "N=%d, dt=%.4fs, A is %dx%d",
            len(self._family_names),
            self._constraints_per_step,
            self._N,
            self._dt,
            self._n_constraints,
            self.number_of_decision_variables,
        )

    @classmethod
    def from_config(cls, config: ConstraintsConfig) -> 'MIQPLinearConstraints':
        """Build the assembler and its families from a configuration.

        Args:
            config: Validated constraints configuration

        Returns:
            Ready MIQPLinearConstraints instance
        """
        return cls(
            control_period_s=config.control_period_s,
            preview_horizon_steps=config.preview_horizon_steps,
            constraint_sources=create_constraint_sources_from_config(config),
        )

    def _set_stage(self, stage: AssemblyStage) -> None:
        logger.debug("MIQP constraints stage %s -> %s", self._stage.name, stage.name)
        self._stage = stage

    def _build_family_blocks(self, constraint_sources: Sequence[ConstraintSource]) -> None:
        """Stack Ci into Acl, Cii into Acr and d into fc_bar."""
        same_step_blocks: List[np.ndarray] = []
        next_step_blocks: List[np.ndarray] = []
        bound_vectors: List[np.ndarray] = []
        self._family_names: List[str] = []

        for source in constraint_sources:
            if not isinstance(source, ConstraintSource):
                raise ConfigurationError(
                    f"Constraint sources must implement ConstraintSource, "
                    f"got {type(source).__name__}"
                )
            bound_vector = np.atleast_1d(np.asarray(source.build_bound_vector(), dtype=float))
            same_step_block = np.asarray(source.build_same_step_block(), dtype=float)
            next_step_block = source.build_next_step_block()
            if next_step_block is None:
                next_step_block = np.zeros_like(same_step_block)
            next_step_block = np.asarray(next_step_block, dtype=float)

            validate_family_blocks(source.name, same_step_block, next_step_block, bound_vector)

            same_step_blocks.append(same_step_block)
            next_step_blocks.append(next_step_block)
            bound_vectors.append(bound_vector)
            self._family_names.append(source.name)

        self._Acl = np.vstack(same_step_blocks)
        self._Acr = np.vstack(next_step_blocks)
        self._fcbar_shape_admiss = np.concatenate(bound_vectors)
        self._constraints_per_step = self._fcbar_shape_admiss.shape[0]
        self._n_constraints = self._N * self._constraints_per_step

        for array in (self._Acl, self._Acr, self._fcbar_shape_admiss):
            array.setflags(write=False)
        self._set_stage(AssemblyStage.BLOCKS_BUILT)

    def _build_preview_model(self) -> None:
        try:
            self._preview_model = PreviewModel.from_control_period(self._dt)
        except ValueError as error:
            raise ConfigurationError(str(error)) from error
        self._set_stage(AssemblyStage.PREVIEW_MODEL_READY)

    def _build_constraints_matrix(self) -> None:
        """Expand the per-step pair over the preview window.

        Builds A, the state projection B and the right-hand side buffers.
        Powers of Q are accumulated incrementally; the blocks only depend on
        the lag i - j, so each is computed once and placed along its
        block diagonal.
        """
        horizon = self._N
        n_rows = self._constraints_per_step
        transition = self._preview_model.state_transition_matrix
        preview_input = self._preview_model.preview_input_matrix

        # Q^0 .. Q^N
        transition_powers = [np.eye(AUXILIARY_STATE_DIMENSION)]
        for _ in range(horizon):
            transition_powers.append(transition_powers[-1] @ transition)

        # Lag blocks: L_0 = Acr·T, L_m = (Acl·Q^(m-1) + Acr·Q^m)·T
        lag_blocks = [self._Acr @ preview_input]
        for lag in range(1, horizon):
            lag_blocks.append(
                (self._Acl @ transition_powers[lag - 1]
                 + self._Acr @ transition_powers[lag]) @ preview_input
            )

        self._A = np.zeros((self._n_constraints, horizon * DECISION_DIMENSION))
        self._b_shape_admiss = np.zeros((self._n_constraints, AUXILIARY_STATE_DIMENSION))
        for row in range(horizon):
            rows = slice(row * n_rows, (row + 1) * n_rows)
            for column in range(row + 1):
                columns = slice(column * DECISION_DIMENSION, (column + 1) * DECISION_DIMENSION)
                self._A[rows, columns] = lag_blocks[row - column]
            self._b_shape_admiss[rows, :] = (
                self._Acl @ transition_powers[row]
                + self._Acr @ transition_powers[row + 1]
            )
        self._A.setflags(write=False)
        self._b_shape_admiss.setflags(write=False)

        self._fcbar_tiled = np.tile(self._fcbar_shape_admiss, horizon)
        self._fcbar_tiled.setflags(write=False)
        self._rhs = self._fcbar_tiled.copy()
        self._state_projection = np.zeros(self._n_constraints)
        self._set_stage(AssemblyStage.MATRIX_ASSEMBLED)

    def update_rhs(self, auxiliary_state) -> None:
        """Refresh rhs = fc_bar - B·xi_k from the current auxiliary state.

        Args:
            auxiliary_state: Auxiliary state xi_k observed this tick (6,)

        Raises:
            StateDimensionError: If the state has the wrong shape or
                non-finite entries; rhs keeps its previous value
        """
        state = coerce_auxiliary_state(auxiliary_state)

        np.dot(self._b_shape_admiss, state, out=self._state_projection)
        np.subtract(self._fcbar_tiled, self._state_projection, out=self._rhs)

        if self._last_state is None:
            self._last_state = state.copy()
        else:
            self._last_state[:] = state

    def get_constraints_matrix_a(self, out_a: np.ndarray) -> None:
        """Copy A into a caller-owned buffer.

        Args:
            out_a: Buffer of shape (get_total_number_of_constraints(), N·2)

        Raises:
            ConfigurationError: If the buffer shape or dtype is wrong
        """
        validate_output_buffer(out_a, self._A.shape, 'out_a')
        np.copyto(out_a, self._A)

    def get_rhs(self, out_rhs: np.ndarray) -> None:
        """Copy the current right-hand side into a caller-owned buffer.

        Args:
            out_rhs: Buffer of shape (get_total_number_of_constraints(),)

        Raises:
            ConfigurationError: If the buffer shape or dtype is wrong
        """
        validate_output_buffer(out_rhs, self._rhs.shape, 'out_rhs')
        np.copyto(out_rhs, self._rhs)

    def get_state_projection_matrix(self, out_b: np.ndarray) -> None:
        """Copy the state projection B into a caller-owned buffer.

        Args:
            out_b: Buffer of shape (get_total_number_of_constraints(), 6)

        Raises:
            ConfigurationError: If the buffer shape or dtype is wrong
        """
        validate_output_buffer(out_b, self._b_shape_admiss.shape, 'out_b')
        np.copyto(out_b, self._b_shape_admiss)

    def get_total_number_of_constraints(self) -> int:
        """Number of rows of A and rhs (N times the rows per step)."""
        return self._n_constraints

    @property
    def stage(self) -> AssemblyStage:
        return self._stage

    @property
    def preview_horizon_steps(self) -> int:
        return self._N

    @property
    def control_period_s(self) -> float:
        return self._dt

    @property
    def constraints_per_step(self) -> int:
        return self._constraints_per_step

    @property
    def number_of_decision_variables(self) -> int:
        return self._N * DECISION_DIMENSION

    @property
    def family_names(self) -> List[str]:
        return list(self._family_names)

    @property
    def preview_model(self) -> PreviewModel:
        return self._preview_model

    @property
    def same_step_matrix(self) -> np.ndarray:
        """Stacked same-step blocks Acl (read-only)."""
        return self._Acl

    @property
    def next_step_matrix(self) -> np.ndarray:
        """Stacked next-step blocks Acr (read-only)."""
        return self._Acr

    @property
    def bound_vector(self) -> np.ndarray:
        """Stacked per-step bounds fc (read-only)."""
        return self._fcbar_shape_admiss

    @property
    def last_auxiliary_state(self) -> Optional[np.ndarray]:
        """State used by the last successful update_rhs, or None."""
        if self._last_state is None:
            return None
        return self._last_state.copy()
