"""Constraint families for the MIQP walking stabilizer.

Each family describes one set of per-step linear inequalities on the
auxiliary state, independent of the preview horizon:

    Ci·xi[k+i] + Cii·xi[k+i+1] <= d

Ci couples the state at the same preview step as the constraint row,
Cii the state at the next step. The assembler only ever talks to the
ConstraintSource interface.

Auxiliary state: [c_x, c_y, dc_x, dc_y, ddc_x, ddc_y]
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from preview_model.parameters import (
    AUXILIARY_STATE_DIMENSION,
    PLANAR_DIMENSION,
    POSITION_SLICE,
    VELOCITY_SLICE,
    STANDARD_GRAVITY_MPS2,
)
from preview_model.preview_model import build_zmp_projection
from miqp_constraints._internal.validation import (
    ConfigurationError,
    validate_positive,
    validate_planar_bounds,
)


def _position_selector() -> np.ndarray:
    """Rows picking the CoM position out of the auxiliary state."""
    selector = np.zeros((PLANAR_DIMENSION, AUXILIARY_STATE_DIMENSION))
    selector[:, POSITION_SLICE] = np.eye(PLANAR_DIMENSION)
    return selector


class ConstraintSource(ABC):
    """Capability implemented by every constraint family."""

    @abstractmethod
    def build_same_step_block(self) -> np.ndarray:
        """Return Ci (n_c, 6), applied to the state at the same step."""

    @abstractmethod
    def build_next_step_block(self) -> np.ndarray:
        """Return Cii (n_c, 6), applied to the state at the next step."""

    @abstractmethod
    def build_bound_vector(self) -> np.ndarray:
        """Return the upper bound vector d (n_c,)."""

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def number_of_constraints(self) -> int:
        return int(np.asarray(self.build_bound_vector()).shape[0])


@dataclass(frozen=True)
class ShapeConstraints(ConstraintSource):
    """ZMP kept inside a convex support polygon.

    Encodes: n_r·z[k+i+1] <= b_r for every polygon edge r, where
    z = c - (h/g)·ddc is the cart-table ZMP at the next preview step.

    Attributes:
        edge_normals: Outward edge normals (n_c, 2)
        edge_offsets: Edge offsets b_r (n_c,)
        com_height_m: Constant CoM height h
        gravity_mps2: Gravitational acceleration g
    """

    edge_normals: Tuple[Tuple[float, float], ...]
    edge_offsets: Tuple[float, ...]
    com_height_m: float
    gravity_mps2: float = STANDARD_GRAVITY_MPS2

    def __post_init__(self) -> None:
        """Validate polygon description."""
        normals = np.asarray(self.edge_normals, dtype=float)
        offsets = np.asarray(self.edge_offsets, dtype=float)

        if normals.ndim != 2 or normals.shape[1] != PLANAR_DIMENSION or normals.shape[0] == 0:
            raise ConfigurationError(
                f"edge_normals must have shape (n, {PLANAR_DIMENSION}), "
                f"got {normals.shape}"
            )
        if offsets.shape != (normals.shape[0],):
            raise ConfigurationError(
                f"edge_offsets must have shape ({normals.shape[0]},), "
                f"got {offsets.shape}"
            )
        if not (np.all(np.isfinite(normals)) and np.all(np.isfinite(offsets))):
            raise ConfigurationError("Support polygon contains non-finite values")
        if np.any(np.linalg.norm(normals, axis=1) == 0.0):
            raise ConfigurationError("edge_normals must not contain zero vectors")

        validate_positive(self.com_height_m, 'com_height_m')
        validate_positive(self.gravity_mps2, 'gravity_mps2')

    @classmethod
    def rectangle(
        cls,
        half_length_m: float,
        half_width_m: float,
        com_height_m: float,
        gravity_mps2: float = STANDARD_GRAVITY_MPS2,
    ) -> 'ShapeConstraints':
        """Axis-aligned rectangular support region centred on the frame origin.

        Args:
            half_length_m: Half extent along x
            half_width_m: Half extent along y
            com_height_m: Constant CoM height
            gravity_mps2: Gravitational acceleration

        Returns:
            ShapeConstraints with 4 rows (+x, -x, +y, -y)
        """
        validate_positive(half_length_m, 'half_length_m')
        validate_positive(half_width_m, 'half_width_m')
        return cls(
            edge_normals=((1.0, 0.0), (-1.0, 0.0), (0.0, 1.0), (0.0, -1.0)),
            edge_offsets=(half_length_m, half_length_m, half_width_m, half_width_m),
            com_height_m=com_height_m,
            gravity_mps2=gravity_mps2,
        )

    def build_same_step_block(self) -> np.ndarray:
        return np.zeros((len(self.edge_offsets), AUXILIARY_STATE_DIMENSION))

    def build_next_step_block(self) -> np.ndarray:
        normals = np.asarray(self.edge_normals, dtype=float)
        return normals @ build_zmp_projection(self.com_height_m, self.gravity_mps2)

    def build_bound_vector(self) -> np.ndarray:
        return np.asarray(self.edge_offsets, dtype=float)


@dataclass(frozen=True)
class AdmissibilityConstraints(ConstraintSource):
    """Bounded CoM displacement between consecutive preview steps.

    Encodes: c[k+i+1] - c[k+i] <= max_displacement_m
    and, when max_backward_displacement_m is set,
             c[k+i] - c[k+i+1] <= max_backward_displacement_m

    Attributes:
        max_displacement_m: Forward/leftward bound per axis (x, y)
        max_backward_displacement_m: Optional backward/rightward bound (x, y)
    """

    max_displacement_m: Tuple[float, float]
    max_backward_displacement_m: Optional[Tuple[float, float]] = None

    def __post_init__(self) -> None:
        """Validate displacement bounds are positive."""
        validate_planar_bounds(tuple(self.max_displacement_m), 'max_displacement_m')
        if self.max_backward_displacement_m is not None:
            validate_planar_bounds(
                tuple(self.max_backward_displacement_m), 'max_backward_displacement_m'
            )

    def build_same_step_block(self) -> np.ndarray:
        selector = _position_selector()
        if self.max_backward_displacement_m is None:
            return -selector
        return np.vstack([-selector, selector])

    def build_next_step_block(self) -> np.ndarray:
        selector = _position_selector()
        if self.max_backward_displacement_m is None:
            return selector
        return np.vstack([selector, -selector])

    def build_bound_vector(self) -> np.ndarray:
        if self.max_backward_displacement_m is None:
            return np.asarray(self.max_displacement_m, dtype=float)
        return np.concatenate([
            np.asarray(self.max_displacement_m, dtype=float),
            np.asarray(self.max_backward_displacement_m, dtype=float),
        ])


@dataclass(frozen=True)
class Constancy(ConstraintSource):
    """Constant upper bound S on a linear function of the same-step state.

    Encodes: selection·xi[k+i] <= S (no next-step contribution).

    Attributes:
        selection: Rows of the linear map applied to the state (n_c, 6)
        upper_bounds: S (n_c,)
    """

    selection: Tuple[Tuple[float, ...], ...]
    upper_bounds: Tuple[float, ...]

    def __post_init__(self) -> None:
        """Validate selection rows and bounds agree."""
        selection = np.asarray(self.selection, dtype=float)
        bounds = np.asarray(self.upper_bounds, dtype=float)

        if selection.ndim != 2 or selection.shape[1] != AUXILIARY_STATE_DIMENSION:
            raise ConfigurationError(
                f"selection must have shape (n, {AUXILIARY_STATE_DIMENSION}), "
                f"got {selection.shape}"
            )
        if selection.shape[0] == 0 or bounds.shape != (selection.shape[0],):
            raise ConfigurationError(
                f"upper_bounds must have shape ({selection.shape[0]},) "
                f"and at least one entry, got {bounds.shape}"
            )
        if not (np.all(np.isfinite(selection)) and np.all(np.isfinite(bounds))):
            raise ConfigurationError("Constancy contains non-finite values")

    @classmethod
    def velocity_limit(cls, limit_x_mps: float, limit_y_mps: float) -> 'Constancy':
        """Upper bound on the CoM velocity components.

        Args:
            limit_x_mps: Bound on dc_x
            limit_y_mps: Bound on dc_y

        Returns:
            Constancy with 2 rows
        """
        validate_planar_bounds((limit_x_mps, limit_y_mps), 'com_velocity_limit_mps')
        selection = np.zeros((PLANAR_DIMENSION, AUXILIARY_STATE_DIMENSION))
        selection[:, VELOCITY_SLICE] = np.eye(PLANAR_DIMENSION)
        return cls(
            selection=tuple(tuple(row) for row in selection),
            upper_bounds=(limit_x_mps, limit_y_mps),
        )

    def build_same_step_block(self) -> np.ndarray:
        return np.asarray(self.selection, dtype=float)

    def build_next_step_block(self) -> np.ndarray:
        return np.zeros((len(self.upper_bounds), AUXILIARY_STATE_DIMENSION))

    def build_bound_vector(self) -> np.ndarray:
        return np.asarray(self.upper_bounds, dtype=float)
