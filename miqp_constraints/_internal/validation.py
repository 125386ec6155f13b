"""Validation utilities for the MIQP constraints module.

Provides the error taxonomy and input validation for assembler
configuration, constraint family blocks, caller buffers and live state.
"""

import math
import numbers
from collections.abc import Sequence
from typing import Tuple

import numpy as np

from preview_model.parameters import AUXILIARY_STATE_DIMENSION


class ConfigurationError(ValueError):
    """Malformed assembler configuration, family block or caller buffer.

    Raised at assembly time or at the query call boundary, never from
    inside a successful control tick.
    """


class StateDimensionError(ValueError):
    """Auxiliary state passed to update_rhs is malformed.

    The previously computed right-hand side is left untouched.
    """


def validate_positive(value: float, name: str) -> None:
    """Validate that a value is strictly positive and finite.

    Args:
        value: The value to validate
        name: Parameter name for error messages

    Raises:
        ConfigurationError: If value is not positive
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Real):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")


def validate_positive_integer(value: int, name: str) -> None:
    """Validate that a value is a positive integer.

    Args:
        value: The value to validate
        name: Parameter name for error messages

    Raises:
        ConfigurationError: If value is not a positive integer
    """
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, numbers.Integral):
        raise ConfigurationError(
            f"{name} must be a positive integer, got {value!r} ({type(value).__name__})"
        )
    if value <= 0:
        raise ConfigurationError(f"{name} must be a positive integer, got {value}")


def validate_planar_bounds(bounds: Sequence[float], name: str) -> None:
    """Validate a pair of strictly positive per-axis bounds.

    Args:
        bounds: (x, y) bound values
        name: Parameter name for error messages

    Raises:
        ConfigurationError: If bounds do not have two positive finite entries
    """
    if isinstance(bounds, str) or not isinstance(bounds, (Sequence, np.ndarray)):
        raise ConfigurationError(
            f"{name} must be an (x, y) pair, got {bounds!r}"
        )
    if len(bounds) != 2:
        raise ConfigurationError(f"{name} must have 2 entries, got {len(bounds)}")
    for axis, value in zip('xy', bounds):
        validate_positive(value, f"{name}[{axis}]")


def validate_family_blocks(
    family_name: str,
    same_step_block: np.ndarray,
    next_step_block: np.ndarray,
    bound_vector: np.ndarray,
) -> None:
    """Validate the static blocks produced by one constraint family.

    Args:
        family_name: Family name for error messages
        same_step_block: Ci (n_c, 6)
        next_step_block: Cii (n_c, 6)
        bound_vector: d (n_c,)

    Raises:
        ConfigurationError: If shapes disagree or entries are not finite
    """
    if bound_vector.ndim != 1 or bound_vector.shape[0] == 0:
        raise ConfigurationError(
            f"{family_name}: bound vector must be a non-empty 1-D array, "
            f"got shape {bound_vector.shape}"
        )
    n_constraints = bound_vector.shape[0]
    expected_shape = (n_constraints, AUXILIARY_STATE_DIMENSION)

    for block_name, block in (('Ci', same_step_block), ('Cii', next_step_block)):
        if block.shape != expected_shape:
            raise ConfigurationError(
                f"{family_name}: {block_name} must have shape {expected_shape}, "
                f"got {block.shape}"
            )
        if not np.all(np.isfinite(block)):
            raise ConfigurationError(
                f"{family_name}: {block_name} contains non-finite values"
            )

    if not np.all(np.isfinite(bound_vector)):
        raise ConfigurationError(
            f"{family_name}: bound vector contains non-finite values"
        )


def validate_output_buffer(
    buffer: np.ndarray,
    expected_shape: Tuple[int, ...],
    name: str,
) -> None:
    """Validate a caller-provided output buffer.

    Args:
        buffer: Caller-owned array to be written in place
        expected_shape: Required shape
        name: Buffer name for error messages

    Raises:
        ConfigurationError: If buffer is not a writable float64 array of the
            expected shape
    """
    if not isinstance(buffer, np.ndarray):
        raise ConfigurationError(
            f"{name} must be a numpy array, got {type(buffer).__name__}"
        )
    if buffer.shape != expected_shape:
        raise ConfigurationError(
            f"{name} must have shape {expected_shape}, got {buffer.shape}"
        )
    # Narrower floats would round A and rhs on copy.
    if buffer.dtype != np.float64:
        raise ConfigurationError(
            f"{name} must have dtype float64, got {buffer.dtype}"
        )
    if not buffer.flags.writeable:
        raise ConfigurationError(f"{name} must be writeable")


def coerce_auxiliary_state(state) -> np.ndarray:
    """Convert and validate the live auxiliary state.

    Args:
        state: Array-like auxiliary state xi_k

    Returns:
        Float array of shape (6,)

    Raises:
        StateDimensionError: If shape incorrect or contains non-finite values
    """
    try:
        state = np.asarray(state, dtype=float)
    except (TypeError, ValueError) as error:
        raise StateDimensionError(
            f"Auxiliary state is not numeric: {error}"
        ) from error

    if state.shape != (AUXILIARY_STATE_DIMENSION,):
        raise StateDimensionError(
            f"Auxiliary state must have shape ({AUXILIARY_STATE_DIMENSION},), "
            f"got {state.shape}"
        )
    if not np.all(np.isfinite(state)):
        raise StateDimensionError(
            f"Auxiliary state contains non-finite values: {state}"
        )
    return state
