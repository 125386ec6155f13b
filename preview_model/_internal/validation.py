"""Runtime contract validation utilities.

Internal module for preview model parameter and input validation.
"""

import math

import numpy as np

from preview_model.parameters import AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION


def validate_positive(value: float, name: str) -> None:
    """Validate that a value is strictly positive and finite.

    Args:
        value: Value to validate
        name: Parameter name for error message

    Raises:
        ValueError: If value <= 0 or not finite
    """
    if not math.isfinite(value) or value <= 0:
        raise ValueError(
            f"{name} must be positive, got {value}"
        )


def validate_auxiliary_state(state: np.ndarray) -> None:
    """Validate auxiliary state has correct shape and finite values.

    Args:
        state: Auxiliary state [c, dc, ddc] (6,)

    Raises:
        ValueError: If shape incorrect or contains non-finite values
    """
    if state.shape != (AUXILIARY_STATE_DIMENSION,):
        raise ValueError(
            f"Auxiliary state must have shape ({AUXILIARY_STATE_DIMENSION},), "
            f"got {state.shape}"
        )

    if not np.all(np.isfinite(state)):
        raise ValueError(
            f"Auxiliary state contains non-finite values: {state}"
        )


def validate_decision_vector(decision: np.ndarray) -> None:
    """Validate a single-step decision vector.

    Args:
        decision: CoM jerk [dddc_x, dddc_y]

    Raises:
        ValueError: If shape incorrect or contains non-finite values
    """
    if decision.shape != (DECISION_DIMENSION,):
        raise ValueError(
            f"Decision vector must have shape ({DECISION_DIMENSION},), "
            f"got {decision.shape}"
        )

    if not np.all(np.isfinite(decision)):
        raise ValueError(
            f"Decision vector contains non-finite values: {decision}"
        )
