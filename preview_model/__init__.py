"""Preview model module for the walking stabilizer.

This module provides the constant linear recurrence of the CoM preview
model, discretized with a zero-order hold.

Public API:
    - PreviewModel: Q, T, Bh matrices for a control period
    - build_matrix_q: State-transition block Q
    - build_matrix_t: Input-to-state block T
    - build_bh: CoM jerk input block Bh
    - build_zmp_projection: Cart-table map from auxiliary state to ZMP
"""

from preview_model.parameters import (
    AUXILIARY_STATE_DIMENSION,
    DECISION_DIMENSION,
)
from preview_model.preview_model import (
    PreviewModel,
    build_matrix_q,
    build_matrix_t,
    build_bh,
    build_zmp_projection,
)

__all__ = [
    'AUXILIARY_STATE_DIMENSION',
    'DECISION_DIMENSION',
    'PreviewModel',
    'build_matrix_q',
    'build_matrix_t',
    'build_bh',
    'build_zmp_projection',
]
