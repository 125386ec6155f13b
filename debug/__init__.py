"""Debug module for constraint visualization.

Provides tools for inspecting the assembled MIQP constraints:
- plot_constraint_matrix_structure: Block pattern of A
- plot_rhs_history: Right-hand side evolution over ticks
"""

from debug.plotting import (
    plot_constraint_matrix_structure,
    plot_rhs_history,
)

__all__ = [
    'plot_constraint_matrix_structure',
    'plot_rhs_history',
]
