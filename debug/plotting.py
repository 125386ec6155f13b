"""Matplotlib plotting utilities for constraint debugging.

Provides reusable plotting functions for inspecting the assembled
constraint system.
"""

from typing import Optional
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from preview_model.parameters import DECISION_DIMENSION


def plot_constraint_matrix_structure(
    constraints_matrix: np.ndarray,
    constraints_per_step: int,
    title: str = "Constraint Matrix Structure",
    save_path: Optional[str] = None,
) -> Figure:
    """Plot the magnitude pattern of A with preview block boundaries.

    Args:
        constraints_matrix: A (N·n_c, N·2)
        constraints_per_step: Rows per preview step n_c
        title: Figure title
        save_path: Optional path to save figure

    Returns:
        Matplotlib Figure object
    """
    n_rows, n_columns = constraints_matrix.shape
    magnitude = np.abs(constraints_matrix)
    # log scale with exact zeros kept blank
    masked = np.ma.masked_where(magnitude == 0.0, magnitude)

    fig, ax = plt.subplots(figsize=(8, 8))
    image = ax.imshow(
        np.ma.log10(masked),
        aspect='auto',
        interpolation='nearest',
        cmap='viridis',
    )
    fig.colorbar(image, ax=ax, label='log10 |A_ij|')

    for row in range(constraints_per_step, n_rows, constraints_per_step):
        ax.axhline(y=row - 0.5, color='w', linewidth=0.5)
    for column in range(DECISION_DIMENSION, n_columns, DECISION_DIMENSION):
        ax.axvline(x=column - 0.5, color='w', linewidth=0.5)

    ax.set_xlabel('Decision variable')
    ax.set_ylabel('Constraint row')
    ax.set_title(title)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig


def plot_rhs_history(
    time_s: np.ndarray,
    rhs_history: np.ndarray,
    constraints_per_step: int,
    title: str = "Right-Hand Side History",
    save_path: Optional[str] = None,
) -> Figure:
    """Plot first-step rhs rows and the minimum slack over time.

    Args:
        time_s: Time array (K,)
        rhs_history: rhs per tick (K, N·n_c)
        constraints_per_step: Rows per preview step n_c
        title: Figure title
        save_path: Optional path to save figure

    Returns:
        Matplotlib Figure object
    """
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    fig.suptitle(title, fontsize=14)

    ax = axes[0]
    for row in range(constraints_per_step):
        ax.plot(time_s, rhs_history[:, row], linewidth=1.2, label=f'row {row}')
    ax.set_ylabel('rhs (first preview step)')
    ax.legend(loc='best', fontsize='small', ncol=2)
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    ax.plot(time_s, np.min(rhs_history, axis=1), 'r-', linewidth=1.5)
    ax.axhline(y=0.0, color='k', linestyle='--')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('min rhs')
    ax.set_title('Tightest bound over the preview window')
    ax.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig
