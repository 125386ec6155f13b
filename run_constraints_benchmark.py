#!/usr/bin/env python3
"""Drive the MIQP constraints refresh loop on a synthetic CoM sway.

Usage:
    python3 run_constraints_benchmark.py                  # Default config, 1000 ticks
    python3 run_constraints_benchmark.py --ticks 5000     # Longer run
    python3 run_constraints_benchmark.py --plot out.png   # Save A structure plot
"""

import argparse
import logging

import numpy as np

from control_pipeline import WalkingConstraintsController
from miqp_constraints import ConfigurationError
from preview_model.parameters import (
    AUXILIARY_STATE_DIMENSION,
    POSITION_Y_INDEX,
    VELOCITY_Y_INDEX,
    ACCELERATION_Y_INDEX,
)

DEFAULT_CONFIG_PATH = 'config/walking/miqp_constraints.yaml'


def sway_state(time_s: float, amplitude_m: float, frequency_hz: float) -> np.ndarray:
    """Auxiliary state of a lateral sinusoidal CoM sway."""
    omega = 2.0 * np.pi * frequency_hz
    state = np.zeros(AUXILIARY_STATE_DIMENSION)
    state[POSITION_Y_INDEX] = amplitude_m * np.sin(omega * time_s)
    state[VELOCITY_Y_INDEX] = amplitude_m * omega * np.cos(omega * time_s)
    state[ACCELERATION_Y_INDEX] = -amplitude_m * omega ** 2 * np.sin(omega * time_s)
    return state


def main():
    parser = argparse.ArgumentParser(description='Benchmark the MIQP constraints refresh loop')
    parser.add_argument('--config', type=str, default=DEFAULT_CONFIG_PATH,
                        help='Path to constraints YAML file')
    parser.add_argument('--ticks', type=int, default=1000,
                        help='Number of control ticks to run')
    parser.add_argument('--amplitude', type=float, default=0.02,
                        help='Lateral sway amplitude in meters')
    parser.add_argument('--frequency', type=float, default=0.8,
                        help='Lateral sway frequency in Hz')
    parser.add_argument('--plot', type=str, default=None,
                        help='Save constraint matrix structure plot to this path')
    parser.add_argument('--verbose', action='store_true',
                        help='Enable debug logging')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(name)s %(levelname)s: %(message)s',
    )

    try:
        controller = WalkingConstraintsController.from_yaml(
            args.config, timing_history_length=max(args.ticks, 1)
        )
    except ConfigurationError as error:
        print(f"Configuration error: {error}")
        return 1

    constraints = controller.constraints
    dt = constraints.control_period_s
    print(f"Families: {', '.join(constraints.family_names)}")
    print(f"A: {constraints.get_total_number_of_constraints()} x "
          f"{constraints.number_of_decision_variables}")

    min_rhs = np.inf
    for tick in range(args.ticks):
        snapshot = controller.step(sway_state(tick * dt, args.amplitude, args.frequency))
        min_rhs = min(min_rhs, float(np.min(snapshot.rhs)))

    stats = controller.timer.compute_statistics()

    print("\n" + "=" * 50)
    print("Constraints Refresh Results")
    print("=" * 50)
    print(f"  Ticks: {args.ticks}")
    if stats is not None:
        print(f"  Mean tick time: {stats.mean_s * 1e6:.1f}us")
        print(f"  Max tick time: {stats.max_s * 1e6:.1f}us")
        print(f"  Control period used: {controller.timer.utilization * 100:.2f}%")
    print(f"  Deadline violations: {controller.timer.deadline_violations}")
    print(f"  Rejected ticks: {controller.rejected_ticks}")
    print(f"  Min rhs entry: {min_rhs:.4f}")

    if args.plot:
        from debug.plotting import plot_constraint_matrix_structure
        constraints_matrix = np.zeros((
            constraints.get_total_number_of_constraints(),
            constraints.number_of_decision_variables,
        ))
        constraints.get_constraints_matrix_a(constraints_matrix)
        plot_constraint_matrix_structure(
            constraints_matrix,
            constraints.constraints_per_step,
            save_path=args.plot,
        )
        print(f"  Saved structure plot to {args.plot}")

    return 0


if __name__ == '__main__':
    exit(main())
