"""Tests for the CoM preview model.

Checks the ZOH discretization against the closed-form triple integrator
and the recurrence helpers.
"""

import numpy as np
import pytest

from preview_model import (
    AUXILIARY_STATE_DIMENSION,
    DECISION_DIMENSION,
    PreviewModel,
    build_matrix_q,
    build_matrix_t,
    build_bh,
    build_zmp_projection,
)


def closed_form_q(dt):
    identity = np.eye(2)
    zero = np.zeros((2, 2))
    return np.block([
        [identity, dt * identity, dt ** 2 / 2 * identity],
        [zero, identity, dt * identity],
        [zero, zero, identity],
    ])


def closed_form_bh(dt):
    identity = np.eye(2)
    return np.vstack([dt ** 3 / 6 * identity, dt ** 2 / 2 * identity, dt * identity])


@pytest.fixture
def preview_model():
    """Preview model at 100 Hz."""
    return PreviewModel.from_control_period(0.01)


class TestMatrixConstruction:
    """Tests for build_matrix_q, build_matrix_t and build_bh."""

    @pytest.mark.parametrize("dt", [0.001, 0.01, 0.05, 0.2])
    def test_q_matches_closed_form(self, dt):
        """Q equals the discrete triple-integrator transition."""
        np.testing.assert_allclose(build_matrix_q(dt), closed_form_q(dt), atol=1e-12)

    @pytest.mark.parametrize("dt", [0.001, 0.01, 0.05, 0.2])
    def test_bh_matches_closed_form(self, dt):
        """Bh equals [dt³/6·I; dt²/2·I; dt·I]."""
        np.testing.assert_allclose(build_bh(dt), closed_form_bh(dt), atol=1e-12)

    def test_t_equals_bh(self):
        """The preview input is the CoM jerk, so T and Bh coincide."""
        np.testing.assert_array_equal(build_matrix_t(0.02), build_bh(0.02))

    def test_shapes(self):
        """Matrices have the documented dimensions."""
        assert build_matrix_q(0.01).shape == (AUXILIARY_STATE_DIMENSION, AUXILIARY_STATE_DIMENSION)
        assert build_matrix_t(0.01).shape == (AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION)
        assert build_bh(0.01).shape == (AUXILIARY_STATE_DIMENSION, DECISION_DIMENSION)

    def test_deterministic(self):
        """Same control period gives identical matrices."""
        np.testing.assert_array_equal(build_matrix_q(0.01), build_matrix_q(0.01))

    @pytest.mark.parametrize("dt", [0.0, -0.01, float('nan'), float('inf')])
    def test_invalid_period_raises(self, dt):
        """Non-positive or non-finite periods are rejected."""
        with pytest.raises(ValueError, match="must be positive"):
            build_matrix_q(dt)


class TestPreviewModel:
    """Tests for the PreviewModel dataclass."""

    def test_matrices_read_only(self, preview_model):
        """Matrices cannot be mutated after construction."""
        with pytest.raises(ValueError):
            preview_model.state_transition_matrix[0, 0] = 2.0

    def test_wrong_shape_rejected(self):
        """Constructor validates matrix shapes."""
        with pytest.raises(ValueError, match="state_transition_matrix"):
            PreviewModel(
                control_period_s=0.01,
                state_transition_matrix=np.eye(4),
                preview_input_matrix=np.zeros((6, 2)),
                com_input_matrix=np.zeros((6, 2)),
            )

    def test_propagate_constant_velocity(self, preview_model):
        """Zero jerk from constant velocity advances position by v·dt."""
        state = np.array([0.0, 0.0, 0.2, -0.1, 0.0, 0.0])
        next_state = preview_model.propagate(state, np.zeros(2))

        np.testing.assert_allclose(next_state[:2], [0.002, -0.001], atol=1e-15)
        np.testing.assert_allclose(next_state[2:], state[2:], atol=1e-15)

    def test_propagate_jerk(self, preview_model):
        """Unit jerk from rest gives the Bh column."""
        next_state = preview_model.propagate(np.zeros(6), np.array([1.0, 0.0]))
        np.testing.assert_allclose(next_state, closed_form_bh(0.01)[:, 0], atol=1e-15)

    def test_propagate_rejects_bad_state(self, preview_model):
        """State must have 6 components."""
        with pytest.raises(ValueError, match="shape"):
            preview_model.propagate(np.zeros(4), np.zeros(2))

    def test_rollout_shape_and_start(self, preview_model):
        """Rollout returns N+1 states starting at the initial state."""
        initial = np.arange(6, dtype=float) * 0.01
        trajectory = preview_model.rollout(initial, np.ones((5, 2)))

        assert trajectory.shape == (6, AUXILIARY_STATE_DIMENSION)
        np.testing.assert_array_equal(trajectory[0], initial)

    def test_rollout_rejects_bad_decisions(self, preview_model):
        """Decisions must be (N, 2)."""
        with pytest.raises(ValueError, match="decisions"):
            preview_model.rollout(np.zeros(6), np.zeros(6))


class TestZmpProjection:
    """Tests for the cart-table ZMP map."""

    def test_static_com_zmp_equals_com(self):
        """Without acceleration the ZMP is the CoM ground projection."""
        projection = build_zmp_projection(0.5, 9.81)
        state = np.array([0.03, -0.02, 0.1, 0.1, 0.0, 0.0])
        np.testing.assert_allclose(projection @ state, [0.03, -0.02])

    def test_acceleration_shifts_zmp(self):
        """z = c - (h/g)·ddc."""
        projection = build_zmp_projection(0.5, 10.0)
        state = np.array([0.0, 0.0, 0.0, 0.0, 1.0, -2.0])
        np.testing.assert_allclose(projection @ state, [-0.05, 0.1])

    def test_invalid_height_raises(self):
        """CoM height must be positive."""
        with pytest.raises(ValueError, match="com_height_m"):
            build_zmp_projection(0.0)
