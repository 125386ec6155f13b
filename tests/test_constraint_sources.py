"""Unit tests for the constraint families."""

import numpy as np
import pytest

from preview_model.parameters import AUXILIARY_STATE_DIMENSION
from miqp_constraints import (
    ConfigurationError,
    ConstraintSource,
    ShapeConstraints,
    AdmissibilityConstraints,
    Constancy,
)


@pytest.fixture
def foot_rectangle():
    """Rectangular support foot."""
    return ShapeConstraints.rectangle(
        half_length_m=0.06,
        half_width_m=0.035,
        com_height_m=0.5,
        gravity_mps2=10.0,
    )


class TestConstraintSourceInterface:
    """Tests for the abstract interface."""

    def test_cannot_instantiate_base(self):
        """The base class is abstract."""
        with pytest.raises(TypeError):
            ConstraintSource()

    @pytest.mark.parametrize("source", [
        ShapeConstraints.rectangle(0.06, 0.035, 0.5),
        AdmissibilityConstraints(max_displacement_m=(0.01, 0.01)),
        Constancy.velocity_limit(0.3, 0.2),
    ])
    def test_families_implement_interface(self, source):
        """Every family yields consistently shaped blocks."""
        assert isinstance(source, ConstraintSource)
        n_rows = source.number_of_constraints
        assert source.build_same_step_block().shape == (n_rows, AUXILIARY_STATE_DIMENSION)
        assert source.build_next_step_block().shape == (n_rows, AUXILIARY_STATE_DIMENSION)
        assert source.build_bound_vector().shape == (n_rows,)

    def test_name_is_class_name(self, foot_rectangle):
        """Family names come from the class."""
        assert foot_rectangle.name == 'ShapeConstraints'


class TestShapeConstraints:
    """Tests for ShapeConstraints."""

    def test_rectangle_has_four_rows(self, foot_rectangle):
        """A rectangle has one row per edge."""
        assert foot_rectangle.number_of_constraints == 4

    def test_rectangle_bounds(self, foot_rectangle):
        """Offsets are the half extents."""
        np.testing.assert_array_equal(
            foot_rectangle.build_bound_vector(), [0.06, 0.06, 0.035, 0.035]
        )

    def test_same_step_block_is_zero(self, foot_rectangle):
        """Shape only constrains the next-step ZMP."""
        assert np.all(foot_rectangle.build_same_step_block() == 0.0)

    def test_next_step_block_is_zmp_rows(self, foot_rectangle):
        """+x edge reads c_x - (h/g)·ddc_x."""
        next_step_block = foot_rectangle.build_next_step_block()
        np.testing.assert_allclose(next_step_block[0], [1, 0, 0, 0, -0.05, 0])
        np.testing.assert_allclose(next_step_block[3], [0, -1, 0, 0, 0, 0.05])

    def test_zmp_at_edge_is_active(self, foot_rectangle):
        """A static CoM on the +x edge saturates the first row only."""
        state = np.array([0.06, 0.0, 0.0, 0.0, 0.0, 0.0])
        slack = (
            foot_rectangle.build_bound_vector()
            - foot_rectangle.build_next_step_block() @ state
        )
        np.testing.assert_allclose(slack, [0.0, 0.12, 0.035, 0.035], atol=1e-15)

    def test_general_polygon(self):
        """Arbitrary half-space polygons are accepted."""
        triangle = ShapeConstraints(
            edge_normals=((0.0, -1.0), (1.0, 1.0), (-1.0, 1.0)),
            edge_offsets=(0.02, 0.05, 0.05),
            com_height_m=0.5,
        )
        assert triangle.number_of_constraints == 3

    def test_mismatched_offsets_raise(self):
        """Offsets must match the number of normals."""
        with pytest.raises(ConfigurationError, match="edge_offsets"):
            ShapeConstraints(
                edge_normals=((1.0, 0.0), (-1.0, 0.0)),
                edge_offsets=(0.1,),
                com_height_m=0.5,
            )

    def test_zero_normal_raises(self):
        """Degenerate edges are rejected."""
        with pytest.raises(ConfigurationError, match="zero vectors"):
            ShapeConstraints(
                edge_normals=((0.0, 0.0),),
                edge_offsets=(0.1,),
                com_height_m=0.5,
            )

    def test_negative_half_length_raises(self):
        """Rectangle extents must be positive."""
        with pytest.raises(ValueError, match="must be positive"):
            ShapeConstraints.rectangle(-0.06, 0.035, 0.5)


class TestAdmissibilityConstraints:
    """Tests for AdmissibilityConstraints."""

    def test_forward_only_has_two_rows(self):
        """Upper displacement bounds give one row per axis."""
        admissibility = AdmissibilityConstraints(max_displacement_m=(0.01, 0.02))
        assert admissibility.number_of_constraints == 2
        np.testing.assert_array_equal(admissibility.build_bound_vector(), [0.01, 0.02])

    def test_blocks_encode_displacement(self):
        """Ci = -[I 0 0], Cii = [I 0 0]."""
        admissibility = AdmissibilityConstraints(max_displacement_m=(0.01, 0.02))
        same_step = admissibility.build_same_step_block()
        next_step = admissibility.build_next_step_block()

        np.testing.assert_array_equal(same_step, -next_step)
        np.testing.assert_array_equal(next_step[:, :2], np.eye(2))
        assert np.all(next_step[:, 2:] == 0.0)

    def test_displacement_evaluation(self):
        """Ci·xi_i + Cii·xi_(i+1) is the position increment."""
        admissibility = AdmissibilityConstraints(max_displacement_m=(0.01, 0.02))
        current = np.array([0.1, 0.2, 1.0, 1.0, 1.0, 1.0])
        following = np.array([0.105, 0.19, 0.0, 0.0, 0.0, 0.0])
        increment = (
            admissibility.build_same_step_block() @ current
            + admissibility.build_next_step_block() @ following
        )
        np.testing.assert_allclose(increment, [0.005, -0.01])

    def test_backward_bound_adds_rows(self):
        """Optional backward bounds double the row count."""
        admissibility = AdmissibilityConstraints(
            max_displacement_m=(0.01, 0.02),
            max_backward_displacement_m=(0.005, 0.02),
        )
        assert admissibility.number_of_constraints == 4
        np.testing.assert_array_equal(
            admissibility.build_bound_vector(), [0.01, 0.02, 0.005, 0.02]
        )
        np.testing.assert_array_equal(
            admissibility.build_next_step_block()[2:],
            -admissibility.build_next_step_block()[:2],
        )

    def test_zero_bound_raises(self):
        """Displacement bounds must be positive."""
        with pytest.raises(ConfigurationError, match="must be positive"):
            AdmissibilityConstraints(max_displacement_m=(0.0, 0.01))

    def test_wrong_length_raises(self):
        """Bounds are planar."""
        with pytest.raises(ConfigurationError, match="2 entries"):
            AdmissibilityConstraints(max_displacement_m=(0.01, 0.01, 0.01))


class TestConstancy:
    """Tests for Constancy."""

    def test_next_step_block_is_zero(self):
        """Constancy has no next-step contribution."""
        constancy = Constancy.velocity_limit(0.3, 0.2)
        assert np.all(constancy.build_next_step_block() == 0.0)

    def test_velocity_limit_selects_velocity(self):
        """Same-step block picks dc_x and dc_y."""
        constancy = Constancy.velocity_limit(0.3, 0.2)
        state = np.array([1.0, 2.0, 0.25, -0.1, 3.0, 4.0])
        np.testing.assert_array_equal(constancy.build_same_step_block() @ state, [0.25, -0.1])
        np.testing.assert_array_equal(constancy.build_bound_vector(), [0.3, 0.2])

    def test_single_row(self):
        """A single-row Constancy is valid."""
        constancy = Constancy(selection=((0, 0, 1, 0, 0, 0),), upper_bounds=(0.3,))
        assert constancy.number_of_constraints == 1

    def test_bound_count_mismatch_raises(self):
        """One bound per selection row."""
        with pytest.raises(ConfigurationError, match="upper_bounds"):
            Constancy(selection=((0, 0, 1, 0, 0, 0),), upper_bounds=(0.3, 0.2))

    def test_selection_width_raises(self):
        """Selection rows act on the 6-dimensional state."""
        with pytest.raises(ConfigurationError, match="selection"):
            Constancy(selection=((1, 0),), upper_bounds=(0.3,))
