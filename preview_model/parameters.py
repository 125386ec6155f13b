"""Dimensions and physical constants for the CoM preview model.

Single source of truth for the auxiliary state layout shared by the
preview recurrence and every constraint family.

Auxiliary state: [c_x, c_y, dc_x, dc_y, ddc_x, ddc_y]
    CoM position, velocity and acceleration in the support frame.
Decision vector: [dddc_x, dddc_y]
    Planar CoM jerk held constant over one preview step.
"""

# Module-level constants for state/decision dimensions
AUXILIARY_STATE_DIMENSION = 6
DECISION_DIMENSION = 2
PLANAR_DIMENSION = 2

# Auxiliary state slices (each covers the x and y components)
POSITION_SLICE = slice(0, 2)
VELOCITY_SLICE = slice(2, 4)
ACCELERATION_SLICE = slice(4, 6)

# Individual indices
POSITION_Y_INDEX = 1
VELOCITY_Y_INDEX = 3
ACCELERATION_Y_INDEX = 5

STANDARD_GRAVITY_MPS2 = 9.81
