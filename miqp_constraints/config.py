"""MIQP constraints configuration parameters.

Single source of truth for the walking stabilizer constraint settings.
See config/walking/miqp_constraints.yaml for parameter values.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import yaml

from preview_model.parameters import STANDARD_GRAVITY_MPS2
from miqp_constraints.constraint_sources import (
    AdmissibilityConstraints,
    ConstraintSource,
    Constancy,
    ShapeConstraints,
)
from miqp_constraints._internal.validation import (
    ConfigurationError,
    validate_planar_bounds,
    validate_positive,
    validate_positive_integer,
)


@dataclass(frozen=True)
class ConstraintsConfig:
    """Configuration parameters for the MIQP linear constraints.

    All parameters immutable after construction (frozen=True).
    Units encoded in parameter names.

    Attributes:
        control_period_s: Preview step duration (dt)
        preview_horizon_steps: Number of preview steps (N)
        com_height_m: Constant CoM height used for the ZMP
        foot_half_length_m: Support rectangle half extent along x
        foot_half_width_m: Support rectangle half extent along y
        max_step_displacement_m: Forward CoM displacement bound per step (x, y)
        max_backward_displacement_m: Optional backward bound per step (x, y)
        com_velocity_limit_mps: Optional CoM velocity bound (x, y); enables
            the Constancy family
        gravity_mps2: Gravitational acceleration
    """
    # Horizon parameters
    control_period_s: float
    preview_horizon_steps: int

    # Shape constraints
    com_height_m: float
    foot_half_length_m: float
    foot_half_width_m: float

    # Admissibility constraints
    max_step_displacement_m: Tuple[float, float]
    max_backward_displacement_m: Optional[Tuple[float, float]] = None

    # Constancy constraints
    com_velocity_limit_mps: Optional[Tuple[float, float]] = None

    gravity_mps2: float = STANDARD_GRAVITY_MPS2

    def __post_init__(self) -> None:
        """Validate parameters satisfy constraints."""
        validate_positive(self.control_period_s, 'control_period_s')
        validate_positive_integer(self.preview_horizon_steps, 'preview_horizon_steps')

        validate_positive(self.com_height_m, 'com_height_m')
        validate_positive(self.foot_half_length_m, 'foot_half_length_m')
        validate_positive(self.foot_half_width_m, 'foot_half_width_m')
        validate_positive(self.gravity_mps2, 'gravity_mps2')

        validate_planar_bounds(self.max_step_displacement_m, 'max_step_displacement_m')
        if self.max_backward_displacement_m is not None:
            validate_planar_bounds(
                self.max_backward_displacement_m, 'max_backward_displacement_m'
            )
        if self.com_velocity_limit_mps is not None:
            validate_planar_bounds(self.com_velocity_limit_mps, 'com_velocity_limit_mps')

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'ConstraintsConfig':
        """Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML file containing constraint parameters

        Returns:
            ConstraintsConfig instance

        Raises:
            FileNotFoundError: If YAML file does not exist
            ConfigurationError: If required parameters missing or invalid
        """
        with open(yaml_path, 'r') as file:
            config = yaml.safe_load(file)

        if not isinstance(config, dict):
            raise ConfigurationError(f"{yaml_path} does not contain a mapping")

        # Scalars and mappings are passed through for __post_init__ to reject
        def as_pair(value):
            return tuple(value) if isinstance(value, list) else value

        def optional_pair(key: str) -> Optional[Tuple[float, float]]:
            value = config.get(key, None)
            return as_pair(value) if value is not None else None

        try:
            return cls(
                control_period_s=config['control_period_s'],
                preview_horizon_steps=config['preview_horizon_steps'],
                com_height_m=config['com_height_m'],
                foot_half_length_m=config['foot_half_length_m'],
                foot_half_width_m=config['foot_half_width_m'],
                max_step_displacement_m=as_pair(config['max_step_displacement_m']),
                max_backward_displacement_m=optional_pair('max_backward_displacement_m'),
                com_velocity_limit_mps=optional_pair('com_velocity_limit_mps'),
                gravity_mps2=config.get('gravity_mps2', STANDARD_GRAVITY_MPS2),
            )
        except KeyError as error:
            raise ConfigurationError(
                f"Missing required parameter {error} in {yaml_path}"
            ) from error

    @property
    def preview_horizon_duration_s(self) -> float:
        """Total preview window duration N * dt."""
        return self.preview_horizon_steps * self.control_period_s


def create_constraint_sources_from_config(config: ConstraintsConfig) -> List[ConstraintSource]:
    """Create the constraint families described by a configuration.

    Families are returned in stacking order: shape, admissibility and,
    when a velocity limit is configured, constancy.

    Args:
        config: Validated constraints configuration

    Returns:
        List of ConstraintSource instances
    """
    sources: List[ConstraintSource] = [
        ShapeConstraints.rectangle(
            half_length_m=config.foot_half_length_m,
            half_width_m=config.foot_half_width_m,
            com_height_m=config.com_height_m,
            gravity_mps2=config.gravity_mps2,
        ),
        AdmissibilityConstraints(
            max_displacement_m=config.max_step_displacement_m,
            max_backward_displacement_m=config.max_backward_displacement_m,
        ),
    ]
    if config.com_velocity_limit_mps is not None:
        sources.append(Constancy.velocity_limit(*config.com_velocity_limit_mps))
    return sources
