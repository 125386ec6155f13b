"""MIQP linear constraints module for the walking stabilizer.

This module assembles the stacked inequality system A·X <= rhs over the
preview window from a set of constraint families.

Public API:
    - MIQPLinearConstraints: Constraint assembler (A built once, rhs per tick)
    - AssemblyStage: Construction stage enum
    - ConstraintsConfig: Configuration dataclass loaded from YAML
    - create_constraint_sources_from_config: Build families from a config
    - ConstraintSource: Interface implemented by every family
    - ShapeConstraints: ZMP inside the support polygon
    - AdmissibilityConstraints: Bounded step-to-step CoM displacement
    - Constancy: Same-step upper bound S
    - ConfigurationError: Malformed configuration, blocks or buffers
    - StateDimensionError: Malformed live auxiliary state
"""

from miqp_constraints._internal.validation import (
    ConfigurationError,
    StateDimensionError,
)
from miqp_constraints.constraint_sources import (
    ConstraintSource,
    ShapeConstraints,
    AdmissibilityConstraints,
    Constancy,
)
from miqp_constraints.config import (
    ConstraintsConfig,
    create_constraint_sources_from_config,
)
from miqp_constraints.linear_constraints import (
    MIQPLinearConstraints,
    AssemblyStage,
)

__all__ = [
    'MIQPLinearConstraints',
    'AssemblyStage',
    'ConstraintsConfig',
    'create_constraint_sources_from_config',
    'ConstraintSource',
    'ShapeConstraints',
    'AdmissibilityConstraints',
    'Constancy',
    'ConfigurationError',
    'StateDimensionError',
]
