"""
SketchSnap - Centralized Tolerance Configuration
================================================

All epsilons and pick/snap radii in one place.

Tolerance philosophy:
- Linear algebra (determinants, parallel tests): 1e-10 - fixed, part of the contract
- Snap radius: 10 units - screen-space pixels at the canvas boundary
- Hit test: 5 units, trim/extend picking: 6 units
- Point-on-curve predicates: 0.1 units

Usage:
    from sketchsnap.config.tolerances import Tolerances

    # Directly as class attributes
    eps = Tolerances.EPSILON_LINEAR

    # Or via convenience functions
    from sketchsnap.config.tolerances import snap_distance
    radius = snap_distance()
"""

import math


class Tolerances:
    """
    Central tolerance constants for SketchSnap.

    Categories:
    - EPSILON_*: numerical stability
    - SNAP_* / HIT_* / PICK: interactive tolerances (model or pixel units)
    - SPLINE_* / ELLIPSE_*: sampling and construction parameters
    """

    # =========================================================================
    # Mathematical epsilons (numerical stability)
    # =========================================================================

    # Determinant threshold for line/line and three-point arc degeneracy
    EPSILON_LINEAR = 1e-10

    # =========================================================================
    # Snapping
    # =========================================================================

    # Default snap radius (strict: candidates AT this distance are rejected)
    SNAP_DISTANCE = 10.0

    # Angle snapping window for snap_to_angle
    ANGLE_SNAP = math.radians(5.0)

    # =========================================================================
    # Hit testing / picking
    # =========================================================================

    # Default tolerance of hit_test_entity
    HIT_TEST = 5.0

    # Trim/Extend tools pick with a slightly larger radius
    PICK = 6.0

    # is_point_on_line / is_point_on_circle default
    POINT_ON_CURVE = 0.1

    # =========================================================================
    # Constraint helpers
    # =========================================================================

    # Horizontal/vertical/parallel/perpendicular angular tolerance (radians)
    CONSTRAINT_ANGULAR = 0.01

    # =========================================================================
    # Sampling / construction
    # =========================================================================

    # Piecewise-linear segments for nearest-point on a spline
    SPLINE_NEAREST_SEGMENTS = 32

    # Piecewise-linear segments for spline hit testing
    SPLINE_HIT_SEGMENTS = 20

    # Finite-difference step for spline tangents
    SPLINE_TANGENT_DELTA = 1e-3

    # Lower bound for the ellipse major axis while dragging the ellipse tool
    ELLIPSE_MIN_MAJOR_AXIS = 1.0

    # Lower bound for the ellipse minor axis while dragging the ellipse tool
    ELLIPSE_MIN_MINOR_AXIS = 1.0


# =============================================================================
# Convenience functions
# =============================================================================

def snap_distance() -> float:
    """Returns the default snap radius."""
    return Tolerances.SNAP_DISTANCE


def hit_tolerance() -> float:
    """Returns the default hit-test tolerance."""
    return Tolerances.HIT_TEST


def pick_tolerance() -> float:
    """Returns the trim/extend pick tolerance."""
    return Tolerances.PICK


# =============================================================================
# Tolerance validation (debugging aid)
# =============================================================================

def validate_tolerances():
    """
    Checks that all tolerances have sensible values.
    Useful for tests and debugging.
    """
    issues = []

    if not (0.0 < Tolerances.EPSILON_LINEAR <= 1e-6):
        issues.append(f"EPSILON_LINEAR out of sensible range: {Tolerances.EPSILON_LINEAR}")

    if Tolerances.SNAP_DISTANCE <= 0.0:
        issues.append(f"SNAP_DISTANCE must be positive: {Tolerances.SNAP_DISTANCE}")

    # Picking for trim/extend should not be stricter than plain hit testing
    if Tolerances.PICK < Tolerances.HIT_TEST:
        issues.append(f"PICK ({Tolerances.PICK}) stricter than HIT_TEST ({Tolerances.HIT_TEST})")

    if Tolerances.SPLINE_NEAREST_SEGMENTS < 1 or Tolerances.SPLINE_HIT_SEGMENTS < 1:
        issues.append("Spline sampling needs at least one segment")

    return issues


# Validate on import (warning only, never an error)
_validation_issues = validate_tolerances()
if _validation_issues:
    from loguru import logger
    for issue in _validation_issues:
        logger.warning(f"Tolerance validation: {issue}")
