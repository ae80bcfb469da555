"""
SketchSnap - Feature Flags
==========================

Feature flags allow incremental rollouts and easy rollback.
New behavior is introduced behind a flag set to False and enabled after validation.

This file holds the debug flags and the entity validation policy.
"""

from typing import Dict

# Feature Flag Registry
# =====================
# The debug flags gate logging on hot paths (pointer-move rate), so they
# must stay False by default.

FEATURE_FLAGS: Dict[str, bool] = {
    # Debug modes
    "snap_debug": False,  # Candidate/winner logging in the snap resolver ([SNAP])
    "hit_test_debug": False,  # Pick logging for trim/extend targets ([PICK])

    # Entity validation
    "strict_entity_validation": True,  # Reject zero radius, empty splines etc. at construction
}


def is_enabled(flag: str) -> bool:
    """
    Checks whether a feature flag is enabled.

    Args:
        flag: Name of the feature flag

    Returns:
        True if enabled, False if disabled or unknown
    """
    return FEATURE_FLAGS.get(flag, False)


def set_flag(flag: str, value: bool) -> None:
    """
    Sets a feature flag at runtime.
    Useful for tests and debugging.

    Args:
        flag: Name of the feature flag
        value: New value
    """
    FEATURE_FLAGS[flag] = value


def get_all_flags() -> Dict[str, bool]:
    """Returns a copy of all feature flags."""
    return FEATURE_FLAGS.copy()
