import pytest

from sketchsnap.config.feature_flags import set_flag


# Global Feature Flag Defaults - Single Source of Truth for Test Isolation
# ========================================================================
# Every test starts with clean feature flags.
# Keep these defaults in sync with sketchsnap/config/feature_flags.py.
FEATURE_FLAG_DEFAULTS = {
    # Debug modes
    "snap_debug": False,
    "hit_test_debug": False,

    # Entity validation
    "strict_entity_validation": True,
}


@pytest.fixture(autouse=True)
def _global_feature_flag_isolation():
    """
    Resets all feature flags before and after every test so flag
    mutations never leak across modules.
    """
    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)

    yield

    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)
