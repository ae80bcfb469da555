"""
SketchSnap - Configuration Module
=================================

Central configuration for all global settings.
"""

from .tolerances import Tolerances, snap_distance, hit_tolerance, pick_tolerance
from .feature_flags import is_enabled, set_flag, get_all_flags, FEATURE_FLAGS
