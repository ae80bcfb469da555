"""
SketchSnap - 2D sketch geometry, snapping and hit testing
"""

from .entities import (
    Point2D, BoundingBox, EntityType, InvalidGeometryError,
    Line, Circle, Arc, Rectangle, Point, Ellipse, Polygon, Slot, Spline,
    Entity, ENTITY_CLASSES,
)

from .geometry import (
    distance, angle, normalize_angle, midpoint,
    closest_point_on_line, closest_point_on_circle, closest_point_on_ellipse,
    point_on_circle, point_on_arc, point_on_ellipse, is_angle_in_arc,
    get_polygon_vertices, polygon_edges, slot_centerline,
    spline_point_at, spline_tangent_at,
    get_entity_bounding_box, snap_to_grid, snap_to_angle,
)

from .intersections import (
    lines_intersect, circle_line_intersections, circle_circle_intersections
)

from .snapper import (
    SnapType, SnapTarget, SnapSettings, SnapDetector,
    SNAP_PRIORITY_ORDER, priority_of,
    find_snap_target, resolve_candidates, collect_candidates
)

from .hit_test import hit_test_entity, pick_entities, pick_entity

from .construction import (
    ArcParameters, arc_from_three_points, make_arc_from_three_points,
    ellipse_minor_axis, ellipse_from_axes
)

from .results import OperationResult, ResultStatus
