"""
SketchSnap - Hit Testing
========================

"Is the cursor on this entity?" predicates for click-to-pick.

The trim and extend tools resolve their target with pick_entities() when
nothing is selected. Tolerances are in the same units as the geometry.
"""

from typing import List, Sequence

from loguru import logger

from .config.feature_flags import is_enabled
from .config.tolerances import Tolerances
from .entities import (
    Point2D, Line, Circle, Arc, Rectangle, Point, Ellipse, Polygon, Slot, Spline,
)
from .geometry import (
    distance, angle, distance_to_line, is_point_on_circle, is_angle_in_arc,
    closest_point_on_ellipse, polygon_edges, rectangle_edges,
    slot_centerline, slot_radius, sample_spline, closest_point_on_polyline,
)
from .results import OperationResult


def hit_test_entity(entity, point: Point2D, tolerance: float = Tolerances.HIT_TEST) -> bool:
    """
    True if `point` lies within `tolerance` of the entity.

    Arcs and slots accept the boundary (<=), every other variant is strict.
    A slot is hit anywhere inside its capsule, not only on the outline.

    Raises:
        TypeError: unknown entity class
    """
    if isinstance(entity, Line):
        return distance_to_line(entity, point) < tolerance

    if isinstance(entity, Circle):
        return is_point_on_circle(entity, point, tolerance)

    if isinstance(entity, Arc):
        if abs(distance(entity.center, point) - entity.radius) > tolerance:
            return False
        return is_angle_in_arc(entity, angle(entity.center, point))

    if isinstance(entity, Point):
        return distance(point, entity.position) < tolerance

    if isinstance(entity, Ellipse):
        return distance(point, closest_point_on_ellipse(entity, point)) < tolerance

    if isinstance(entity, Polygon):
        return any(distance_to_line(edge, point) < tolerance for edge in polygon_edges(entity))

    if isinstance(entity, Rectangle):
        return any(distance_to_line(edge, point) < tolerance for edge in rectangle_edges(entity))

    if isinstance(entity, Slot):
        radius = slot_radius(entity)
        to_center = distance_to_line(slot_centerline(entity), point)
        if to_center > radius + tolerance:
            return False
        in_start_cap = distance(point, entity.start) <= radius + tolerance
        in_end_cap = distance(point, entity.end) <= radius + tolerance
        return to_center <= radius - tolerance or in_start_cap or in_end_cap

    if isinstance(entity, Spline):
        if not entity.control_points:
            return False
        samples = sample_spline(entity, Tolerances.SPLINE_HIT_SEGMENTS)
        _, dist = closest_point_on_polyline(samples, point)
        return dist < tolerance

    raise TypeError(f"Unsupported sketch entity: {type(entity).__name__}")


def pick_entities(entities: Sequence, point: Point2D,
                  tolerance: float = Tolerances.PICK) -> List:
    """All entities hit at `point`, in drawing order (construction geometry included)."""
    hits = [e for e in entities if hit_test_entity(e, point, tolerance)]
    if is_enabled("hit_test_debug"):
        logger.debug(f"[PICK] ({point.x:.3f}, {point.y:.3f}) tol={tolerance}: "
                     f"{[e.id for e in hits]}")
    return hits


def pick_entity(entities: Sequence, point: Point2D,
                tolerance: float = Tolerances.PICK) -> OperationResult:
    """
    Click target for trim/extend.

    Returns:
        NO_TARGET if nothing is hit, otherwise SUCCESS with the top-most
        (last drawn) entity as `data` and all hit ids in the message.
    """
    hits = pick_entities(entities, point, tolerance)
    if not hits:
        return OperationResult.no_target()
    return OperationResult.ok(message=",".join(e.id for e in hits), data=hits[-1])
