"""
SketchSnap - Construction Helpers
=================================

Preview builders for the drawing tools: three-point arcs and ellipses
dragged out from their axes.

Usage:
    from sketchsnap.construction import make_arc_from_three_points

    result = make_arc_from_three_points(start, end, through)
    if result.success:
        arc = result.data
"""

from typing import NamedTuple, Optional
import math

from .config.tolerances import Tolerances
from .entities import Point2D, Arc, Ellipse
from .geometry import angle, distance, normalize_angle, TWO_PI
from .results import OperationResult


class ArcParameters(NamedTuple):
    """Circle through three points plus a counter-clockwise angular span"""
    center: Point2D
    radius: float
    start_angle: float
    end_angle: float


def _is_angle_between_ccw(theta: float, start: float, end: float) -> bool:
    theta %= TWO_PI
    start %= TWO_PI
    end %= TWO_PI
    if start <= end:
        return start <= theta <= end
    return theta >= start or theta <= end


def arc_from_three_points(start: Point2D, end: Point2D, through: Point2D) -> Optional[ArcParameters]:
    """
    Arc from `start` to `end` passing through `through`.

    Returns None for (nearly) collinear points, which cannot form an arc.
    If `through` only lies on the clockwise span, start and end angles are
    swapped so the result still runs counter-clockwise.
    """
    dx1 = through.x - start.x
    dy1 = through.y - start.y
    dx2 = end.x - through.x
    dy2 = end.y - through.y

    cross = dx1 * dy2 - dy1 * dx2
    if abs(cross) < Tolerances.EPSILON_LINEAR:
        return None

    # Circumcenter
    sx, sy = start.x, start.y
    mx, my = through.x, through.y
    ex, ey = end.x, end.y
    d = 2 * (sx * (my - ey) + mx * (ey - sy) + ex * (sy - my))
    ux = ((sx**2 + sy**2) * (my - ey) + (mx**2 + my**2) * (ey - sy) + (ex**2 + ey**2) * (sy - my)) / d
    uy = ((sx**2 + sy**2) * (ex - mx) + (mx**2 + my**2) * (sx - ex) + (ex**2 + ey**2) * (mx - sx)) / d
    center = Point2D(ux, uy)

    start_angle = normalize_angle(angle(center, start))
    through_angle = normalize_angle(angle(center, through))
    end_angle = normalize_angle(angle(center, end))

    ccw_contains = _is_angle_between_ccw(through_angle, start_angle, end_angle)
    cw_contains = _is_angle_between_ccw(through_angle, end_angle, start_angle)
    if not ccw_contains and cw_contains:
        start_angle, end_angle = end_angle, start_angle

    return ArcParameters(center, distance(start, center), start_angle, end_angle)


def make_arc_from_three_points(start: Point2D, end: Point2D, through: Point2D,
                               construction: bool = False) -> OperationResult:
    """Builds an Arc entity; ERROR status for collinear input."""
    params = arc_from_three_points(start, end, through)
    if params is None:
        return OperationResult.error("Points are collinear, cannot form an arc")
    arc = Arc(params.center, params.radius, params.start_angle, params.end_angle,
              construction=construction)
    return OperationResult.ok(data=arc)


def ellipse_minor_axis(center: Point2D, target: Point2D, rotation: float) -> float:
    """
    Distance of `target` from the major axis through `center` at `rotation`,
    floored at Tolerances.ELLIPSE_MIN_MINOR_AXIS.
    """
    nx = -math.sin(rotation)
    ny = math.cos(rotation)
    projection = abs((target.x - center.x) * nx + (target.y - center.y) * ny)
    return max(projection, Tolerances.ELLIPSE_MIN_MINOR_AXIS)


def ellipse_from_axes(center: Point2D, major_end: Point2D, minor_target: Point2D,
                      construction: bool = False) -> Ellipse:
    """
    Ellipse tool preview: the first drag sets the major axis end, the
    second the minor axis extent.

    Both axes are floored at 1.0, so a click on the center still gives a
    valid preview (rotation 0).
    """
    rotation = angle(center, major_end)
    return Ellipse(
        center,
        major_axis=max(distance(center, major_end), Tolerances.ELLIPSE_MIN_MAJOR_AXIS),
        minor_axis=ellipse_minor_axis(center, minor_target, rotation),
        rotation=rotation,
        construction=construction,
    )
