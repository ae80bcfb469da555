"""
SketchSnap - Intersection Engine
================================

Closed-form line/line, circle/line and circle/circle intersections.

Degenerate configurations (parallel lines, concentric or disjoint circles,
zero-length lines) yield None or an empty list, never an exception.
"""

from typing import List, Optional
import math

from .config.tolerances import Tolerances
from .entities import Point2D, Line, Circle, Arc


def lines_intersect(line1: Line, line2: Line) -> Optional[Point2D]:
    """
    Intersection of two segments via the 2x2 determinant form.

    Returns None for parallel or near-parallel segments (|denom| < 1e-10)
    and when the crossing lies outside either segment.
    """
    x1, y1 = line1.start.x, line1.start.y
    x2, y2 = line1.end.x, line1.end.y
    x3, y3 = line2.start.x, line2.start.y
    x4, y4 = line2.end.x, line2.end.y

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < Tolerances.EPSILON_LINEAR:
        return None  # Parallel

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom

    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return Point2D(x1 + t * (x2 - x1), y1 + t * (y2 - y1))
    return None


def circle_line_intersections(circle, line: Line) -> List[Point2D]:
    """
    Intersections of a circle with the infinite line through `line`.

    Accepts anything with `center` and `radius`. The quadratic in the line
    parameter is solved in the sign-aware form, so the smaller root is not
    lost to cancellation when b*b >> 4ac.

    Returns:
        0 points (discriminant < 0), 1 point (tangent) or 2 points
    """
    # Circle-centered coordinates
    fx = line.start.x - circle.center.x
    fy = line.start.y - circle.center.y
    dx = line.end.x - line.start.x
    dy = line.end.y - line.start.y

    a = dx * dx + dy * dy
    c = fx * fx + fy * fy - circle.radius * circle.radius

    # Zero-length line: only a point lying on the circle intersects
    if a == 0:
        if abs(c) <= Tolerances.EPSILON_LINEAR * max(1.0, circle.radius * circle.radius):
            return [line.start]
        return []

    b = 2 * (fx * dx + fy * dy)
    discriminant = b * b - 4 * a * c
    if discriminant < 0:
        return []

    if discriminant == 0:
        t = -b / (2 * a)
        return [Point2D(line.start.x + t * dx, line.start.y + t * dy)]

    sqrt_disc = math.sqrt(discriminant)
    q = -0.5 * (b + math.copysign(sqrt_disc, b))
    t1 = q / a
    # q == 0 only if b == 0 and disc == 0, handled above
    t2 = c / q
    return [
        Point2D(line.start.x + t1 * dx, line.start.y + t1 * dy),
        Point2D(line.start.x + t2 * dx, line.start.y + t2 * dy),
    ]


def circle_circle_intersections(c1, c2) -> List[Point2D]:
    """
    Intersections of two full circles (radical line method).

    Concentric circles and circles further apart than r1 + r2 or nested
    inside each other (d < |r1 - r2|) do not intersect.
    """
    dx = c2.center.x - c1.center.x
    dy = c2.center.y - c1.center.y
    d = math.hypot(dx, dy)
    r1, r2 = c1.radius, c2.radius

    if d == 0 or d > r1 + r2 or d < abs(r1 - r2):
        return []

    a = (r1 * r1 - r2 * r2 + d * d) / (2 * d)
    h = math.sqrt(max(0.0, r1 * r1 - a * a))

    # Foot of the chord on the center line
    xm = c1.center.x + a * dx / d
    ym = c1.center.y + a * dy / d
    rx = -dy * (h / d)
    ry = dx * (h / d)

    points = [Point2D(xm + rx, ym + ry)]
    if h != 0:
        points.append(Point2D(xm - rx, ym - ry))
    return points


def arc_as_circle(arc: Arc) -> Circle:
    """Full circle of an arc, keeping the arc's id.

    The intersection routines then ignore the arc's span; callers get the
    circle's intersection points unfiltered.
    """
    return Circle(arc.center, arc.radius, id=arc.id, construction=arc.construction)
