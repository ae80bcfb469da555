"""
SketchSnap - Geometry Library
Distances, angles, parametric evaluation, closest points and bounding boxes
for all sketch entities. Every function is pure and never mutates its input.
"""

from typing import List, Optional, Sequence, Tuple
import math

import numpy as np

from .config.tolerances import Tolerances
from .entities import (
    Point2D, BoundingBox, Line, Circle, Arc, Rectangle, Point, Ellipse,
    Polygon, Slot, Spline,
)

TWO_PI = 2 * math.pi


# === Distances and lengths ===

def distance(p1: Point2D, p2: Point2D) -> float:
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def distance_squared(p1: Point2D, p2: Point2D) -> float:
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    return dx * dx + dy * dy


def line_length(line: Line) -> float:
    return distance(line.start, line.end)


# === Angles ===

def angle(p1: Point2D, p2: Point2D) -> float:
    """Direction angle from p1 to p2 in radians"""
    return math.atan2(p2.y - p1.y, p2.x - p1.x)


def normalize_angle(rad: float) -> float:
    """Maps an angle into (-pi, pi]."""
    rad = math.fmod(rad, TWO_PI)
    if rad > math.pi:
        rad -= TWO_PI
    elif rad <= -math.pi:
        rad += TWO_PI
    return rad


def angle_between_lines(line1: Line, line2: Line) -> float:
    """Signed angle from line1 to line2, normalized to (-pi, pi]."""
    return normalize_angle(angle(line2.start, line2.end) - angle(line1.start, line1.end))


def rad_to_deg(rad: float) -> float:
    return rad * (180.0 / math.pi)


def deg_to_rad(deg: float) -> float:
    return deg * (math.pi / 180.0)


# === Point operations ===

def midpoint(p1: Point2D, p2: Point2D) -> Point2D:
    return Point2D((p1.x + p2.x) / 2, (p1.y + p2.y) / 2)


def lerp(p1: Point2D, p2: Point2D, t: float) -> Point2D:
    return Point2D(p1.x + (p2.x - p1.x) * t, p1.y + (p2.y - p1.y) * t)


def rotate(point: Point2D, center: Point2D, rad: float) -> Point2D:
    """Rotates point around center by rad (counter-clockwise)"""
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    dx = point.x - center.x
    dy = point.y - center.y
    return Point2D(center.x + dx * cos_a - dy * sin_a,
                   center.y + dx * sin_a + dy * cos_a)


def translate(point: Point2D, dx: float, dy: float) -> Point2D:
    return Point2D(point.x + dx, point.y + dy)


def scale(point: Point2D, center: Point2D, factor: float) -> Point2D:
    return Point2D(center.x + (point.x - center.x) * factor,
                   center.y + (point.y - center.y) * factor)


# === Vector operations ===

def normalize(p1: Point2D, p2: Point2D) -> Point2D:
    """Unit vector from p1 to p2; the zero vector if both coincide"""
    length = distance(p1, p2)
    if length == 0:
        return Point2D(0.0, 0.0)
    return Point2D((p2.x - p1.x) / length, (p2.y - p1.y) / length)


def dot_product(v1: Point2D, v2: Point2D) -> float:
    return v1.x * v2.x + v1.y * v2.y


def cross_product(v1: Point2D, v2: Point2D) -> float:
    return v1.x * v2.y - v1.y * v2.x


def perpendicular(v: Point2D) -> Point2D:
    return Point2D(-v.y, v.x)


# === Line ===

def point_on_line(line: Line, t: float) -> Point2D:
    """Point at parameter t (0=start, 1=end)"""
    return lerp(line.start, line.end, t)


def closest_point_on_line(line: Line, point: Point2D) -> Point2D:
    """Orthogonal projection onto the segment, clamped to the endpoints.

    A zero-length line returns its start point.
    """
    dx = line.end.x - line.start.x
    dy = line.end.y - line.start.y
    length_sq = dx * dx + dy * dy

    if length_sq == 0:
        return line.start

    t = ((point.x - line.start.x) * dx + (point.y - line.start.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return point_on_line(line, t)


def distance_to_line(line: Line, point: Point2D) -> float:
    return distance(point, closest_point_on_line(line, point))


def is_point_on_line(line: Line, point: Point2D, tolerance: float = Tolerances.POINT_ON_CURVE) -> bool:
    return distance_to_line(line, point) < tolerance


# === Circle ===

def point_on_circle(circle: Circle, theta: float) -> Point2D:
    return Point2D(circle.center.x + circle.radius * math.cos(theta),
                   circle.center.y + circle.radius * math.sin(theta))


def is_point_on_circle(circle: Circle, point: Point2D, tolerance: float = Tolerances.POINT_ON_CURVE) -> bool:
    return abs(distance(circle.center, point) - circle.radius) < tolerance


def closest_point_on_circle(circle, point: Point2D) -> Point2D:
    """Radial projection from the center.

    Accepts anything with `center` and `radius` (circles and arcs). The query
    point at the center has no direction; angle 0 is used instead.
    """
    dx = point.x - circle.center.x
    dy = point.y - circle.center.y
    dist = math.hypot(dx, dy)
    if dist == 0:
        return Point2D(circle.center.x + circle.radius, circle.center.y)

    s = circle.radius / dist
    return Point2D(circle.center.x + dx * s, circle.center.y + dy * s)


# === Arc ===

def point_on_arc(arc: Arc, theta: float) -> Point2D:
    return Point2D(arc.center.x + arc.radius * math.cos(theta),
                   arc.center.y + arc.radius * math.sin(theta))


def arc_start_point(arc: Arc) -> Point2D:
    return point_on_arc(arc, arc.start_angle)


def arc_end_point(arc: Arc) -> Point2D:
    return point_on_arc(arc, arc.end_angle)


def arc_sweep(arc: Arc) -> float:
    """Counter-clockwise opening angle in [0, 2pi)"""
    return (arc.end_angle - arc.start_angle) % TWO_PI


def arc_midpoint(arc: Arc) -> Point2D:
    """Point halfway along the counter-clockwise sweep"""
    # Not (start + end) / 2, which lands off the arc when start > end
    return point_on_arc(arc, arc.start_angle + arc_sweep(arc) / 2)


def is_angle_in_arc(arc: Arc, theta: float) -> bool:
    """Angular containment test, handles spans that wrap through +-pi."""
    theta = normalize_angle(theta)
    start = normalize_angle(arc.start_angle)
    end = normalize_angle(arc.end_angle)

    if start <= end:
        return start <= theta <= end
    # Wraps over the seam (e.g. 170° to -170°)
    return theta >= start or theta <= end


def arc_length(arc: Arc) -> float:
    return arc.radius * abs(arc.end_angle - arc.start_angle)


# === Ellipse ===

def point_on_ellipse(ellipse: Ellipse, theta: float) -> Point2D:
    """Point at parametric angle theta (rotate, then translate)."""
    local_x = ellipse.major_axis * math.cos(theta)
    local_y = ellipse.minor_axis * math.sin(theta)
    cos_rot = math.cos(ellipse.rotation)
    sin_rot = math.sin(ellipse.rotation)
    return Point2D(ellipse.center.x + local_x * cos_rot - local_y * sin_rot,
                   ellipse.center.y + local_x * sin_rot + local_y * cos_rot)


def closest_point_on_ellipse(ellipse: Ellipse, point: Point2D) -> Point2D:
    """
    Approximate closest point on an ellipse.

    The query point is moved into the unrotated local frame, scaled onto
    the unit circle, normalized and scaled back. This is a single step and
    not the true foot point for eccentric ellipses; snapping and hit
    testing rely on exactly this behavior.
    """
    cos_rot = math.cos(ellipse.rotation)
    sin_rot = math.sin(ellipse.rotation)
    dx = point.x - ellipse.center.x
    dy = point.y - ellipse.center.y

    # Inverse rotation into the local frame
    local_x = cos_rot * dx + sin_rot * dy
    local_y = -sin_rot * dx + cos_rot * dy

    sx = local_x / ellipse.major_axis
    sy = local_y / ellipse.minor_axis
    length = math.hypot(sx, sy)
    if length == 0:
        return point_on_ellipse(ellipse, 0.0)

    px = sx / length * ellipse.major_axis
    py = sy / length * ellipse.minor_axis
    return Point2D(ellipse.center.x + px * cos_rot - py * sin_rot,
                   ellipse.center.y + px * sin_rot + py * cos_rot)


def ellipse_axis_endpoints(ellipse: Ellipse) -> Tuple[Point2D, Point2D]:
    """Both extremities of the major axis"""
    return point_on_ellipse(ellipse, 0.0), point_on_ellipse(ellipse, math.pi)


# === Polygon ===

def get_polygon_vertices(polygon: Polygon) -> List[Point2D]:
    step = TWO_PI / polygon.sides
    return [
        Point2D(polygon.center.x + polygon.radius * math.cos(polygon.rotation + i * step),
                polygon.center.y + polygon.radius * math.sin(polygon.rotation + i * step))
        for i in range(polygon.sides)
    ]


def _edges_from_vertices(owner, vertices: Sequence[Point2D]) -> List[Line]:
    n = len(vertices)
    return [
        Line(vertices[i], vertices[(i + 1) % n], id=f"{owner.id}-edge-{i}",
             construction=owner.construction)
        for i in range(n)
    ]


def polygon_edges(polygon: Polygon) -> List[Line]:
    """Closed edge loop (last vertex connects back to the first)"""
    return _edges_from_vertices(polygon, get_polygon_vertices(polygon))


def polygon_centroid(polygon: Polygon) -> Point2D:
    vertices = get_polygon_vertices(polygon)
    n = len(vertices)
    return Point2D(sum(v.x for v in vertices) / n, sum(v.y for v in vertices) / n)


# === Rectangle ===

def rectangle_corners(rect: Rectangle) -> List[Point2D]:
    """Corners in drawing order starting at top_left"""
    tl, br = rect.top_left, rect.bottom_right
    return [tl, Point2D(br.x, tl.y), br, Point2D(tl.x, br.y)]


def rectangle_edges(rect: Rectangle) -> List[Line]:
    return _edges_from_vertices(rect, rectangle_corners(rect))


def rectangle_center(rect: Rectangle) -> Point2D:
    return midpoint(rect.top_left, rect.bottom_right)


# === Slot ===

def slot_endpoints(slot: Slot) -> Tuple[Point2D, Point2D]:
    return slot.start, slot.end


def slot_length(slot: Slot) -> float:
    return distance(slot.start, slot.end)


def slot_radius(slot: Slot) -> float:
    return slot.width / 2


def slot_direction(slot: Slot) -> Point2D:
    return normalize(slot.start, slot.end)


def slot_centerline(slot: Slot) -> Line:
    return Line(slot.start, slot.end, id=f"{slot.id}-centerline",
                construction=slot.construction)


# === Spline ===

def spline_point_at(spline: Spline, t: float) -> Point2D:
    """
    Evaluates the spline at t in [0, 1] with de Casteljau.

    Only the first min(degree, n - 1) + 1 control points take part, so this
    is a segment-local Bezier evaluation rather than a global B-spline basis.
    """
    cps = spline.control_points
    if not cps:
        return Point2D(0.0, 0.0)
    if len(cps) == 1:
        return cps[0]

    degree = min(spline.degree, len(cps) - 1)
    points = list(cps[:degree + 1])
    for r in range(1, degree + 1):
        for i in range(degree - r + 1):
            points[i] = lerp(points[i], points[i + 1], t)
    return points[0]


def spline_tangent_at(spline: Spline, t: float) -> Point2D:
    """Unit tangent by central finite difference"""
    delta = Tolerances.SPLINE_TANGENT_DELTA
    p1 = spline_point_at(spline, max(0.0, t - delta))
    p2 = spline_point_at(spline, min(1.0, t + delta))
    return normalize(p1, p2)


def sample_spline(spline: Spline, segments: int) -> np.ndarray:
    """
    Piecewise-linear sampling as an (segments + 1, 2) array.

    Row 0 is the first control point, rows 1..segments are spline_point_at(i / segments).
    """
    cps = spline.control_points
    first = cps[0] if cps else Point2D(0.0, 0.0)
    samples = [first.as_tuple()]
    for i in range(1, segments + 1):
        samples.append(spline_point_at(spline, i / segments).as_tuple())
    return np.asarray(samples, dtype=float)


def spline_centroid(spline: Spline) -> Optional[Point2D]:
    cps = spline.control_points
    if not cps:
        return None
    n = len(cps)
    return Point2D(sum(p.x for p in cps) / n, sum(p.y for p in cps) / n)


# === Polyline ===

def closest_point_on_polyline(points: np.ndarray, point: Point2D) -> Tuple[Point2D, float]:
    """
    Closest point on the open polyline through `points` (shape (n, 2)).

    All segments are projected at once; degenerate segments project onto
    their start vertex. Ties resolve to the first segment.
    """
    pts = np.asarray(points, dtype=float)
    if len(pts) == 1:
        only = Point2D(pts[0, 0], pts[0, 1])
        return only, distance(only, point)

    a = pts[:-1]
    d = pts[1:] - a
    q = np.array([point.x, point.y])

    length_sq = np.einsum("ij,ij->i", d, d)
    raw_t = np.einsum("ij,ij->i", q - a, d)
    t = np.zeros_like(length_sq)
    nonzero = length_sq > 0
    t[nonzero] = np.clip(raw_t[nonzero] / length_sq[nonzero], 0.0, 1.0)

    proj = a + d * t[:, None]
    dists = np.hypot(proj[:, 0] - q[0], proj[:, 1] - q[1])
    best = int(np.argmin(dists))
    return Point2D(proj[best, 0], proj[best, 1]), float(dists[best])


# === Bounding box ===

def _box_of(points: Sequence[Point2D]) -> BoundingBox:
    return BoundingBox(
        Point2D(min(p.x for p in points), min(p.y for p in points)),
        Point2D(max(p.x for p in points), max(p.y for p in points)),
    )


def _box_around(center: Point2D, dx: float, dy: float) -> BoundingBox:
    return BoundingBox(Point2D(center.x - dx, center.y - dy),
                       Point2D(center.x + dx, center.y + dy))


def get_entity_bounding_box(entity) -> BoundingBox:
    """Conservative axis-aligned bounds of any entity variant"""
    if isinstance(entity, Line):
        return _box_of([entity.start, entity.end])

    if isinstance(entity, (Circle, Arc)):
        # Arcs use their full circle
        return _box_around(entity.center, entity.radius, entity.radius)

    if isinstance(entity, Rectangle):
        return _box_of([entity.top_left, entity.bottom_right])

    if isinstance(entity, Point):
        return BoundingBox(entity.position, entity.position)

    if isinstance(entity, Ellipse):
        cos_r = math.cos(entity.rotation)
        sin_r = math.sin(entity.rotation)
        dx = math.hypot(entity.major_axis * cos_r, entity.minor_axis * sin_r)
        dy = math.hypot(entity.major_axis * sin_r, entity.minor_axis * cos_r)
        return _box_around(entity.center, dx, dy)

    if isinstance(entity, Polygon):
        return _box_of(get_polygon_vertices(entity))

    if isinstance(entity, Slot):
        box = _box_of([entity.start, entity.end])
        return expand_bounding_box(box, slot_radius(entity))

    if isinstance(entity, Spline):
        if not entity.control_points:
            return BoundingBox(Point2D(0.0, 0.0), Point2D(0.0, 0.0))
        return _box_of(entity.control_points)

    raise TypeError(f"Unsupported sketch entity: {type(entity).__name__}")


def is_point_in_bounding_box(point: Point2D, bbox: BoundingBox, margin: float = 0.0) -> bool:
    return (bbox.min.x - margin <= point.x <= bbox.max.x + margin
            and bbox.min.y - margin <= point.y <= bbox.max.y + margin)


def expand_bounding_box(bbox: BoundingBox, margin: float) -> BoundingBox:
    return BoundingBox(Point2D(bbox.min.x - margin, bbox.min.y - margin),
                       Point2D(bbox.max.x + margin, bbox.max.y + margin))


def union_bounding_boxes(boxes: Sequence[BoundingBox]) -> Optional[BoundingBox]:
    """Smallest box containing all given boxes, None for an empty input"""
    if not boxes:
        return None
    return _box_of([b.min for b in boxes] + [b.max for b in boxes])


# === Constraint helpers ===

def is_horizontal(line: Line, tolerance: float = Tolerances.CONSTRAINT_ANGULAR) -> bool:
    ang = angle(line.start, line.end)
    return abs(ang) < tolerance or abs(abs(ang) - math.pi) < tolerance


def is_vertical(line: Line, tolerance: float = Tolerances.CONSTRAINT_ANGULAR) -> bool:
    ang = angle(line.start, line.end)
    return abs(abs(ang) - math.pi / 2) < tolerance


def are_parallel(line1: Line, line2: Line, tolerance: float = Tolerances.CONSTRAINT_ANGULAR) -> bool:
    ang = angle_between_lines(line1, line2)
    return abs(ang) < tolerance or abs(abs(ang) - math.pi) < tolerance


def are_perpendicular(line1: Line, line2: Line, tolerance: float = Tolerances.CONSTRAINT_ANGULAR) -> bool:
    ang = angle_between_lines(line1, line2)
    return abs(abs(ang) - math.pi / 2) < tolerance


# === Grid / angle snapping ===

def snap_to_grid(point: Point2D, grid_size: float) -> Point2D:
    # round() is banker's rounding; floor(v + 0.5) rounds halves up
    return Point2D(math.floor(point.x / grid_size + 0.5) * grid_size,
                   math.floor(point.y / grid_size + 0.5) * grid_size)


def snap_to_angle(start: Point2D, end: Point2D, snap_angles: Sequence[float]) -> Point2D:
    """
    Rotates `end` around `start` onto the closest of `snap_angles`
    if that one is within Tolerances.ANGLE_SNAP, keeping the length.
    """
    current = angle(start, end)
    dist = distance(start, end)

    closest = current
    min_diff = math.inf
    for candidate in snap_angles:
        diff = abs(normalize_angle(current - candidate))
        if diff < min_diff:
            min_diff = diff
            closest = candidate

    if min_diff < Tolerances.ANGLE_SNAP:
        return Point2D(start.x + dist * math.cos(closest),
                       start.y + dist * math.sin(closest))
    return end
