"""
SketchSnap - Snap Resolver
==========================

Turns a raw cursor position into the single best snap point.

Candidates come from the grid, from entity features (endpoints, midpoints,
centers, nearest point on the curve) and from curve/curve intersections.
Every candidate closer than `snap_distance` competes; the winner is picked
by priority first and distance second, so an exact endpoint a few units
away beats a curve point right under the cursor.

Usage:
    from sketchsnap.snapper import SnapDetector, SnapSettings

    detector = SnapDetector(SnapSettings(snap_distance=10.0))
    detector.update_entities(entities)      # fresh snapshot per query
    target = detector.find_snap_target(cursor, grid_size=5.0)

    # or without any cached state
    target = find_snap_target(entities, settings, cursor, grid_size=5.0)
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from enum import Enum

from loguru import logger

from .config.feature_flags import is_enabled
from .config.tolerances import Tolerances
from .entities import (
    Point2D, Line, Circle, Arc, Rectangle, Point, Ellipse, Polygon, Slot, Spline,
)
from .geometry import (
    distance, midpoint, angle, snap_to_grid,
    closest_point_on_line, closest_point_on_circle, closest_point_on_ellipse,
    closest_point_on_polyline, is_angle_in_arc, is_point_in_bounding_box,
    get_entity_bounding_box, arc_start_point, arc_end_point, arc_midpoint,
    ellipse_axis_endpoints, get_polygon_vertices, polygon_edges, polygon_centroid,
    rectangle_corners, rectangle_edges, rectangle_center,
    slot_centerline, slot_direction, slot_radius,
    sample_spline, spline_centroid,
)
from .intersections import (
    lines_intersect, circle_line_intersections, circle_circle_intersections, arc_as_circle,
)


class SnapType(Enum):
    """Snap categories"""
    GRID = "grid"
    ENDPOINT = "endpoint"
    MIDPOINT = "midpoint"
    CENTER = "center"
    INTERSECTION = "intersection"
    PERPENDICULAR = "perpendicular"
    TANGENT = "tangent"
    NEAREST = "nearest"


# Highest priority first. Every SnapType must appear exactly once.
SNAP_PRIORITY_ORDER: Tuple[SnapType, ...] = (
    SnapType.ENDPOINT,
    SnapType.CENTER,
    SnapType.MIDPOINT,
    SnapType.INTERSECTION,
    SnapType.PERPENDICULAR,
    SnapType.TANGENT,
    SnapType.NEAREST,
    SnapType.GRID,
)

_PRIORITY_RANK: Dict[SnapType, int] = {t: rank for rank, t in enumerate(SNAP_PRIORITY_ORDER, start=1)}


def priority_of(snap_type: SnapType) -> int:
    """Rank of a snap type, 1 = most important"""
    return _PRIORITY_RANK[snap_type]


@dataclass(frozen=True)
class SnapTarget:
    """A snap candidate or the resolved snap result"""
    type: SnapType
    position: Point2D
    distance: float
    entity_id: Optional[str] = None

    @property
    def priority(self) -> int:
        return priority_of(self.type)


@dataclass
class SnapSettings:
    """Per-category toggles and the snap radius (strict: distance < snap_distance)"""
    enabled: bool = True
    grid_snap: bool = True
    endpoint_snap: bool = True
    midpoint_snap: bool = True
    center_snap: bool = True
    intersection_snap: bool = True
    perpendicular_snap: bool = True
    tangent_snap: bool = True
    snap_distance: float = Tolerances.SNAP_DISTANCE

    def updated(self, **changes) -> 'SnapSettings':
        """Copy with the given fields replaced (partial settings update)."""
        return replace(self, **changes)


# --- Entity features ---

def entity_endpoints(entity) -> List[Point2D]:
    """Points offered for endpoint snapping"""
    if isinstance(entity, (Line, Slot)):
        return [entity.start, entity.end]
    if isinstance(entity, Arc):
        return [arc_start_point(entity), arc_end_point(entity)]
    if isinstance(entity, Point):
        return [entity.position]
    if isinstance(entity, Ellipse):
        return list(ellipse_axis_endpoints(entity))
    if isinstance(entity, Polygon):
        return get_polygon_vertices(entity)
    if isinstance(entity, Rectangle):
        return rectangle_corners(entity)
    if isinstance(entity, Spline):
        cps = entity.control_points
        return [cps[0], cps[-1]] if cps else []
    if isinstance(entity, Circle):
        return []
    raise TypeError(f"Unsupported sketch entity: {type(entity).__name__}")


def entity_midpoint(entity) -> Optional[Point2D]:
    if isinstance(entity, (Line, Slot)):
        return midpoint(entity.start, entity.end)
    if isinstance(entity, Arc):
        return arc_midpoint(entity)
    if isinstance(entity, Polygon):
        return polygon_centroid(entity)
    if isinstance(entity, (Circle, Rectangle, Point, Ellipse, Spline)):
        return None
    raise TypeError(f"Unsupported sketch entity: {type(entity).__name__}")


def entity_center(entity) -> Optional[Point2D]:
    if isinstance(entity, (Circle, Arc, Ellipse)):
        return entity.center
    if isinstance(entity, Rectangle):
        return rectangle_center(entity)
    if isinstance(entity, Slot):
        return midpoint(entity.start, entity.end)
    if isinstance(entity, Polygon):
        return polygon_centroid(entity)
    if isinstance(entity, Spline):
        return spline_centroid(entity)
    if isinstance(entity, (Line, Point)):
        return None
    raise TypeError(f"Unsupported sketch entity: {type(entity).__name__}")


def _closest_on_edges(edges: Sequence[Line], point: Point2D) -> Tuple[Point2D, float]:
    candidates = [closest_point_on_line(edge, point) for edge in edges]
    best = min(candidates, key=lambda p: distance(point, p))
    return best, distance(point, best)


def nearest_point_on_entity(entity, point: Point2D) -> Optional[Tuple[Point2D, float]]:
    """
    Nearest point on the entity's outline and its distance to `point`.

    Returns None where there is nothing to project onto: standalone points,
    arcs whose span does not face the cursor, empty splines.
    """
    if isinstance(entity, Line):
        nearest = closest_point_on_line(entity, point)
        return nearest, distance(point, nearest)

    if isinstance(entity, Circle):
        nearest = closest_point_on_circle(entity, point)
        return nearest, distance(point, nearest)

    if isinstance(entity, Arc):
        if not is_angle_in_arc(entity, angle(entity.center, point)):
            return None
        nearest = closest_point_on_circle(entity, point)
        return nearest, distance(point, nearest)

    if isinstance(entity, Ellipse):
        nearest = closest_point_on_ellipse(entity, point)
        return nearest, distance(point, nearest)

    if isinstance(entity, Polygon):
        return _closest_on_edges(polygon_edges(entity), point)

    if isinstance(entity, Rectangle):
        return _closest_on_edges(rectangle_edges(entity), point)

    if isinstance(entity, Slot):
        on_center = closest_point_on_line(slot_centerline(entity), point)
        direction = slot_direction(entity)
        nx, ny = -direction.y, direction.x
        dot = (point.x - on_center.x) * nx + (point.y - on_center.y) * ny
        # Offset toward the cursor side; on the centerline itself no offset
        side = (dot > 0) - (dot < 0)
        r = slot_radius(entity)
        nearest = Point2D(on_center.x + nx * side * r, on_center.y + ny * side * r)
        return nearest, distance(point, nearest)

    if isinstance(entity, Spline):
        if not entity.control_points:
            return None
        samples = sample_spline(entity, Tolerances.SPLINE_NEAREST_SEGMENTS)
        return closest_point_on_polyline(samples, point)

    if isinstance(entity, Point):
        return None

    raise TypeError(f"Unsupported sketch entity: {type(entity).__name__}")


def nearest_snap_type(entity) -> SnapType:
    """Tag of the nearest-point candidate: line-like, curved or other"""
    if isinstance(entity, (Line, Slot)):
        return SnapType.PERPENDICULAR
    if isinstance(entity, (Circle, Arc, Ellipse)):
        return SnapType.TANGENT
    return SnapType.NEAREST


# --- Candidate generation ---

def _check_point(candidates: List[SnapTarget], snap_type: SnapType, position: Point2D,
                 query: Point2D, snap_distance: float, entity_id: Optional[str] = None) -> None:
    dist = distance(query, position)
    if dist < snap_distance:
        candidates.append(SnapTarget(snap_type, position, dist, entity_id))


def _intersection_points(first, second, cache: Optional[dict], solver) -> List[Point2D]:
    if cache is None:
        return solver(first, second)
    key = (first, second)
    if key not in cache:
        cache[key] = solver(first, second)
    return cache[key]


def _line_intersection_list(a: Line, b: Line) -> List[Point2D]:
    pt = lines_intersect(a, b)
    return [pt] if pt is not None else []


def collect_intersections(entities: Iterable, point: Point2D, snap_distance: float,
                          cache: Optional[dict] = None) -> List[SnapTarget]:
    """
    Intersection candidates among all entities, construction geometry included.

    Slots take part through their centerline. Arcs are promoted to full
    circles, so points outside the arc span are kept.
    A pair is only solved when the cursor is within `snap_distance` of the
    bounding box that must contain its intersection points.
    """
    lines: List[Line] = []
    circles: List[Circle] = []
    for entity in entities:
        if isinstance(entity, Line):
            lines.append(entity)
        elif isinstance(entity, Slot):
            lines.append(slot_centerline(entity))
        elif isinstance(entity, Circle):
            circles.append(entity)
        elif isinstance(entity, Arc):
            circles.append(arc_as_circle(entity))

    margin = snap_distance + Tolerances.EPSILON_LINEAR
    line_near = [is_point_in_bounding_box(point, get_entity_bounding_box(l), margin) for l in lines]
    circle_near = [is_point_in_bounding_box(point, get_entity_bounding_box(c), margin) for c in circles]

    found: List[SnapTarget] = []

    def _add(points: List[Point2D], id_a: str, id_b: str) -> None:
        for pt in points:
            _check_point(found, SnapType.INTERSECTION, pt, point, snap_distance, f"{id_a},{id_b}")

    # Line - line
    for i in range(len(lines)):
        if not line_near[i]:
            continue
        for j in range(i + 1, len(lines)):
            if line_near[j]:
                _add(_intersection_points(lines[i], lines[j], cache, _line_intersection_list),
                     lines[i].id, lines[j].id)

    # Circle / arc - line (points lie on the infinite line, so only the circle bounds them)
    for ci, circle in enumerate(circles):
        if not circle_near[ci]:
            continue
        for line in lines:
            _add(_intersection_points(circle, line, cache, circle_line_intersections),
                 circle.id, line.id)

    # Circle / arc - circle / arc
    for i in range(len(circles)):
        if not circle_near[i]:
            continue
        for j in range(i + 1, len(circles)):
            if circle_near[j]:
                _add(_intersection_points(circles[i], circles[j], cache, circle_circle_intersections),
                     circles[i].id, circles[j].id)

    return found


def collect_candidates(entities: Sequence, settings: SnapSettings, point: Point2D,
                       grid_size: float, cache: Optional[dict] = None) -> List[SnapTarget]:
    """All snap candidates for `point`, in generation order (grid, entities, intersections)."""
    candidates: List[SnapTarget] = []
    if not settings.enabled:
        return candidates

    snap_distance = settings.snap_distance

    # 1. Grid (filtered later like every other candidate)
    if settings.grid_snap and grid_size > 0:
        grid_point = snap_to_grid(point, grid_size)
        candidates.append(SnapTarget(SnapType.GRID, grid_point, distance(point, grid_point)))

    # 2. Entity features
    for entity in entities:
        if entity.construction:
            continue

        if settings.endpoint_snap:
            for endpoint in entity_endpoints(entity):
                _check_point(candidates, SnapType.ENDPOINT, endpoint, point, snap_distance, entity.id)

        if settings.midpoint_snap:
            mid = entity_midpoint(entity)
            if mid is not None:
                _check_point(candidates, SnapType.MIDPOINT, mid, point, snap_distance, entity.id)

        if settings.center_snap:
            center = entity_center(entity)
            if center is not None:
                _check_point(candidates, SnapType.CENTER, center, point, snap_distance, entity.id)

        nearest = nearest_point_on_entity(entity, point)
        if nearest is not None and nearest[1] < snap_distance:
            candidates.append(SnapTarget(nearest_snap_type(entity), nearest[0], nearest[1], entity.id))

    # 3. Intersections
    if settings.intersection_snap:
        candidates.extend(collect_intersections(entities, point, snap_distance, cache))

    return candidates


def resolve_candidates(candidates: Iterable[SnapTarget], snap_distance: float) -> Optional[SnapTarget]:
    """
    Best candidate strictly inside `snap_distance`: lowest priority rank,
    then smallest distance. Equal keys keep generation order.
    """
    within = [c for c in candidates if c.distance < snap_distance]
    if not within:
        return None
    within.sort(key=lambda c: (c.priority, c.distance))
    return within[0]


def find_snap_target(entities: Sequence, settings: SnapSettings, point: Point2D,
                     grid_size: float, cache: Optional[dict] = None) -> Optional[SnapTarget]:
    """Stateless snap query over an explicit entity snapshot."""
    if not settings.enabled:
        return None

    candidates = collect_candidates(entities, settings, point, grid_size, cache)
    winner = resolve_candidates(candidates, settings.snap_distance)

    if is_enabled("snap_debug"):
        if winner:
            logger.debug(f"[SNAP] ({point.x:.3f}, {point.y:.3f}): {len(candidates)} candidates, "
                         f"winner={winner.type.value} d={winner.distance:.3f} id={winner.entity_id}")
        else:
            logger.debug(f"[SNAP] ({point.x:.3f}, {point.y:.3f}): {len(candidates)} candidates, no snap")
    return winner


class SnapDetector:
    """
    Snap resolver holding the current entity snapshot and settings.

    The snapshot is not observed; push a fresh one with update_entities()
    before querying. The instance is not safe for concurrent mutation; give
    each thread its own detector or use find_snap_target() directly.
    """

    def __init__(self, settings: Optional[SnapSettings] = None, entities: Iterable = ()):
        self.settings = settings if settings is not None else SnapSettings()
        self.entities: Tuple = tuple(entities)
        # {(entity_a, entity_b): [Point2D, ...]}, valid for the current snapshot
        self._intersection_cache: dict = {}

    def update_settings(self, settings: SnapSettings) -> None:
        self.settings = settings

    def update_entities(self, entities: Iterable) -> None:
        self.entities = tuple(entities)
        self._intersection_cache.clear()

    def collect_candidates(self, point: Point2D, grid_size: float) -> List[SnapTarget]:
        return collect_candidates(self.entities, self.settings, point, grid_size,
                                  self._intersection_cache)

    def find_snap_target(self, point: Point2D, grid_size: float) -> Optional[SnapTarget]:
        """Best snap for `point`, or None when nothing is within the snap distance."""
        return find_snap_target(self.entities, self.settings, point, grid_size,
                                self._intersection_cache)
