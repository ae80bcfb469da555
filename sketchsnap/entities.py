"""
SketchSnap - Sketch Entities
Points, lines, circles, arcs, ellipses, polygons, slots, splines as immutable value data
"""

from dataclasses import dataclass, field
from typing import ClassVar, Tuple, Union
from enum import Enum, auto
import math
import uuid

from .config.feature_flags import is_enabled


class InvalidGeometryError(ValueError):
    """Raised when an entity is constructed from degenerate parameters."""


class EntityType(Enum):
    """Entity variants"""
    LINE = auto()
    CIRCLE = auto()
    ARC = auto()
    RECTANGLE = auto()
    POINT = auto()
    ELLIPSE = auto()
    POLYGON = auto()
    SLOT = auto()
    SPLINE = auto()


def _new_id() -> str:
    return str(uuid.uuid4())[:8]


@dataclass(frozen=True)
class Point2D:
    """2D point - building block of all geometry"""
    x: float = 0.0
    y: float = 0.0

    def __post_init__(self):
        # numpy scalars from polyline sampling become native floats here
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def distance_to(self, other: 'Point2D') -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def midpoint(self, other: 'Point2D') -> 'Point2D':
        return Point2D((self.x + other.x) / 2, (self.y + other.y) / 2)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def __repr__(self):
        return f"P({self.x:.2f}, {self.y:.2f})"


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box given by its min and max corners"""
    min: Point2D
    max: Point2D

    @property
    def width(self) -> float:
        return self.max.x - self.min.x

    @property
    def height(self) -> float:
        return self.max.y - self.min.y

    @property
    def center(self) -> Point2D:
        return self.min.midpoint(self.max)


class SketchEntity:
    """
    Common base of all entity variants.

    Every variant is a frozen dataclass carrying `id`, `construction`,
    `selected` and `highlighted` next to its geometry. Dispatching code
    checks the concrete class and raises TypeError for anything else.
    """
    TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.TYPE

    def _strict(self) -> bool:
        return is_enabled("strict_entity_validation")

    def _require_finite(self, *points: Point2D) -> None:
        for p in points:
            if not p.is_finite():
                raise InvalidGeometryError(f"{type(self).__name__}: non-finite coordinate {p!r}")

    def _require_positive(self, name: str, value: float) -> None:
        if not (math.isfinite(value) and value > 0):
            raise InvalidGeometryError(f"{type(self).__name__}: {name} must be > 0, got {value}")


@dataclass(frozen=True)
class Line(SketchEntity):
    """Line segment between two points (zero length is legal)"""
    TYPE: ClassVar[EntityType] = EntityType.LINE

    start: Point2D
    end: Point2D
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.start, self.end)

    def __repr__(self):
        return f"Line({self.start} -> {self.end})"


@dataclass(frozen=True)
class Circle(SketchEntity):
    """Full circle"""
    TYPE: ClassVar[EntityType] = EntityType.CIRCLE

    center: Point2D
    radius: float = 10.0
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.center)
            self._require_positive("radius", self.radius)

    def __repr__(self):
        return f"Circle(center={self.center}, r={self.radius:.2f})"


@dataclass(frozen=True)
class Arc(SketchEntity):
    """Circular arc, angles in radians running counter-clockwise from start to end.

    The angles are not normalized; start_angle > end_angle means the span
    wraps through the -pi/pi seam.
    """
    TYPE: ClassVar[EntityType] = EntityType.ARC

    center: Point2D
    radius: float = 10.0
    start_angle: float = 0.0
    end_angle: float = math.pi / 2
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.center)
            self._require_positive("radius", self.radius)
            if not (math.isfinite(self.start_angle) and math.isfinite(self.end_angle)):
                raise InvalidGeometryError("Arc: angles must be finite")

    def __repr__(self):
        return (f"Arc(center={self.center}, r={self.radius:.2f}, "
                f"{math.degrees(self.start_angle):.1f}°-{math.degrees(self.end_angle):.1f}°)")


@dataclass(frozen=True)
class Rectangle(SketchEntity):
    """Axis-aligned rectangle given by two opposite corners"""
    TYPE: ClassVar[EntityType] = EntityType.RECTANGLE

    top_left: Point2D
    bottom_right: Point2D
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.top_left, self.bottom_right)

    def __repr__(self):
        return f"Rect({self.top_left}, {self.bottom_right})"


@dataclass(frozen=True)
class Point(SketchEntity):
    """Standalone sketch point"""
    TYPE: ClassVar[EntityType] = EntityType.POINT

    position: Point2D
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.position)


@dataclass(frozen=True)
class Ellipse(SketchEntity):
    """Ellipse with semi-axes and a rotation in radians"""
    TYPE: ClassVar[EntityType] = EntityType.ELLIPSE

    center: Point2D
    major_axis: float = 10.0
    minor_axis: float = 5.0
    rotation: float = 0.0
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.center)
            self._require_positive("major_axis", self.major_axis)
            self._require_positive("minor_axis", self.minor_axis)

    def __repr__(self):
        return (f"Ellipse(center={self.center}, a={self.major_axis:.2f}, "
                f"b={self.minor_axis:.2f}, rot={math.degrees(self.rotation):.1f}°)")


@dataclass(frozen=True)
class Polygon(SketchEntity):
    """Regular polygon given by its circumradius"""
    TYPE: ClassVar[EntityType] = EntityType.POLYGON

    center: Point2D
    radius: float = 10.0
    sides: int = 6
    rotation: float = 0.0
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.center)
            self._require_positive("radius", self.radius)
            if self.sides < 3:
                raise InvalidGeometryError(f"Polygon: needs at least 3 sides, got {self.sides}")


@dataclass(frozen=True)
class Slot(SketchEntity):
    """Capsule around a centerline; the cap radius is width / 2"""
    TYPE: ClassVar[EntityType] = EntityType.SLOT

    start: Point2D
    end: Point2D
    width: float = 10.0
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        if self._strict():
            self._require_finite(self.start, self.end)
            self._require_positive("width", self.width)


@dataclass(frozen=True)
class Spline(SketchEntity):
    """
    Spline through an ordered control polygon.

    The degree is clamped to len(control_points) - 1 at evaluation time.
    A single control point is legal and evaluates to that point.
    """
    TYPE: ClassVar[EntityType] = EntityType.SPLINE

    control_points: Tuple[Point2D, ...] = ()
    degree: int = 3
    closed: bool = False
    id: str = field(default_factory=_new_id)
    construction: bool = False
    selected: bool = False
    highlighted: bool = False

    def __post_init__(self):
        object.__setattr__(self, "control_points", tuple(self.control_points))
        if self._strict():
            if not self.control_points:
                raise InvalidGeometryError("Spline: needs at least one control point")
            if self.degree < 1:
                raise InvalidGeometryError(f"Spline: degree must be >= 1, got {self.degree}")
            self._require_finite(*self.control_points)

    def __repr__(self):
        return f"Spline({len(self.control_points)} pts, deg={self.degree})"


Entity = Union[Line, Circle, Arc, Rectangle, Point, Ellipse, Polygon, Slot, Spline]

ENTITY_CLASSES = (Line, Circle, Arc, Rectangle, Point, Ellipse, Polygon, Slot, Spline)
