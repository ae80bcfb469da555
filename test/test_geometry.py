"""
Geometry Library Tests - projections, angles, polygons, splines, bounds
"""

import math

import numpy as np
import pytest

from sketchsnap.entities import (
    Point2D, Line, Circle, Arc, Rectangle, Point, Ellipse, Polygon, Slot, Spline,
)
from sketchsnap import geometry as geo


def _close(p: Point2D, x: float, y: float, tol: float = 1e-9) -> bool:
    return math.isclose(p.x, x, abs_tol=tol) and math.isclose(p.y, y, abs_tol=tol)


class TestLineProjection:

    @pytest.mark.parametrize("px,py", [(3, 7), (-5, 2), (20, -4), (5, 0), (0, 0)])
    def test_closest_point_is_idempotent(self, px, py):
        line = Line(Point2D(0, 0), Point2D(10, 0))
        once = geo.closest_point_on_line(line, Point2D(px, py))
        twice = geo.closest_point_on_line(line, once)
        assert _close(twice, once.x, once.y)

    def test_projection_clamps_to_endpoints(self):
        line = Line(Point2D(0, 0), Point2D(10, 0))
        assert _close(geo.closest_point_on_line(line, Point2D(-4, 3)), 0, 0)
        assert _close(geo.closest_point_on_line(line, Point2D(14, -3)), 10, 0)
        assert _close(geo.closest_point_on_line(line, Point2D(4, 3)), 4, 0)

    def test_zero_length_line_returns_start(self):
        line = Line(Point2D(2, 3), Point2D(2, 3))
        assert geo.closest_point_on_line(line, Point2D(9, 9)) == Point2D(2, 3)
        assert math.isclose(geo.distance_to_line(line, Point2D(5, 7)), 5.0)

    def test_is_point_on_line(self):
        line = Line(Point2D(0, 0), Point2D(10, 10))
        assert geo.is_point_on_line(line, Point2D(5, 5.05))
        assert not geo.is_point_on_line(line, Point2D(5, 6))


class TestCircleAndArc:

    @pytest.mark.parametrize("theta", [0.0, 0.3, math.pi / 2, 2.5, math.pi, -1.2, 5.9])
    def test_circle_round_trip(self, theta):
        circle = Circle(Point2D(3, -2), 7.5)
        on = geo.point_on_circle(circle, theta)
        back = geo.closest_point_on_circle(circle, on)
        assert _close(back, on.x, on.y, 1e-9)

    def test_closest_point_from_center_falls_back_to_angle_zero(self):
        circle = Circle(Point2D(1, 1), 4)
        assert _close(geo.closest_point_on_circle(circle, Point2D(1, 1)), 5, 1)

    def test_arc_midpoint_follows_ccw_sweep(self):
        # Span wraps through the seam: 170° to -170° is a 20° arc around 180°
        arc = Arc(Point2D(0, 0), 10, math.radians(170), math.radians(-170))
        mid = geo.arc_midpoint(arc)
        assert _close(mid, -10, 0, 1e-9)

    def test_arc_midpoint_stays_on_arc_when_start_exceeds_end(self):
        # Right half circle, 270° ccw to 90°; the plain angle average (180°) is off the arc
        arc = Arc(Point2D(0, 0), 10, 3 * math.pi / 2, math.pi / 2)
        mid = geo.arc_midpoint(arc)
        assert _close(mid, 10, 0, 1e-9)
        assert geo.is_angle_in_arc(arc, geo.angle(arc.center, mid))

    def test_arc_endpoints(self):
        arc = Arc(Point2D(0, 0), 10, 0.0, math.pi / 2)
        assert _close(geo.arc_start_point(arc), 10, 0)
        assert _close(geo.arc_end_point(arc), 0, 10)

    def test_angle_in_arc_wrapping(self):
        arc = Arc(Point2D(0, 0), 5, math.radians(170), math.radians(-170))
        assert geo.is_angle_in_arc(arc, math.pi)
        assert geo.is_angle_in_arc(arc, math.radians(-175))
        assert not geo.is_angle_in_arc(arc, 0.0)

    def test_angle_in_arc_plain(self):
        arc = Arc(Point2D(0, 0), 5, 0.0, math.pi / 2)
        assert geo.is_angle_in_arc(arc, math.pi / 4)
        assert geo.is_angle_in_arc(arc, 2 * math.pi + math.pi / 4)
        assert not geo.is_angle_in_arc(arc, -math.pi / 4)


class TestAngles:

    def test_normalize_angle_range(self):
        assert math.isclose(geo.normalize_angle(3 * math.pi / 2), -math.pi / 2)
        assert math.isclose(geo.normalize_angle(-math.pi), math.pi)
        assert math.isclose(geo.normalize_angle(math.pi), math.pi)

    def test_angle_between_lines(self):
        a = Line(Point2D(0, 0), Point2D(1, 0))
        b = Line(Point2D(0, 0), Point2D(0, 1))
        assert math.isclose(geo.angle_between_lines(a, b), math.pi / 2)
        assert geo.are_perpendicular(a, b)
        assert not geo.are_parallel(a, b)

    def test_horizontal_vertical(self):
        assert geo.is_horizontal(Line(Point2D(5, 1), Point2D(-5, 1)))
        assert geo.is_vertical(Line(Point2D(2, 0), Point2D(2, -8)))

    def test_snap_to_angle_keeps_length(self):
        snapped = geo.snap_to_angle(Point2D(0, 0), Point2D(10, 0.5), [0.0, math.pi / 2])
        assert _close(snapped, math.hypot(10, 0.5), 0.0)

    def test_snap_to_angle_outside_window_is_unchanged(self):
        end = Point2D(10, 5)
        assert geo.snap_to_angle(Point2D(0, 0), end, [0.0, math.pi / 2]) == end


class TestEllipse:

    def test_point_on_rotated_ellipse(self):
        e = Ellipse(Point2D(0, 0), 10, 5, math.pi / 2)
        assert _close(geo.point_on_ellipse(e, 0.0), 0, 10)

    def test_closest_point_lies_on_ellipse(self):
        e = Ellipse(Point2D(1, 2), 8, 3, 0.4)
        p = geo.closest_point_on_ellipse(e, Point2D(15, -4))
        cos_r, sin_r = math.cos(-e.rotation), math.sin(-e.rotation)
        dx, dy = p.x - 1, p.y - 2
        lx = dx * cos_r - dy * sin_r
        ly = dx * sin_r + dy * cos_r
        assert math.isclose((lx / 8) ** 2 + (ly / 3) ** 2, 1.0, rel_tol=1e-9)

    def test_closest_point_on_axis(self):
        e = Ellipse(Point2D(0, 0), 10, 5)
        assert _close(geo.closest_point_on_ellipse(e, Point2D(20, 0)), 10, 0)
        assert _close(geo.closest_point_on_ellipse(e, Point2D(0, -2)), 0, -5)

    def test_closest_point_from_center(self):
        e = Ellipse(Point2D(3, 3), 10, 5, math.pi / 2)
        assert _close(geo.closest_point_on_ellipse(e, Point2D(3, 3)), 3, 13)


class TestPolygon:

    def test_hexagon_vertices(self):
        hexagon = Polygon(Point2D(0, 0), 10, 6, 0.0)
        vertices = geo.get_polygon_vertices(hexagon)
        assert len(vertices) == 6
        assert _close(vertices[0], 10, 0)
        for v in vertices:
            assert math.isclose(geo.distance(Point2D(0, 0), v), 10.0)

    def test_edges_close_the_loop(self):
        square = Polygon(Point2D(0, 0), 5, 4, math.pi / 4)
        edges = geo.polygon_edges(square)
        assert len(edges) == 4
        assert edges[-1].end == edges[0].start
        assert edges[0].id == f"{square.id}-edge-0"

    def test_centroid_is_center(self):
        poly = Polygon(Point2D(4, -3), 7, 5, 0.2)
        assert _close(geo.polygon_centroid(poly), 4, -3, 1e-9)


class TestSlotAndRectangle:

    def test_slot_helpers(self):
        slot = Slot(Point2D(0, 0), Point2D(10, 0), width=4)
        assert geo.slot_radius(slot) == 2
        assert geo.slot_length(slot) == 10
        assert _close(geo.slot_direction(slot), 1, 0)
        centerline = geo.slot_centerline(slot)
        assert centerline.id == f"{slot.id}-centerline"
        assert (centerline.start, centerline.end) == (slot.start, slot.end)

    def test_rectangle_corners_and_center(self):
        rect = Rectangle(Point2D(0, 10), Point2D(20, 0))
        corners = geo.rectangle_corners(rect)
        assert corners == [Point2D(0, 10), Point2D(20, 10), Point2D(20, 0), Point2D(0, 0)]
        assert geo.rectangle_center(rect) == Point2D(10, 5)
        assert len(geo.rectangle_edges(rect)) == 4


class TestSpline:

    def test_endpoints_of_bezier_segment(self):
        spline = Spline([Point2D(0, 0), Point2D(5, 10), Point2D(10, 0)], degree=2)
        assert geo.spline_point_at(spline, 0.0) == Point2D(0, 0)
        assert _close(geo.spline_point_at(spline, 1.0), 10, 0)
        assert _close(geo.spline_point_at(spline, 0.5), 5, 5)

    def test_degree_is_clamped(self):
        spline = Spline([Point2D(0, 0), Point2D(10, 0)], degree=3)
        assert _close(geo.spline_point_at(spline, 0.25), 2.5, 0)

    def test_single_control_point(self):
        spline = Spline([Point2D(4, 4)])
        assert geo.spline_point_at(spline, 0.7) == Point2D(4, 4)

    def test_tangent_is_unit_length(self):
        spline = Spline([Point2D(0, 0), Point2D(5, 10), Point2D(10, 0)], degree=2)
        t = geo.spline_tangent_at(spline, 0.5)
        assert _close(t, 1, 0, 1e-6)

    def test_sample_shape(self):
        spline = Spline([Point2D(0, 0), Point2D(5, 10), Point2D(10, 0)], degree=2)
        samples = geo.sample_spline(spline, 8)
        assert samples.shape == (9, 2)
        assert tuple(samples[0]) == (0.0, 0.0)


class TestPolyline:

    def test_closest_point_on_polyline(self):
        pts = np.array([[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])
        nearest, dist = geo.closest_point_on_polyline(pts, Point2D(12, 5))
        assert _close(nearest, 10, 5)
        assert math.isclose(dist, 2.0)

    def test_degenerate_segments(self):
        pts = np.array([[1.0, 1.0], [1.0, 1.0]])
        nearest, dist = geo.closest_point_on_polyline(pts, Point2D(4, 5))
        assert nearest == Point2D(1, 1)
        assert math.isclose(dist, 5.0)


class TestBoundingBox:

    def test_circle_box(self):
        box = geo.get_entity_bounding_box(Circle(Point2D(1, 1), 2))
        assert (box.min, box.max) == (Point2D(-1, -1), Point2D(3, 3))

    def test_rotated_ellipse_box(self):
        box = geo.get_entity_bounding_box(Ellipse(Point2D(0, 0), 10, 5, math.pi / 2))
        assert math.isclose(box.width, 10.0)
        assert math.isclose(box.height, 20.0)

    def test_slot_box_includes_caps(self):
        box = geo.get_entity_bounding_box(Slot(Point2D(0, 0), Point2D(10, 0), width=4))
        assert (box.min, box.max) == (Point2D(-2, -2), Point2D(12, 2))

    def test_point_in_box_with_margin(self):
        box = geo.get_entity_bounding_box(Line(Point2D(0, 0), Point2D(10, 0)))
        assert geo.is_point_in_bounding_box(Point2D(5, 0), box)
        assert not geo.is_point_in_bounding_box(Point2D(5, 3), box)
        assert geo.is_point_in_bounding_box(Point2D(5, 3), box, margin=3)

    def test_union(self):
        boxes = [geo.get_entity_bounding_box(Point(Point2D(0, 0))),
                 geo.get_entity_bounding_box(Point(Point2D(4, -2)))]
        union = geo.union_bounding_boxes(boxes)
        assert (union.min, union.max) == (Point2D(0, -2), Point2D(4, 0))
        assert geo.union_bounding_boxes([]) is None

    def test_unknown_entity_raises(self):
        with pytest.raises(TypeError):
            geo.get_entity_bounding_box(object())


class TestGrid:

    def test_snap_to_grid_rounds_halves_up(self):
        assert geo.snap_to_grid(Point2D(2.5, -2.5), 5) == Point2D(5, 0)
        assert geo.snap_to_grid(Point2D(7.4, 12.6), 5) == Point2D(5, 15)
