"""
Unit tests for detail_drawing.geometry (kernel and contour).

Tests:
- Bounding boxes of shapes and point sets
- Distances
- Dimension line geometry and labels
- Snap point search
- Contour detection and contour coupling
"""

import math

import pytest

from detail_drawing.geometry.contour import (
    HORIZONTAL,
    VERTICAL,
    contour_datum,
    detect_contour,
    is_inside_contour,
    matches_contour_extent,
)
from detail_drawing.geometry.kernel import (
    BoundingBox,
    SnapType,
    bounding_box_of_points,
    dimension_geometry_bbox,
    dimension_label,
    dimension_length,
    dimension_line_points,
    distance,
    find_snap_point,
    perpendicular,
    point_to_segment_distance,
    shape_bounding_box,
    shapes_bounding_box,
    union_bounding_boxes,
)
from detail_drawing.model import Circle, Dimension, Line, Point, Rectangle


class TestBoundingBox:
    """Tests for BoundingBox dataclass."""

    def test_size_and_center(self):
        """Test size and center."""
        box = BoundingBox(0, 0, 10, 20)
        assert box.width == 10
        assert box.height == 20
        assert box.center == Point(5, 10)

    def test_expand(self):
        """Test expand."""
        box = BoundingBox(0, 0, 10, 10).expand(2)
        assert box == BoundingBox(-2, -2, 12, 12)

    def test_intersects_is_inclusive(self):
        """Boxes that only touch along an edge intersect."""
        a = BoundingBox(0, 0, 10, 10)
        assert a.intersects(BoundingBox(10, 0, 20, 10))
        assert not a.intersects(BoundingBox(10.1, 0, 20, 10))

    def test_contains(self):
        """Test contains."""
        outer = BoundingBox(0, 0, 10, 10)
        assert outer.contains(BoundingBox(1, 1, 9, 9))
        assert outer.contains(outer)
        assert not outer.contains(BoundingBox(5, 5, 11, 9))

    def test_union(self):
        """Test union."""
        box = BoundingBox(0, 0, 1, 1).union(BoundingBox(-1, 2, 0, 3))
        assert box == BoundingBox(-1, 0, 1, 3)

    def test_to_dict(self):
        """Test to dict."""
        assert BoundingBox(1, 2, 3, 4).to_dict() == {
            'min_x': 1, 'min_y': 2, 'max_x': 3, 'max_y': 4,
        }


class TestShapeBoundingBox:
    """Tests for shape_bounding_box and friends."""

    def test_circle(self):
        """Test circle."""
        box = shape_bounding_box(Circle('c', Point(5, 5), 2))
        assert box == BoundingBox(3, 3, 7, 7)

    def test_rectangle_with_reversed_corners(self):
        """Test rectangle with reversed corners."""
        box = shape_bounding_box(Rectangle('r', Point(10, 8), Point(2, 1)))
        assert box == BoundingBox(2, 1, 10, 8)

    def test_line(self):
        """Test line."""
        box = shape_bounding_box(Line('l', Point(0, 5), Point(4, 1)))
        assert box == BoundingBox(0, 1, 4, 5)

    def test_shapes_bounding_box_empty(self):
        """Test shapes bounding box empty."""
        assert shapes_bounding_box([]) is None

    def test_shapes_bounding_box(self, plate_shapes):
        """Test shapes bounding box."""
        assert shapes_bounding_box(plate_shapes) == BoundingBox(0, 0, 100, 60)

    def test_union_of_no_boxes(self):
        """Test union of no boxes."""
        assert union_bounding_boxes([]) is None

    def test_points_required(self):
        """Test points required."""
        with pytest.raises(ValueError):
            bounding_box_of_points([])


class TestDistances:
    """Tests for point and segment distances."""

    def test_distance(self):
        """Test distance."""
        assert distance(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)

    def test_segment_interior(self):
        """Test segment interior."""
        d = point_to_segment_distance(Point(5, 3), Point(0, 0), Point(10, 0))
        assert d == pytest.approx(3.0)

    def test_segment_clamps_to_endpoint(self):
        """Test segment clamps to endpoint."""
        d = point_to_segment_distance(Point(13, 4), Point(0, 0), Point(10, 0))
        assert d == pytest.approx(5.0)

    def test_zero_length_segment(self):
        """Test zero length segment."""
        d = point_to_segment_distance(Point(3, 4), Point(0, 0), Point(0, 0))
        assert d == pytest.approx(5.0)


class TestDimensionGeometry:
    """Tests for dimension line placement and labels."""

    def test_perpendicular_is_left_of_baseline(self):
        """Test perpendicular is left of baseline."""
        ux, uy = perpendicular(Point(0, 0), Point(10, 0))
        assert ux == pytest.approx(0.0, abs=1e-12)
        assert uy == pytest.approx(1.0)

    def test_positive_offset_moves_horizontal_line_up(self):
        """Test positive offset moves horizontal line up."""
        dim = Dimension('d', Point(0, 0), Point(10, 0), offset=5)
        p1, p2 = dimension_line_points(dim)
        assert p1.y == pytest.approx(5.0)
        assert p2.y == pytest.approx(5.0)

    def test_negative_offset_on_downward_baseline_moves_left(self):
        """Test negative offset on downward baseline moves left."""
        dim = Dimension('d', Point(0, 10), Point(0, 0), offset=-5)
        p1, p2 = dimension_line_points(dim)
        assert p1.x == pytest.approx(-5.0)
        assert p2.x == pytest.approx(-5.0)

    def test_label_uses_length(self):
        """Test label uses length."""
        dim = Dimension('d', Point(0, 0), Point(3, 4))
        assert dimension_length(dim) == pytest.approx(5.0)
        assert dimension_label(dim) == '5.0'

    def test_label_override(self):
        """Test label override."""
        dim = Dimension('d', Point(0, 0), Point(3, 4), text='ø5.0')
        assert dimension_label(dim) == 'ø5.0'

    def test_geometry_bbox_covers_extension_and_text(self):
        """Test geometry bbox covers extension and text."""
        dim = Dimension('d', Point(0, 0), Point(100, 0), offset=10)
        box = dimension_geometry_bbox(dim)
        # extension line reaches offset + 15, text margin 20 around the line
        assert box.max_y == pytest.approx(30.0)
        assert box.min_y == pytest.approx(-10.0)
        assert box.min_x == pytest.approx(0.0)
        assert box.max_x == pytest.approx(100.0)


class TestSnapping:
    """Tests for find_snap_point."""

    def test_line_midpoint(self):
        """Test line midpoint."""
        line = Line('l', Point(0, 0), Point(10, 0))
        snap = find_snap_point(Point(5.5, 0.5), [line], snap_distance=2)
        assert snap.point == Point(5, 0)
        assert snap.type is SnapType.MIDPOINT

    def test_circle_center(self):
        """Test circle center."""
        circle = Circle('c', Point(20, 20), 10)
        snap = find_snap_point(Point(21, 20), [circle], snap_distance=3)
        assert snap.type is SnapType.CENTER

    def test_nearest_wins(self):
        """Test nearest wins."""
        rect = Rectangle('r', Point(0, 0), Point(10, 10))
        snap = find_snap_point(Point(9, 9.5), [rect], snap_distance=5)
        assert snap.point == Point(10, 10)

    def test_out_of_range(self):
        """Test out of range."""
        line = Line('l', Point(0, 0), Point(10, 0))
        assert find_snap_point(Point(5, 8), [line], snap_distance=2) is None

    def test_distance_must_be_strictly_closer(self):
        """Test distance must be strictly closer."""
        line = Line('l', Point(0, 0), Point(10, 0))
        assert find_snap_point(Point(0, 2), [line], snap_distance=2) is None


class TestContour:
    """Tests for contour detection and coupling."""

    def test_largest_rectangle(self, plate_shapes, contour):
        """Test largest rectangle."""
        assert detect_contour(plate_shapes) == contour

    def test_no_rectangles(self, hole, slot_line):
        """Test no rectangles."""
        assert detect_contour([hole, slot_line]) is None

    def test_tie_keeps_first(self):
        """Test tie keeps first."""
        a = Rectangle('a', Point(0, 0), Point(10, 10))
        b = Rectangle('b', Point(20, 0), Point(30, 10))
        assert detect_contour([a, b]).id == 'a'

    def test_datum_is_min_corner(self):
        """Test datum is min corner."""
        rect = Rectangle('r', Point(50, 40), Point(10, 5))
        assert contour_datum(rect) == Point(10, 5)

    def test_inside(self, contour, hole, pocket):
        """Test inside."""
        assert is_inside_contour(hole, contour)
        assert is_inside_contour(pocket, contour)

    def test_contour_not_inside_itself(self, contour):
        """Test contour not inside itself."""
        assert not is_inside_contour(contour, contour)

    def test_outside(self, contour):
        """Test outside."""
        far = Circle('far', Point(200, 30), 5)
        assert not is_inside_contour(far, contour)

    def test_inside_tolerance(self, contour):
        """Test inside tolerance."""
        touching = Circle('edge', Point(10, 10), 10.5)
        assert is_inside_contour(touching, contour)

    def test_matches_extent(self, contour):
        """Test matches extent."""
        assert matches_contour_extent(100.2, HORIZONTAL, contour)
        assert matches_contour_extent(60, VERTICAL, contour)
        assert not matches_contour_extent(60, HORIZONTAL, contour)
        assert not matches_contour_extent(100, HORIZONTAL, None)

    def test_matches_extent_bad_orientation(self, contour):
        """Test matches extent bad orientation."""
        with pytest.raises(ValueError):
            matches_contour_extent(1, 'diagonal', contour)
