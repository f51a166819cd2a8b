"""
Geometry kernel: distances and bounding boxes over drawing primitives.

Provides:
- Axis-aligned bounding box (BoundingBox) with union/intersection tests
- Point and point-to-segment distances
- Shape and rendered-dimension bounding boxes
- Snap point search (endpoints, midpoints, centers)

All coordinates are drawing units (mm), Y axis pointing up.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from detail_drawing.config import (
    DIM_EXTENSION_LENGTH,
    DIM_LABEL_DECIMALS,
    DIM_TEXT_MARGIN,
)
from detail_drawing.model import Circle, Dimension, Line, Point, Rectangle, Shape

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-Aligned Bounding Box (AABB) in drawing units.

    Attributes:
        min_x, min_y: Minimum corner
        max_x, max_y: Maximum corner
    """
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        """X-axis extent."""
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        """Y-axis extent."""
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        """Get box center point."""
        return Point((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    @property
    def min_corner(self) -> Point:
        return Point(self.min_x, self.min_y)

    def expand(self, margin: float) -> 'BoundingBox':
        """Return bounding box expanded by margin on all sides."""
        return BoundingBox(
            self.min_x - margin, self.min_y - margin,
            self.max_x + margin, self.max_y + margin,
        )

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        """Smallest box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x), min(self.min_y, other.min_y),
            max(self.max_x, other.max_x), max(self.max_y, other.max_y),
        )

    def intersects(self, other: 'BoundingBox') -> bool:
        """Check if X-ranges and Y-ranges both overlap (inclusive)."""
        return (
            self.min_x <= other.max_x and self.max_x >= other.min_x and
            self.min_y <= other.max_y and self.max_y >= other.min_y
        )

    def contains(self, other: 'BoundingBox') -> bool:
        """Check if other box lies fully inside this one (inclusive)."""
        return (
            other.min_x >= self.min_x and other.max_x <= self.max_x and
            other.min_y >= self.min_y and other.max_y <= self.max_y
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'min_x': self.min_x,
            'min_y': self.min_y,
            'max_x': self.max_x,
            'max_y': self.max_y,
        }


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------

def distance(p1: Point, p2: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def point_to_segment_distance(p: Point, a: Point, b: Point) -> float:
    """Distance from point to segment a-b.

    The projection parameter t is clamped to [0, 1], so points beyond
    the segment ends measure to the nearest endpoint. A zero-length
    segment degenerates to point-to-point distance.
    """
    l2 = (b.x - a.x) ** 2 + (b.y - a.y) ** 2
    if l2 == 0:
        return distance(p, a)
    t = ((p.x - a.x) * (b.x - a.x) + (p.y - a.y) * (b.y - a.y)) / l2
    t = max(0.0, min(1.0, t))
    closest = Point(a.x + t * (b.x - a.x), a.y + t * (b.y - a.y))
    return distance(p, closest)


# ---------------------------------------------------------------------------
# Bounding boxes
# ---------------------------------------------------------------------------

def bounding_box_of_points(points: Iterable[Point]) -> BoundingBox:
    """Bounding box of a non-empty point set.

    Raises:
        ValueError: If points is empty
    """
    coords = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    if coords.size == 0:
        raise ValueError("Cannot compute bounding box of an empty point set")
    mins = coords.min(axis=0)
    maxs = coords.max(axis=0)
    return BoundingBox(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


def union_bounding_boxes(boxes: Sequence[BoundingBox]) -> Optional[BoundingBox]:
    """Union of boxes, or None for an empty sequence."""
    if not boxes:
        return None
    arr = np.array(
        [(b.min_x, b.min_y, b.max_x, b.max_y) for b in boxes], dtype=np.float64
    )
    return BoundingBox(
        float(arr[:, 0].min()), float(arr[:, 1].min()),
        float(arr[:, 2].max()), float(arr[:, 3].max()),
    )


def shape_bounding_box(shape: Shape) -> BoundingBox:
    """Axis-aligned bounding box of a shape.

    Circle: center +/- radius on both axes.
    Line and Rectangle: min/max of the two defining points.
    """
    if isinstance(shape, Circle):
        c, r = shape.center, shape.radius
        return BoundingBox(c.x - r, c.y - r, c.x + r, c.y + r)
    if isinstance(shape, (Line, Rectangle)):
        return BoundingBox(
            min(shape.p1.x, shape.p2.x), min(shape.p1.y, shape.p2.y),
            max(shape.p1.x, shape.p2.x), max(shape.p1.y, shape.p2.y),
        )
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


def shapes_bounding_box(shapes: Sequence[Shape]) -> Optional[BoundingBox]:
    """Union bounding box of all shapes, or None when there are none."""
    return union_bounding_boxes([shape_bounding_box(s) for s in shapes])


# ---------------------------------------------------------------------------
# Dimension geometry
# ---------------------------------------------------------------------------

def perpendicular(p1: Point, p2: Point) -> Tuple[float, float]:
    """Unit vector of the baseline p1->p2 rotated by +90 degrees."""
    angle = math.atan2(p2.y - p1.y, p2.x - p1.x)
    perp = angle + math.pi / 2
    return math.cos(perp), math.sin(perp)


def offset_baseline(p1: Point, p2: Point, offset: float) -> Tuple[Point, Point]:
    """Endpoints of the dimension line displaced by offset from p1-p2."""
    ux, uy = perpendicular(p1, p2)
    dx, dy = ux * offset, uy * offset
    return Point(p1.x + dx, p1.y + dy), Point(p2.x + dx, p2.y + dy)


def dimension_line_points(dim: Dimension) -> Tuple[Point, Point]:
    """Endpoints of the rendered dimension line."""
    return offset_baseline(dim.p1, dim.p2, dim.offset)


def dimension_length(dim: Dimension) -> float:
    """Measured length (distance between p1 and p2)."""
    return distance(dim.p1, dim.p2)


def format_length(value: float) -> str:
    """Numeric dimension label with one decimal."""
    return f"{value:.{DIM_LABEL_DECIMALS}f}"


def dimension_label(dim: Dimension) -> str:
    """Displayed text: override text, or measured length."""
    if dim.text is not None:
        return dim.text
    return format_length(dimension_length(dim))


def dimension_geometry_bbox(dim: Dimension) -> BoundingBox:
    """Bounding box of the rendered dimension, for print layout sizing.

    Includes the baseline points, the offset dimension line, extension
    lines overshooting by DIM_EXTENSION_LENGTH and a DIM_TEXT_MARGIN
    text allowance on both sides of the dimension line midpoint.
    """
    p1, p2, offset = dim.p1, dim.p2, dim.offset
    ux, uy = perpendicular(p1, p2)
    dim_p1, dim_p2 = offset_baseline(p1, p2, offset)

    ext = offset + DIM_EXTENSION_LENGTH
    ext_p1 = Point(p1.x + ux * ext, p1.y + uy * ext)
    ext_p2 = Point(p2.x + ux * ext, p2.y + uy * ext)

    mid_x = (dim_p1.x + dim_p2.x) / 2
    mid_y = (dim_p1.y + dim_p2.y) / 2
    text_a = Point(mid_x + ux * DIM_TEXT_MARGIN, mid_y + uy * DIM_TEXT_MARGIN)
    text_b = Point(mid_x - ux * DIM_TEXT_MARGIN, mid_y - uy * DIM_TEXT_MARGIN)

    return bounding_box_of_points([p1, p2, dim_p1, dim_p2, ext_p1, ext_p2, text_a, text_b])


# ---------------------------------------------------------------------------
# Snapping
# ---------------------------------------------------------------------------

class SnapType(Enum):
    """Kind of snap target."""
    ENDPOINT = "endpoint"
    MIDPOINT = "midpoint"
    CENTER = "center"


@dataclass(frozen=True)
class SnapPoint:
    """Snap target found near the cursor."""
    point: Point
    type: SnapType


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def snap_candidates(shape: Shape) -> List[SnapPoint]:
    """All snap targets of one shape."""
    if isinstance(shape, Line):
        return [
            SnapPoint(shape.p1, SnapType.ENDPOINT),
            SnapPoint(shape.p2, SnapType.ENDPOINT),
            SnapPoint(_midpoint(shape.p1, shape.p2), SnapType.MIDPOINT),
        ]
    if isinstance(shape, Circle):
        c, r = shape.center, shape.radius
        return [
            SnapPoint(c, SnapType.CENTER),
            SnapPoint(Point(c.x + r, c.y), SnapType.ENDPOINT),
            SnapPoint(Point(c.x - r, c.y), SnapType.ENDPOINT),
            SnapPoint(Point(c.x, c.y + r), SnapType.ENDPOINT),
            SnapPoint(Point(c.x, c.y - r), SnapType.ENDPOINT),
        ]
    if isinstance(shape, Rectangle):
        p1, p2 = shape.p1, shape.p2
        p3 = Point(p2.x, p1.y)
        p4 = Point(p1.x, p2.y)
        corners = [SnapPoint(p, SnapType.ENDPOINT) for p in (p1, p2, p3, p4)]
        edges = [
            SnapPoint(_midpoint(a, b), SnapType.MIDPOINT)
            for a, b in ((p1, p3), (p3, p2), (p2, p4), (p4, p1))
        ]
        return corners + edges + [SnapPoint(_midpoint(p1, p2), SnapType.CENTER)]
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


def find_snap_point(
    cursor: Point,
    shapes: Sequence[Shape],
    snap_distance: float,
) -> Optional[SnapPoint]:
    """Nearest snap target strictly closer than snap_distance.

    Args:
        cursor: Cursor position in drawing units
        shapes: Shapes to snap to
        snap_distance: Capture radius

    Returns:
        Closest SnapPoint, or None if nothing is in range
    """
    best: Optional[SnapPoint] = None
    best_dist = snap_distance
    for shape in shapes:
        for snap in snap_candidates(shape):
            d = distance(cursor, snap.point)
            if d < best_dist:
                best_dist = d
                best = snap
    return best
