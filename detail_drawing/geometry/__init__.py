"""Геометрическое ядро: расстояния, bbox, детектор контура."""

from detail_drawing.geometry.contour import (
    detect_contour,
    is_inside_contour,
    matches_contour_extent,
)
from detail_drawing.geometry.kernel import (
    BoundingBox,
    dimension_geometry_bbox,
    distance,
    find_snap_point,
    point_to_segment_distance,
    shape_bounding_box,
)

__all__ = [
    "BoundingBox",
    "detect_contour",
    "dimension_geometry_bbox",
    "distance",
    "find_snap_point",
    "is_inside_contour",
    "matches_contour_extent",
    "point_to_segment_distance",
    "shape_bounding_box",
]
